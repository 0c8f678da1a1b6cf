"""
Party configuration parameters for PartyBid.

Defines the auction a party targets, its fee recipients and the
economic parameters used at settlement. One PartyConfig is supplied per
party instance; nothing is read from module-level state.
"""

import os
from typing import Any, Optional

from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from partybid.crypto import to_checksum_address

# Deployment defaults
TOKEN_FEE_BASIS_POINTS = 250      # 2.5% of share supply to the fee recipient
ETH_FEE_BASIS_POINTS = 250        # 2.5% of the winning bid to the fee recipient
TOKEN_SCALE = 1000                # Shares minted per wei contributed
FORTY_EIGHT_HOURS_IN_SECONDS = 48 * 60 * 60

SUPPORTED_MARKETS = ("foundation", "zora", "nouns", "koans")

ENV_PREFIX = "PARTYBID_"


class PartyConfig(BaseModel):
    """Configuration supplied at party creation"""

    model_config = ConfigDict(frozen=True)

    # Identities
    party_address: str
    fee_recipient: str
    split_recipient: Optional[str] = None

    # Target auction
    market: str = "nouns"
    auction_id: int = Field(default=0, ge=0)
    asset_id: int = Field(default=0, ge=0)
    auction_reserve_price: int = Field(default=0, ge=0)

    # Economics
    split_basis_points: int = Field(default=0, ge=0, le=10_000)
    token_fee_basis_points: int = Field(default=TOKEN_FEE_BASIS_POINTS, ge=0, le=10_000)
    eth_fee_basis_points: int = Field(default=ETH_FEE_BASIS_POINTS, ge=0, le=10_000)
    token_scale: int = Field(default=TOKEN_SCALE, gt=0)

    # Share token metadata
    name: str = "Party"
    symbol: str = "PARTY"

    @field_validator("party_address", "fee_recipient", "split_recipient")
    @classmethod
    def _checksum(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return to_checksum_address(value)

    @field_validator("market")
    @classmethod
    def _known_market(cls, value: str) -> str:
        value = value.lower()
        if value not in SUPPORTED_MARKETS:
            raise ValueError(f"market must be one of {SUPPORTED_MARKETS}, got {value!r}")
        return value

    @model_validator(mode="after")
    def _check_splits(self) -> "PartyConfig":
        if self.split_basis_points > 0 and self.split_recipient is None:
            raise ValueError("split_recipient is required when split_basis_points > 0")
        if self.token_fee_basis_points + self.split_basis_points > 10_000:
            raise ValueError("token_fee_basis_points + split_basis_points must not exceed 10000")
        return self


def load_party_config(env_file: Optional[str] = None, **overrides: Any) -> PartyConfig:
    """
    Load configuration from the environment.

    Reads PARTYBID_<FIELD> variables (e.g. PARTYBID_ETH_FEE_BASIS_POINTS)
    from `env_file` (or a .env found from the working directory) and from
    the process environment. The process environment wins over the file,
    and keyword overrides win over both. The environment is not modified.

    Args:
        env_file: Optional path to a dotenv file

    Returns:
        PartyConfig instance
    """
    source = dict(dotenv_values(env_file or find_dotenv(usecwd=True)))
    source.update(os.environ)

    values: dict = {}
    for field_name in PartyConfig.model_fields:
        raw = source.get(ENV_PREFIX + field_name.upper())
        if raw is not None and raw != "":
            values[field_name] = raw
    values.update(overrides)

    return PartyConfig(**values)

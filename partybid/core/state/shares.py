"""
Shares - Redeemable party share token.

Shares are minted to contributors as they contribute, minted to fee
recipients at a winning finalize, and burned when redeemed for the
contributor's cut of the unspent pool.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from partybid.crypto import to_checksum_address
from partybid.errors import InsufficientShares, InvalidAmount


@dataclass
class ShareToken:
    """
    Fungible share bookkeeping.

    Attributes:
        name: Token name
        symbol: Token symbol
    """
    name: str = "Party"
    symbol: str = "PARTY"

    def __post_init__(self):
        self._balances: Dict[str, int] = {}
        self._total_supply: int = 0

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        return self._balances.get(to_checksum_address(holder), 0)

    def holders(self) -> Dict[str, int]:
        """Non-zero balances by holder."""
        return {h: b for h, b in self._balances.items() if b > 0}

    def mint(self, holder: str, amount: int) -> None:
        if amount < 0:
            raise InvalidAmount(f"mint amount must be >= 0, got {amount}")
        holder = to_checksum_address(holder)
        self._balances[holder] = self._balances.get(holder, 0) + amount
        self._total_supply += amount

    def burn(self, holder: str, amount: int) -> None:
        holder = to_checksum_address(holder)
        held = self._balances.get(holder, 0)
        if amount > held:
            raise InsufficientShares(f"{holder} holds {held} shares, tried to burn {amount}")
        self._balances[holder] = held - amount
        self._total_supply -= amount

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        if amount <= 0:
            raise InvalidAmount(f"transfer amount must be > 0, got {amount}")
        sender = to_checksum_address(sender)
        recipient = to_checksum_address(recipient)
        held = self._balances.get(sender, 0)
        if amount > held:
            raise InsufficientShares(f"{sender} holds {held} shares, tried to send {amount}")
        self._balances[sender] = held - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount

    def snapshot(self) -> Tuple[Dict[str, int], int]:
        return dict(self._balances), self._total_supply

    def restore(self, snapshot: Tuple[Dict[str, int], int]) -> None:
        self._balances, self._total_supply = dict(snapshot[0]), snapshot[1]

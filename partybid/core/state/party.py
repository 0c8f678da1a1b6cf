"""
Party - The pooled-funds aggregate and its status.

Status transitions:
    ACTIVE -> WON
    ACTIVE -> LOST

Both outcomes are terminal.
"""

from dataclasses import dataclass
from enum import IntEnum

from partybid.errors import AlreadyFinalized, InvalidState


class PartyStatus(IntEnum):
    """Lifecycle status of a party."""
    ACTIVE = 0    # Accepting contributions and bids
    WON = 1       # Party owns the asset
    LOST = 2      # Someone else won, or nobody did


@dataclass
class Party:
    """
    Singleton aggregate for one party instance.

    Attributes:
        status: Current lifecycle status
        total_contributed: Sum of all accepted contributions (incl. excess)
        total_spent: Winning bid plus ETH fee; zero unless WON
        highest_bid: Last bid the party placed on the market
        excess_contributions: Unredeemed funds accepted after the auction ended
        redeemable_eth: Pool shared pro-rata by share holders
        total_redeemed: Paid out so far through share redemption
        total_excess_refunded: Paid out so far as excess refunds
        total_deposited: Funds added to the pool after finalize
    """
    status: PartyStatus = PartyStatus.ACTIVE
    total_contributed: int = 0
    total_spent: int = 0
    highest_bid: int = 0
    excess_contributions: int = 0
    redeemable_eth: int = 0
    total_redeemed: int = 0
    total_excess_refunded: int = 0
    total_deposited: int = 0

    @property
    def is_active(self) -> bool:
        return self.status == PartyStatus.ACTIVE

    def require_active(self, action: str) -> None:
        if not self.is_active:
            raise InvalidState(f"{action}: party not active ({self.status.name})")

    def require_finalized(self, action: str) -> None:
        if self.is_active:
            raise InvalidState(f"{action}: party not finalized")

    def settle(self, status: PartyStatus, total_spent: int) -> None:
        """Move to a terminal status. Only ever succeeds once."""
        if not self.is_active:
            raise AlreadyFinalized(f"party already {self.status.name}")
        if status == PartyStatus.ACTIVE:
            raise InvalidState("cannot settle into ACTIVE")
        if total_spent > 0 and status != PartyStatus.WON:
            raise InvalidState("only a WON party can have spent funds")
        self.status = status
        self.total_spent = total_spent

    def snapshot(self) -> dict:
        return dict(vars(self))

    def restore(self, snapshot: dict) -> None:
        for name, value in snapshot.items():
            setattr(self, name, value)

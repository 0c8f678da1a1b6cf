"""
Bid Controller - Decides whether and how much the party bids.

Policy: bid only what is needed to retake the lead. The controller always
places the smallest bid the house will accept, so that as much
contributor capital as possible is left for refunds.

Every attempt reads a fresh MarketSnapshot; nothing is cached between
calls, so a house that was paused a moment ago is re-checked each time.
"""

import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Optional

from partybid.core.market.adapter import MarketAdapter, MarketSnapshot
from partybid.crypto import to_checksum_address
from partybid.errors import InsufficientFunds, MarketPaused, MarketRejected
from partybid.utils.logger import get_logger
from partybid.utils.validation import BASIS_POINTS_DENOMINATOR

logger = get_logger("bidding")


class BidOutcome(IntEnum):
    """Result of a bid attempt."""
    PLACED = 0            # A new bid went to the market
    ALREADY_LEADING = 1   # Party is already the highest bidder; nothing sent


@dataclass(frozen=True)
class BidResult:
    outcome: BidOutcome
    amount: int
    snapshot: MarketSnapshot

    @property
    def placed(self) -> bool:
        return self.outcome == BidOutcome.PLACED


def minimum_next_bid(snapshot: MarketSnapshot, reserve_price: int = 0) -> int:
    """
    Smallest bid the party will place next.

    With no bids, the larger of the house reserve and the party's own
    configured reserve. Otherwise the highest bid plus the house increment
    (at least 1 wei, so it strictly exceeds). A minimum quoted by the
    house itself is never undercut.
    """
    if not snapshot.has_bids:
        return max(snapshot.reserve_price, snapshot.minimum_bid, reserve_price, 1)
    increment = snapshot.highest_bid * snapshot.min_bid_increment_bps // BASIS_POINTS_DENOMINATOR
    return max(snapshot.highest_bid + max(increment, 1), snapshot.minimum_bid)


class BidController:
    """
    Places minimal bids on one auction for one party.

    Attributes:
        market: Adapter for the target auction house
        auction_id: Auction the party is bidding in
        party_address: Address the market knows the party by
        reserve_price: Smallest opening bid the party will make
    """

    def __init__(
        self,
        market: MarketAdapter,
        auction_id: int,
        party_address: str,
        clock: Optional[Callable[[], float]] = None,
        reserve_price: int = 0,
    ):
        self.market = market
        self.auction_id = auction_id
        self.party_address = to_checksum_address(party_address)
        self.reserve_price = reserve_price
        self.clock = clock or time.time

    def attempt_bid(self, available_funds: int) -> BidResult:
        """
        Retake the lead with the smallest valid bid.

        Args:
            available_funds: Most the party can put on the table

        Returns:
            BidResult (PLACED or ALREADY_LEADING)

        Raises:
            MarketPaused: house is paused
            MarketRejected: auction is settled or over, or the house refused
            InsufficientFunds: available_funds is below the minimum bid
        """
        snapshot = self.market.current_state(self.auction_id)

        if snapshot.paused:
            logger.warning(f"Bid refused: auction {self.auction_id} house is paused")
            raise MarketPaused(f"auction {self.auction_id}: market is paused")
        if snapshot.has_ended(self.clock()):
            raise MarketRejected(f"auction {self.auction_id}: auction not active")

        if snapshot.highest_bidder == self.party_address:
            logger.debug(f"Already leading auction {self.auction_id} at {snapshot.highest_bid}")
            return BidResult(BidOutcome.ALREADY_LEADING, snapshot.highest_bid, snapshot)

        amount = minimum_next_bid(snapshot, self.reserve_price)
        if amount > available_funds:
            logger.warning(f"Bid refused: need {amount}, party can spend {available_funds}")
            raise InsufficientFunds(f"insufficient funds to bid: need {amount}, have {available_funds}")

        self.market.place_bid(self.auction_id, amount)
        logger.info(f"Bid placed on auction {self.auction_id}: {amount}")
        return BidResult(BidOutcome.PLACED, amount, snapshot)

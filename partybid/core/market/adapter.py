"""
Market Adapter - Uniform interface over external reserve-auction houses.

The settlement engine never talks to an auction house directly. It talks
to a MarketAdapter, which:
- Reads the house's state into a MarketSnapshot
- Places bids on behalf of the party
- Finalizes (settles) the auction
- Reports who owns the asset

Adapters translate wire shapes and revert reasons only. They make no
decisions; that is the BidController's and SettlementEngine's job.

Variants are registered by name and chosen from PartyConfig.market.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol, runtime_checkable


# =============================================================================
# Snapshot
# =============================================================================


@dataclass(frozen=True)
class MarketSnapshot:
    """
    Read-only view of one auction, fetched fresh for every decision.

    Attributes:
        auction_id: House-specific auction identifier
        highest_bid: Current highest bid (0 if none)
        highest_bidder: Address of the highest bidder, None if no bids
        end_time: Unix time the auction ends, 0 if the timer has not started
        paused: Whether the house refuses bids right now
        reserve_price: Minimum first bid
        min_bid_increment_bps: Required raise over the highest bid
        minimum_bid: Smallest next bid as quoted by the house, 0 if it quotes none
        settled: Whether the auction has already been finalized
    """
    auction_id: int
    highest_bid: int
    highest_bidder: Optional[str]
    end_time: int
    paused: bool = False
    reserve_price: int = 0
    min_bid_increment_bps: int = 0
    minimum_bid: int = 0
    settled: bool = False

    @property
    def has_bids(self) -> bool:
        return self.highest_bidder is not None

    def has_ended(self, now: float) -> bool:
        """True once the timer has started and run out, or the auction settled."""
        if self.settled:
            return True
        return self.end_time > 0 and now >= self.end_time


# =============================================================================
# Capability Interface
# =============================================================================


@runtime_checkable
class MarketAdapter(Protocol):
    """Capabilities every supported auction house must expose."""

    def current_state(self, auction_id: int) -> MarketSnapshot:
        ...

    def place_bid(self, auction_id: int, amount: int) -> None:
        """Raises MarketRejected or MarketPaused."""
        ...

    def finalize(self, auction_id: int) -> None:
        """Raises NotYetEndable or MarketFinalizeFailed."""
        ...

    def owner_of(self, asset_id: int) -> str:
        ...


# =============================================================================
# Registry
# =============================================================================

AdapterFactory = Callable[..., MarketAdapter]

_ADAPTERS: Dict[str, AdapterFactory] = {}


def register_adapter(*names: str) -> Callable[[AdapterFactory], AdapterFactory]:
    """Register an adapter factory under one or more market names."""

    def decorator(factory: AdapterFactory) -> AdapterFactory:
        for name in names:
            _ADAPTERS[name.lower()] = factory
        return factory

    return decorator


def create_adapter(market: str, house, nft, bidder: str) -> MarketAdapter:
    """
    Build the adapter for a named market.

    Args:
        market: Market name (see PartyConfig.market)
        house: The auction house client
        nft: The asset registry client
        bidder: Address bids are placed from (the party)
    """
    factory = _ADAPTERS.get(market.lower())
    if factory is None:
        raise ValueError(f"No adapter registered for market {market!r}")
    return factory(house=house, nft=nft, bidder=bidder)


def registered_markets() -> list:
    return sorted(_ADAPTERS)

"""External auction market boundary"""
from partybid.core.market.adapter import (
    MarketSnapshot,
    MarketAdapter,
    register_adapter,
    create_adapter,
    registered_markets,
)
from partybid.core.market.adapters import (
    FoundationMarketAdapter,
    ZoraMarketAdapter,
    NounsMarketAdapter,
)
from partybid.core.market.houses import (
    SimulatedClock,
    MockNFT,
    ReserveAuctionHouse,
    MockFoundationMarket,
    MockZoraAuctionHouse,
    MockNounsAuctionHouse,
)

__all__ = [
    "MarketSnapshot",
    "MarketAdapter",
    "register_adapter",
    "create_adapter",
    "registered_markets",
    "FoundationMarketAdapter",
    "ZoraMarketAdapter",
    "NounsMarketAdapter",
    "SimulatedClock",
    "MockNFT",
    "ReserveAuctionHouse",
    "MockFoundationMarket",
    "MockZoraAuctionHouse",
    "MockNounsAuctionHouse",
]

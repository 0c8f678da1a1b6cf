"""
Unit tests for the market boundary.

Tests cover:
1. Revert reason translation
2. Adapter registry
3. Foundation adapter against the simulated Foundation market
4. Zora adapter against the simulated Zora auction house
5. Nouns / Koans adapter, including the paused settle path
"""

import pytest

from partybid.core.bid_controller import minimum_next_bid
from partybid.core.market import (
    FoundationMarketAdapter,
    MarketAdapter,
    MarketSnapshot,
    MockFoundationMarket,
    MockNFT,
    MockNounsAuctionHouse,
    MockZoraAuctionHouse,
    NounsMarketAdapter,
    SimulatedClock,
    ZoraMarketAdapter,
    create_adapter,
    registered_markets,
)
from partybid.core.state import EthLedger
from partybid.crypto import random_address
from partybid.errors import (
    HouseError,
    MarketFinalizeFailed,
    MarketPaused,
    MarketRejected,
    NotYetEndable,
    translate_house_errors,
)
from partybid.utils.units import eth

DAY = 24 * 60 * 60


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock():
    return SimulatedClock()


@pytest.fixture
def nft():
    return MockNFT()


@pytest.fixture
def balances():
    return EthLedger()


@pytest.fixture
def party(balances):
    """A funded bidding address."""
    address = random_address()
    balances.credit(address, eth(100))
    return address


@pytest.fixture
def rival(balances):
    address = random_address()
    balances.credit(address, eth(100))
    return address


@pytest.fixture
def seller():
    return random_address()


@pytest.fixture
def foundation(nft, balances, clock, seller, party):
    house = MockFoundationMarket(nft, balances, clock)
    nft.mint(seller, 7)
    auction_id = house.create_reserve_auction(seller, 7, eth(1), DAY)
    return house, FoundationMarketAdapter(house=house, nft=nft, bidder=party), auction_id


@pytest.fixture
def zora(nft, balances, clock, seller, party):
    house = MockZoraAuctionHouse(nft, balances, clock)
    nft.mint(seller, 7)
    auction_id = house.create_reserve_auction(seller, 7, eth(1), DAY)
    return house, ZoraMarketAdapter(house=house, nft=nft, bidder=party), auction_id


@pytest.fixture
def nouns(nft, balances, clock, party):
    house = MockNounsAuctionHouse(nft, balances, clock, reserve_price=eth(1))
    return house, NounsMarketAdapter(house=house, nft=nft, bidder=party)


# =============================================================================
# Error translation
# =============================================================================


class _FakeHouseClient:
    def __init__(self, reason):
        self.reason = reason

    @translate_house_errors
    def place_bid(self):
        raise HouseError(self.reason)

    @translate_house_errors
    def finalize(self):
        raise HouseError(self.reason)


class TestTranslateHouseErrors:
    """Tests for mapping revert reasons to market error kinds."""

    def test_paused(self):
        with pytest.raises(MarketPaused):
            _FakeHouseClient("Pausable: paused").place_bid()

    @pytest.mark.parametrize("reason", [
        "NFTMarketReserveAuction: Auction still in progress",
        "Auction hasn't begun",
        "Auction hasn't completed",
        "Auction not ended",
    ])
    def test_not_yet_endable(self, reason):
        with pytest.raises(NotYetEndable):
            _FakeHouseClient(reason).finalize()

    def test_finalize_failure(self):
        with pytest.raises(MarketFinalizeFailed, match="already been settled"):
            _FakeHouseClient("Auction has already been settled").finalize()

    def test_other_rejections(self):
        with pytest.raises(MarketRejected):
            _FakeHouseClient("Must send at least reservePrice").place_bid()

    def test_not_paused_is_not_paused(self):
        """'Pausable: not paused' is a plain failure, not MarketPaused."""
        with pytest.raises(MarketFinalizeFailed):
            _FakeHouseClient("Pausable: not paused").finalize()

    def test_other_exceptions_pass_through(self):
        @translate_house_errors
        def broken():
            raise KeyError("x")

        with pytest.raises(KeyError):
            broken()


# =============================================================================
# Registry
# =============================================================================


class TestRegistry:
    """Tests for adapter selection by market name."""

    def test_all_markets_registered(self):
        assert set(registered_markets()) >= {"foundation", "zora", "nouns", "koans"}

    def test_koans_uses_nouns_adapter(self, nft, party):
        adapter = create_adapter("Koans", house=object(), nft=nft, bidder=party)
        assert isinstance(adapter, NounsMarketAdapter)
        assert isinstance(adapter, MarketAdapter)

    def test_unknown_market(self, nft, party):
        with pytest.raises(ValueError):
            create_adapter("sothebys", house=object(), nft=nft, bidder=party)


class TestSnapshot:
    """Tests for MarketSnapshot helpers."""

    def test_timer_not_started(self):
        snapshot = MarketSnapshot(auction_id=1, highest_bid=0, highest_bidder=None, end_time=0)
        assert not snapshot.has_bids
        assert not snapshot.has_ended(10**12)

    def test_ended(self):
        snapshot = MarketSnapshot(auction_id=1, highest_bid=5, highest_bidder=random_address(), end_time=100)
        assert snapshot.has_bids
        assert not snapshot.has_ended(99)
        assert snapshot.has_ended(100)

    def test_settled_counts_as_ended(self):
        snapshot = MarketSnapshot(auction_id=1, highest_bid=0, highest_bidder=None, end_time=0, settled=True)
        assert snapshot.has_ended(0)


# =============================================================================
# Foundation
# =============================================================================


class TestFoundationAdapter:
    """Tests for the Foundation adapter."""

    def test_snapshot_before_bids(self, foundation):
        _, adapter, auction_id = foundation
        snapshot = adapter.current_state(auction_id)
        assert snapshot.highest_bid == 0
        assert snapshot.highest_bidder is None
        assert snapshot.reserve_price == eth(1)
        assert snapshot.end_time == 0
        assert snapshot.minimum_bid == eth(1)
        assert not snapshot.settled

    def test_bid_starts_timer_and_escrows(self, foundation, clock, balances, party):
        house, adapter, auction_id = foundation
        adapter.place_bid(auction_id, eth(1))

        snapshot = adapter.current_state(auction_id)
        assert snapshot.highest_bid == eth(1)
        assert snapshot.highest_bidder == party
        assert snapshot.end_time == clock.now + DAY
        assert balances.balance_of(house.address) == eth(1)
        assert balances.balance_of(party) == eth(99)

    def test_minimum_bid_quoted_by_house(self, foundation, rival):
        """The next bid comes from get_min_bid_amount, not a local increment."""
        house, adapter, auction_id = foundation
        adapter.place_bid(auction_id, eth(1))
        snapshot = adapter.current_state(auction_id)
        assert snapshot.minimum_bid == eth("1.1")
        assert snapshot.minimum_bid == house.get_min_bid_amount(auction_id)
        assert minimum_next_bid(snapshot) == eth("1.1")

        house.place_bid(auction_id, eth(2), sender=rival)
        assert minimum_next_bid(adapter.current_state(auction_id)) == eth("2.2")

    def test_bid_below_reserve(self, foundation):
        _, adapter, auction_id = foundation
        with pytest.raises(MarketRejected, match="Bid amount too low"):
            adapter.place_bid(auction_id, eth(1) - 1)

    def test_outbid_refunds(self, foundation, balances, party, rival):
        house, adapter, auction_id = foundation
        adapter.place_bid(auction_id, eth(1))
        assert house.get_min_bid_amount(auction_id) == eth("1.1")
        house.place_bid(auction_id, eth("1.1"), sender=rival)
        assert balances.balance_of(party) == eth(100)
        assert adapter.current_state(auction_id).highest_bidder == rival

    def test_finalize_too_early(self, foundation):
        _, adapter, auction_id = foundation
        with pytest.raises(NotYetEndable):
            adapter.finalize(auction_id)
        adapter.place_bid(auction_id, eth(1))
        with pytest.raises(NotYetEndable):
            adapter.finalize(auction_id)

    def test_finalize_transfers_asset(self, foundation, clock, balances, seller, party):
        _, adapter, auction_id = foundation
        adapter.place_bid(auction_id, eth(1))
        clock.advance(DAY)

        with pytest.raises(MarketRejected, match="Auction is over"):
            adapter.place_bid(auction_id, eth(2))

        adapter.finalize(auction_id)
        assert adapter.owner_of(7) == party
        assert balances.balance_of(seller) == eth(1)
        assert adapter.current_state(auction_id).settled

        with pytest.raises(MarketFinalizeFailed):
            adapter.finalize(auction_id)


# =============================================================================
# Zora
# =============================================================================


class TestZoraAdapter:
    """Tests for the Zora adapter."""

    def test_snapshot_before_bids(self, zora):
        _, adapter, auction_id = zora
        snapshot = adapter.current_state(auction_id)
        assert snapshot.highest_bidder is None
        assert snapshot.reserve_price == eth(1)
        assert snapshot.end_time == 0
        assert snapshot.min_bid_increment_bps == 500

    def test_bid_below_reserve(self, zora):
        _, adapter, auction_id = zora
        with pytest.raises(MarketRejected, match="reservePrice"):
            adapter.place_bid(auction_id, 1)

    def test_increment_enforced(self, zora, rival):
        house, adapter, auction_id = zora
        adapter.place_bid(auction_id, eth(1))
        with pytest.raises(HouseError, match="minBidIncrementPercentage"):
            house.create_bid(auction_id, eth("1.04"), sender=rival)
        house.create_bid(auction_id, eth("1.05"), sender=rival)

    def test_late_bid_extends_end_time(self, zora, clock, rival):
        house, adapter, auction_id = zora
        adapter.place_bid(auction_id, eth(1))
        clock.advance(DAY - 60)
        house.create_bid(auction_id, eth(2), sender=rival)
        assert adapter.current_state(auction_id).end_time == clock.now + house.time_buffer

    def test_end_before_first_bid(self, zora):
        _, adapter, auction_id = zora
        with pytest.raises(NotYetEndable):
            adapter.finalize(auction_id)

    def test_end_auction(self, zora, clock, party):
        _, adapter, auction_id = zora
        adapter.place_bid(auction_id, eth(1))
        clock.advance(DAY)
        adapter.finalize(auction_id)
        assert adapter.owner_of(7) == party
        snapshot = adapter.current_state(auction_id)
        assert snapshot.settled
        assert snapshot.has_ended(clock.now)


# =============================================================================
# Nouns / Koans
# =============================================================================


class TestNounsAdapter:
    """Tests for the Nouns-style adapter."""

    def test_auction_runs_from_creation(self, nouns, clock):
        house, adapter = nouns
        snapshot = adapter.current_state(0)
        assert snapshot.end_time == clock.now + DAY
        assert snapshot.reserve_price == eth(1)
        assert snapshot.min_bid_increment_bps == 200
        assert adapter.owner_of(0) == house.address

    def test_paused_bid(self, nouns):
        house, adapter = nouns
        house.pause()
        assert adapter.current_state(0).paused
        with pytest.raises(MarketPaused):
            adapter.place_bid(0, eth(1))

    def test_wrong_noun(self, nouns):
        _, adapter = nouns
        with pytest.raises(MarketRejected, match="not up for auction"):
            adapter.place_bid(3, eth(1))

    def test_settle_opens_next_auction(self, nouns, clock, party):
        house, adapter = nouns
        adapter.place_bid(0, eth(1))
        with pytest.raises(NotYetEndable):
            adapter.finalize(0)

        clock.advance(DAY)
        adapter.finalize(0)

        assert adapter.owner_of(0) == party
        assert house.auction()["noun_id"] == 1
        assert adapter.current_state(0).settled
        assert not adapter.current_state(1).settled

        with pytest.raises(MarketFinalizeFailed, match="already been settled"):
            adapter.finalize(0)

    def test_paused_house_settles_through_settle_auction(self, nouns, clock, party):
        """A paused house cannot settle-and-create, so the adapter uses settle_auction."""
        house, adapter = nouns
        adapter.place_bid(0, eth(1))
        house.pause()
        clock.advance(DAY)

        with pytest.raises(HouseError, match="Pausable: paused"):
            house.settle_current_and_create_new_auction()

        adapter.finalize(0)
        assert adapter.owner_of(0) == party
        assert house.auction()["noun_id"] == 0
        assert adapter.current_state(0).settled

    def test_paused_no_bids_returns_to_house(self, nouns, clock):
        house, adapter = nouns
        house.pause()
        clock.advance(DAY)
        adapter.finalize(0)
        assert adapter.owner_of(0) == house.address

    def test_owner_of_unknown_token(self, nouns):
        _, adapter = nouns
        with pytest.raises(MarketRejected):
            adapter.owner_of(999)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

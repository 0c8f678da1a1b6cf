"""
Unit tests for the bid controller.

Tests cover:
1. Minimum next bid computation
2. Refusal when paused, ended or underfunded
3. No bid when the party already leads
4. Fresh market state on every attempt
"""

import pytest

from partybid.core.bid_controller import BidController, BidOutcome, minimum_next_bid
from partybid.core.market import MarketSnapshot
from partybid.crypto import random_address
from partybid.errors import InsufficientFunds, MarketPaused, MarketRejected

NOW = 1_000


class StubMarket:
    """Records bids and serves whatever snapshot the test sets."""

    def __init__(self, snapshot):
        self.snapshot = snapshot
        self.bids = []
        self.reads = 0

    def current_state(self, auction_id):
        self.reads += 1
        return self.snapshot

    def place_bid(self, auction_id, amount):
        self.bids.append((auction_id, amount))

    def finalize(self, auction_id):
        pass

    def owner_of(self, asset_id):
        return None


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def party_address():
    return random_address()


def make_snapshot(**overrides):
    fields = dict(
        auction_id=5,
        highest_bid=0,
        highest_bidder=None,
        end_time=NOW + 100,
        reserve_price=100,
        min_bid_increment_bps=500,
    )
    fields.update(overrides)
    return MarketSnapshot(**fields)


def make_controller(snapshot, party_address):
    market = StubMarket(snapshot)
    return market, BidController(market, 5, party_address, clock=lambda: NOW)


# =============================================================================
# Tests
# =============================================================================


class TestMinimumNextBid:
    """Tests for the smallest acceptable bid."""

    def test_reserve_when_no_bids(self):
        assert minimum_next_bid(make_snapshot()) == 100

    def test_reserve_floor_is_one(self):
        assert minimum_next_bid(make_snapshot(reserve_price=0)) == 1

    def test_increment_over_highest(self):
        snapshot = make_snapshot(highest_bid=1000, highest_bidder=random_address())
        assert minimum_next_bid(snapshot) == 1050

    def test_party_reserve_above_house_reserve(self):
        """The configured reserve raises the opening bid, never the raise over a rival."""
        assert minimum_next_bid(make_snapshot(), reserve_price=500) == 500
        assert minimum_next_bid(make_snapshot(), reserve_price=50) == 100
        snapshot = make_snapshot(highest_bid=1000, highest_bidder=random_address())
        assert minimum_next_bid(snapshot, reserve_price=5000) == 1050

    def test_house_quoted_minimum(self):
        snapshot = make_snapshot(
            highest_bid=1000, highest_bidder=random_address(), min_bid_increment_bps=0, minimum_bid=1100,
        )
        assert minimum_next_bid(snapshot) == 1100
        assert minimum_next_bid(make_snapshot(minimum_bid=250)) == 250

    def test_increment_at_least_one_wei(self):
        """A tiny highest bid still requires a strictly higher bid."""
        snapshot = make_snapshot(highest_bid=10, highest_bidder=random_address())
        assert minimum_next_bid(snapshot) == 11


class TestAttemptBid:
    """Tests for BidController.attempt_bid."""

    def test_places_reserve_bid(self, party_address):
        market, controller = make_controller(make_snapshot(), party_address)
        result = controller.attempt_bid(available_funds=1_000)

        assert result.outcome == BidOutcome.PLACED
        assert result.placed
        assert result.amount == 100
        assert market.bids == [(5, 100)]

    def test_outbids_rival_minimally(self, party_address):
        snapshot = make_snapshot(highest_bid=400, highest_bidder=random_address())
        market, controller = make_controller(snapshot, party_address)
        result = controller.attempt_bid(available_funds=1_000)
        assert result.amount == 420
        assert market.bids == [(5, 420)]

    def test_opens_at_configured_reserve(self, party_address):
        market = StubMarket(make_snapshot())
        controller = BidController(market, 5, party_address, clock=lambda: NOW, reserve_price=300)
        assert controller.attempt_bid(available_funds=1_000).amount == 300
        assert market.bids == [(5, 300)]

    def test_already_leading(self, party_address):
        snapshot = make_snapshot(highest_bid=400, highest_bidder=party_address)
        market, controller = make_controller(snapshot, party_address)
        result = controller.attempt_bid(available_funds=1_000)

        assert result.outcome == BidOutcome.ALREADY_LEADING
        assert not result.placed
        assert result.amount == 400
        assert market.bids == []

    def test_paused(self, party_address):
        market, controller = make_controller(make_snapshot(paused=True), party_address)
        with pytest.raises(MarketPaused):
            controller.attempt_bid(available_funds=1_000)
        assert market.bids == []

    def test_auction_over(self, party_address):
        market, controller = make_controller(make_snapshot(end_time=NOW), party_address)
        with pytest.raises(MarketRejected, match="auction not active"):
            controller.attempt_bid(available_funds=1_000)

    def test_settled(self, party_address):
        market, controller = make_controller(make_snapshot(settled=True), party_address)
        with pytest.raises(MarketRejected):
            controller.attempt_bid(available_funds=1_000)

    def test_insufficient_funds(self, party_address):
        snapshot = make_snapshot(highest_bid=1_000, highest_bidder=random_address())
        market, controller = make_controller(snapshot, party_address)
        with pytest.raises(InsufficientFunds):
            controller.attempt_bid(available_funds=1_049)
        assert market.bids == []

    def test_exact_funds_suffice(self, party_address):
        snapshot = make_snapshot(highest_bid=1_000, highest_bidder=random_address())
        market, controller = make_controller(snapshot, party_address)
        assert controller.attempt_bid(available_funds=1_050).amount == 1_050

    def test_reads_fresh_state(self, party_address):
        """Unpausing the market is seen by the very next attempt."""
        market, controller = make_controller(make_snapshot(paused=True), party_address)
        with pytest.raises(MarketPaused):
            controller.attempt_bid(available_funds=1_000)

        market.snapshot = make_snapshot()
        assert controller.attempt_bid(available_funds=1_000).placed
        assert market.reads == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

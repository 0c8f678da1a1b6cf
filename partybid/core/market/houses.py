"""
Simulated auction houses for PartyBid.

In-process stand-ins for the external reserve-auction contracts a party
bids on. Each house keeps its own escrow in a shared EthLedger, custodies
the asset in a MockNFT registry, and reverts with a HouseError carrying
the same reason strings the real contracts use.

Three call surfaces are provided:
- MockFoundationMarket: dict records, timer starts on first bid
- MockZoraAuctionHouse: positional tuple records, percentage increments
- MockNounsAuctionHouse: one current auction at a time, pausable

Used by the test suite and by `partybid demo`.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from partybid.core.state.balances import EthLedger
from partybid.crypto import ZERO_ADDRESS, random_address, to_checksum_address
from partybid.errors import HouseError
from partybid.utils.logger import get_logger

logger = get_logger("houses")

# Late bids push the end time out to at least this far in the future
DEFAULT_TIME_BUFFER = 15 * 60


# =============================================================================
# Shared Infrastructure
# =============================================================================


class SimulatedClock:
    """Manually advanced unix clock. Calling it returns the current time."""

    def __init__(self, start: int = 1_600_000_000):
        self.now = start

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now

    def __call__(self) -> int:
        return self.now


class MockNFT:
    """ERC-721 style ownership registry."""

    def __init__(self):
        self._owners: Dict[int, str] = {}

    def mint(self, to: str, token_id: int) -> None:
        if token_id in self._owners:
            raise HouseError("ERC721: token already minted")
        self._owners[token_id] = to_checksum_address(to)

    def owner_of(self, token_id: int) -> str:
        owner = self._owners.get(token_id)
        if owner is None:
            raise HouseError("ERC721: owner query for nonexistent token")
        return owner

    def transfer_from(self, sender: str, recipient: str, token_id: int) -> None:
        if self.owner_of(token_id) != to_checksum_address(sender):
            raise HouseError("ERC721: transfer of token that is not own")
        self._owners[token_id] = to_checksum_address(recipient)


@dataclass
class _Auction:
    auction_id: int
    token_id: int
    seller: str
    reserve_price: int
    duration: int
    end_time: int = 0
    first_bid_time: int = 0
    bidder: Optional[str] = None
    amount: int = 0
    settled: bool = False


class ReserveAuctionHouse:
    """
    Common reserve-auction mechanics.

    Subclasses expose the house-specific call surface on top of _bid,
    _settle and _minimum_bid.
    """

    min_bid_increment_bps = 500
    starts_on_first_bid = True

    def __init__(
        self,
        nft: MockNFT,
        balances: EthLedger,
        clock: SimulatedClock,
        address: Optional[str] = None,
        time_buffer: int = DEFAULT_TIME_BUFFER,
    ):
        self.nft = nft
        self.balances = balances
        self.clock = clock
        self.address = to_checksum_address(address or random_address())
        self.time_buffer = time_buffer
        self.is_paused = False
        self._auctions: Dict[int, _Auction] = {}
        self._next_id = 1

    # -------------------------------------------------------------------------
    # Admin
    # -------------------------------------------------------------------------

    def pause(self) -> None:
        self.is_paused = True
        logger.info(f"{type(self).__name__} paused")

    def unpause(self) -> None:
        self.is_paused = False
        logger.info(f"{type(self).__name__} unpaused")

    def create_reserve_auction(self, seller: str, token_id: int, reserve_price: int, duration: int) -> int:
        """Escrow the asset and open an auction. Returns the auction id."""
        self.nft.transfer_from(seller, self.address, token_id)
        return self._open(token_id, seller, reserve_price, duration, self._take_id())

    def _take_id(self) -> int:
        auction_id = self._next_id
        self._next_id += 1
        return auction_id

    def _open(self, token_id: int, seller: str, reserve_price: int, duration: int, auction_id: int) -> int:
        auction = _Auction(
            auction_id=auction_id,
            token_id=token_id,
            seller=to_checksum_address(seller),
            reserve_price=reserve_price,
            duration=duration,
        )
        if not self.starts_on_first_bid:
            auction.end_time = self.clock() + duration
        self._auctions[auction_id] = auction
        logger.debug(f"Auction {auction_id} opened for token {token_id}, reserve={reserve_price}")
        return auction_id

    # -------------------------------------------------------------------------
    # Mechanics
    # -------------------------------------------------------------------------

    def _get(self, auction_id: int) -> _Auction:
        auction = self._auctions.get(auction_id)
        if auction is None:
            raise HouseError("Auction doesn't exist")
        return auction

    def _minimum_bid(self, auction: _Auction) -> int:
        if auction.bidder is None:
            return max(auction.reserve_price, 1)
        increment = auction.amount * self.min_bid_increment_bps // 10_000
        return auction.amount + max(increment, 1)

    def _bid(self, auction_id: int, bidder: str, amount: int) -> None:
        auction = self._get(auction_id)
        if self.is_paused:
            raise HouseError("Pausable: paused")
        if auction.settled:
            raise HouseError("Auction has already been settled")
        now = self.clock()
        if auction.end_time and now >= auction.end_time:
            raise HouseError("Auction expired")
        if amount < self._minimum_bid(auction):
            raise HouseError(f"Bid too low: minimum is {self._minimum_bid(auction)}")

        bidder = to_checksum_address(bidder)
        self.balances.transfer(bidder, self.address, amount)
        if auction.bidder is not None:
            self.balances.transfer(self.address, auction.bidder, auction.amount)

        if auction.end_time == 0:
            auction.first_bid_time = now
            auction.end_time = now + auction.duration
        elif auction.end_time - now < self.time_buffer:
            auction.end_time = now + self.time_buffer

        auction.bidder = bidder
        auction.amount = amount
        logger.debug(f"Auction {auction_id}: bid {amount} by {bidder[:10]}...")

    def _settle(self, auction_id: int) -> None:
        auction = self._get(auction_id)
        if auction.settled:
            raise HouseError("Auction has already been settled")
        if auction.end_time == 0:
            raise HouseError("Auction hasn't begun")
        if self.clock() < auction.end_time:
            raise HouseError("Auction hasn't completed")

        auction.settled = True
        if auction.bidder is None:
            self.nft.transfer_from(self.address, auction.seller, auction.token_id)
        else:
            self.nft.transfer_from(self.address, auction.bidder, auction.token_id)
            self.balances.transfer(self.address, auction.seller, auction.amount)
        logger.info(f"Auction {auction_id} settled: winner={auction.bidder}, amount={auction.amount}")

    def _bidder_or_zero(self, auction: _Auction) -> str:
        return auction.bidder or ZERO_ADDRESS


# =============================================================================
# Foundation
# =============================================================================


class MockFoundationMarket(ReserveAuctionHouse):
    """Foundation-style market: 10% increments, never paused."""

    min_bid_increment_bps = 1000
    extension_duration = DEFAULT_TIME_BUFFER

    def get_reserve_auction(self, auction_id: int) -> dict:
        auction = self._get(auction_id)
        if auction.settled:
            # Foundation deletes the record on finalize
            return {
                "nft_contract": ZERO_ADDRESS, "token_id": 0, "seller": ZERO_ADDRESS,
                "duration": 0, "extension_duration": 0, "end_time": 0,
                "bidder": ZERO_ADDRESS, "amount": 0,
            }
        return {
            "nft_contract": ZERO_ADDRESS,
            "token_id": auction.token_id,
            "seller": auction.seller,
            "duration": auction.duration,
            "extension_duration": self.extension_duration,
            "end_time": auction.end_time,
            "bidder": self._bidder_or_zero(auction),
            # Before the first bid this holds the reserve price
            "amount": auction.amount if auction.bidder else auction.reserve_price,
        }

    def get_min_bid_amount(self, auction_id: int) -> int:
        return self._minimum_bid(self._get(auction_id))

    def place_bid(self, auction_id: int, amount: int, sender: str) -> None:
        try:
            self._bid(auction_id, sender, amount)
        except HouseError as err:
            if err.reason.startswith("Bid too low"):
                raise HouseError("NFTMarketReserveAuction: Bid amount too low") from err
            if err.reason == "Auction expired":
                raise HouseError("NFTMarketReserveAuction: Auction is over") from err
            raise

    def finalize_reserve_auction(self, auction_id: int) -> None:
        auction = self._get(auction_id)
        if auction.settled:
            raise HouseError("NFTMarketReserveAuction: Auction was already settled")
        if auction.end_time == 0 or self.clock() < auction.end_time:
            raise HouseError("NFTMarketReserveAuction: Auction still in progress")
        self._settle(auction_id)


# =============================================================================
# Zora
# =============================================================================


class MockZoraAuctionHouse(ReserveAuctionHouse):
    """Zora-style auction house: 5% increments, positional records."""

    min_bid_increment_percentage = 5
    min_bid_increment_bps = min_bid_increment_percentage * 100

    def auctions(self, auction_id: int) -> tuple:
        """
        (token_id, token_contract, approved, amount, duration, first_bid_time,
         reserve_price, curator_fee_percentage, token_owner, bidder, curator,
         auction_currency)
        """
        auction = self._get(auction_id)
        if auction.settled:
            # Zora deletes the record on end_auction
            return (0, ZERO_ADDRESS, False, 0, 0, 0, 0, 0, ZERO_ADDRESS, ZERO_ADDRESS, ZERO_ADDRESS, ZERO_ADDRESS)
        return (
            auction.token_id,
            ZERO_ADDRESS,
            True,
            auction.amount,
            # The duration field tracks time-buffer extensions
            auction.end_time - auction.first_bid_time if auction.first_bid_time else auction.duration,
            auction.first_bid_time,
            auction.reserve_price,
            0,
            auction.seller,
            self._bidder_or_zero(auction),
            ZERO_ADDRESS,
            ZERO_ADDRESS,
        )

    def create_bid(self, auction_id: int, amount: int, sender: str) -> None:
        try:
            self._bid(auction_id, sender, amount)
        except HouseError as err:
            if err.reason.startswith("Bid too low"):
                auction = self._get(auction_id)
                if auction.bidder is None:
                    raise HouseError("Must send at least reservePrice") from err
                raise HouseError("Must send more than last bid by minBidIncrementPercentage amount") from err
            raise

    def end_auction(self, auction_id: int) -> None:
        self._settle(auction_id)


# =============================================================================
# Nouns
# =============================================================================


class MockNounsAuctionHouse(ReserveAuctionHouse):
    """
    Nouns-style auction house.

    One auction runs at a time; its id is the noun (token) id, and the
    noun is minted by the house when the auction opens. While running,
    settle_current_and_create_new_auction() settles and opens the next
    one. While paused, only settle_auction() may settle.
    """

    min_bid_increment_percentage = 2
    min_bid_increment_bps = min_bid_increment_percentage * 100
    starts_on_first_bid = False

    def __init__(self, *args, reserve_price: int = 1, duration: int = 24 * 60 * 60, **kwargs):
        super().__init__(*args, **kwargs)
        self.reserve_price = reserve_price
        self.duration = duration
        self._current_id = 0
        self.seller = self.address
        self._create_auction()

    def _create_auction(self) -> None:
        noun_id = self._current_id + 1 if self._auctions else self._current_id
        self.nft.mint(self.address, noun_id)
        self._open(noun_id, self.address, self.reserve_price, self.duration, noun_id)
        self._current_id = noun_id

    def paused(self) -> bool:
        return self.is_paused

    def auction(self) -> dict:
        auction = self._auctions[self._current_id]
        return {
            "noun_id": auction.auction_id,
            "amount": auction.amount,
            "start_time": auction.end_time - auction.duration,
            "end_time": auction.end_time,
            "bidder": self._bidder_or_zero(auction),
            "settled": auction.settled,
        }

    def create_bid(self, noun_id: int, amount: int, sender: str) -> None:
        if noun_id != self._current_id:
            raise HouseError("Noun not up for auction")
        try:
            self._bid(noun_id, sender, amount)
        except HouseError as err:
            if err.reason.startswith("Bid too low"):
                if self._auctions[noun_id].bidder is None:
                    raise HouseError("Must send at least reservePrice") from err
                raise HouseError("Must send more than last bid by minBidIncrementPercentage amount") from err
            raise

    def settle_current_and_create_new_auction(self) -> None:
        if self.is_paused:
            raise HouseError("Pausable: paused")
        self._settle(self._current_id)
        self._create_auction()

    def settle_auction(self) -> None:
        if not self.is_paused:
            raise HouseError("Pausable: not paused")
        self._settle(self._current_id)

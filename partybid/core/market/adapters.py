"""
Market adapter variants, one per supported auction house.

Each adapter converts its house's record layout into a MarketSnapshot and
its revert reasons into market error kinds (see translate_house_errors).
"""

from typing import Optional

from partybid.core.market.adapter import MarketSnapshot, register_adapter
from partybid.crypto import ZERO_ADDRESS, to_checksum_address
from partybid.errors import HouseError, translate_house_errors
from partybid.utils.logger import get_logger

logger = get_logger("market")


def _bidder(address: str) -> Optional[str]:
    """The houses report "no bidder" as the zero address."""
    if address == ZERO_ADDRESS:
        return None
    return to_checksum_address(address)


class _AdapterBase:
    """Holds the house, the asset registry and the party's bidding address."""

    def __init__(self, house, nft, bidder: str):
        self.house = house
        self.nft = nft
        self.bidder = to_checksum_address(bidder)

    @translate_house_errors
    def owner_of(self, asset_id: int) -> str:
        return to_checksum_address(self.nft.owner_of(asset_id))


@register_adapter("foundation")
class FoundationMarketAdapter(_AdapterBase):
    """Foundation NFTMarket reserve auctions."""

    @translate_house_errors
    def current_state(self, auction_id: int) -> MarketSnapshot:
        record = self.house.get_reserve_auction(auction_id)
        settled = record["seller"] == ZERO_ADDRESS
        bidder = _bidder(record["bidder"])
        return MarketSnapshot(
            auction_id=auction_id,
            highest_bid=record["amount"] if bidder else 0,
            highest_bidder=bidder,
            end_time=record["end_time"],
            paused=False,
            reserve_price=0 if bidder else record["amount"],
            minimum_bid=0 if settled else self.house.get_min_bid_amount(auction_id),
            settled=settled,
        )

    @translate_house_errors
    def place_bid(self, auction_id: int, amount: int) -> None:
        self.house.place_bid(auction_id, amount, sender=self.bidder)
        logger.info(f"Foundation bid placed: auction={auction_id}, amount={amount}")

    @translate_house_errors
    def finalize(self, auction_id: int) -> None:
        self.house.finalize_reserve_auction(auction_id)
        logger.info(f"Foundation auction {auction_id} finalized")


@register_adapter("zora")
class ZoraMarketAdapter(_AdapterBase):
    """Zora AuctionHouse."""

    @translate_house_errors
    def current_state(self, auction_id: int) -> MarketSnapshot:
        (
            _token_id, _token_contract, _approved, amount, duration, first_bid_time,
            reserve_price, _curator_fee, token_owner, bidder, _curator, _currency,
        ) = self.house.auctions(auction_id)
        bidder = _bidder(bidder)
        return MarketSnapshot(
            auction_id=auction_id,
            highest_bid=amount,
            highest_bidder=bidder,
            end_time=first_bid_time + duration if first_bid_time else 0,
            paused=False,
            reserve_price=reserve_price,
            min_bid_increment_bps=self.house.min_bid_increment_percentage * 100,
            settled=token_owner == ZERO_ADDRESS,
        )

    @translate_house_errors
    def place_bid(self, auction_id: int, amount: int) -> None:
        self.house.create_bid(auction_id, amount, sender=self.bidder)
        logger.info(f"Zora bid placed: auction={auction_id}, amount={amount}")

    @translate_house_errors
    def finalize(self, auction_id: int) -> None:
        self.house.end_auction(auction_id)
        logger.info(f"Zora auction {auction_id} ended")


@register_adapter("nouns", "koans")
class NounsMarketAdapter(_AdapterBase):
    """
    Nouns-style auction houses (Nouns, Koans).

    The auction id is the token id. Only the current auction is visible;
    an id that is no longer current has already been settled.
    """

    @translate_house_errors
    def current_state(self, auction_id: int) -> MarketSnapshot:
        record = self.house.auction()
        paused = self.house.paused()
        if record["noun_id"] != auction_id:
            return MarketSnapshot(
                auction_id=auction_id,
                highest_bid=0,
                highest_bidder=None,
                end_time=0,
                paused=paused,
                settled=True,
            )
        return MarketSnapshot(
            auction_id=auction_id,
            highest_bid=record["amount"],
            highest_bidder=_bidder(record["bidder"]),
            end_time=record["end_time"],
            paused=paused,
            reserve_price=self.house.reserve_price,
            min_bid_increment_bps=self.house.min_bid_increment_percentage * 100,
            settled=record["settled"],
        )

    @translate_house_errors
    def place_bid(self, auction_id: int, amount: int) -> None:
        self.house.create_bid(auction_id, amount, sender=self.bidder)
        logger.info(f"Nouns bid placed: noun={auction_id}, amount={amount}")

    @translate_house_errors
    def finalize(self, auction_id: int) -> None:
        if self.house.auction()["noun_id"] != auction_id:
            raise HouseError("Auction has already been settled")
        # A paused house only settles through settle_auction()
        if self.house.paused():
            self.house.settle_auction()
        else:
            self.house.settle_current_and_create_new_auction()
        logger.info(f"Nouns auction {auction_id} settled")

"""
PartyBid errors.

Every rejected operation raises one of these. Market boundary failures
are propagated as-is and never retried by the engine.
"""

import functools
from typing import Any, Callable


class PartyBidError(Exception):
    """
    Base exception for all party operations
    """


class InvalidState(PartyBidError):
    """
    Operation is not valid for the party's current status
    """


class InvalidAmount(PartyBidError):
    """
    Non-positive or malformed quantity
    """


class InvalidAddress(PartyBidError, ValueError):
    """
    Not a 0x-prefixed 20-byte account address
    """


class InsufficientFunds(PartyBidError):
    """
    Not enough pooled funds to cover the requested amount
    """


class InsufficientShares(PartyBidError):
    """
    Caller holds fewer shares than claimed
    """


class NotAContributor(PartyBidError):
    """
    Caller has never contributed to the party
    """


class AlreadyFinalized(PartyBidError):
    """
    Finalize has already run for this party
    """


class MarketError(PartyBidError):
    """
    Base exception for failures reported by the external auction market
    """


class MarketRejected(MarketError):
    """
    The market refused the bid (below minimum, auction over or settled)
    """


class MarketPaused(MarketError):
    """
    The market is paused and does not accept bids
    """


class NotYetEndable(MarketError):
    """
    The auction has not reached its end time
    """


class AuctionStillOpen(NotYetEndable):
    """
    Finalize was attempted before the auction's end time
    """


class MarketFinalizeFailed(MarketError):
    """
    The market's finalize call failed for a reason other than timing
    """


class HouseError(Exception):
    """
    Raised by auction house clients; carries the house's revert reason
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


# Revert reasons the supported houses use for "too early to settle"
NOT_ENDED_REASONS = (
    "still in progress",
    "hasn't begun",
    "hasn't completed",
    "not ended",
)


def translate_house_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator that maps HouseError revert reasons onto market error kinds.

    - "Pausable: paused" -> MarketPaused
    - any of NOT_ENDED_REASONS -> NotYetEndable
    - anything else raised while finalizing -> MarketFinalizeFailed
    - anything else -> MarketRejected

    Other exception types are re-raised untouched.
    """

    @functools.wraps(func)
    def wrapped_func(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except HouseError as err:
            reason = err.reason.lower()
            if reason.endswith(": paused"):
                raise MarketPaused(err.reason) from err
            if any(r in reason for r in NOT_ENDED_REASONS):
                raise NotYetEndable(err.reason) from err
            if func.__name__ == "finalize":
                raise MarketFinalizeFailed(err.reason) from err
            raise MarketRejected(err.reason) from err

    return wrapped_func

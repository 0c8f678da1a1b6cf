"""
Settlement Engine - Lifecycle of a single party.

Lifecycle:
---------
1. Contribution window: contributors deposit funds and receive shares
2. Bidding: any contributor may trigger a minimal bid on the market
3. Finalize: once the auction is over, anyone settles the outcome
4. Redemption: share holders withdraw their cut of the unspent pool

Status:
------
    ACTIVE -> WON | LOST      (exactly once, irreversible)

Atomicity:
---------
The engine is a single logical actor. Every operation runs under one
re-entrant lock, and mutating operations additionally refuse to be
re-entered from inside an external market call. Local state (party
totals, contributions, shares) is checkpointed before each mutating
operation and restored if it raises. The one currency movement an
operation makes is always its last step, so a failure never leaves a
transfer without the matching bookkeeping.

Finalize flips the status away from ACTIVE before any fee is paid out, so
anything that calls back into the engine during the payout sees a
settled party.
"""

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from partybid.core.bid_controller import BidController, BidResult
from partybid.core.config import PartyConfig
from partybid.core.fees import FeeSplit, compute_fee_split, maximum_bid
from partybid.core.market.adapter import MarketAdapter
from partybid.core.state import (
    ContributionLedger,
    ContributionReceipt,
    EthLedger,
    Party,
    PartyStatus,
    ShareToken,
)
from partybid.crypto import to_checksum_address
from partybid.errors import (
    AlreadyFinalized,
    AuctionStillOpen,
    InvalidAmount,
    InvalidState,
    MarketError,
    MarketFinalizeFailed,
    NotAContributor,
    NotYetEndable,
)
from partybid.utils.logger import get_logger
from partybid.utils.validation import validate_amount

logger = get_logger("settlement")


@dataclass(frozen=True)
class FinalizeResult:
    """Outcome of a successful finalize()."""
    status: PartyStatus
    total_spent: int
    fees: Optional[FeeSplit]
    redeemable_eth: int


class SettlementEngine:
    """
    Orchestrates one party against one auction.

    Attributes:
        config: Party configuration
        market: Adapter for the auction house
        balances: Currency accounts (party, fee recipient, contributors)
        party: The party aggregate
        shares: Redeemable share token
        ledger: Contribution ledger
        bidder: Bid controller
    """

    def __init__(
        self,
        config: PartyConfig,
        market: MarketAdapter,
        balances: EthLedger,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.config = config
        self.market = market
        self.balances = balances
        self.clock = clock or time.time

        self.party = Party()
        self.shares = ShareToken(name=config.name, symbol=config.symbol)
        self.ledger = ContributionLedger(self.party, self.shares, config.token_scale)
        self.bidder = BidController(
            market,
            config.auction_id,
            config.party_address,
            clock=self.clock,
            reserve_price=config.auction_reserve_price,
        )

        self._lock = threading.RLock()
        self._entered = False

    @property
    def address(self) -> str:
        return self.config.party_address

    # =========================================================================
    # Concurrency
    # =========================================================================

    @contextmanager
    def _transaction(self, action: str) -> Iterator[None]:
        """Serialize, refuse re-entry, and roll local state back on failure."""
        with self._lock:
            if self._entered:
                raise InvalidState(f"{action}: reentrant call")
            self._entered = True
            checkpoint = (
                self.party.snapshot(),
                self.ledger.snapshot(),
                self.shares.snapshot(),
            )
            try:
                yield
            except Exception as err:
                party_state, ledger_state, share_state = checkpoint
                self.party.restore(party_state)
                self.ledger.restore(ledger_state)
                self.shares.restore(share_state)
                logger.warning(f"{action} refused: {type(err).__name__}: {err}")
                raise
            finally:
                self._entered = False

    # =========================================================================
    # Contributions
    # =========================================================================

    def contribute(self, contributor: str, amount: int) -> ContributionReceipt:
        """
        Add funds to the party.

        A contribution made after the auction's end time is booked as an
        excess contribution: it mints no shares and is refunded in full
        after finalize.

        Raises:
            InvalidAddress: contributor is not a valid address
            InvalidState: party is not active
            InvalidAmount: amount is not a positive integer
        """
        with self._transaction("contribute"):
            contributor = to_checksum_address(contributor)
            self.party.require_active("contribute")
            valid, error = validate_amount(amount)
            if not valid:
                raise InvalidAmount(error)

            snapshot = self.market.current_state(self.config.auction_id)
            excess = snapshot.has_ended(self.clock())

            receipt = self.ledger.contribute(contributor, amount, excess=excess)
            self.balances.credit(self.address, amount)
            return receipt

    # =========================================================================
    # Bidding
    # =========================================================================

    def maximum_bid(self) -> int:
        """Largest bid the pool can cover including the ETH fee."""
        with self._lock:
            pool = self.party.total_contributed - self.party.excess_contributions
            return maximum_bid(pool, self.config.eth_fee_basis_points)

    def bid(self, caller: str) -> BidResult:
        """
        Bid on behalf of the party.

        Raises:
            InvalidAddress: caller is not a valid address
            InvalidState: party is not active
            NotAContributor: caller never contributed
            MarketPaused / MarketRejected: refused by the market
            InsufficientFunds: the pool cannot cover the minimum bid
        """
        with self._transaction("bid"):
            caller = to_checksum_address(caller)
            if not self.party.is_active:
                raise InvalidState(f"bid: auction not active ({self.party.status.name})")
            if not self.ledger.is_contributor(caller):
                raise NotAContributor(f"bid: {caller} is not a contributor")

            result = self.bidder.attempt_bid(self.maximum_bid())
            if result.placed:
                self.party.highest_bid = result.amount
            return result

    # =========================================================================
    # Finalize
    # =========================================================================

    def finalize(self) -> FinalizeResult:
        """
        Settle the auction outcome. Succeeds at most once.

        Raises:
            AlreadyFinalized: party already settled
            AuctionStillOpen: auction end time has not passed
            NotYetEndable: market refused to settle because it is too early
            MarketFinalizeFailed: market failed to settle
        """
        with self._transaction("finalize"):
            if not self.party.is_active:
                raise AlreadyFinalized(f"finalize: party already {self.party.status.name}")

            auction_id = self.config.auction_id
            snapshot = self.market.current_state(auction_id)
            if not snapshot.has_ended(self.clock()):
                raise AuctionStillOpen(f"finalize: auction {auction_id} is not over")

            if not snapshot.settled:
                try:
                    self.market.finalize(auction_id)
                except (NotYetEndable, MarketFinalizeFailed):
                    raise
                except MarketError as err:
                    raise MarketFinalizeFailed(f"finalize: {err}") from err

            won = self.market.owner_of(self.config.asset_id) == self.address
            if won:
                return self._close_won()
            return self._close_lost()

    def _close_won(self) -> FinalizeResult:
        fees = compute_fee_split(
            winning_bid=self.party.highest_bid,
            share_supply=self.shares.total_supply,
            eth_fee_basis_points=self.config.eth_fee_basis_points,
            token_fee_basis_points=self.config.token_fee_basis_points,
            split_basis_points=self.config.split_basis_points,
        )

        self.party.settle(PartyStatus.WON, fees.total_spent)
        pool = self.ledger.open_redemptions()

        # Both credits are taken against the pre-finalize supply
        self.shares.mint(self.config.fee_recipient, fees.token_fee)
        if self.config.split_recipient is not None:
            self.shares.mint(self.config.split_recipient, fees.split_recipient_share)

        self.balances.transfer(self.address, self.config.fee_recipient, fees.eth_fee)

        logger.info(
            f"Party WON: bid={fees.winning_bid}, eth_fee={fees.eth_fee}, "
            f"token_fee={fees.token_fee}, split={fees.split_recipient_share}, redeemable={pool}"
        )
        return FinalizeResult(PartyStatus.WON, fees.total_spent, fees, pool)

    def _close_lost(self) -> FinalizeResult:
        self.party.settle(PartyStatus.LOST, 0)
        pool = self.ledger.open_redemptions()
        logger.info(f"Party LOST: redeemable={pool}, excess={self.party.excess_contributions}")
        return FinalizeResult(PartyStatus.LOST, 0, None, pool)

    # =========================================================================
    # Redemption
    # =========================================================================

    def redeem(self, holder: str, share_amount: int) -> int:
        """
        Burn shares for their cut of the unspent pool and pay it out.

        Raises:
            InvalidAddress: holder is not a valid address
            InvalidState: party not finalized
            InvalidAmount: share_amount is not a positive integer
            InsufficientShares: holder has fewer shares
        """
        with self._transaction("redeem"):
            holder = to_checksum_address(holder)
            eth_amount = self.ledger.redeem(holder, share_amount)
            self.balances.transfer(self.address, holder, eth_amount)
            return eth_amount

    def claim_excess(self, contributor: str) -> int:
        """Refund a contributor's excess contributions in full."""
        with self._transaction("claim_excess"):
            contributor = to_checksum_address(contributor)
            owed = self.ledger.claim_excess(contributor)
            self.balances.transfer(self.address, contributor, owed)
            return owed

    def deposit(self, amount: int) -> None:
        """Receive funds after finalize; they become redeemable by share holders."""
        with self._transaction("deposit"):
            self.ledger.deposit(amount)
            self.balances.credit(self.address, amount)
            logger.info(f"Deposit of {amount} wei, redeemable={self.party.redeemable_eth}")

    def transfer_shares(self, sender: str, recipient: str, amount: int) -> None:
        with self._transaction("transfer_shares"):
            sender, recipient = to_checksum_address(sender), to_checksum_address(recipient)
            self.shares.transfer(sender, recipient, amount)

    # =========================================================================
    # Queries
    # =========================================================================

    def party_status(self) -> PartyStatus:
        with self._lock:
            return self.party.status

    def total_spent(self) -> int:
        with self._lock:
            return self.party.total_spent

    def highest_bid(self) -> int:
        with self._lock:
            return self.party.highest_bid

    def total_contributed(self) -> int:
        with self._lock:
            return self.party.total_contributed

    def excess_contributions(self) -> int:
        with self._lock:
            return self.party.excess_contributions

    def redeemable_eth_balance(self) -> int:
        with self._lock:
            return self.ledger.redeemable_balance()

    def redeem_amount(self, share_amount: int) -> int:
        with self._lock:
            return self.ledger.redeem_amount(share_amount)

    def total_contributed_by(self, contributor: str) -> int:
        with self._lock:
            return self.ledger.total_contributed_by(contributor)

    def total_supply(self) -> int:
        with self._lock:
            return self.shares.total_supply

    def balance_of(self, holder: str) -> int:
        with self._lock:
            return self.shares.balance_of(holder)

    def eth_balance(self) -> int:
        """Currency currently held by the party."""
        with self._lock:
            return self.balances.balance_of(self.address)

    def stats(self) -> dict:
        """Get party statistics."""
        with self._lock:
            return {
                "status": self.party.status.name,
                "market": self.config.market,
                "auction_id": self.config.auction_id,
                "highest_bid": self.party.highest_bid,
                "total_spent": self.party.total_spent,
                "eth_balance": self.balances.balance_of(self.address),
                **self.ledger.stats(),
            }

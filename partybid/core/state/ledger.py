"""
Ledger - Contribution bookkeeping for a party.

Conceptual Background:
---------------------
The ContributionLedger records every deposit into the party and the
shares minted against it:

1. **Contributions**: append-only, ordered by submission sequence
2. **Shares**: `amount * token_scale` minted per contribution
3. **Redeemable pool**: funds share holders split pro-rata once the
   party is finalized

Excess contributions:
--------------------
A contribution that arrives after the auction's end time can never be
used for a bid. It is recorded with the `excess` flag, mints no shares,
and is paid back in full to its contributor through claim_excess().

Redemption:
----------
    eth_out = redeemable_eth * shares_in // total_supply

Integer division truncates toward zero, so the sum of all payouts never
exceeds the pool. Truncation dust stays in the pool and is picked up by
whoever redeems last.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from partybid.core.state.party import Party
from partybid.core.state.shares import ShareToken
from partybid.crypto import to_checksum_address
from partybid.errors import InsufficientShares, InvalidAmount, InvalidState
from partybid.utils.logger import get_logger
from partybid.utils.validation import validate_amount

logger = get_logger("ledger")


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class Contribution:
    """
    A single deposit into the party.

    Attributes:
        contributor: Checksummed contributor address
        amount: Amount contributed (wei)
        contributed_at: Submission sequence index
        previous_total: Party total before this contribution
        excess: True if accepted after the auction ended
    """
    contributor: str
    amount: int
    contributed_at: int
    previous_total: int
    excess: bool = False


@dataclass(frozen=True)
class ContributionReceipt:
    """Returned to the caller of contribute()."""
    contribution: Contribution
    shares_minted: int
    total_contributed: int


# =============================================================================
# Contribution Ledger
# =============================================================================


class ContributionLedger:
    """
    Records contributions, mints shares and answers redemption queries.

    Attributes:
        party: The party aggregate this ledger books against
        shares: Share token minted to contributors
        token_scale: Shares minted per wei contributed
        contributions: All contributions in submission order
    """

    def __init__(self, party: Party, shares: ShareToken, token_scale: int = 1):
        if token_scale <= 0:
            raise ValueError(f"token_scale must be > 0, got {token_scale}")
        self.party = party
        self.shares = shares
        self.token_scale = token_scale
        self.contributions: List[Contribution] = []
        self._excess_owed: Dict[str, int] = {}

    # =========================================================================
    # Contributions
    # =========================================================================

    def contribute(self, contributor: str, amount: int, excess: bool = False) -> ContributionReceipt:
        """
        Record a contribution.

        Args:
            contributor: Contributor address
            amount: Amount in wei, must be > 0
            excess: Book as an excess contribution (no shares minted)

        Returns:
            ContributionReceipt

        Raises:
            InvalidState: party is no longer active
            InvalidAmount: amount is not a positive integer
        """
        self.party.require_active("contribute")
        valid, error = validate_amount(amount)
        if not valid:
            raise InvalidAmount(error)

        contributor = to_checksum_address(contributor)
        contribution = Contribution(
            contributor=contributor,
            amount=amount,
            contributed_at=len(self.contributions),
            previous_total=self.party.total_contributed,
            excess=excess,
        )

        shares_minted = 0
        if excess:
            self.party.excess_contributions += amount
            self._excess_owed[contributor] = self._excess_owed.get(contributor, 0) + amount
        else:
            shares_minted = amount * self.token_scale
            self.shares.mint(contributor, shares_minted)

        self.contributions.append(contribution)
        self.party.total_contributed += amount

        logger.info(
            f"Contribution #{contribution.contributed_at}: {contributor[:10]}... "
            f"amount={amount}{' (excess)' if excess else ''}, total={self.party.total_contributed}"
        )
        return ContributionReceipt(
            contribution=contribution,
            shares_minted=shares_minted,
            total_contributed=self.party.total_contributed,
        )

    def contributions_of(self, contributor: str) -> List[Contribution]:
        """All contributions by one address, in order."""
        contributor = to_checksum_address(contributor)
        return [c for c in self.contributions if c.contributor == contributor]

    def total_contributed_by(self, contributor: str) -> int:
        """Sum of a contributor's contributions (including excess)."""
        return sum(c.amount for c in self.contributions_of(contributor))

    def excess_contributed_by(self, contributor: str) -> int:
        """Excess still owed to a contributor."""
        return self._excess_owed.get(to_checksum_address(contributor), 0)

    def is_contributor(self, address: str) -> bool:
        return self.total_contributed_by(address) > 0

    # =========================================================================
    # Redemption
    # =========================================================================

    def open_redemptions(self) -> int:
        """
        Fund the redeemable pool from the settled party totals.

        Called once, right after the party leaves ACTIVE.

        Returns:
            Size of the redeemable pool
        """
        self.party.require_finalized("open_redemptions")
        pool = (
            self.party.total_contributed
            - self.party.total_spent
            - self.party.excess_contributions
        )
        if pool < 0:
            raise InvalidState(f"spent more than contributed: pool={pool}")
        self.party.redeemable_eth = pool
        return pool

    def redeemable_balance(self) -> int:
        """Funds currently claimable by share holders."""
        return self.party.redeemable_eth

    def redeem_amount(self, share_amount: int) -> int:
        """Wei paid out for `share_amount` shares at the current pool size."""
        if share_amount < 0:
            raise InvalidAmount(f"share_amount must be >= 0, got {share_amount}")
        supply = self.shares.total_supply
        if supply == 0:
            return 0
        if share_amount > supply:
            raise InsufficientShares(f"share_amount {share_amount} exceeds supply {supply}")
        return self.party.redeemable_eth * share_amount // supply

    def redeem(self, holder: str, share_amount: int) -> int:
        """
        Burn shares for their cut of the redeemable pool.

        Returns:
            Wei owed to the holder

        Raises:
            InvalidState: party is still active
            InvalidAmount: share_amount is not a positive integer
            InsufficientShares: holder has fewer shares
        """
        self.party.require_finalized("redeem")
        valid, error = validate_amount(share_amount, "share_amount")
        if not valid:
            raise InvalidAmount(error)

        eth_amount = self.redeem_amount(share_amount)
        self.shares.burn(holder, share_amount)
        self.party.redeemable_eth -= eth_amount
        self.party.total_redeemed += eth_amount

        logger.info(f"Redeemed {share_amount} shares for {eth_amount} wei by {to_checksum_address(holder)[:10]}...")
        return eth_amount

    def claim_excess(self, contributor: str) -> int:
        """
        Release a contributor's excess contributions.

        Returns:
            Wei owed to the contributor (0 if nothing is owed)
        """
        self.party.require_finalized("claim_excess")
        contributor = to_checksum_address(contributor)
        owed = self._excess_owed.pop(contributor, 0)
        if owed:
            self.party.excess_contributions -= owed
            self.party.total_excess_refunded += owed
            logger.info(f"Excess refund of {owed} wei to {contributor[:10]}...")
        return owed

    def deposit(self, amount: int) -> None:
        """Add post-finalize funds (e.g. sale proceeds) to the redeemable pool."""
        self.party.require_finalized("deposit")
        valid, error = validate_amount(amount)
        if not valid:
            raise InvalidAmount(error)
        self.party.redeemable_eth += amount
        self.party.total_deposited += amount

    # =========================================================================
    # Rollback
    # =========================================================================

    def snapshot(self) -> Tuple[int, Dict[str, int]]:
        return len(self.contributions), dict(self._excess_owed)

    def restore(self, snapshot: Tuple[int, Dict[str, int]]) -> None:
        count, excess_owed = snapshot
        del self.contributions[count:]
        self._excess_owed = dict(excess_owed)

    # =========================================================================
    # Utility
    # =========================================================================

    def __repr__(self) -> str:
        return (
            f"ContributionLedger(contributions={len(self.contributions)}, "
            f"total={self.party.total_contributed}, supply={self.shares.total_supply})"
        )

    def stats(self) -> dict:
        """Get ledger statistics."""
        return {
            "contribution_count": len(self.contributions),
            "contributor_count": len({c.contributor for c in self.contributions}),
            "total_contributed": self.party.total_contributed,
            "excess_contributions": self.party.excess_contributions,
            "share_supply": self.shares.total_supply,
            "redeemable_eth": self.party.redeemable_eth,
            "total_redeemed": self.party.total_redeemed,
        }

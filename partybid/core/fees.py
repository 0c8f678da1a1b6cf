"""
Fees - Basis-point fee arithmetic for party settlement.

Manages:
- ETH fee on the winning bid
- Token fee minted to the fee recipient
- Split recipient share

All amounts are integers in the smallest unit. Every computation is
`amount * basis_points // 10000`, rounding toward zero. Whatever the
truncation leaves behind stays in the party pool.
"""

from dataclasses import dataclass

from partybid.utils.validation import (
    BASIS_POINTS_DENOMINATOR,
    validate_basis_points,
    validate_integer,
)


def basis_points_of(amount: int, basis_points: int) -> int:
    """Return floor(amount * basis_points / 10000)."""
    valid, error = validate_integer(amount, "amount")
    if not valid:
        raise ValueError(error)
    valid, error = validate_basis_points(basis_points)
    if not valid:
        raise ValueError(error)
    return amount * basis_points // BASIS_POINTS_DENOMINATOR


def eth_fee_for(bid: int, eth_fee_basis_points: int) -> int:
    """ETH fee charged on top of a winning bid."""
    return basis_points_of(bid, eth_fee_basis_points)


def maximum_bid(pool: int, eth_fee_basis_points: int) -> int:
    """
    Largest bid whose bid + ETH fee still fits in the pool.

    bid + bid * f / 10000 <= pool  =>  bid <= pool * 10000 / (10000 + f)

    The fee rounds down, so the closed form can sit a few wei below the
    true maximum; step up while the next wei still fits.
    """
    bid = pool * BASIS_POINTS_DENOMINATOR // (BASIS_POINTS_DENOMINATOR + eth_fee_basis_points)
    while (bid + 1) + eth_fee_for(bid + 1, eth_fee_basis_points) <= pool:
        bid += 1
    return bid


@dataclass(frozen=True)
class FeeSplit:
    """Fee breakdown for a winning party."""
    winning_bid: int
    eth_fee: int
    token_fee: int
    split_recipient_share: int

    @property
    def total_spent(self) -> int:
        return self.winning_bid + self.eth_fee


def compute_fee_split(
    winning_bid: int,
    share_supply: int,
    eth_fee_basis_points: int,
    token_fee_basis_points: int,
    split_basis_points: int = 0,
) -> FeeSplit:
    """
    Compute the fee split for a won auction.

    The token fee and split share are both taken against the same
    contributor share supply, so crediting order does not matter.

    Args:
        winning_bid: Final bid paid to the market
        share_supply: Share supply held by contributors before finalize
        eth_fee_basis_points: ETH fee rate
        token_fee_basis_points: Token fee rate
        split_basis_points: Split recipient rate

    Returns:
        FeeSplit with breakdown
    """
    return FeeSplit(
        winning_bid=winning_bid,
        eth_fee=eth_fee_for(winning_bid, eth_fee_basis_points),
        token_fee=basis_points_of(share_supply, token_fee_basis_points),
        split_recipient_share=basis_points_of(share_supply, split_basis_points),
    )

"""Party state: status, contributions, shares and balances"""
from partybid.core.state.party import Party, PartyStatus
from partybid.core.state.shares import ShareToken
from partybid.core.state.balances import EthLedger
from partybid.core.state.ledger import (
    Contribution,
    ContributionReceipt,
    ContributionLedger,
)

__all__ = [
    "Party",
    "PartyStatus",
    "ShareToken",
    "EthLedger",
    "Contribution",
    "ContributionReceipt",
    "ContributionLedger",
]

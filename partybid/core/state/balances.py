"""
Balances - Settlement currency accounts.

A minimal account book for the settlement currency (wei). It plays the
role of the chain's native balance: contributions are credited to the
party, bids move funds into market escrow, fees and redemptions move
funds out again.
"""

from collections import defaultdict
from typing import Dict

from partybid.crypto import to_checksum_address
from partybid.errors import InsufficientFunds, InvalidAmount
from partybid.utils.logger import get_logger

logger = get_logger("balances")


class EthLedger:
    """
    Account balances in wei.

    Attributes:
        balances: Mapping of checksummed address to balance
    """

    def __init__(self):
        self.balances: Dict[str, int] = defaultdict(int)

    def balance_of(self, address: str) -> int:
        """Get balance for an address."""
        return self.balances.get(to_checksum_address(address), 0)

    def credit(self, address: str, amount: int) -> None:
        """Add externally sourced funds to an account."""
        if amount < 0:
            raise InvalidAmount(f"credit amount must be >= 0, got {amount}")
        self.balances[to_checksum_address(address)] += amount

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """
        Move funds between two accounts.

        Raises:
            InsufficientFunds: if the sender balance is below amount
        """
        if amount < 0:
            raise InvalidAmount(f"transfer amount must be >= 0, got {amount}")
        sender = to_checksum_address(sender)
        recipient = to_checksum_address(recipient)
        available = self.balances.get(sender, 0)
        if amount > available:
            raise InsufficientFunds(f"{sender} has {available}, needs {amount}")

        self.balances[sender] = available - amount
        self.balances[recipient] += amount
        logger.debug(f"Transfer {amount} wei {sender[:10]}... -> {recipient[:10]}...")

    def snapshot(self) -> Dict[str, int]:
        """Copy of all balances, for rollback."""
        return dict(self.balances)

    def restore(self, snapshot: Dict[str, int]) -> None:
        """Restore balances captured by snapshot()."""
        self.balances = defaultdict(int, snapshot)

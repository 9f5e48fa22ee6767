"""Per-account balance ledger.

Balances are non-negative integers; unknown accounts hold 0.
"""

import logging

from racebook.core.errors import EngineError, ErrorCode
from racebook.core.storage import BALANCES, Storage

logger = logging.getLogger(__name__)


class Ledger:
    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    def balance_of(self, account: str) -> int:
        return int(self.storage.get(BALANCES, account, 0))

    def deposit(self, account: str, amount: int) -> int:
        """Credit ``amount`` to ``account``. Returns the deposited amount."""
        if amount <= 0:
            raise EngineError(ErrorCode.INVALID_AMOUNT, f"Deposit must be positive, got {amount}")
        self.credit(account, amount)
        logger.info("Deposit: %s +%d", account, amount)
        return amount

    def withdraw(self, account: str, amount: int) -> int:
        """Debit ``amount`` from ``account``. Returns the withdrawn amount.

        Raises InsufficientFunds when the balance is short, and InvalidAmount
        for a negative amount.
        """
        if amount < 0:
            # A negative withdrawal would mint funds
            raise EngineError(ErrorCode.INVALID_AMOUNT, f"Withdrawal cannot be negative, got {amount}")
        self.debit(account, amount)
        logger.info("Withdraw: %s -%d", account, amount)
        return amount

    def credit(self, account: str, amount: int) -> None:
        self.storage.set(BALANCES, account, self.balance_of(account) + amount)

    def debit(self, account: str, amount: int) -> None:
        balance = self.balance_of(account)
        if balance < amount:
            raise EngineError(
                ErrorCode.INSUFFICIENT_FUNDS,
                f"{account} has {balance}, needs {amount}",
            )
        self.storage.set(BALANCES, account, balance - amount)

"""
Ledger Error Module

Error kinds raised by account operations and bank queries. Every error derives
from ValueError so callers treating bad input generically keep working.
"""

from datetime import datetime
from typing import Optional


class LedgerError(ValueError):
    """Base class for all ledger errors"""


class AccountNotFound(LedgerError):
    """Unknown account number"""

    def __init__(self, account_number: Optional[str], message: Optional[str] = None):
        self.account_number = account_number
        super().__init__(message or f"Account {account_number} not found")


class DuplicateAccount(LedgerError):
    """Account number already registered"""

    def __init__(self, account_number: str):
        self.account_number = account_number
        super().__init__(f"Account {account_number} already exists")


class InvalidAmount(LedgerError):
    """Negative amount, or non-positive amount where a positive one is required"""


class InsufficientFunds(LedgerError):
    """Debit exceeds the available balance"""

    def __init__(self, account_number: str, balance, requested):
        self.account_number = account_number
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Insufficient funds on {account_number}: "
            f"balance {balance.to_string()}, requested {requested.to_string()}"
        )


class DebitLockActive(LedgerError):
    """Saving account debit attempted inside the lock window"""

    def __init__(self, account_number: str, unlocks_at: datetime):
        self.account_number = account_number
        self.unlocks_at = unlocks_at
        super().__init__(
            f"Debit locked on {account_number} until {unlocks_at.isoformat()}"
        )


class ReadOnlyOperations(LedgerError):
    """Mutation attempted through operations built without a mutating layer"""


class AggregateFailure(LedgerError):
    """One or more constituents of a bank-wide aggregate failed"""

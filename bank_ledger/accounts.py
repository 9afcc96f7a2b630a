"""
Account Record Module

Stored state of bank accounts. An account is either PLAIN or SAVING; saving
accounts carry their interest and withdrawal-lock terms in a SavingTerms
value that is present only on that variant.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional

from .amount import Amount
from .persons import Person


class AccountKind(Enum):
    """Account variants"""
    PLAIN = "plain"
    SAVING = "saving"


@dataclass
class SavingTerms:
    """
    Saving-specific state. Rate and lock duration are stamped from the bank
    defaults at opening time and never change afterwards.
    """
    daily_interest_rate: Decimal
    debit_lock_duration: timedelta
    last_interest_credit_at: datetime
    last_debit_at: Optional[datetime] = None
    # Accrued interest below one cent, carried to the next credit
    interest_remainder: Decimal = Decimal('0')

    def __post_init__(self):
        if not isinstance(self.daily_interest_rate, Decimal):
            self.daily_interest_rate = Decimal(str(self.daily_interest_rate))

        if self.interest_remainder < Decimal('0'):
            raise ValueError("Interest remainder cannot be negative")

        if self.daily_interest_rate < Decimal('0'):
            raise ValueError("Daily interest rate cannot be negative")

        if self.debit_lock_duration < timedelta(0):
            raise ValueError("Debit lock duration cannot be negative")


@dataclass
class AccountRecord:
    """
    One bank account. The balance is only mutated through account operations.
    """
    number: str
    owner: Person
    opened_at: datetime
    balance: Amount
    saving: Optional[SavingTerms] = None

    def __post_init__(self):
        if not self.number:
            raise ValueError("Account number is required")

        if not isinstance(self.balance, Amount):
            self.balance = Amount(self.balance)

    @property
    def kind(self) -> AccountKind:
        return AccountKind.SAVING if self.saving is not None else AccountKind.PLAIN

    @property
    def is_saving(self) -> bool:
        """Check if this is a saving account"""
        return self.saving is not None

    def __str__(self) -> str:
        return f"{self.number} [{self.kind.value}] owner={self.owner.name} balance={self.balance.to_string()}"

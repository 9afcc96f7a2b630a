"""
Account Operations Module

Layered operation handlers over an AccountRecord. Each layer wraps another
AccountOperations and adds one concern:

    BaseAccountOperations       balance arithmetic and the non-negative balance rule
    HistoryTrackingOperations   appends successful mutations to the TransactionHistory
    SavingAccountOperations     debit lock window and interest computation/crediting

Requests flow outside-in (saving rules are checked first) and effects apply
inside-out (balance mutation, then history). A failed operation raises and
leaves both the balance and the history untouched.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_DOWN
from typing import Optional

from .accounts import AccountRecord, SavingTerms
from .amount import Amount, AmountLike
from .errors import (
    InvalidAmount, InsufficientFunds, DebitLockActive, ReadOnlyOperations
)
from .history import TransactionHistory, TransactionKind
from .logging_config import get_logger

logger = get_logger("bank_ledger.operations")

SECONDS_PER_DAY = Decimal('86400')
CENT = Decimal('0.01')


def require_positive(amount: AmountLike) -> Amount:
    """Convert to Amount and reject zero (negatives are rejected by Amount)"""
    if not isinstance(amount, Amount):
        amount = Amount(amount)
    if not amount.is_positive():
        raise InvalidAmount(f"Amount must be positive, got {amount.to_string()}")
    return amount


def elapsed_days(start: datetime, end: datetime) -> Decimal:
    """
    Fractional days between two instants, computed exactly from the timedelta
    components. Negative spans count as zero.
    """
    delta = end - start
    if delta <= timedelta(0):
        return Decimal('0')
    seconds = Decimal(delta.days * 86400 + delta.seconds) + Decimal(delta.microseconds) / Decimal(10 ** 6)
    return seconds / SECONDS_PER_DAY


class AccountOperations(ABC):
    """Abstract interface for balance-mutating operations on one account"""

    @property
    @abstractmethod
    def record(self) -> AccountRecord:
        """Account the operations apply to"""
        pass

    @property
    def balance(self) -> Amount:
        """Current balance of the account"""
        return self.record.balance

    @abstractmethod
    def debit(self, now: datetime, amount: AmountLike) -> Amount:
        """
        Withdraw a positive amount

        Returns:
            Balance after the debit

        Raises:
            InvalidAmount: If amount is not positive
            InsufficientFunds: If amount exceeds the balance
        """
        pass

    @abstractmethod
    def credit(
        self,
        now: datetime,
        amount: AmountLike,
        kind: TransactionKind = TransactionKind.CREDIT
    ) -> Amount:
        """
        Deposit a positive amount

        Returns:
            Balance after the credit

        Raises:
            InvalidAmount: If amount is not positive
        """
        pass


class BaseAccountOperations(AccountOperations):
    """Pure balance arithmetic with the balance >= 0 rule"""

    def __init__(self, record: AccountRecord):
        self._record = record

    @property
    def record(self) -> AccountRecord:
        return self._record

    def debit(self, now: datetime, amount: AmountLike) -> Amount:
        amount = require_positive(amount)

        if amount > self._record.balance:
            logger.debug(
                f"Debit of {amount.to_string()} rejected on {self._record.number}: "
                f"balance {self._record.balance.to_string()}"
            )
            raise InsufficientFunds(self._record.number, self._record.balance, amount)

        self._record.balance = self._record.balance - amount
        return self._record.balance

    def credit(
        self,
        now: datetime,
        amount: AmountLike,
        kind: TransactionKind = TransactionKind.CREDIT
    ) -> Amount:
        amount = require_positive(amount)
        self._record.balance = self._record.balance + amount
        return self._record.balance


class HistoryTrackingOperations(AccountOperations):
    """Records every successful mutation of the wrapped operations"""

    def __init__(self, inner: AccountOperations, history: TransactionHistory):
        self._inner = inner
        self._history = history

    @property
    def record(self) -> AccountRecord:
        return self._inner.record

    @property
    def history(self) -> TransactionHistory:
        return self._history

    def debit(self, now: datetime, amount: AmountLike) -> Amount:
        amount = require_positive(amount)
        resulting_balance = self._inner.debit(now, amount)
        self._history.record(now, TransactionKind.DEBIT, amount, resulting_balance)
        return resulting_balance

    def credit(
        self,
        now: datetime,
        amount: AmountLike,
        kind: TransactionKind = TransactionKind.CREDIT
    ) -> Amount:
        amount = require_positive(amount)
        resulting_balance = self._inner.credit(now, amount, kind)
        self._history.record(now, kind, amount, resulting_balance)
        return resulting_balance


class SavingAccountOperations(AccountOperations):
    """
    Saving account rules on top of another AccountOperations:

    - a debit is refused while the lock window opened by the previous debit
      is still running
    - interest accrues as balance * daily rate * elapsed days since the last
      interest credit

    `inner` may be None to get a read-only view that can only report the
    interest due; any mutation then raises ReadOnlyOperations.
    """

    def __init__(self, inner: Optional[AccountOperations], record: AccountRecord):
        if not record.is_saving:
            raise ValueError(f"Account {record.number} is not a saving account")
        self._inner = inner
        self._record = record

    @property
    def record(self) -> AccountRecord:
        return self._record

    @property
    def terms(self) -> SavingTerms:
        return self._record.saving

    @property
    def is_read_only(self) -> bool:
        return self._inner is None

    def _require_inner(self) -> AccountOperations:
        if self._inner is None:
            raise ReadOnlyOperations(
                f"Operations on {self._record.number} are read-only"
            )
        return self._inner

    def debit_unlocks_at(self) -> Optional[datetime]:
        """Instant from which the next debit is allowed (None if never debited)"""
        if self.terms.last_debit_at is None:
            return None
        return self.terms.last_debit_at + self.terms.debit_lock_duration

    def is_debit_locked(self, now: datetime) -> bool:
        unlocks_at = self.debit_unlocks_at()
        return unlocks_at is not None and now < unlocks_at

    def debit(self, now: datetime, amount: AmountLike) -> Amount:
        if self.is_debit_locked(now):
            logger.debug(f"Debit rejected on {self._record.number}: lock window active")
            raise DebitLockActive(self._record.number, self.debit_unlocks_at())

        resulting_balance = self._require_inner().debit(now, amount)
        self.terms.last_debit_at = now
        return resulting_balance

    def credit(
        self,
        now: datetime,
        amount: AmountLike,
        kind: TransactionKind = TransactionKind.CREDIT
    ) -> Amount:
        return self._require_inner().credit(now, amount, kind)

    def compute_exact_interest_due(self, now: datetime) -> Decimal:
        """
        Unrounded interest owed: balance * daily_interest_rate * elapsed days
        since the last interest credit, plus the sub-cent remainder carried
        from earlier credits. Does not mutate state.
        """
        days = elapsed_days(self.terms.last_interest_credit_at, now)
        accrued = self._record.balance.value * self.terms.daily_interest_rate * days
        return accrued + self.terms.interest_remainder

    def compute_interest_due(self, now: datetime) -> Amount:
        """
        Interest that would be credited at `now`. Does not mutate state.

        Args:
            now: Instant the interest is computed for

        Returns:
            Exact interest due truncated to whole cents
        """
        return Amount(self.compute_exact_interest_due(now).quantize(CENT, rounding=ROUND_DOWN))

    def credit_interest_due(self, now: datetime) -> Amount:
        """
        Credit the interest due in whole cents and restart the interest clock.

        The part below one cent is kept on the account and paid with a later
        credit, so the interest earned does not depend on how often this runs.
        A zero amount is not credited (and not recorded) but the clock still
        advances, so the same interval is never accrued twice.

        Returns:
            Interest credited
        """
        inner = self._require_inner()
        exact_due = self.compute_exact_interest_due(now)
        interest_due = Amount(exact_due.quantize(CENT, rounding=ROUND_DOWN))

        if interest_due.is_positive():
            inner.credit(now, interest_due, TransactionKind.INTEREST_CREDIT)

        self.terms.interest_remainder = exact_due - interest_due.value
        if now > self.terms.last_interest_credit_at:
            self.terms.last_interest_credit_at = now

        return interest_due

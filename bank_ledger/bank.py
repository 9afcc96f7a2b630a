"""
Bank Module

Registry of accounts and their transaction histories. Builds the operation
handler chain for an account on demand and runs bank-wide sweeps (fee debit,
interest crediting) and aggregate queries (totals, rankings).

Sweeps are not transactional: every qualifying account is attempted, failures
are collected, and mutations already applied stay applied.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional
import asyncio

from .accounts import AccountRecord, SavingTerms
from .amount import Amount, AmountLike, sum_amounts, to_decimal
from .balance_source import AsyncBalanceSource, RecordBalanceSource
from .config import LedgerConfig, get_config
from .errors import AccountNotFound, AggregateFailure, DuplicateAccount, LedgerError
from .history import DEFAULT_HISTORY_CAPACITY, TransactionHistory
from .logging_config import get_logger, log_action, setup_logging
from .operations import (
    AccountOperations, BaseAccountOperations, HistoryTrackingOperations,
    SavingAccountOperations
)
from .persons import Person


@dataclass
class SweepResult:
    """Outcome of a bank-wide sweep"""
    applied: List[str] = field(default_factory=list)
    failures: Dict[str, LedgerError] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        """True only if every qualifying account succeeded"""
        return not self.failures

    def __bool__(self) -> bool:
        return self.success


class Bank:
    """
    Single-institution ledger owning all account records and histories.
    Operation handlers returned to callers are short-lived views over the
    bank's own records.
    """

    def __init__(
        self,
        saving_account_daily_interest: AmountLike,
        saving_account_debit_lock_duration: timedelta,
        history_capacity: int = DEFAULT_HISTORY_CAPACITY,
        balance_source: Optional[AsyncBalanceSource] = None
    ):
        rate = to_decimal(saving_account_daily_interest)
        if rate < Decimal('0'):
            raise ValueError("Saving account daily interest cannot be negative")
        if saving_account_debit_lock_duration < timedelta(0):
            raise ValueError("Saving account debit lock duration cannot be negative")

        self._accounts: Dict[str, AccountRecord] = {}
        self._accounts_by_owner: Dict[Person, List[AccountRecord]] = {}
        self._histories: Dict[str, TransactionHistory] = {}

        self._saving_account_daily_interest = rate
        self._saving_account_debit_lock_duration = saving_account_debit_lock_duration
        self._history_capacity = history_capacity
        self._balance_source = balance_source or RecordBalanceSource()

        self.logger = get_logger("bank_ledger.bank")

    @classmethod
    def from_config(
        cls,
        cfg: Optional[LedgerConfig] = None,
        balance_source: Optional[AsyncBalanceSource] = None
    ) -> 'Bank':
        """
        Build a bank from settings (the global configuration by default) and
        configure the package logger from its log level and format
        """
        cfg = cfg or get_config()
        setup_logging(cfg.log_level, log_format=cfg.log_format)
        return cls(
            saving_account_daily_interest=cfg.saving_account_daily_interest,
            saving_account_debit_lock_duration=cfg.saving_account_debit_lock,
            history_capacity=cfg.history_capacity,
            balance_source=balance_source
        )

    @property
    def saving_account_daily_interest(self) -> Decimal:
        return self._saving_account_daily_interest

    @property
    def saving_account_debit_lock_duration(self) -> timedelta:
        return self._saving_account_debit_lock_duration

    # Account opening

    def _register(self, account: AccountRecord) -> AccountRecord:
        if account.number in self._accounts:
            raise DuplicateAccount(account.number)

        self._accounts[account.number] = account
        self._histories[account.number] = TransactionHistory(self._history_capacity)
        self._accounts_by_owner.setdefault(account.owner, []).append(account)

        log_action(
            self.logger, "info", f"Account opened: {account.number}",
            action="open_account", resource=f"account:{account.number}",
            extra={
                "kind": account.kind.value,
                "owner": account.owner.name,
                "initial_balance": account.balance.to_string()
            }
        )
        return account

    def open_bank_account(
        self,
        number: str,
        owner: Person,
        now: datetime,
        initial_credit: AmountLike
    ) -> AccountRecord:
        """
        Open a plain account

        Raises:
            DuplicateAccount: If the number is already registered
            InvalidAmount: If the initial credit is negative
        """
        account = AccountRecord(
            number=number,
            owner=owner,
            opened_at=now,
            balance=Amount(initial_credit)
        )
        return self._register(account)

    def open_saving_account(
        self,
        number: str,
        owner: Person,
        now: datetime,
        initial_credit: AmountLike
    ) -> AccountRecord:
        """
        Open a saving account stamped with the bank's current interest rate
        and debit lock duration

        Raises:
            DuplicateAccount: If the number is already registered
            InvalidAmount: If the initial credit is negative
        """
        account = AccountRecord(
            number=number,
            owner=owner,
            opened_at=now,
            balance=Amount(initial_credit),
            saving=SavingTerms(
                daily_interest_rate=self._saving_account_daily_interest,
                debit_lock_duration=self._saving_account_debit_lock_duration,
                last_interest_credit_at=now
            )
        )
        return self._register(account)

    # Lookups

    def get_account(self, number: str) -> AccountRecord:
        account = self._accounts.get(number)
        if account is None:
            raise AccountNotFound(number)
        return account

    def get_accounts_for_owner(self, owner: Person) -> List[AccountRecord]:
        """Accounts of an owner in opening order"""
        return list(self._accounts_by_owner.get(owner, []))

    def get_operations_for_account(self, number: str) -> AccountOperations:
        """
        Build the handler chain for an account: history tracking over base
        operations, wrapped in saving rules for saving accounts

        Raises:
            AccountNotFound: If the number is unknown
        """
        account = self.get_account(number)

        operations: AccountOperations = HistoryTrackingOperations(
            BaseAccountOperations(account), self._histories[number]
        )
        if account.is_saving:
            operations = SavingAccountOperations(operations, account)

        return operations

    def get_history_for_account(self, number: str) -> TransactionHistory:
        history = self._histories.get(number)
        if history is None:
            raise AccountNotFound(number)
        return history

    # Sweeps

    def _finish_sweep(self, action: str, result: SweepResult) -> SweepResult:
        for number, error in result.failures.items():
            log_action(
                self.logger, "warning", f"{action} failed on {number}: {error}",
                action=action, resource=f"account:{number}",
                extra={"error": type(error).__name__}
            )

        log_action(
            self.logger, "info" if result.success else "warning",
            f"{action} completed: {len(result.applied)} applied, {len(result.failures)} failed",
            action=action,
            extra={"applied": len(result.applied), "failed": len(result.failures)}
        )
        return result

    def debit_fee(self, now: datetime, fee_amount: AmountLike) -> SweepResult:
        """
        Debit a flat fee from every plain account. Saving accounts are exempt.
        Accounts that cannot pay are reported in the result; the others stay
        debited.
        """
        result = SweepResult()
        for account in list(self._accounts.values()):
            if account.is_saving:
                continue
            try:
                self.get_operations_for_account(account.number).debit(now, fee_amount)
            except LedgerError as e:
                result.failures[account.number] = e
            else:
                result.applied.append(account.number)

        return self._finish_sweep("debit_fee", result)

    def compute_total_interest(self, now: datetime) -> Amount:
        """Interest owed to all saving accounts at `now`, without crediting it"""
        return sum_amounts(
            SavingAccountOperations(None, account).compute_interest_due(now)
            for account in self._accounts.values()
            if account.is_saving
        )

    def credit_interest_for_all_saving_accounts(self, now: datetime) -> SweepResult:
        """Credit the interest due on every saving account"""
        result = SweepResult()
        for account in list(self._accounts.values()):
            if not account.is_saving:
                continue
            try:
                self.get_operations_for_account(account.number).credit_interest_due(now)
            except LedgerError as e:
                result.failures[account.number] = e
            else:
                result.applied.append(account.number)

        return self._finish_sweep("credit_interest", result)

    # Queries

    def get_accounts_with_balance_above(self, amount: AmountLike) -> List[AccountRecord]:
        """Accounts with balance >= amount, ordered by owner name"""
        threshold = Amount(amount)
        return sorted(
            (account for account in self._accounts.values() if account.balance >= threshold),
            key=lambda account: account.owner.sort_key
        )

    def get_accounts_with_balance_greater_than(self, amount: AmountLike) -> List[AccountRecord]:
        """Accounts with balance strictly above amount, in opening order"""
        threshold = Amount(amount)
        return [account for account in self._accounts.values() if account.balance > threshold]

    def get_owner_of_smallest_account(self) -> Person:
        """
        Owner of the account with the lowest balance. Ties go to the account
        opened first.

        Raises:
            AccountNotFound: If the bank has no accounts
        """
        if not self._accounts:
            raise AccountNotFound(None, "Bank has no accounts")

        ranked = sorted(self._accounts.values(), key=lambda account: account.balance)
        return ranked[0].owner

    def get_total_balance(self) -> Amount:
        return sum_amounts(account.balance for account in self._accounts.values())

    async def get_total_balance_async(
        self,
        balance_source: Optional[AsyncBalanceSource] = None
    ) -> Amount:
        """
        Sum of balances queried concurrently, one query per account. The total
        is summed in account order once every query has completed.

        Raises:
            AggregateFailure: If any query fails
        """
        source = balance_source or self._balance_source
        accounts = list(self._accounts.values())

        try:
            balances = await asyncio.gather(
                *(source.get_balance(account) for account in accounts)
            )
            # Sources may answer with raw numbers; anything not a valid Amount fails the total
            return sum_amounts(Amount(balance) for balance in balances)
        except Exception as e:
            log_action(
                self.logger, "error", f"Total balance query failed: {e}",
                action="get_total_balance_async",
                extra={"accounts": len(accounts), "error": type(e).__name__}
            )
            raise AggregateFailure(f"Balance query failed: {e}") from e

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, number: str) -> bool:
        return number in self._accounts

    def __str__(self) -> str:
        return "\n".join(str(account) for account in self._accounts.values())

"""
Transaction History Module

Bounded record of the most recent transactions of one account. When the
history is full the oldest entry is evicted; insertion order is preserved.
"""

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Deque, Dict, Iterator, List, Optional

from .amount import Amount

DEFAULT_HISTORY_CAPACITY = 10


class TransactionKind(Enum):
    """Kinds of recorded transactions"""
    DEBIT = "debit"
    CREDIT = "credit"
    INTEREST_CREDIT = "interest_credit"


@dataclass(frozen=True)
class TransactionRecord:
    """One successful balance mutation"""
    timestamp: datetime
    kind: TransactionKind
    amount: Amount
    resulting_balance: Amount

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for display or export"""
        return {
            'timestamp': self.timestamp.isoformat(),
            'kind': self.kind.value,
            'amount': str(self.amount.value),
            'resulting_balance': str(self.resulting_balance.value)
        }


class TransactionHistory:
    """Ring buffer of at most `capacity` transaction records"""

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self._capacity = capacity
        self._records: Deque[TransactionRecord] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, record: TransactionRecord) -> None:
        """Append a record, evicting the oldest one when full"""
        self._records.append(record)

    def record(
        self,
        timestamp: datetime,
        kind: TransactionKind,
        amount: Amount,
        resulting_balance: Amount
    ) -> TransactionRecord:
        """Build and append a record in one step"""
        entry = TransactionRecord(
            timestamp=timestamp,
            kind=kind,
            amount=amount,
            resulting_balance=resulting_balance
        )
        self.append(entry)
        return entry

    def latest(self) -> Optional[TransactionRecord]:
        """Most recent record, or None for an empty history"""
        return self._records[-1] if self._records else None

    def is_full(self) -> bool:
        return len(self._records) == self._capacity

    def to_list(self) -> List[TransactionRecord]:
        """Copy of the records, oldest first"""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TransactionRecord]:
        return iter(list(self._records))

    def __getitem__(self, index: int) -> TransactionRecord:
        return self._records[index]

    def __repr__(self) -> str:
        return f"TransactionHistory(capacity={self._capacity}, size={len(self._records)})"

"""
Test suite for history module

Tests bounded transaction history: append order, eviction at capacity and
record export.
"""

import pytest
from datetime import datetime, timezone, timedelta

from bank_ledger.amount import Amount
from bank_ledger.history import (
    TransactionHistory, TransactionRecord, TransactionKind, DEFAULT_HISTORY_CAPACITY
)


START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_record(index: int) -> TransactionRecord:
    return TransactionRecord(
        timestamp=START + timedelta(hours=index),
        kind=TransactionKind.CREDIT,
        amount=Amount(index + 1),
        resulting_balance=Amount((index + 1) * 10)
    )


class TestTransactionHistory:
    """Test TransactionHistory ring buffer"""

    def test_default_capacity(self):
        """Test default capacity of ten"""
        history = TransactionHistory()
        assert history.capacity == DEFAULT_HISTORY_CAPACITY == 10
        assert len(history) == 0
        assert history.latest() is None
        assert not history.is_full()

    def test_invalid_capacity(self):
        """Test that capacity must be positive"""
        with pytest.raises(ValueError, match="at least 1"):
            TransactionHistory(0)

    def test_append_preserves_order(self):
        """Test records are kept oldest first"""
        history = TransactionHistory(5)
        records = [make_record(i) for i in range(3)]
        for record in records:
            history.append(record)

        assert history.to_list() == records
        assert list(history) == records
        assert history[0] == records[0]
        assert history.latest() == records[-1]

    def test_eviction_at_capacity(self):
        """Test that the oldest record is evicted once full"""
        history = TransactionHistory(10)
        records = [make_record(i) for i in range(11)]
        for record in records:
            history.append(record)

        assert len(history) == 10
        assert history.is_full()
        assert records[0] not in history.to_list()
        assert history.to_list() == records[1:]

    def test_record_helper(self):
        """Test building and appending a record in one call"""
        history = TransactionHistory()
        entry = history.record(START, TransactionKind.DEBIT, Amount('5'), Amount('95'))

        assert entry.kind == TransactionKind.DEBIT
        assert history.latest() == entry

    def test_to_list_is_a_copy(self):
        """Test that exported lists do not alias the buffer"""
        history = TransactionHistory()
        history.append(make_record(0))
        exported = history.to_list()
        exported.clear()
        assert len(history) == 1


class TestTransactionRecord:
    """Test TransactionRecord export"""

    def test_to_dict(self):
        """Test dictionary conversion"""
        record = TransactionRecord(
            timestamp=START,
            kind=TransactionKind.INTEREST_CREDIT,
            amount=Amount('10'),
            resulting_balance=Amount('1010')
        )
        assert record.to_dict() == {
            'timestamp': START.isoformat(),
            'kind': 'interest_credit',
            'amount': '10.00',
            'resulting_balance': '1010.00'
        }

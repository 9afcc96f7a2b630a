"""
Async Balance Source Module

Interface for retrieving account balances asynchronously from an external
source, plus an in-process implementation that reads the account records.
"""

from abc import ABC, abstractmethod
import asyncio

from .accounts import AccountRecord
from .amount import Amount


class AsyncBalanceSource(ABC):
    """Abstract interface for asynchronous balance retrieval"""

    @abstractmethod
    async def get_balance(self, account: AccountRecord) -> Amount:
        """
        Fetch the current balance of an account

        Raises:
            Any exception; the caller treats it as a failed query
        """
        pass


class RecordBalanceSource(AsyncBalanceSource):
    """Reads the balance straight from the in-memory record"""

    async def get_balance(self, account: AccountRecord) -> Amount:
        # Yield so queries interleave like real I/O
        await asyncio.sleep(0)
        return account.balance

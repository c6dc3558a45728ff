"""
Keyed transaction log.

Records are upserted by id. Readers may run concurrently; the orchestrator
assumes a single writer per address.
"""

import asyncio
from typing import Collection, Dict, List, Optional, Protocol

from .models import ExecutionRecord


class TransactionLog(Protocol):
    async def upsert(self, record: ExecutionRecord) -> None:
        ...

    async def get(self, record_id: str) -> Optional[ExecutionRecord]:
        ...

    async def find(
        self,
        address: str,
        description: str,
        chain_id: int,
        exclude: Collection[str] = (),
    ) -> Optional[ExecutionRecord]:
        ...

    async def list_for_address(self, address: str) -> List[ExecutionRecord]:
        ...


class InMemoryTransactionLog:
    """Process-local ``TransactionLog``."""

    def __init__(self) -> None:
        self._records: Dict[str, ExecutionRecord] = {}
        self._lock = asyncio.Lock()

    async def upsert(self, record: ExecutionRecord) -> None:
        async with self._lock:
            self._records[record.id] = record

    async def update(self, record_id: str, **changes) -> ExecutionRecord:
        """Apply non-``None`` field changes to an existing record.

        Raises:
            KeyError: if no record has ``record_id``
        """
        async with self._lock:
            existing = self._records.get(record_id)
            if existing is None:
                raise KeyError(record_id)
            updated = existing.copy_with(**changes)
            self._records[record_id] = updated
            return updated

    async def get(self, record_id: str) -> Optional[ExecutionRecord]:
        return self._records.get(record_id)

    async def find(
        self,
        address: str,
        description: str,
        chain_id: int,
        exclude: Collection[str] = (),
    ) -> Optional[ExecutionRecord]:
        """Most recent record for ``address`` matching description and chain, skipping ids in ``exclude``."""
        matches = [
            record
            for record in self._records.values()
            if record.address.lower() == address.lower()
            and record.description == description
            and record.chain_id == chain_id
            and record.id not in exclude
        ]
        if not matches:
            return None
        return max(matches, key=lambda record: record.timestamp)

    async def list_for_address(self, address: str) -> List[ExecutionRecord]:
        """Records for ``address``, newest first."""
        records = [
            record for record in self._records.values()
            if record.address.lower() == address.lower()
        ]
        return sorted(records, key=lambda record: record.timestamp, reverse=True)


# Singleton instance
_log: Optional[InMemoryTransactionLog] = None


def get_transaction_log() -> InMemoryTransactionLog:
    """Get the singleton process-wide transaction log."""
    global _log
    if _log is None:
        _log = InMemoryTransactionLog()
    return _log

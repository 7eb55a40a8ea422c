"""Ledger Entry Repository Interface

Entries are immutable and append-only for audit trail.
Idempotency is enforced via unique idempotency_key.
"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.ledger_entry import LedgerEntry


class LedgerEntryRepository(ABC):
    """Repository interface for LedgerEntry persistence"""

    @abstractmethod
    async def create(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Append a new ledger entry

        Raises:
            IntegrityError: If idempotency_key already exists
        """
        pass

    @abstractmethod
    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[LedgerEntry]:
        pass

    @abstractmethod
    async def list_by_owner(self, owner_id: str, limit: int = 20, offset: int = 0) -> tuple[list[LedgerEntry], int]:
        """
        Page through an owner's entries, newest first

        Returns:
            Tuple of (entries, total count)
        """
        pass

    @abstractmethod
    async def list_by_reference(self, reference_id: str) -> list[LedgerEntry]:
        pass

    @abstractmethod
    async def get_sum_by_account(self, account_id: int) -> int:
        """Sum of signed amounts for an account (0 when it has no entries)"""
        pass

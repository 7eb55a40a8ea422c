"""SQLAlchemy implementation of LedgerEntryRepository

Append-only; idempotency enforced via unique constraint on idempotency_key.
"""

from typing import Optional
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.domain.ledger_entry import LedgerEntry


class SqlAlchemyLedgerEntryRepository(LedgerEntryRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: LedgerEntry) -> LedgerEntry:
        """
        Raises:
            IntegrityError: If idempotency_key already exists (duplicate entry attempt)
        """
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[LedgerEntry]:
        stmt = select(LedgerEntry).where(LedgerEntry.idempotency_key == idempotency_key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_owner(self, owner_id: str, limit: int = 20, offset: int = 0) -> tuple[list[LedgerEntry], int]:
        count_stmt = select(func.count()).select_from(LedgerEntry).where(LedgerEntry.owner_id == owner_id)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(LedgerEntry)
            .where(LedgerEntry.owner_id == owner_id)
            .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def list_by_reference(self, reference_id: str) -> list[LedgerEntry]:
        stmt = select(LedgerEntry).where(LedgerEntry.reference_id == reference_id).order_by(LedgerEntry.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_sum_by_account(self, account_id: int) -> int:
        stmt = select(func.coalesce(func.sum(LedgerEntry.amount), 0)).where(LedgerEntry.account_id == account_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

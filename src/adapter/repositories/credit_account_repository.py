"""SQLAlchemy implementation of CreditAccountRepository

Balance and reservation changes are single conditional UPDATE statements,
so concurrent reservations are serialized by the database instead of by
read-modify-write in Python.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.domain.credit_account import CreditAccount


class SqlAlchemyCreditAccountRepository(CreditAccountRepository):
    """
    SQLAlchemy implementation of CreditAccountRepository

    Features:
    - Atomic conditional UPDATEs (rowcount tells whether the guard held)
    - Pessimistic locking via SELECT FOR UPDATE for reads before settlement
    - Reads always refresh the identity map (populate_existing)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_owner_id(self, owner_id: str, for_update: bool = False) -> Optional[CreditAccount]:
        stmt = (
            select(CreditAccount)
            .where(CreditAccount.owner_id == owner_id)
            .execution_options(populate_existing=True)
        )

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(self) -> list[CreditAccount]:
        result = await self.session.execute(select(CreditAccount).order_by(CreditAccount.id))
        return list(result.scalars().all())

    async def create(self, account: CreditAccount) -> CreditAccount:
        self.session.add(account)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def try_reserve(self, owner_id: str, amount: int) -> bool:
        stmt = (
            update(CreditAccount)
            .where(
                CreditAccount.owner_id == owner_id,
                CreditAccount.balance - CreditAccount.reserved >= amount,
            )
            .values(reserved=CreditAccount.reserved + amount, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def release_reservation(self, owner_id: str, amount: int) -> bool:
        stmt = (
            update(CreditAccount)
            .where(CreditAccount.owner_id == owner_id, CreditAccount.reserved >= amount)
            .values(reserved=CreditAccount.reserved - amount, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def apply_settlement(self, account_id: int, release: int, balance_delta: int) -> bool:
        stmt = (
            update(CreditAccount)
            .where(
                CreditAccount.id == account_id,
                CreditAccount.reserved >= release,
                CreditAccount.balance + balance_delta >= 0,
            )
            .values(
                reserved=CreditAccount.reserved - release,
                balance=CreditAccount.balance + balance_delta,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def add_to_balance(self, account_id: int, amount: int) -> None:
        stmt = (
            update(CreditAccount)
            .where(CreditAccount.id == account_id)
            .values(balance=CreditAccount.balance + amount, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

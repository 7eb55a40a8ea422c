"""SQLAlchemy implementation of GenerationJobRepository

Status changes are compare-and-set UPDATEs guarded by the current status,
so a canceller and a worker (or two deliveries of the same message)
cannot both win the same transition.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import func, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.generation_job_repository import GenerationJobRepository
from src.domain.generation_job import GenerationJob
from src.domain.job_state import JobStatus, InvalidTransitionError, can_transition, transition


class SqlAlchemyGenerationJobRepository(GenerationJobRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, job: GenerationJob) -> GenerationJob:
        self.session.add(job)
        await self.session.flush()
        await self.session.refresh(job)
        return job

    async def get_by_id(self, job_id: str) -> Optional[GenerationJob]:
        stmt = (
            select(GenerationJob)
            .where(GenerationJob.id == job_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_owner(self, job_id: str, owner_id: str) -> Optional[GenerationJob]:
        stmt = (
            select(GenerationJob)
            .where(GenerationJob.id == job_id, GenerationJob.owner_id == owner_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_owner(self, owner_id: str, limit: int = 10, offset: int = 0) -> tuple[list[GenerationJob], int]:
        count_stmt = select(func.count()).select_from(GenerationJob).where(GenerationJob.owner_id == owner_id)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(GenerationJob)
            .where(GenerationJob.owner_id == owner_id)
            .order_by(GenerationJob.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def save(self, job: GenerationJob) -> GenerationJob:
        job.updated_at = datetime.utcnow()
        self.session.add(job)
        await self.session.flush()
        return job

    async def transition(self, job: GenerationJob, target: JobStatus, error_message: Optional[str] = None) -> bool:
        """
        Compare-and-set status update

        The in-memory job is only changed once the guarded UPDATE has matched.
        """
        current = JobStatus(job.status)
        if not can_transition(current, target):
            raise InvalidTransitionError(current, target)

        now = datetime.utcnow()
        values = {"status": target, "updated_at": now}
        if target == JobStatus.RUNNING and job.started_at is None:
            values["started_at"] = now
        if target.is_terminal:
            values["completed_at"] = now
        if error_message is not None:
            values["error_message"] = error_message

        stmt = (
            update(GenerationJob)
            .where(GenerationJob.id == job.id, GenerationJob.status == current)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return False

        transition(job, target, now=now, error_message=error_message)
        return True

    async def request_cancel(self, job_id: str) -> bool:
        now = datetime.utcnow()
        stmt = (
            update(GenerationJob)
            .where(GenerationJob.id == job_id, GenerationJob.status == JobStatus.RUNNING)
            .values(
                cancel_requested_at=func.coalesce(GenerationJob.cancel_requested_at, now),
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def is_cancel_requested(self, job_id: str) -> bool:
        stmt = select(GenerationJob.cancel_requested_at).where(GenerationJob.id == job_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def mark_settled(self, job_id: str, actual_credits: int) -> bool:
        now = datetime.utcnow()
        stmt = (
            update(GenerationJob)
            .where(
                GenerationJob.id == job_id,
                GenerationJob.status.in_([s for s in JobStatus if s.is_terminal]),
                GenerationJob.settled_at.is_(None),
            )
            .values(actual_credits=actual_credits, settled_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

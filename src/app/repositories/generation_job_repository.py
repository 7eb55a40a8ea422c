"""Generation Job Repository Interface

Durable store for generation jobs. Status changes are compare-and-set
updates so that two actors (e.g. a canceller and a worker) cannot both
win the same transition.
"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.generation_job import GenerationJob
from src.domain.job_state import JobStatus


class GenerationJobRepository(ABC):
    """Repository interface for GenerationJob persistence"""

    @abstractmethod
    async def create(self, job: GenerationJob) -> GenerationJob:
        pass

    @abstractmethod
    async def get_by_id(self, job_id: str) -> Optional[GenerationJob]:
        """Retrieve job by ID, re-reading the row from the store"""
        pass

    @abstractmethod
    async def get_for_owner(self, job_id: str, owner_id: str) -> Optional[GenerationJob]:
        pass

    @abstractmethod
    async def list_by_owner(self, owner_id: str, limit: int = 10, offset: int = 0) -> tuple[list[GenerationJob], int]:
        pass

    @abstractmethod
    async def save(self, job: GenerationJob) -> GenerationJob:
        """Persist in-place changes (progress, titles) made by the owning worker"""
        pass

    @abstractmethod
    async def transition(self, job: GenerationJob, target: JobStatus, error_message: Optional[str] = None) -> bool:
        """
        Compare-and-set the job status from its current value to target

        Raises:
            InvalidTransitionError: If the edge is not part of the state machine

        Returns:
            True if this caller won the transition, False if the stored status changed meanwhile
        """
        pass

    @abstractmethod
    async def request_cancel(self, job_id: str) -> bool:
        """Flag a RUNNING job for cooperative cancellation"""
        pass

    @abstractmethod
    async def is_cancel_requested(self, job_id: str) -> bool:
        pass

    @abstractmethod
    async def mark_settled(self, job_id: str, actual_credits: int) -> bool:
        """
        One-time settlement write on a terminal job

        Returns:
            True on the first call, False if the job was already settled
        """
        pass

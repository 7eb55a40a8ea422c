"""Cancel Job Use Case

Cancels a generation job on behalf of its owner.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.generation_job_repository import GenerationJobRepository
from src.app.use_cases.credits.credit_ledger import CreditLedger
from src.domain.job_state import JobStatus
from .dtos import CancelJobResponseDTO

logger = logging.getLogger(__name__)


class CancelJob:
    """
    Use Case: Cancel a generation job

    Business Rules:
    1. QUEUED: immediate CANCELLED, full reservation released in the same transaction
    2. RUNNING: advisory; cancel_requested_at is set and the worker stops
       before its next title, settling produced output and releasing the rest
    3. COMPLETED / FAILED: JOB_NOT_CANCELLABLE
    4. CANCELLED: no-op, nothing refunded again

    Flow:
    1. Load job for owner
    2. QUEUED -> compare-and-set CANCELLED; if a worker started it meanwhile, treat as RUNNING
    3. Commit and return refunded credits
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ledger: CreditLedger,
        job_repo: GenerationJobRepository,
    ):
        self.uow = uow
        self.ledger = ledger
        self.job_repo = job_repo

    async def execute(self, owner_id: str, job_id: str) -> Result[CancelJobResponseDTO]:
        try:
            # Step 1: Load job
            job = await self.job_repo.get_for_owner(job_id, owner_id)
            if not job:
                return Return.err(
                    Error(code="JOB_NOT_FOUND", message=f"Generation job {job_id} not found")
                )

            # Step 2: Immediate cancellation of a job no worker has picked up
            if job.status == JobStatus.QUEUED:
                won = await self.job_repo.transition(job, JobStatus.CANCELLED)
                if won:
                    refund = await self.ledger.refund_reservation(
                        owner_id, job.estimated_credits, "Job cancelled before start", reference_id=job.id
                    )
                    if refund.is_err():
                        await self.uow.rollback()
                        return refund
                    await self.job_repo.mark_settled(job.id, 0)
                    await self.uow.commit()

                    logger.info(f"Cancelled queued job {job.id}, released {job.estimated_credits} credits")
                    return Return.ok(
                        CancelJobResponseDTO(
                            job_id=job.id,
                            status=JobStatus.CANCELLED,
                            refunded_credits=job.estimated_credits,
                        )
                    )
                job = await self.job_repo.get_by_id(job_id)

            # Step 3: Cooperative cancellation of a running job
            if job.status == JobStatus.RUNNING:
                await self.job_repo.request_cancel(job.id)
                await self.uow.commit()

                logger.info(f"Cancellation requested for running job {job.id}")
                return Return.ok(
                    CancelJobResponseDTO(
                        job_id=job.id,
                        status=JobStatus.RUNNING,
                        refunded_credits=0,
                        cancellation_pending=True,
                    )
                )

            if job.status == JobStatus.CANCELLED:
                return Return.ok(
                    CancelJobResponseDTO(job_id=job.id, status=JobStatus.CANCELLED, refunded_credits=0)
                )

            return Return.err(
                Error(
                    code="JOB_NOT_CANCELLABLE",
                    message=f"Job {job.id} is {JobStatus(job.status).value} and cannot be cancelled",
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CANCEL_JOB_FAILED",
                    message="Failed to cancel generation job",
                    reason=str(e),
                )
            )

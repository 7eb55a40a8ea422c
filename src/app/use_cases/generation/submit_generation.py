"""Submit Generation Use Cases

Entry points that turn a generation request into a queued job:
estimate, reserve credits, persist the job, enqueue it.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.message_queue import MessageQueue, QueueUnavailableError
from src.app.repositories.generation_job_repository import GenerationJobRepository
from src.app.use_cases.credits.credit_ledger import CreditLedger
from src.domain.generation_config import GenerationConfig
from src.domain.generation_job import GenerationJob
from src.domain.job_state import JobKind, JobStatus
from .dtos import SubmitSingleCommandDTO, SubmitBulkCommandDTO, SubmitJobResponseDTO
from .estimate_cost import estimate_credits, estimate_time_minutes, validate_configuration

logger = logging.getLogger(__name__)


class SubmitGeneration:
    """
    Shared submission flow for single and bulk jobs

    Business Rules:
    1. Configuration is validated before any reservation (INVALID_CONFIGURATION)
    2. Reservation and job creation are committed in the same transaction
    3. Insufficient credits leave no job and no hold
    4. If the queue rejects the message, the job is FAILED and the hold released

    Flow:
    1. Validate configuration and titles
    2. Estimate total cost (per-title estimate x titles)
    3. Reserve credits + create QUEUED job, commit
    4. Enqueue job id
    5. Return job id and estimate
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ledger: CreditLedger,
        job_repo: GenerationJobRepository,
        queue: MessageQueue,
    ):
        self.uow = uow
        self.ledger = ledger
        self.job_repo = job_repo
        self.queue = queue

    async def _submit(self, owner_id: str, titles: list[str], configuration, kind: JobKind) -> Result[SubmitJobResponseDTO]:
        # Step 1: Validate configuration and titles
        parsed = validate_configuration(configuration)
        if parsed.is_err():
            return parsed
        config: GenerationConfig = parsed.value

        # Duplicate titles would map to the same article
        titles = list(dict.fromkeys(t.strip() for t in titles if t and t.strip()))
        if not titles:
            return Return.err(
                Error(
                    code="INVALID_CONFIGURATION",
                    message="At least one non-empty title is required",
                )
            )

        try:
            # Step 2: Estimate
            estimated = estimate_credits(config) * len(titles)

            # Step 3: Reserve + create job in one transaction
            reservation = await self.ledger.reserve(owner_id, estimated)
            if reservation.is_err():
                await self.uow.rollback()
                return reservation

            job = await self.job_repo.create(
                GenerationJob(
                    owner_id=owner_id,
                    kind=kind,
                    status=JobStatus.QUEUED,
                    requested_titles=titles,
                    configuration=config.model_dump(mode="json"),
                    estimated_credits=estimated,
                )
            )
            await self.uow.commit()

            logger.info(
                f"Created {kind.value} job {job.id} for owner {owner_id}: "
                f"{len(titles)} title(s), reserved {estimated} credits"
            )
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="SUBMIT_GENERATION_FAILED",
                    message="Failed to submit generation job",
                    reason=str(e),
                )
            )

        # Step 4: Enqueue
        try:
            await self.queue.enqueue(job.id, {"owner_id": owner_id, "kind": kind.value})
        except QueueUnavailableError as e:
            logger.error(f"Queue unavailable for job {job.id}: {e}")
            return await self._fail_unqueued(job, str(e))

        # Step 5: Build response
        return Return.ok(
            SubmitJobResponseDTO(
                job_id=job.id,
                kind=kind,
                status=JobStatus.QUEUED,
                estimated_credits=estimated,
                estimated_time_minutes=estimate_time_minutes(len(titles)),
            )
        )

    async def _fail_unqueued(self, job: GenerationJob, reason: str) -> Result[SubmitJobResponseDTO]:
        """Job was persisted but never enqueued: fail it and release its hold"""
        try:
            won = await self.job_repo.transition(job, JobStatus.FAILED, error_message=f"Queue unavailable: {reason}")
            if won:
                refund = await self.ledger.refund_reservation(
                    job.owner_id, job.estimated_credits, "Job could not be queued", reference_id=job.id
                )
                if refund.is_err():
                    raise RuntimeError(refund.error.message)
                await self.job_repo.mark_settled(job.id, 0)
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to release reservation of unqueued job {job.id}: {e}")

        return Return.err(
            Error(
                code="QUEUE_UNAVAILABLE",
                message="Generation queue is unavailable, please retry later",
                reason=reason,
            )
        )


class SubmitSingleGeneration(SubmitGeneration):
    """Use Case: submit one title"""

    async def execute(self, command: SubmitSingleCommandDTO) -> Result[SubmitJobResponseDTO]:
        return await self._submit(command.owner_id, [command.title], command.configuration, JobKind.SINGLE)


class SubmitBulkGeneration(SubmitGeneration):
    """Use Case: submit an ordered list of titles sharing one configuration"""

    async def execute(self, command: SubmitBulkCommandDTO) -> Result[SubmitJobResponseDTO]:
        return await self._submit(command.owner_id, command.titles, command.configuration, JobKind.BULK)

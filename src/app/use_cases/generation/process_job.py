"""Process Generation Job Use Case

Worker-side execution of one generation job: runs its titles in order,
records per-title outcomes, then moves the job to a terminal status and
settles its credit reservation.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.content_provider import ContentProvider, ProviderError
from src.app.services.provider_registry import ProviderRegistry
from src.app.repositories.generation_job_repository import GenerationJobRepository
from src.app.repositories.article_repository import ArticleRepository
from src.app.use_cases.credits.credit_ledger import CreditLedger
from src.domain.article import Article, ArticleStatus
from src.domain.generation_config import GenerationConfig
from src.domain.generation_job import GenerationJob
from src.domain.job_state import JobKind, JobStatus
from src.domain.ledger_entry import Feature
from .article_assembler import ArticleAssembler
from .dtos import ProcessJobResultDTO, FailedTitleDTO
from .estimate_cost import calculate_actual_credits, validate_configuration

logger = logging.getLogger(__name__)


class ProcessGenerationJob:
    """
    Use Case: Process one generation job (called by the worker pool)

    Business Rules:
    1. Titles run sequentially in submission order with a pacing delay
    2. A title that fails is recorded in failed_titles; the job continues
    3. Titles already processed, or with an existing article, are skipped
       (redelivery of a job that was partly processed)
    4. A cancellation request is honoured before the next title
    5. Outcome:
       - cancelled: CANCELLED, settle the attempted share, release the rest
       - at least one article: COMPLETED, settle the whole reservation
       - no article: FAILED, release the whole reservation
    6. Terminal transition, ledger calls and settled_at are one transaction;
       a ledger failure rolls all of it back and the job stays RUNNING

    Returns:
        Ok(ProcessJobResultDTO) when the message can be acked,
        Err for infrastructure failures (the message should be redelivered)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ledger: CreditLedger,
        job_repo: GenerationJobRepository,
        article_repo: ArticleRepository,
        registry: ProviderRegistry,
        assembler: ArticleAssembler,
        pacing_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.uow = uow
        self.ledger = ledger
        self.job_repo = job_repo
        self.article_repo = article_repo
        self.registry = registry
        self.assembler = assembler
        self.pacing_seconds = pacing_seconds
        self.sleep = sleep

    async def execute(self, job_id: str) -> Result[ProcessJobResultDTO]:
        try:
            # Step 1: Load job
            job = await self.job_repo.get_by_id(job_id)
            if not job:
                return Return.err(Error(code="JOB_NOT_FOUND", message=f"Generation job {job_id} not found"))

            if JobStatus(job.status).is_terminal:
                return await self._recover(job)

            parsed = validate_configuration(job.configuration)
            if parsed.is_err():
                return await self._finish(job, JobStatus.FAILED, parsed.error.message)
            config: GenerationConfig = parsed.value
            provider = self.registry.get(config.ai_model)

            # Step 2: Claim the job
            if job.status == JobStatus.QUEUED:
                won = await self.job_repo.transition(job, JobStatus.RUNNING)
                await self.uow.commit()
                if not won:
                    job = await self.job_repo.get_by_id(job_id)
                    if JobStatus(job.status).is_terminal:
                        return await self._recover(job)
                logger.info(f"Job {job.id} started: {len(job.requested_titles)} title(s) with {provider.name}")
            else:
                logger.info(f"Resuming job {job.id}: {len(job.processed_titles)} of {len(job.requested_titles)} done")

            # Step 3: Titles in order
            cancelled = await self._run_titles(job, provider, config)

            # Step 4: Terminal status + settlement
            if cancelled:
                return await self._finish(job, JobStatus.CANCELLED)
            if job.completed_titles:
                return await self._finish(job, JobStatus.COMPLETED)
            return await self._finish(job, JobStatus.FAILED, self._failure_message(job))

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Processing job {job_id} failed: {e}")
            return Return.err(
                Error(
                    code="PROCESS_JOB_FAILED",
                    message=f"Failed to process generation job {job_id}",
                    reason=str(e),
                )
            )

    async def fail(self, job_id: str, reason: str) -> Result[ProcessJobResultDTO]:
        """
        Give up on a job whose message exhausted its delivery attempts

        Produced articles are still settled; the rest of the reservation is released.
        """
        try:
            job = await self.job_repo.get_by_id(job_id)
            if not job:
                return Return.err(Error(code="JOB_NOT_FOUND", message=f"Generation job {job_id} not found"))
            if JobStatus(job.status).is_terminal:
                return await self._recover(job)
            return await self._finish(job, JobStatus.FAILED, reason)

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failing job {job_id} failed: {e}")
            return Return.err(
                Error(
                    code="PROCESS_JOB_FAILED",
                    message=f"Failed to fail generation job {job_id}",
                    reason=str(e),
                )
            )

    async def _run_titles(self, job: GenerationJob, provider: ContentProvider, config: GenerationConfig) -> bool:
        """Process pending titles; returns True if stopped by a cancellation request"""
        generated = 0
        for title in job.requested_titles:
            if title in job.processed_titles:
                continue

            if await self.job_repo.is_cancel_requested(job.id):
                logger.info(f"Job {job.id} cancelled after {len(job.processed_titles)} title(s)")
                return True

            existing = await self.article_repo.get_by_job_and_title(job.id, title)
            if existing:
                self._record_success(job, title)
                await self.job_repo.save(job)
                await self.uow.commit()
                continue

            if generated > 0 and self.pacing_seconds > 0:
                await self.sleep(self.pacing_seconds)
            generated += 1

            result = await self._generate_title(provider, job, title, config)

            if result.is_ok():
                await self.article_repo.create(result.value)
                self._record_success(job, title)
            else:
                logger.warning(f"Job {job.id}: title '{title}' failed: {result.error.message}")
                job.failed_titles = job.failed_titles + [{"title": title, "error": result.error.message}]

            # Article and progress are committed together
            await self.job_repo.save(job)
            await self.uow.commit()

        return False

    async def _generate_title(
        self, provider: ContentProvider, job: GenerationJob, title: str, config: GenerationConfig
    ) -> Result[Article]:
        try:
            assembled = await self.assembler.assemble(provider, title, config)
        except ProviderError as e:
            return Return.err(Error(code="GENERATION_FAILED", message=str(e), reason=e.reason))

        return Return.ok(
            Article(
                owner_id=job.owner_id,
                job_id=job.id,
                title=title,
                content=assembled.content,
                word_count=assembled.word_count,
                status=ArticleStatus.COMPLETED,
                images=assembled.images,
                configuration=job.configuration,
                credits_used=calculate_actual_credits(assembled.word_count, len(assembled.images)),
            )
        )

    def _record_success(self, job: GenerationJob, title: str) -> None:
        job.completed_titles = job.completed_titles + [title]
        progress = len(job.completed_titles) * 100 // len(job.requested_titles)
        job.progress = max(job.progress, progress)

    def _failure_message(self, job: GenerationJob) -> str:
        if job.kind == JobKind.SINGLE and job.failed_titles:
            return job.failed_titles[0]["error"]
        return f"All {len(job.requested_titles)} titles failed"

    async def _finish(
        self, job: GenerationJob, target: JobStatus, error_message: Optional[str] = None
    ) -> Result[ProcessJobResultDTO]:
        job_id = job.id
        won = await self.job_repo.transition(job, target, error_message=error_message)
        if not won:
            # Another delivery of this job got there first
            await self.uow.rollback()
            job = await self.job_repo.get_by_id(job_id)
            return await self._recover(job)

        if target == JobStatus.COMPLETED:
            job.progress = 100
            await self.job_repo.save(job)

        return await self._settle(job)

    async def _recover(self, job: GenerationJob) -> Result[ProcessJobResultDTO]:
        """Terminal job: settle it if a previous attempt stopped before settlement"""
        if job.settled_at is not None:
            logger.info(f"Job {job.id} already {JobStatus(job.status).value} and settled, skipping")
            return Return.ok(self._to_result(job, skipped=True))

        logger.warning(f"Job {job.id} is {JobStatus(job.status).value} but unsettled, settling now")
        return await self._settle(job)

    async def _settle(self, job: GenerationJob) -> Result[ProcessJobResultDTO]:
        """Ledger calls + settled_at write, committed together with the pending transition"""
        job_id = job.id
        articles = await self.article_repo.list_by_job(job.id)
        actual = sum(article.credits_used for article in articles)
        reserved_part, refund = self._settlement_plan(job, actual)

        charged = 0
        if reserved_part > 0:
            settlement = await self.ledger.settle(
                owner_id=job.owner_id,
                reserved_amount=reserved_part,
                actual_amount=actual,
                feature=Feature.AI_WRITER if job.kind == JobKind.SINGLE else Feature.AUTO_WRITER,
                description=self._usage_description(job, len(articles)),
                reference_id=job.id,
                metadata={"articles": len(articles), "status": JobStatus(job.status).value},
            )
            if settlement.is_err():
                return await self._settlement_failed(job_id, settlement.error)
            charged = settlement.value.charged

        if refund > 0:
            released = await self.ledger.refund_reservation(
                job.owner_id, refund, f"Job {JobStatus(job.status).value}", reference_id=job.id
            )
            if released.is_err():
                return await self._settlement_failed(job_id, released.error)

        if not await self.job_repo.mark_settled(job_id, charged):
            # Another delivery settled first; undo this attempt's ledger calls
            await self.uow.rollback()
            logger.info(f"Job {job_id} was settled by another worker")
            job = await self.job_repo.get_by_id(job_id)
            return Return.ok(self._to_result(job, skipped=True))
        await self.uow.commit()

        logger.info(
            f"Job {job.id} {JobStatus(job.status).value}: {len(job.completed_titles)} article(s), "
            f"charged {charged}, released {refund} of {job.estimated_credits} reserved"
        )
        return Return.ok(self._to_result(job, refunded=refund, actual=charged))

    def _settlement_plan(self, job: GenerationJob, actual: int) -> tuple[int, int]:
        """(reservation part to settle, reservation part to release)"""
        if actual == 0:
            return 0, job.estimated_credits
        if job.status == JobStatus.COMPLETED:
            return job.estimated_credits, 0
        share = min(job.per_title_credits * len(job.processed_titles), job.estimated_credits)
        return share, job.estimated_credits - share

    async def _settlement_failed(self, job_id: str, error: Error) -> Result[ProcessJobResultDTO]:
        await self.uow.rollback()
        logger.error(f"Settlement of job {job_id} failed, leaving it for redelivery: {error.message}")
        return Return.err(
            Error(
                code="SETTLEMENT_FAILED",
                message=f"Failed to settle generation job {job_id}",
                reason=error.message,
            )
        )

    def _usage_description(self, job: GenerationJob, article_count: int) -> str:
        if job.kind == JobKind.SINGLE:
            return f"Article generation: {job.requested_titles[0][:200]}"
        return f"Bulk article generation: {article_count} of {len(job.requested_titles)} articles"

    def _to_result(
        self, job: GenerationJob, skipped: bool = False, refunded: int = 0, actual: Optional[int] = None
    ) -> ProcessJobResultDTO:
        return ProcessJobResultDTO(
            job_id=job.id,
            status=job.status,
            completed_titles=job.completed_titles,
            failed_titles=[FailedTitleDTO(**item) for item in job.failed_titles],
            actual_credits=job.actual_credits if actual is None else actual,
            refunded_credits=refunded,
            skipped=skipped,
        )

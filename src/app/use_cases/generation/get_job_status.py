"""Get Job Status Use Case

Read-only view of a generation job for its owner.
"""

from libs.result import Result, Return, Error
from src.app.repositories.generation_job_repository import GenerationJobRepository
from src.app.repositories.article_repository import ArticleRepository
from src.domain.generation_job import GenerationJob
from src.domain.job_state import JobStatus
from .dtos import JobStatusResponseDTO, FailedTitleDTO, ArticleSummaryDTO


class GetJobStatus:
    """
    Get Job Status Use Case

    Articles are included once the job has finished with output
    (COMPLETED, or CANCELLED after some titles were produced).
    """

    def __init__(self, job_repo: GenerationJobRepository, article_repo: ArticleRepository):
        self.job_repo = job_repo
        self.article_repo = article_repo

    async def execute(self, owner_id: str, job_id: str) -> Result[JobStatusResponseDTO]:
        """
        Errors:
            JOB_NOT_FOUND: Unknown job id, or job owned by someone else
        """
        job = await self.job_repo.get_for_owner(job_id, owner_id)
        if not job:
            return Return.err(
                Error(
                    code="JOB_NOT_FOUND",
                    message=f"Generation job {job_id} not found",
                )
            )

        articles = []
        if job.status in (JobStatus.COMPLETED, JobStatus.CANCELLED) and job.completed_titles:
            articles = [
                ArticleSummaryDTO(
                    id=article.id,
                    title=article.title,
                    word_count=article.word_count,
                    status=article.status.value if hasattr(article.status, "value") else article.status,
                    credits_used=article.credits_used,
                    images=article.images,
                    created_at=article.created_at,
                )
                for article in await self.article_repo.list_by_job(job.id)
            ]

        return Return.ok(to_status_dto(job, articles))


def to_status_dto(job: GenerationJob, articles: list[ArticleSummaryDTO]) -> JobStatusResponseDTO:
    return JobStatusResponseDTO(
        job_id=job.id,
        kind=job.kind,
        status=job.status,
        progress=job.progress,
        requested_titles=job.requested_titles,
        completed_titles=job.completed_titles,
        failed_titles=[FailedTitleDTO(**item) for item in job.failed_titles],
        estimated_credits=job.estimated_credits,
        actual_credits=job.actual_credits,
        error_message=job.error_message,
        cancellation_pending=job.status == JobStatus.RUNNING and job.cancel_requested_at is not None,
        created_at=job.created_at,
        started_at=job.started_at,
        completed_at=job.completed_at,
        articles=articles,
    )

"""
List Jobs Use Case

Paginated generation job history for an owner, newest first.
"""
from libs.result import Result, Return
from src.app.repositories.generation_job_repository import GenerationJobRepository
from .dtos import ListJobsResponseDTO, JobSummaryDTO


class ListJobs:
    def __init__(self, job_repo: GenerationJobRepository):
        self.job_repo = job_repo

    async def execute(self, owner_id: str, page: int = 1, limit: int = 10) -> Result[ListJobsResponseDTO]:
        page = max(page, 1)
        limit = max(limit, 1)
        jobs, total = await self.job_repo.list_by_owner(owner_id, limit=limit, offset=(page - 1) * limit)

        return Return.ok(
            ListJobsResponseDTO(
                jobs=[
                    JobSummaryDTO(
                        job_id=job.id,
                        kind=job.kind,
                        status=job.status,
                        progress=job.progress,
                        title_count=len(job.requested_titles),
                        estimated_credits=job.estimated_credits,
                        actual_credits=job.actual_credits,
                        created_at=job.created_at,
                    )
                    for job in jobs
                ],
                total=total,
                page=page,
                limit=limit,
                pages=(total + limit - 1) // limit,
            )
        )

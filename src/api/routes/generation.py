"""Generation API Routes

Submission, status, cancellation and estimate endpoints for article jobs.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.error import ClientError
from src.api.identity import get_owner_id
from src.api.schemas.generation_request import (
    SubmitSingleRequestSchema,
    SubmitBulkRequestSchema,
    EstimateRequestSchema,
    TitleIdeasRequestSchema,
)
from src.adapter.repositories import SqlAlchemyGenerationJobRepository, SqlAlchemyArticleRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.message_queue import MessageQueue
from src.app.services.provider_registry import ProviderRegistry
from src.app.use_cases.generation import (
    SubmitSingleGeneration,
    SubmitBulkGeneration,
    GetJobStatus,
    ListJobs,
    CancelJob,
    EstimateCost,
    GenerateTitleIdeas,
)
from src.app.use_cases.generation.dtos import (
    SubmitSingleCommandDTO,
    SubmitBulkCommandDTO,
    SubmitJobResponseDTO,
    EstimateCommandDTO,
    EstimateResponseDTO,
    JobStatusResponseDTO,
    ListJobsResponseDTO,
    CancelJobResponseDTO,
    TitleIdeasCommandDTO,
    TitleIdeasResponseDTO,
)
from src.depends import get_session, get_message_queue, get_provider_registry, build_credit_ledger

router = APIRouter(prefix="/generation", tags=["Generation"])


@router.post("/single", response_model=SubmitJobResponseDTO, status_code=status.HTTP_202_ACCEPTED)
async def submit_single(
    request: SubmitSingleRequestSchema,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
    queue: MessageQueue = Depends(get_message_queue),
):
    """
    Queue one article.

    Credits for the estimate are reserved immediately and settled against
    the actual word count when the article is done.

    **Returns:**
    - 202: Job queued
    - 402: Not enough available credits
    - 422: Invalid configuration
    - 503: Queue unavailable (nothing is reserved)
    """
    use_case = SubmitSingleGeneration(
        SqlAlchemyUnitOfWork(session),
        build_credit_ledger(session),
        SqlAlchemyGenerationJobRepository(session),
        queue,
    )
    result = await use_case.execute(
        SubmitSingleCommandDTO(owner_id=owner_id, title=request.title, configuration=request.configuration)
    )

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/bulk", response_model=SubmitJobResponseDTO, status_code=status.HTTP_202_ACCEPTED)
async def submit_bulk(
    request: SubmitBulkRequestSchema,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
    queue: MessageQueue = Depends(get_message_queue),
):
    """
    Queue many titles as one job sharing a configuration.

    Titles are generated in order; failed titles do not fail the job.
    """
    use_case = SubmitBulkGeneration(
        SqlAlchemyUnitOfWork(session),
        build_credit_ledger(session),
        SqlAlchemyGenerationJobRepository(session),
        queue,
    )
    result = await use_case.execute(
        SubmitBulkCommandDTO(owner_id=owner_id, titles=request.titles, configuration=request.configuration)
    )

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/estimate", response_model=EstimateResponseDTO)
async def estimate(request: EstimateRequestSchema):
    """Preview the credit cost of a configuration (nothing is reserved)"""
    result = await EstimateCost().execute(
        EstimateCommandDTO(configuration=request.configuration, item_count=request.item_count)
    )

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/jobs", response_model=ListJobsResponseDTO)
async def list_jobs(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    result = await ListJobs(SqlAlchemyGenerationJobRepository(session)).execute(owner_id, page=page, limit=limit)
    return result.value


@router.get("/jobs/{job_id}", response_model=JobStatusResponseDTO)
async def get_job_status(
    job_id: str,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    """Poll a job. Articles are included once the job has finished with output."""
    use_case = GetJobStatus(SqlAlchemyGenerationJobRepository(session), SqlAlchemyArticleRepository(session))
    result = await use_case.execute(owner_id, job_id)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/jobs/{job_id}/cancel", response_model=CancelJobResponseDTO)
async def cancel_job(
    job_id: str,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Cancel a job.

    A queued job is cancelled at once and its reservation released. A
    running job stops before its next title (cancellation_pending=true).

    **Returns:**
    - 200: Cancelled or cancellation requested
    - 404: Unknown job
    - 409: Job already completed or failed
    """
    use_case = CancelJob(
        SqlAlchemyUnitOfWork(session),
        build_credit_ledger(session),
        SqlAlchemyGenerationJobRepository(session),
    )
    result = await use_case.execute(owner_id, job_id)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/title-ideas", response_model=TitleIdeasResponseDTO)
async def title_ideas(
    request: TitleIdeasRequestSchema,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
    registry: ProviderRegistry = Depends(get_provider_registry),
):
    use_case = GenerateTitleIdeas(SqlAlchemyUnitOfWork(session), build_credit_ledger(session), registry)
    result = await use_case.execute(
        TitleIdeasCommandDTO(owner_id=owner_id, topic=request.topic, count=request.count, ai_model=request.ai_model)
    )

    if result.is_err():
        raise ClientError(result.error)
    return result.value

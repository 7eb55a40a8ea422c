"""Article generation use cases"""
from .estimate_cost import (
    EstimateCost,
    estimate_credits,
    estimate_breakdown,
    estimate_bulk_credits,
    estimate_time_minutes,
    calculate_actual_credits,
    validate_configuration,
)
from .submit_generation import SubmitSingleGeneration, SubmitBulkGeneration
from .get_job_status import GetJobStatus
from .list_jobs import ListJobs
from .cancel_job import CancelJob
from .generate_title_ideas import GenerateTitleIdeas
from .article_assembler import ArticleAssembler, AssembledArticle
from .process_job import ProcessGenerationJob
from .dtos import (
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
    ProcessJobResultDTO,
)

__all__ = [
    "EstimateCost",
    "estimate_credits",
    "estimate_breakdown",
    "estimate_bulk_credits",
    "estimate_time_minutes",
    "calculate_actual_credits",
    "validate_configuration",
    "SubmitSingleGeneration",
    "SubmitBulkGeneration",
    "GetJobStatus",
    "ListJobs",
    "CancelJob",
    "GenerateTitleIdeas",
    "ArticleAssembler",
    "AssembledArticle",
    "ProcessGenerationJob",
    "SubmitSingleCommandDTO",
    "SubmitBulkCommandDTO",
    "SubmitJobResponseDTO",
    "EstimateCommandDTO",
    "EstimateResponseDTO",
    "JobStatusResponseDTO",
    "ListJobsResponseDTO",
    "CancelJobResponseDTO",
    "TitleIdeasCommandDTO",
    "TitleIdeasResponseDTO",
    "ProcessJobResultDTO",
]

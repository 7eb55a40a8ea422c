"""Data Transfer Objects for Generation Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from src.domain.job_state import JobKind, JobStatus


class SubmitSingleCommandDTO(BaseModel):
    """
    Command DTO for a one-title generation job

    configuration is validated against GenerationConfig by the use case so
    that an invalid configuration is reported before any reservation.
    """

    owner_id: str = Field(..., min_length=1, description="Owner identifier")
    title: str = Field(..., min_length=1, max_length=500, description="Article title")
    configuration: Dict[str, Any] = Field(default_factory=dict, description="Generation parameters")

    class Config:
        json_schema_extra = {
            "example": {
                "owner_id": "user_123",
                "title": "How to brew pour-over coffee",
                "configuration": {"length": "short", "faq_items": 3},
            }
        }


class SubmitBulkCommandDTO(BaseModel):
    """Command DTO for a many-title generation job"""

    owner_id: str = Field(..., min_length=1, description="Owner identifier")
    titles: list[str] = Field(..., min_length=1, max_length=100, description="Ordered titles")
    configuration: Dict[str, Any] = Field(default_factory=dict, description="Generation parameters shared by all titles")


class SubmitJobResponseDTO(BaseModel):
    job_id: str
    kind: JobKind
    status: JobStatus
    estimated_credits: int
    estimated_time_minutes: int


class EstimateCommandDTO(BaseModel):
    """Command DTO for an estimate preview (no reservation)"""

    configuration: Dict[str, Any] = Field(default_factory=dict)
    item_count: int = Field(default=1, ge=1, le=100, description="Number of titles")


class EstimateResponseDTO(BaseModel):
    estimated_credits: int = Field(..., description="Total for item_count titles")
    per_item_credits: int
    item_count: int
    breakdown: Dict[str, int] = Field(..., description="Per-item cost components")


class FailedTitleDTO(BaseModel):
    title: str
    error: str


class ArticleSummaryDTO(BaseModel):
    id: int
    title: str
    word_count: int
    status: str
    credits_used: int
    images: list[Dict[str, Any]] = Field(default_factory=list)
    created_at: datetime


class JobStatusResponseDTO(BaseModel):
    job_id: str
    kind: JobKind
    status: JobStatus
    progress: int
    requested_titles: list[str]
    completed_titles: list[str]
    failed_titles: list[FailedTitleDTO]
    estimated_credits: int
    actual_credits: int
    error_message: Optional[str] = None
    cancellation_pending: bool = False
    created_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    articles: list[ArticleSummaryDTO] = Field(default_factory=list)


class JobSummaryDTO(BaseModel):
    job_id: str
    kind: JobKind
    status: JobStatus
    progress: int
    title_count: int
    estimated_credits: int
    actual_credits: int
    created_at: datetime


class ListJobsResponseDTO(BaseModel):
    jobs: list[JobSummaryDTO]
    total: int
    page: int
    limit: int
    pages: int


class CancelJobResponseDTO(BaseModel):
    job_id: str
    status: JobStatus
    refunded_credits: int = Field(..., description="Credits released now (0 while cancellation is pending)")
    cancellation_pending: bool = False


class TitleIdeasCommandDTO(BaseModel):
    owner_id: str = Field(..., min_length=1)
    topic: str = Field(..., min_length=1, max_length=500)
    count: int = Field(default=10, ge=1, le=50)
    ai_model: Optional[str] = Field(default=None, max_length=50)


class TitleIdeasResponseDTO(BaseModel):
    titles: list[str]
    credits_used: int


class ProcessJobResultDTO(BaseModel):
    """Outcome of one worker pass over a job"""

    job_id: str
    status: JobStatus
    completed_titles: list[str] = Field(default_factory=list)
    failed_titles: list[FailedTitleDTO] = Field(default_factory=list)
    actual_credits: int = 0
    refunded_credits: int = 0
    skipped: bool = Field(default=False, description="True when the job was already finished and settled")

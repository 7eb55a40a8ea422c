"""Generation Job Domain Entity

Durable record of one submitted generation request (one or many titles)
and its lifecycle state.
"""

from datetime import datetime
from typing import Any, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import JSON, String, Text
from src.domain.base import BaseModel, generate_uuid
from src.domain.job_state import JobKind, JobStatus


class GenerationJob(BaseModel, table=True):
    """
    Generation Job - Tracks one-or-many article requests

    Domain Rules:
    - Created QUEUED by the orchestrator together with the credit reservation
    - Mutated only by the worker that holds the job (status changes via job_state.transition)
    - progress is 0-100 and never decreases
    - completed_titles is an ordered, append-only subset of requested_titles
    - Immutable once terminal, except the one-time settlement write
      (actual_credits, settled_at)
    """

    __tablename__ = "generation_jobs"
    __table_args__ = (
        Index('ix_generation_jobs_owner_created', 'owner_id', 'created_at'),
        Index('ix_generation_jobs_status', 'status'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        sa_column=Column(String(36), primary_key=True),
        description="Client-visible job id (uuid4)"
    )

    owner_id: str = Field(
        description="Owner (user) ID"
    )

    kind: JobKind = Field(
        description="Job kind (single, bulk)"
    )

    status: JobStatus = Field(
        default=JobStatus.QUEUED,
        description="Lifecycle status"
    )

    progress: int = Field(
        default=0,
        description="Progress percentage (0-100, non-decreasing)"
    )

    requested_titles: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Ordered list of requested titles"
    )

    completed_titles: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Titles that produced an article, in completion order"
    )

    failed_titles: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Per-title error report ({title, error})"
    )

    configuration: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
        description="Generation parameters (GenerationConfig dump)"
    )

    estimated_credits: int = Field(
        description="Credits reserved at submission"
    )

    actual_credits: int = Field(
        default=0,
        description="Credits charged at settlement (0 until settled)"
    )

    error_message: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Job-level failure reason"
    )

    cancel_requested_at: Optional[datetime] = Field(
        default=None,
        description="Set when cancellation of a running job is requested"
    )

    started_at: Optional[datetime] = Field(default=None)
    completed_at: Optional[datetime] = Field(default=None)

    settled_at: Optional[datetime] = Field(
        default=None,
        description="When the reservation was settled or released (written once)"
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def processed_titles(self) -> list[str]:
        """Titles already attempted (succeeded or failed)"""
        failed = [item["title"] for item in self.failed_titles]
        return list(self.completed_titles) + failed

    @property
    def per_title_credits(self) -> int:
        if not self.requested_titles:
            return 0
        return self.estimated_credits // len(self.requested_titles)

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": "6f1c1f0e-8a63-4b53-9d2b-3b6f1f3f7d11",
                "owner_id": "user_123",
                "kind": "bulk",
                "status": "running",
                "progress": 33,
                "requested_titles": ["Title A", "Title B", "Title C"],
                "completed_titles": ["Title A"],
                "failed_titles": [],
                "configuration": {"length": "short"},
                "estimated_credits": 2640,
                "actual_credits": 0,
            }
        }

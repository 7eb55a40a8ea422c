"""Article Domain Entity

Artifact produced by the worker for one successfully generated title.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import JSON, String, Text, UniqueConstraint
from src.domain.base import BaseModel, BigIntegerId


class ArticleStatus(str, Enum):
    DRAFT = "draft"
    COMPLETED = "completed"
    PUBLISHED = "published"
    FAILED = "failed"


class Article(BaseModel, table=True):
    """
    Article - Assembled content for one title

    Domain Rules:
    - Created only by the worker (never by the orchestrator)
    - (job_id, title) is unique so a redelivered job cannot duplicate an article
    - images is an ordered list of {url, alt, position, caption}
    """

    __tablename__ = "articles"
    __table_args__ = (
        UniqueConstraint('job_id', 'title', name='uq_articles_job_title'),
        Index('ix_articles_owner_id', 'owner_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerId, primary_key=True, autoincrement=True),
    )

    owner_id: str = Field(description="Owner (user) ID")

    job_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(36), nullable=True, index=True),
        description="Generation job that produced the article"
    )

    title: str = Field(
        sa_column=Column(String(500), nullable=False),
    )

    content: str = Field(
        sa_column=Column(Text, nullable=False),
        description="Assembled markdown content"
    )

    word_count: int = Field(default=0)

    status: ArticleStatus = Field(default=ArticleStatus.DRAFT)

    images: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    configuration: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
        description="Configuration snapshot used for generation"
    )

    credits_used: int = Field(
        default=0,
        description="Actual credits this article costs (word count + image surcharge)"
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

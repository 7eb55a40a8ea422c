"""Request schemas for the generation and credits API

The owner is not part of any body: it comes from the X-Owner-Id header.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator
from src.domain.ledger_entry import EntryKind


class SubmitSingleRequestSchema(BaseModel):
    title: str = Field(..., min_length=1, max_length=500, description="Article title")
    configuration: Dict[str, Any] = Field(default_factory=dict, description="Generation parameters")

    class Config:
        json_schema_extra = {
            "example": {
                "title": "How to brew pour-over coffee",
                "configuration": {"length": "short", "takeaways": 3, "faq_items": 3, "ai_model": "claude"},
            }
        }


class SubmitBulkRequestSchema(BaseModel):
    titles: list[str] = Field(..., min_length=1, max_length=100, description="Ordered titles")
    configuration: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("titles")
    @classmethod
    def validate_titles(cls, v):
        if not any(t.strip() for t in v):
            raise ValueError("At least one non-empty title is required")
        return v


class EstimateRequestSchema(BaseModel):
    configuration: Dict[str, Any] = Field(default_factory=dict)
    item_count: int = Field(default=1, ge=1, le=100)


class TitleIdeasRequestSchema(BaseModel):
    topic: str = Field(..., min_length=1, max_length=500)
    count: int = Field(default=10, ge=1, le=50)
    ai_model: Optional[str] = Field(default=None, max_length=50)


class AllocateCreditsRequestSchema(BaseModel):
    """Credit top-up posted by the payment/subscription side"""

    amount: int = Field(..., gt=0)
    kind: EntryKind = Field(default=EntryKind.PURCHASE)
    description: str = Field(default="Credit purchase", max_length=255)
    idempotency_key: Optional[str] = Field(default=None, max_length=255)
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("kind")
    @classmethod
    def validate_kind(cls, v):
        if v == EntryKind.USAGE:
            raise ValueError("usage entries are created by settlement only")
        return v

"""Ledger Entry Domain Entity

Immutable append-only audit trail of all credit mutations.
The sum of an owner's entries equals the account balance.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, String, Text
from src.domain.base import BaseModel, BigIntegerId


class EntryKind(str, Enum):
    """Ledger entry kinds"""
    PURCHASE = "purchase"      # Credits bought by the user
    USAGE = "usage"            # Credits consumed by generation work
    RENEWAL = "renewal"        # Subscription renewal allocation
    ADJUSTMENT = "adjustment"  # Settlement correction (unused estimate) or admin change
    REFUND = "refund"          # Credits returned to the user


class Feature(str, Enum):
    """Product features that consume credits"""
    AI_WRITER = "ai_writer"
    AUTO_WRITER = "auto_writer"
    LONG_FORM_WRITER = "long_form_writer"
    IMAGE_GENERATION = "image_generation"
    TITLE_IDEAS = "title_ideas"


class LedgerEntry(BaseModel, table=True):
    """
    Ledger Entry - Immutable record of one credit mutation

    Domain Rules:
    - Entries are never updated or deleted
    - amount is signed: positive = credit, negative = debit
    - idempotency_key (when present) is unique and prevents double-settlement
    - reference_id links the entry to a generation job
    """

    __tablename__ = "ledger_entries"
    __table_args__ = (
        Index('ix_ledger_entries_created_at', 'created_at'),
        Index('ix_ledger_entries_reference_id', 'reference_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerId, primary_key=True, autoincrement=True),
        description="Unique entry identifier (auto-increment)"
    )

    owner_id: str = Field(
        index=True,
        description="Owner ID for query optimization"
    )

    account_id: int = Field(
        sa_column=Column(BigIntegerId, ForeignKey("credit_accounts.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to CreditAccount"
    )

    amount: int = Field(
        description="Signed credit amount (positive = credit, negative = debit)"
    )

    kind: EntryKind = Field(
        description="Entry kind (purchase, usage, renewal, adjustment, refund)"
    )

    feature: Optional[Feature] = Field(
        default=None,
        description="Feature that caused the mutation"
    )

    description: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Human-readable description"
    )

    metadata_json: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Opaque JSON metadata for audit and debugging"
    )

    reference_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="ID of the referenced entity (e.g., generation job id)"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True, unique=True),
        description="Unique key for idempotent mutations (e.g., usage:<job_id>)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Entry timestamp (immutable)"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "owner_id": "user_123",
                "account_id": 1,
                "amount": -1200,
                "kind": "usage",
                "feature": "ai_writer",
                "description": "Article generation (single)",
                "reference_id": "6f1c1f0e-...",
                "idempotency_key": "usage:6f1c1f0e-...",
                "created_at": "2024-01-01T00:00:00Z"
            }
        }

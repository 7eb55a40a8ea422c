"""Credit Account Domain Entity

Holds an owner's spendable and reserved credit balances. Each owner has
exactly one account. Balances are only mutated by Ledger operations.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint
from src.domain.base import BaseModel, BigIntegerId


class CreditAccount(BaseModel, table=True):
    """
    Credit Account - Tracks owner credit balance and in-flight reservations

    Domain Rules:
    - One account per owner (owner_id is unique)
    - balance >= 0 and reserved >= 0 at all times
    - available = balance - reserved is never negative when a reservation is accepted
    - Mutations go through the Ledger (atomic conditional UPDATEs)
    """

    __tablename__ = "credit_accounts"
    __table_args__ = (
        CheckConstraint('balance >= 0', name='balance_non_negative'),
        CheckConstraint('reserved >= 0', name='reserved_non_negative'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerId, primary_key=True, autoincrement=True),
        description="Unique account identifier (auto-increment)"
    )

    owner_id: str = Field(
        index=True,
        unique=True,
        description="Owner (user) ID supplied by the identity layer"
    )

    balance: int = Field(
        default=0,
        description="Spendable credits (must be >= 0)"
    )

    reserved: int = Field(
        default=0,
        description="Credits held against in-flight generation jobs (must be >= 0)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Account creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last balance update timestamp"
    )

    @property
    def available(self) -> int:
        return self.balance - self.reserved

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "owner_id": "user_123",
                "balance": 100000,
                "reserved": 2640,
                "created_at": "2024-01-01T00:00:00Z",
                "updated_at": "2024-01-01T00:00:00Z"
            }
        }

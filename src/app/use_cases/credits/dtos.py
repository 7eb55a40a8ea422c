"""Data Transfer Objects for Credit Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field
from src.domain.ledger_entry import EntryKind, Feature


class ReservationDTO(BaseModel):
    """Outcome of an accepted reservation"""

    owner_id: str
    amount: int
    balance: int
    reserved: int
    available: int


class SettlementDTO(BaseModel):
    """
    Outcome of a settlement

    charged is the USAGE debit; adjusted is the ADJUSTMENT credit for the
    unused part of the estimate (0 when the estimate was exact or short).
    """

    owner_id: str
    reference_id: str
    reserved_released: int
    charged: int
    adjusted: int
    usage_entry_id: Optional[int] = None
    adjustment_entry_id: Optional[int] = None
    already_settled: bool = False


class AllocateCreditsCommandDTO(BaseModel):
    """
    Command DTO for adding credits (purchase, renewal, admin adjustment)

    Used as input to AllocateCredits use case.
    """

    owner_id: str = Field(..., min_length=1, description="Owner identifier")
    amount: int = Field(..., gt=0, description="Credits to add (must be > 0)")
    kind: EntryKind = Field(default=EntryKind.PURCHASE, description="purchase, renewal, adjustment or refund")
    description: str = Field(default="Credit purchase", max_length=255)
    idempotency_key: Optional[str] = Field(
        default=None,
        description="Unique key for idempotent operations (e.g., payment id)"
    )
    feature: Optional[Feature] = None
    metadata: Optional[Dict[str, Any]] = None

    class Config:
        json_schema_extra = {
            "example": {
                "owner_id": "user_123",
                "amount": 100000,
                "kind": "purchase",
                "description": "PRO plan purchase",
                "idempotency_key": "payment:pay_789",
            }
        }


class LedgerEntryDTO(BaseModel):
    id: int
    amount: int
    kind: str
    feature: Optional[str] = None
    description: str
    reference_id: Optional[str] = None
    created_at: datetime


class AllocateCreditsResponseDTO(BaseModel):
    entry_id: int
    owner_id: str
    amount: int
    kind: str
    balance_after: int
    idempotency_key: Optional[str] = None
    created_at: datetime


class BalanceResponseDTO(BaseModel):
    """Response DTO for get balance operation"""

    owner_id: str = Field(..., description="Owner identifier")
    balance: int = Field(..., description="Spendable credits")
    reserved: int = Field(..., description="Credits held by in-flight jobs")
    available: int = Field(..., description="balance - reserved")
    last_updated: datetime


class ListLedgerEntriesResponseDTO(BaseModel):
    entries: list[LedgerEntryDTO]
    total: int
    limit: int
    offset: int


class AccountDiscrepancyDTO(BaseModel):
    owner_id: str
    account_id: int
    account_balance: int
    calculated_balance: int
    discrepancy: int


class ReconciliationResultDTO(BaseModel):
    total_accounts_checked: int
    discrepancies_found: int
    discrepancies: list[AccountDiscrepancyDTO]
    reconciliation_time: datetime
    execution_time_ms: int

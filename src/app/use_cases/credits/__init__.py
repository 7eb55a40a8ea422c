"""Credit ledger use cases"""
from .credit_ledger import CreditLedger, OveragePolicy, usage_key, adjustment_key
from .allocate_credits import AllocateCredits
from .get_balance import GetBalance
from .list_ledger_entries import ListLedgerEntries
from .reconcile_ledger import ReconcileLedger
from .dtos import (
    ReservationDTO,
    SettlementDTO,
    AllocateCreditsCommandDTO,
    AllocateCreditsResponseDTO,
    BalanceResponseDTO,
    LedgerEntryDTO,
    ListLedgerEntriesResponseDTO,
    AccountDiscrepancyDTO,
    ReconciliationResultDTO,
)

__all__ = [
    "CreditLedger",
    "OveragePolicy",
    "usage_key",
    "adjustment_key",
    "AllocateCredits",
    "GetBalance",
    "ListLedgerEntries",
    "ReconcileLedger",
    "ReservationDTO",
    "SettlementDTO",
    "AllocateCreditsCommandDTO",
    "AllocateCreditsResponseDTO",
    "BalanceResponseDTO",
    "LedgerEntryDTO",
    "ListLedgerEntriesResponseDTO",
    "AccountDiscrepancyDTO",
    "ReconciliationResultDTO",
]

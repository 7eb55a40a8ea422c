"""
List Ledger Entries Use Case

Retrieves the credit entry history for an owner with pagination.
"""
from libs.result import Result, Return
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from .dtos import ListLedgerEntriesResponseDTO, LedgerEntryDTO


class ListLedgerEntries:
    """
    Use case: View credit history

    Entries are ordered by created_at DESC (most recent first).
    """

    def __init__(self, entry_repo: LedgerEntryRepository):
        self.entry_repo = entry_repo

    async def execute(
        self, owner_id: str, limit: int = 20, offset: int = 0
    ) -> Result[ListLedgerEntriesResponseDTO]:
        entries, total = await self.entry_repo.list_by_owner(
            owner_id=owner_id,
            limit=limit,
            offset=offset,
        )

        entry_dtos = [
            LedgerEntryDTO(
                id=entry.id,
                amount=entry.amount,
                kind=entry.kind.value if hasattr(entry.kind, "value") else entry.kind,
                feature=entry.feature.value if hasattr(entry.feature, "value") else entry.feature,
                description=entry.description,
                reference_id=entry.reference_id,
                created_at=entry.created_at,
            )
            for entry in entries
        ]

        return Return.ok(
            ListLedgerEntriesResponseDTO(
                entries=entry_dtos,
                total=total,
                limit=limit,
                offset=offset,
            )
        )

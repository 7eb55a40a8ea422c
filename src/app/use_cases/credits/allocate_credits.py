"""AllocateCredits Use Case

Adds purchased or renewed credits to an owner's account.
"""

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.domain.ledger_entry import LedgerEntry
from .credit_ledger import CreditLedger
from .dtos import AllocateCreditsCommandDTO, AllocateCreditsResponseDTO


class AllocateCredits:
    """
    Use Case: Allocate credits to an owner's balance

    Business Rules:
    1. Idempotency: same idempotency_key returns the original entry
    2. Account creation: first credit creates the account
    3. Atomic updates: balance and entry created in a single transaction

    Flow:
    1. Delegate to CreditLedger.credit (idempotency check, lock, entry, balance)
    2. Commit
    3. Re-read the account for balance_after
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ledger: CreditLedger,
        account_repo: CreditAccountRepository,
    ):
        self.uow = uow
        self.ledger = ledger
        self.account_repo = account_repo

    async def execute(self, command: AllocateCreditsCommandDTO) -> Result[AllocateCreditsResponseDTO]:
        try:
            # Step 1: Credit the account (creates it when missing)
            result = await self.ledger.credit(
                owner_id=command.owner_id,
                amount=command.amount,
                kind=command.kind,
                description=command.description,
                feature=command.feature,
                idempotency_key=command.idempotency_key,
                metadata=command.metadata,
            )
            if result.is_err():
                await self.uow.rollback()
                return result

            # Step 2: Commit transaction
            await self.uow.commit()

            # Step 3: Build response
            account = await self.account_repo.get_by_owner_id(command.owner_id)
            return Return.ok(self._to_response_dto(result.value, account.balance))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="ALLOCATE_CREDIT_FAILED",
                    message="Failed to allocate credit",
                    reason=str(e),
                )
            )

    def _to_response_dto(self, entry: LedgerEntry, balance_after: int) -> AllocateCreditsResponseDTO:
        return AllocateCreditsResponseDTO(
            entry_id=entry.id,
            owner_id=entry.owner_id,
            amount=entry.amount,
            kind=entry.kind.value if hasattr(entry.kind, "value") else entry.kind,
            balance_after=balance_after,
            idempotency_key=entry.idempotency_key,
            created_at=entry.created_at,
        )

"""Get Balance Use Case

Retrieves an owner's current credit balance.
"""

from libs.result import Result, Return, Error
from src.app.repositories.credit_account_repository import CreditAccountRepository
from .dtos import BalanceResponseDTO


class GetBalance:
    """
    Get Balance Use Case

    Read-only operation returning balance, reserved credits held by
    in-flight jobs and the available headroom.
    """

    def __init__(self, account_repo: CreditAccountRepository):
        self.account_repo = account_repo

    async def execute(self, owner_id: str) -> Result[BalanceResponseDTO]:
        """
        Execute get balance operation

        Errors:
            ACCOUNT_NOT_FOUND: Owner has no credit account
        """
        account = await self.account_repo.get_by_owner_id(owner_id)

        if not account:
            return Return.err(
                Error(
                    code="ACCOUNT_NOT_FOUND",
                    message=f"No credit account found for owner {owner_id}",
                )
            )

        return Return.ok(
            BalanceResponseDTO(
                owner_id=account.owner_id,
                balance=account.balance,
                reserved=account.reserved,
                available=account.available,
                last_updated=account.updated_at,
            )
        )

"""ReconcileLedger Use Case

Reconciles account balances against the ledger entry history to detect discrepancies.
"""

import logging
import time
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from .dtos import AccountDiscrepancyDTO, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class ReconcileLedger:
    """
    Use Case: Reconcile credit accounts against ledger entries

    Business Rules:
    1. For each account, the signed sum of its entries must equal its balance
    2. Reserved credits are not part of the comparison (holds have no entries)
    3. Read-only: discrepancies are reported and logged, never repaired

    Flow:
    1. Get all accounts
    2. For each account compare balance with the entry sum
    3. Return reconciliation result with all discrepancies
    """

    def __init__(
        self,
        account_repo: CreditAccountRepository,
        entry_repo: LedgerEntryRepository,
    ):
        self.account_repo = account_repo
        self.entry_repo = entry_repo

    async def execute(self) -> Result[ReconciliationResultDTO]:
        start_time = time.time()
        reconciliation_time = datetime.utcnow()

        try:
            logger.info("Starting credit ledger reconciliation")

            # Step 1: Get all accounts
            accounts = await self.account_repo.get_all()
            total_accounts = len(accounts)

            logger.info(f"Found {total_accounts} accounts to reconcile")

            # Step 2: Check each account for discrepancies
            discrepancies: list[AccountDiscrepancyDTO] = []

            for account in accounts:
                entry_sum = await self.entry_repo.get_sum_by_account(account.id)

                if account.balance != entry_sum:
                    discrepancy_amount = account.balance - entry_sum
                    discrepancies.append(
                        AccountDiscrepancyDTO(
                            owner_id=account.owner_id,
                            account_id=account.id,
                            account_balance=account.balance,
                            calculated_balance=entry_sum,
                            discrepancy=discrepancy_amount,
                        )
                    )

                    logger.warning(
                        f"Discrepancy found for owner {account.owner_id} "
                        f"(account_id={account.id}): "
                        f"balance={account.balance}, "
                        f"entry_sum={entry_sum}, "
                        f"discrepancy={discrepancy_amount}"
                    )

            # Step 3: Build response
            execution_time_ms = int((time.time() - start_time) * 1000)

            if discrepancies:
                logger.warning(
                    f"Reconciliation complete. Found {len(discrepancies)} discrepancies "
                    f"out of {total_accounts} accounts in {execution_time_ms}ms"
                )
            else:
                logger.info(
                    f"Reconciliation complete. All {total_accounts} accounts balanced "
                    f"in {execution_time_ms}ms"
                )

            return Return.ok(
                ReconciliationResultDTO(
                    total_accounts_checked=total_accounts,
                    discrepancies_found=len(discrepancies),
                    discrepancies=discrepancies,
                    reconciliation_time=reconciliation_time,
                    execution_time_ms=execution_time_ms,
                )
            )

        except Exception as e:
            logger.error(f"Ledger reconciliation failed: {e}")
            return Return.err(
                Error(
                    code="RECONCILIATION_FAILED",
                    message="Failed to reconcile credit ledger",
                    reason=str(e),
                )
            )

"""Credit Ledger

Reservation and settlement of credits against an owner's account.

The ledger does not commit: every operation runs inside the caller's unit
of work so that, for example, a reservation and the job it pays for are
persisted in the same transaction. Storage errors propagate to the caller,
which rolls back.
"""

import json
import logging
from enum import Enum
from typing import Any, Optional
from libs.result import Result, Return, Error
from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.app.repositories.ledger_entry_repository import LedgerEntryRepository
from src.domain.credit_account import CreditAccount
from src.domain.ledger_entry import LedgerEntry, EntryKind, Feature
from .dtos import ReservationDTO, SettlementDTO

logger = logging.getLogger(__name__)


class OveragePolicy(str, Enum):
    """What settlement does when actual cost exceeds the reservation"""
    DEBIT = "debit"  # charge the full actual amount, as far as the balance covers it
    CAP = "cap"      # charge at most the reserved amount


def usage_key(reference_id: str) -> str:
    return f"usage:{reference_id}"


def adjustment_key(reference_id: str) -> str:
    return f"adjustment:{reference_id}"


class CreditLedger:
    """
    Ledger operations on credit accounts

    Business Rules:
    1. reserve is a single conditional UPDATE (balance - reserved >= amount)
    2. settle releases the hold, debits actual usage (USAGE entry) and credits
       back an unused estimate (ADJUSTMENT entry); a charge never leaves the
       balance below the credits still held by other jobs
    3. settle is idempotent per reference_id via entry idempotency keys
    4. refund_reservation releases a hold without touching the balance
    5. credit adds purchased/renewed credits and creates the account if needed
    """

    def __init__(
        self,
        account_repo: CreditAccountRepository,
        entry_repo: LedgerEntryRepository,
        overage_policy: OveragePolicy = OveragePolicy.DEBIT,
    ):
        self.account_repo = account_repo
        self.entry_repo = entry_repo
        self.overage_policy = OveragePolicy(overage_policy)

    async def reserve(self, owner_id: str, amount: int) -> Result[ReservationDTO]:
        """
        Hold amount credits for an in-flight job

        Returns:
            Result[ReservationDTO], or INSUFFICIENT_CREDITS / ACCOUNT_NOT_FOUND
            errors without side effects
        """
        if amount < 0:
            return Return.err(Error(code="INVALID_AMOUNT", message="Reservation amount must be >= 0"))

        accepted = await self.account_repo.try_reserve(owner_id, amount)
        account = await self.account_repo.get_by_owner_id(owner_id)

        if account is None:
            return Return.err(
                Error(
                    code="ACCOUNT_NOT_FOUND",
                    message=f"Credit account not found for owner {owner_id}",
                    reason="Owner has never purchased credits",
                )
            )

        if not accepted:
            return Return.err(
                Error(
                    code="INSUFFICIENT_CREDITS",
                    message=f"Not enough credits. Need {amount}, have {account.available}",
                    reason=f"balance={account.balance}, reserved={account.reserved}, required={amount}",
                )
            )

        logger.debug(f"Reserved {amount} credits for owner {owner_id} (reserved={account.reserved})")
        return Return.ok(
            ReservationDTO(
                owner_id=owner_id,
                amount=amount,
                balance=account.balance,
                reserved=account.reserved,
                available=account.available,
            )
        )

    async def settle(
        self,
        owner_id: str,
        reserved_amount: int,
        actual_amount: int,
        feature: Optional[Feature],
        description: str,
        reference_id: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Result[SettlementDTO]:
        """
        Close a reservation against the actual cost

        Args:
            owner_id: Account owner
            reserved_amount: Credits held for this reference
            actual_amount: Credits actually consumed
            feature: Feature tag for the entries
            description: USAGE entry description
            reference_id: Job id; makes the settlement idempotent

        Returns:
            Result[SettlementDTO]; already_settled=True when the reference was settled before
        """
        existing = await self.entry_repo.get_by_idempotency_key(usage_key(reference_id))
        if existing:
            adjustment = await self.entry_repo.get_by_idempotency_key(adjustment_key(reference_id))
            return Return.ok(
                SettlementDTO(
                    owner_id=owner_id,
                    reference_id=reference_id,
                    reserved_released=reserved_amount,
                    charged=-existing.amount,
                    adjusted=adjustment.amount if adjustment else 0,
                    usage_entry_id=existing.id,
                    adjustment_entry_id=adjustment.id if adjustment else None,
                    already_settled=True,
                )
            )

        account = await self.account_repo.get_by_owner_id(owner_id, for_update=True)
        if account is None:
            return Return.err(
                Error(
                    code="ACCOUNT_NOT_FOUND",
                    message=f"Credit account not found for owner {owner_id}",
                )
            )

        release = reserved_amount
        if account.reserved < reserved_amount:
            logger.error(
                f"Account {owner_id} holds {account.reserved} reserved credits, "
                f"settlement of {reference_id} expected {reserved_amount}; releasing what is held"
            )
            release = account.reserved

        adjusted = reserved_amount - actual_amount if actual_amount < reserved_amount else 0
        charged = self._charge_for(reserved_amount, actual_amount, reference_id)

        # Other in-flight holds must stay covered by the balance
        bearable = max(account.balance + adjusted - (account.reserved - release), 0)
        if charged > bearable:
            logger.warning(
                f"Charge {charged} for {reference_id} would leave owner {owner_id} unable to cover "
                f"{account.reserved - release} credits held by other jobs; charging {bearable}, "
                f"{charged - bearable} credits uncollectable"
            )
            charged = bearable

        applied = await self.account_repo.apply_settlement(account.id, release, adjusted - charged)
        if not applied:
            return Return.err(
                Error(
                    code="SETTLEMENT_CONFLICT",
                    message=f"Account {owner_id} changed during settlement of {reference_id}",
                )
            )

        meta = json.dumps({"job_id": reference_id, **(metadata or {})})
        usage_entry = await self.entry_repo.create(
            LedgerEntry(
                owner_id=owner_id,
                account_id=account.id,
                amount=-charged,
                kind=EntryKind.USAGE,
                feature=feature,
                description=description,
                metadata_json=meta,
                reference_id=reference_id,
                idempotency_key=usage_key(reference_id),
            )
        )

        adjustment_entry = None
        if adjusted > 0:
            adjustment_entry = await self.entry_repo.create(
                LedgerEntry(
                    owner_id=owner_id,
                    account_id=account.id,
                    amount=adjusted,
                    kind=EntryKind.ADJUSTMENT,
                    feature=feature,
                    description="Credit adjustment for unused estimated credits",
                    metadata_json=meta,
                    reference_id=reference_id,
                    idempotency_key=adjustment_key(reference_id),
                )
            )

        logger.info(
            f"Settled {reference_id} for owner {owner_id}: reserved={reserved_amount}, "
            f"actual={actual_amount}, charged={charged}, adjusted={adjusted}"
        )

        return Return.ok(
            SettlementDTO(
                owner_id=owner_id,
                reference_id=reference_id,
                reserved_released=release,
                charged=charged,
                adjusted=adjusted,
                usage_entry_id=usage_entry.id,
                adjustment_entry_id=adjustment_entry.id if adjustment_entry else None,
            )
        )

    async def refund_reservation(
        self,
        owner_id: str,
        amount: int,
        reason: str,
        reference_id: Optional[str] = None,
    ) -> Result[int]:
        """
        Release a hold with no balance change and no ledger entry

        Returns:
            Result[int] with the released amount
        """
        if amount == 0:
            return Return.ok(0)

        released = await self.account_repo.release_reservation(owner_id, amount)
        if not released:
            account = await self.account_repo.get_by_owner_id(owner_id)
            if account is None:
                return Return.err(
                    Error(code="ACCOUNT_NOT_FOUND", message=f"Credit account not found for owner {owner_id}")
                )
            return Return.err(
                Error(
                    code="RESERVATION_NOT_FOUND",
                    message=f"Owner {owner_id} holds {account.reserved} reserved credits, cannot release {amount}",
                    reason=reason,
                )
            )

        logger.info(f"Released {amount} reserved credits for owner {owner_id} ({reference_id}): {reason}")
        return Return.ok(amount)

    async def credit(
        self,
        owner_id: str,
        amount: int,
        kind: EntryKind,
        description: str,
        feature: Optional[Feature] = None,
        idempotency_key: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Result[LedgerEntry]:
        """
        Add credits (purchase, renewal) and append the matching entry

        Returns:
            Result[LedgerEntry]; the existing entry when idempotency_key was used before
        """
        if amount <= 0:
            return Return.err(Error(code="INVALID_AMOUNT", message="Credit amount must be > 0"))

        if idempotency_key:
            existing = await self.entry_repo.get_by_idempotency_key(idempotency_key)
            if existing:
                return Return.ok(existing)

        account = await self.account_repo.get_by_owner_id(owner_id, for_update=True)
        if account is None:
            account = await self.account_repo.create(CreditAccount(owner_id=owner_id))

        await self.account_repo.add_to_balance(account.id, amount)

        entry = await self.entry_repo.create(
            LedgerEntry(
                owner_id=owner_id,
                account_id=account.id,
                amount=amount,
                kind=kind,
                feature=feature,
                description=description,
                metadata_json=json.dumps(metadata) if metadata else None,
                idempotency_key=idempotency_key,
            )
        )
        return Return.ok(entry)

    def _charge_for(self, reserved_amount: int, actual_amount: int, reference_id: str) -> int:
        if actual_amount <= reserved_amount:
            return actual_amount

        if self.overage_policy == OveragePolicy.CAP:
            logger.warning(
                f"Actual cost {actual_amount} exceeds reservation {reserved_amount} for {reference_id}; "
                f"charging the reserved amount only"
            )
            return reserved_amount

        return actual_amount

"""Unit tests for CreditLedger

Tests cover:
- Reservation (accepted, insufficient, unknown account)
- Settlement entries (USAGE debit, ADJUSTMENT credit-back)
- Settlement idempotency
- Overage policies
- Reservation release
- Credit allocation
"""

import json
import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.credits.credit_ledger import (
    CreditLedger,
    OveragePolicy,
    adjustment_key,
    usage_key,
)
from src.domain.credit_account import CreditAccount
from src.domain.ledger_entry import EntryKind, Feature, LedgerEntry


@pytest.fixture
def mock_account_repo():
    repo = MagicMock()
    repo.try_reserve = AsyncMock(return_value=True)
    repo.release_reservation = AsyncMock(return_value=True)
    repo.apply_settlement = AsyncMock(return_value=True)
    repo.add_to_balance = AsyncMock()
    return repo


@pytest.fixture
def mock_entry_repo():
    repo = MagicMock()
    repo.get_by_idempotency_key = AsyncMock(return_value=None)

    created = []

    async def _create(entry):
        entry.id = len(created) + 1
        created.append(entry)
        return entry

    repo.create = AsyncMock(side_effect=_create)
    repo.created = created
    return repo


@pytest.fixture
def ledger(mock_account_repo, mock_entry_repo):
    return CreditLedger(mock_account_repo, mock_entry_repo)


def make_account(balance: int, reserved: int = 0) -> CreditAccount:
    return CreditAccount(id=1, owner_id="user_123", balance=balance, reserved=reserved)


@pytest.mark.asyncio
class TestReserve:
    """Holding credits for a job"""

    async def test_reserve_accepted(self, ledger, mock_account_repo):
        """
        Given: Account with 10000 credits
        When: Reserving 2640
        Then: Reservation reports the new reserved and available amounts
        """
        mock_account_repo.get_by_owner_id = AsyncMock(return_value=make_account(10000, 2640))

        result = await ledger.reserve("user_123", 2640)

        assert result.is_ok()
        assert result.value.reserved == 2640
        assert result.value.available == 7360
        mock_account_repo.try_reserve.assert_called_once_with("user_123", 2640)

    async def test_reserve_insufficient_credits(self, ledger, mock_account_repo):
        """
        Given: Available credits below the estimate
        When: Reserving
        Then: INSUFFICIENT_CREDITS error
        """
        mock_account_repo.try_reserve = AsyncMock(return_value=False)
        mock_account_repo.get_by_owner_id = AsyncMock(return_value=make_account(500))

        result = await ledger.reserve("user_123", 880)

        assert result.is_err()
        assert result.error.code == "INSUFFICIENT_CREDITS"
        assert "Need 880, have 500" in result.error.message

    async def test_reserve_unknown_owner(self, ledger, mock_account_repo):
        mock_account_repo.try_reserve = AsyncMock(return_value=False)
        mock_account_repo.get_by_owner_id = AsyncMock(return_value=None)

        result = await ledger.reserve("ghost", 880)

        assert result.is_err()
        assert result.error.code == "ACCOUNT_NOT_FOUND"

    async def test_reserve_negative_amount(self, ledger, mock_account_repo):
        result = await ledger.reserve("user_123", -1)

        assert result.is_err()
        assert result.error.code == "INVALID_AMOUNT"
        mock_account_repo.try_reserve.assert_not_called()


@pytest.mark.asyncio
class TestSettle:
    """Closing a reservation against actual usage"""

    async def test_actual_below_reservation_writes_usage_and_adjustment(
        self, ledger, mock_account_repo, mock_entry_repo
    ):
        """
        Given: 2640 reserved, 1200 actually used
        When: Settling
        Then: USAGE -1200 and ADJUSTMENT +1440, hold of 2640 released
        """
        mock_account_repo.get_by_owner_id = AsyncMock(return_value=make_account(10000, 2640))

        result = await ledger.settle(
            owner_id="user_123",
            reserved_amount=2640,
            actual_amount=1200,
            feature=Feature.AUTO_WRITER,
            description="Bulk article generation",
            reference_id="job_1",
        )

        assert result.is_ok()
        assert result.value.charged == 1200
        assert result.value.adjusted == 1440
        assert result.value.reserved_released == 2640

        usage, adjustment = mock_entry_repo.created
        assert usage.kind == EntryKind.USAGE
        assert usage.amount == -1200
        assert usage.idempotency_key == usage_key("job_1")
        assert json.loads(usage.metadata_json)["job_id"] == "job_1"
        assert adjustment.kind == EntryKind.ADJUSTMENT
        assert adjustment.amount == 1440
        assert adjustment.idempotency_key == adjustment_key("job_1")
        assert adjustment.description == "Credit adjustment for unused estimated credits"

        mock_account_repo.apply_settlement.assert_called_once_with(1, 2640, 1440 - 1200)

    async def test_actual_equal_to_reservation_has_no_adjustment(
        self, ledger, mock_account_repo, mock_entry_repo
    ):
        mock_account_repo.get_by_owner_id = AsyncMock(return_value=make_account(5000, 880))

        result = await ledger.settle("user_123", 880, 880, Feature.AI_WRITER, "Article", "job_2")

        assert result.is_ok()
        assert result.value.adjusted == 0
        assert result.value.adjustment_entry_id is None
        assert len(mock_entry_repo.created) == 1
        mock_account_repo.apply_settlement.assert_called_once_with(1, 880, -880)

    async def test_second_settlement_is_a_no_op(self, ledger, mock_account_repo, mock_entry_repo):
        """
        Given: Job already settled (usage entry exists)
        When: Settling again
        Then: Existing outcome returned, no new entries, balances untouched
        """
        usage = LedgerEntry(
            id=7, owner_id="user_123", account_id=1, amount=-1200,
            kind=EntryKind.USAGE, description="Article", idempotency_key=usage_key("job_1"),
        )
        adjustment = LedgerEntry(
            id=8, owner_id="user_123", account_id=1, amount=1440,
            kind=EntryKind.ADJUSTMENT, description="Adjustment", idempotency_key=adjustment_key("job_1"),
        )
        mock_entry_repo.get_by_idempotency_key = AsyncMock(side_effect=[usage, adjustment])

        result = await ledger.settle("user_123", 2640, 1200, Feature.AUTO_WRITER, "Bulk", "job_1")

        assert result.is_ok()
        assert result.value.already_settled is True
        assert result.value.charged == 1200
        assert result.value.adjusted == 1440
        mock_account_repo.apply_settlement.assert_not_called()
        mock_entry_repo.create.assert_not_called()

    async def test_overage_debit_policy_charges_actual(self, mock_account_repo, mock_entry_repo):
        ledger = CreditLedger(mock_account_repo, mock_entry_repo, OveragePolicy.DEBIT)
        mock_account_repo.get_by_owner_id = AsyncMock(return_value=make_account(5000, 880))

        result = await ledger.settle("user_123", 880, 950, Feature.AI_WRITER, "Article", "job_3")

        assert result.value.charged == 950
        assert result.value.adjusted == 0
        mock_account_repo.apply_settlement.assert_called_once_with(1, 880, -950)

    async def test_overage_debit_policy_never_goes_below_zero(self, mock_account_repo, mock_entry_repo):
        ledger = CreditLedger(mock_account_repo, mock_entry_repo, OveragePolicy.DEBIT)
        mock_account_repo.get_by_owner_id = AsyncMock(return_value=make_account(900, 880))

        result = await ledger.settle("user_123", 880, 950, Feature.AI_WRITER, "Article", "job_4")

        assert result.value.charged == 900

    async def test_overage_leaves_other_holds_covered(self, mock_account_repo, mock_entry_repo):
        """
        Given: Balance 1760 with two 880-credit holds
        When: One of them settles an actual cost of 1700
        Then: Only 880 is charged so the other hold stays covered
        """
        ledger = CreditLedger(mock_account_repo, mock_entry_repo, OveragePolicy.DEBIT)
        mock_account_repo.get_by_owner_id = AsyncMock(return_value=make_account(1760, 1760))

        result = await ledger.settle("user_123", 880, 1700, Feature.AI_WRITER, "Article", "job_7")

        assert result.value.charged == 880
        mock_account_repo.apply_settlement.assert_called_once_with(1, 880, -880)

    async def test_overage_cap_policy_charges_reservation(self, mock_account_repo, mock_entry_repo):
        ledger = CreditLedger(mock_account_repo, mock_entry_repo, OveragePolicy.CAP)
        mock_account_repo.get_by_owner_id = AsyncMock(return_value=make_account(5000, 880))

        result = await ledger.settle("user_123", 880, 950, Feature.AI_WRITER, "Article", "job_5")

        assert result.value.charged == 880
        assert mock_entry_repo.created[0].amount == -880

    async def test_conflicting_account_update(self, ledger, mock_account_repo, mock_entry_repo):
        mock_account_repo.get_by_owner_id = AsyncMock(return_value=make_account(5000, 880))
        mock_account_repo.apply_settlement = AsyncMock(return_value=False)

        result = await ledger.settle("user_123", 880, 500, Feature.AI_WRITER, "Article", "job_6")

        assert result.is_err()
        assert result.error.code == "SETTLEMENT_CONFLICT"
        mock_entry_repo.create.assert_not_called()

    async def test_settle_unknown_account(self, ledger, mock_account_repo):
        mock_account_repo.get_by_owner_id = AsyncMock(return_value=None)

        result = await ledger.settle("ghost", 880, 500, Feature.AI_WRITER, "Article", "job_7")

        assert result.is_err()
        assert result.error.code == "ACCOUNT_NOT_FOUND"


@pytest.mark.asyncio
class TestRefundReservation:
    async def test_release(self, ledger, mock_account_repo, mock_entry_repo):
        result = await ledger.refund_reservation("user_123", 1760, "Job cancelled", reference_id="job_1")

        assert result.is_ok()
        assert result.value == 1760
        mock_account_repo.release_reservation.assert_called_once_with("user_123", 1760)
        mock_entry_repo.create.assert_not_called()

    async def test_zero_amount_is_a_no_op(self, ledger, mock_account_repo):
        result = await ledger.refund_reservation("user_123", 0, "Nothing held")

        assert result.value == 0
        mock_account_repo.release_reservation.assert_not_called()

    async def test_release_more_than_held(self, ledger, mock_account_repo):
        mock_account_repo.release_reservation = AsyncMock(return_value=False)
        mock_account_repo.get_by_owner_id = AsyncMock(return_value=make_account(5000, 100))

        result = await ledger.refund_reservation("user_123", 880, "Job failed")

        assert result.is_err()
        assert result.error.code == "RESERVATION_NOT_FOUND"


@pytest.mark.asyncio
class TestCredit:
    async def test_creates_account_on_first_purchase(self, ledger, mock_account_repo, mock_entry_repo):
        mock_account_repo.get_by_owner_id = AsyncMock(return_value=None)
        mock_account_repo.create = AsyncMock(
            side_effect=lambda account: CreditAccount(id=5, owner_id=account.owner_id)
        )

        result = await ledger.credit("user_new", 10000, EntryKind.PURCHASE, "Credit purchase")

        assert result.is_ok()
        assert result.value.amount == 10000
        assert result.value.account_id == 5
        mock_account_repo.add_to_balance.assert_called_once_with(5, 10000)

    async def test_idempotent_credit(self, ledger, mock_account_repo, mock_entry_repo):
        existing = LedgerEntry(
            id=3, owner_id="user_123", account_id=1, amount=500,
            kind=EntryKind.PURCHASE, description="Credit purchase", idempotency_key="order_1",
        )
        mock_entry_repo.get_by_idempotency_key = AsyncMock(return_value=existing)

        result = await ledger.credit("user_123", 500, EntryKind.PURCHASE, "Credit purchase", idempotency_key="order_1")

        assert result.value is existing
        mock_account_repo.add_to_balance.assert_not_called()

    async def test_rejects_non_positive_amount(self, ledger):
        result = await ledger.credit("user_123", 0, EntryKind.PURCHASE, "Nothing")

        assert result.is_err()
        assert result.error.code == "INVALID_AMOUNT"

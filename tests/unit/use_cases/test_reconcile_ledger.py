"""Unit tests for ReconcileLedger

Tests cover:
- Discrepancy detection (balance vs entry sum)
- No discrepancies scenario
- Error handling
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.credits import ReconcileLedger
from src.domain.credit_account import CreditAccount


@pytest.fixture
def mock_account_repo():
    return MagicMock()


@pytest.fixture
def mock_entry_repo():
    return MagicMock()


@pytest.fixture
def reconcile_use_case(mock_account_repo, mock_entry_repo):
    return ReconcileLedger(account_repo=mock_account_repo, entry_repo=mock_entry_repo)


@pytest.mark.asyncio
class TestReconcileLedger:
    async def test_detects_discrepancy_when_balance_differs(
        self, reconcile_use_case, mock_account_repo, mock_entry_repo
    ):
        """
        Given: Account balance differs from entry sum
        When: Reconciliation runs
        Then: Discrepancy is reported
        """
        mock_account_repo.get_all = AsyncMock(
            return_value=[CreditAccount(id=1, owner_id="user_123", balance=10240, reserved=0)]
        )
        mock_entry_repo.get_sum_by_account = AsyncMock(return_value=10000)

        result = await reconcile_use_case.execute()

        assert result.is_ok()
        response = result.value
        assert response.total_accounts_checked == 1
        assert response.discrepancies_found == 1
        discrepancy = response.discrepancies[0]
        assert discrepancy.owner_id == "user_123"
        assert discrepancy.account_balance == 10240
        assert discrepancy.calculated_balance == 10000
        assert discrepancy.discrepancy == 240

    async def test_reserved_credits_are_not_a_discrepancy(
        self, reconcile_use_case, mock_account_repo, mock_entry_repo
    ):
        mock_account_repo.get_all = AsyncMock(
            return_value=[CreditAccount(id=1, owner_id="user_123", balance=10000, reserved=2640)]
        )
        mock_entry_repo.get_sum_by_account = AsyncMock(return_value=10000)

        result = await reconcile_use_case.execute()

        assert result.value.discrepancies_found == 0

    async def test_repository_error(self, reconcile_use_case, mock_account_repo):
        mock_account_repo.get_all = AsyncMock(side_effect=Exception("Database connection failed"))

        result = await reconcile_use_case.execute()

        assert result.is_err()
        assert result.error.code == "RECONCILIATION_FAILED"
        assert "Database connection failed" in result.error.reason

"""Unit tests for CancelJob"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

from libs.result import Return
from src.app.use_cases.generation import CancelJob
from src.domain.generation_job import GenerationJob
from src.domain.job_state import JobKind, JobStatus


def make_job(status: JobStatus) -> GenerationJob:
    return GenerationJob(
        id="job_1",
        owner_id="user_123",
        kind=JobKind.BULK,
        status=status,
        requested_titles=["A", "B", "C"],
        estimated_credits=2640,
    )


@pytest.fixture
def mock_ledger():
    ledger = MagicMock()
    ledger.refund_reservation = AsyncMock(side_effect=lambda owner_id, amount, *a, **kw: Return.ok(amount))
    return ledger


@pytest.fixture
def mock_job_repo():
    repo = MagicMock()
    repo.transition = AsyncMock(return_value=True)
    repo.mark_settled = AsyncMock(return_value=True)
    repo.request_cancel = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def use_case(mock_uow, mock_ledger, mock_job_repo):
    return CancelJob(mock_uow, mock_ledger, mock_job_repo)


@pytest.mark.asyncio
class TestCancelJob:
    async def test_queued_job_is_cancelled_and_refunded(self, use_case, mock_uow, mock_ledger, mock_job_repo):
        """
        Given: QUEUED job with 2640 reserved
        When: Owner cancels
        Then: CANCELLED immediately, 2640 released, job marked settled
        """
        mock_job_repo.get_for_owner = AsyncMock(return_value=make_job(JobStatus.QUEUED))

        result = await use_case.execute("user_123", "job_1")

        assert result.is_ok()
        assert result.value.status == JobStatus.CANCELLED
        assert result.value.refunded_credits == 2640
        mock_ledger.refund_reservation.assert_called_once()
        mock_job_repo.mark_settled.assert_called_once_with("job_1", 0)
        mock_uow.commit.assert_called_once()

    async def test_running_job_gets_cancellation_request(self, use_case, mock_ledger, mock_job_repo):
        mock_job_repo.get_for_owner = AsyncMock(return_value=make_job(JobStatus.RUNNING))

        result = await use_case.execute("user_123", "job_1")

        assert result.is_ok()
        assert result.value.status == JobStatus.RUNNING
        assert result.value.cancellation_pending is True
        assert result.value.refunded_credits == 0
        mock_job_repo.request_cancel.assert_called_once_with("job_1")
        mock_ledger.refund_reservation.assert_not_called()

    async def test_worker_claimed_job_during_cancel(self, use_case, mock_ledger, mock_job_repo):
        """
        Given: Job read as QUEUED but a worker moved it to RUNNING first
        When: Owner cancels
        Then: Falls back to a cancellation request, nothing refunded
        """
        mock_job_repo.get_for_owner = AsyncMock(return_value=make_job(JobStatus.QUEUED))
        mock_job_repo.transition = AsyncMock(return_value=False)
        running = make_job(JobStatus.RUNNING)
        running.cancel_requested_at = datetime.utcnow()
        mock_job_repo.get_by_id = AsyncMock(return_value=running)

        result = await use_case.execute("user_123", "job_1")

        assert result.is_ok()
        assert result.value.cancellation_pending is True
        mock_ledger.refund_reservation.assert_not_called()

    async def test_cancelled_job_is_idempotent(self, use_case, mock_ledger, mock_job_repo):
        mock_job_repo.get_for_owner = AsyncMock(return_value=make_job(JobStatus.CANCELLED))

        result = await use_case.execute("user_123", "job_1")

        assert result.is_ok()
        assert result.value.refunded_credits == 0
        mock_ledger.refund_reservation.assert_not_called()

    @pytest.mark.parametrize("status", [JobStatus.COMPLETED, JobStatus.FAILED])
    async def test_finished_job_cannot_be_cancelled(self, use_case, mock_job_repo, status):
        mock_job_repo.get_for_owner = AsyncMock(return_value=make_job(status))

        result = await use_case.execute("user_123", "job_1")

        assert result.is_err()
        assert result.error.code == "JOB_NOT_CANCELLABLE"

    async def test_unknown_job(self, use_case, mock_job_repo):
        mock_job_repo.get_for_owner = AsyncMock(return_value=None)

        result = await use_case.execute("user_123", "missing")

        assert result.is_err()
        assert result.error.code == "JOB_NOT_FOUND"

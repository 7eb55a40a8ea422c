"""Unit tests for ProcessGenerationJob

Tests cover:
- Bulk job with a failing title still completes with the others
- Cooperative cancellation settles the attempted share
- Single-title failure releases the whole reservation
- Progress never decreases
- Redelivery of a settled job is skipped
- Settlement failure leaves the job for redelivery
"""

import pytest
from datetime import datetime
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

from libs.result import Error, Return
from src.app.services.content_provider import ProviderError
from src.app.use_cases.credits.dtos import SettlementDTO
from src.app.use_cases.generation import ProcessGenerationJob
from src.app.use_cases.generation.article_assembler import AssembledArticle
from src.domain import job_state
from src.domain.generation_job import GenerationJob
from src.domain.job_state import JobKind, JobStatus
from src.domain.ledger_entry import Feature


class FakeJobRepository:
    """Holds one job in memory; cancellation is requested after cancel_after processed titles"""

    def __init__(self, job: GenerationJob, cancel_after: Optional[int] = None):
        self.job = job
        self.cancel_after = cancel_after
        self.progress_history: list[int] = []

    async def get_by_id(self, job_id):
        return self.job if self.job.id == job_id else None

    async def transition(self, job, target, error_message=None):
        if not job_state.can_transition(JobStatus(job.status), target):
            return False
        job_state.transition(job, target, error_message=error_message)
        return True

    async def is_cancel_requested(self, job_id):
        return self.cancel_after is not None and len(self.job.processed_titles) >= self.cancel_after

    async def save(self, job):
        self.progress_history.append(job.progress)
        return job

    async def mark_settled(self, job_id, actual_credits):
        if self.job.settled_at is not None:
            return False
        self.job.settled_at = datetime.utcnow()
        self.job.actual_credits = actual_credits
        return True


class FakeArticleRepository:
    def __init__(self):
        self.articles = []

    async def create(self, article):
        article.id = len(self.articles) + 1
        self.articles.append(article)
        return article

    async def get_by_job_and_title(self, job_id, title):
        return next((a for a in self.articles if a.job_id == job_id and a.title == title), None)

    async def list_by_job(self, job_id):
        return [a for a in self.articles if a.job_id == job_id]


class FakeAssembler:
    """1200-word articles; titles in fail_titles raise ProviderError"""

    def __init__(self, fail_titles=(), word_count: int = 1200):
        self.fail_titles = set(fail_titles)
        self.word_count = word_count
        self.calls: list[str] = []

    async def assemble(self, provider, title, config):
        self.calls.append(title)
        if title in self.fail_titles:
            raise ProviderError("gpt4", "generate_outline", "rate limited")
        return AssembledArticle(title=title, content="text " * self.word_count, word_count=self.word_count)


def make_job(titles, status=JobStatus.QUEUED, kind=JobKind.BULK) -> GenerationJob:
    return GenerationJob(
        id="job_1",
        owner_id="user_123",
        kind=kind,
        status=status,
        requested_titles=list(titles),
        configuration={"length": "short"},
        estimated_credits=880 * len(titles),
    )


def settle_side_effect(owner_id, reserved_amount, actual_amount, feature, description, reference_id, metadata=None):
    return Return.ok(
        SettlementDTO(
            owner_id=owner_id,
            reference_id=reference_id,
            reserved_released=reserved_amount,
            charged=actual_amount,
            adjusted=max(reserved_amount - actual_amount, 0),
        )
    )


@pytest.fixture
def mock_ledger():
    ledger = MagicMock()
    ledger.settle = AsyncMock(side_effect=settle_side_effect)
    ledger.refund_reservation = AsyncMock(side_effect=lambda owner_id, amount, *a, **kw: Return.ok(amount))
    return ledger


@pytest.fixture
def mock_registry():
    registry = MagicMock()
    provider = MagicMock()
    provider.name = "gpt4"
    registry.get = MagicMock(return_value=provider)
    return registry


def build_use_case(mock_uow, mock_ledger, mock_registry, job_repo, assembler, article_repo=None, sleep=None):
    return ProcessGenerationJob(
        uow=mock_uow,
        ledger=mock_ledger,
        job_repo=job_repo,
        article_repo=article_repo or FakeArticleRepository(),
        registry=mock_registry,
        assembler=assembler,
        pacing_seconds=1.0,
        sleep=sleep or AsyncMock(),
    )


@pytest.mark.asyncio
class TestProcessBulkJob:
    async def test_failed_title_does_not_stop_the_job(self, mock_uow, mock_ledger, mock_registry):
        """
        Given: Bulk job of 3 short titles where the second one fails
        When: Processing
        Then: COMPLETED with titles 1 and 3, title 2 reported, whole reservation settled
        """
        job_repo = FakeJobRepository(make_job(["A", "B", "C"]))
        use_case = build_use_case(mock_uow, mock_ledger, mock_registry, job_repo, FakeAssembler(fail_titles={"B"}))

        result = await use_case.execute("job_1")

        assert result.is_ok()
        outcome = result.value
        assert outcome.status == JobStatus.COMPLETED
        assert outcome.completed_titles == ["A", "C"]
        assert [f.title for f in outcome.failed_titles] == ["B"]
        assert "rate limited" in outcome.failed_titles[0].error
        assert outcome.actual_credits == 2400
        assert outcome.refunded_credits == 0

        settle_kwargs = mock_ledger.settle.call_args.kwargs
        assert settle_kwargs["reserved_amount"] == 2640
        assert settle_kwargs["actual_amount"] == 2400
        assert settle_kwargs["feature"] == Feature.AUTO_WRITER
        assert settle_kwargs["reference_id"] == "job_1"
        mock_ledger.refund_reservation.assert_not_called()

        assert job_repo.job.progress == 100
        assert job_repo.job.settled_at is not None
        assert job_repo.job.actual_credits == 2400

    async def test_progress_is_non_decreasing(self, mock_uow, mock_ledger, mock_registry):
        job_repo = FakeJobRepository(make_job(["A", "B", "C", "D"]))
        use_case = build_use_case(mock_uow, mock_ledger, mock_registry, job_repo, FakeAssembler(fail_titles={"C"}))

        await use_case.execute("job_1")

        assert job_repo.progress_history == sorted(job_repo.progress_history)
        assert job_repo.progress_history[-1] == 100

    async def test_titles_are_paced(self, mock_uow, mock_ledger, mock_registry):
        sleep = AsyncMock()
        job_repo = FakeJobRepository(make_job(["A", "B", "C"]))
        use_case = build_use_case(mock_uow, mock_ledger, mock_registry, job_repo, FakeAssembler(), sleep=sleep)

        await use_case.execute("job_1")

        assert sleep.await_count == 2
        sleep.assert_awaited_with(1.0)

    async def test_cancellation_after_first_title(self, mock_uow, mock_ledger, mock_registry):
        """
        Given: Bulk job of 3 short titles (2640 reserved), cancel requested after title 1
        When: Processing
        Then: CANCELLED, 880 share settled against actual usage, 1760 released
        """
        job_repo = FakeJobRepository(make_job(["A", "B", "C"]), cancel_after=1)
        assembler = FakeAssembler()
        use_case = build_use_case(mock_uow, mock_ledger, mock_registry, job_repo, assembler)

        result = await use_case.execute("job_1")

        assert result.is_ok()
        assert result.value.status == JobStatus.CANCELLED
        assert result.value.completed_titles == ["A"]
        assert result.value.refunded_credits == 1760
        assert assembler.calls == ["A"]

        settle_kwargs = mock_ledger.settle.call_args.kwargs
        assert settle_kwargs["reserved_amount"] == 880
        assert settle_kwargs["actual_amount"] == 1200
        mock_ledger.refund_reservation.assert_called_once()
        assert mock_ledger.refund_reservation.call_args[0][:2] == ("user_123", 1760)

    async def test_all_titles_failed(self, mock_uow, mock_ledger, mock_registry):
        job_repo = FakeJobRepository(make_job(["A", "B"]))
        use_case = build_use_case(mock_uow, mock_ledger, mock_registry, job_repo, FakeAssembler(fail_titles={"A", "B"}))

        result = await use_case.execute("job_1")

        assert result.value.status == JobStatus.FAILED
        assert job_repo.job.error_message == "All 2 titles failed"
        mock_ledger.settle.assert_not_called()
        assert mock_ledger.refund_reservation.call_args[0][:2] == ("user_123", 1760)


@pytest.mark.asyncio
class TestProcessSingleJob:
    async def test_single_failure_releases_reservation(self, mock_uow, mock_ledger, mock_registry):
        """
        Given: Single job whose provider fails
        When: Processing
        Then: FAILED with the provider error, 880 released, nothing charged
        """
        job_repo = FakeJobRepository(make_job(["A"], kind=JobKind.SINGLE))
        use_case = build_use_case(mock_uow, mock_ledger, mock_registry, job_repo, FakeAssembler(fail_titles={"A"}))

        result = await use_case.execute("job_1")

        assert result.is_ok()
        assert result.value.status == JobStatus.FAILED
        assert result.value.refunded_credits == 880
        assert "rate limited" in job_repo.job.error_message
        mock_ledger.settle.assert_not_called()
        assert job_repo.job.actual_credits == 0

    async def test_single_success_uses_ai_writer_feature(self, mock_uow, mock_ledger, mock_registry):
        job_repo = FakeJobRepository(make_job(["A"], kind=JobKind.SINGLE))
        use_case = build_use_case(mock_uow, mock_ledger, mock_registry, job_repo, FakeAssembler(word_count=500))

        result = await use_case.execute("job_1")

        assert result.value.status == JobStatus.COMPLETED
        assert mock_ledger.settle.call_args.kwargs["feature"] == Feature.AI_WRITER
        assert mock_ledger.settle.call_args.kwargs["actual_amount"] == 500


@pytest.mark.asyncio
class TestRedelivery:
    async def test_settled_job_is_skipped(self, mock_uow, mock_ledger, mock_registry):
        job = make_job(["A"], status=JobStatus.COMPLETED)
        job.completed_titles = ["A"]
        job.settled_at = datetime.utcnow()
        use_case = build_use_case(mock_uow, mock_ledger, mock_registry, FakeJobRepository(job), FakeAssembler())

        result = await use_case.execute("job_1")

        assert result.is_ok()
        assert result.value.skipped is True
        mock_ledger.settle.assert_not_called()
        mock_ledger.refund_reservation.assert_not_called()

    async def test_terminal_unsettled_job_is_settled(self, mock_uow, mock_ledger, mock_registry):
        job = make_job(["A"], status=JobStatus.FAILED)
        job.failed_titles = [{"title": "A", "error": "boom"}]
        job_repo = FakeJobRepository(job)
        use_case = build_use_case(mock_uow, mock_ledger, mock_registry, job_repo, FakeAssembler())

        result = await use_case.execute("job_1")

        assert result.is_ok()
        assert result.value.refunded_credits == 880
        assert job_repo.job.settled_at is not None

    async def test_resumes_running_job_without_repeating_titles(self, mock_uow, mock_ledger, mock_registry):
        job = make_job(["A", "B"], status=JobStatus.RUNNING)
        job.completed_titles = ["A"]
        job.progress = 50
        assembler = FakeAssembler()
        articles = FakeArticleRepository()
        use_case = build_use_case(
            mock_uow, mock_ledger, mock_registry, FakeJobRepository(job), assembler, article_repo=articles
        )

        result = await use_case.execute("job_1")

        assert result.value.status == JobStatus.COMPLETED
        assert assembler.calls == ["B"]

    async def test_unknown_job(self, mock_uow, mock_ledger, mock_registry):
        use_case = build_use_case(
            mock_uow, mock_ledger, mock_registry, FakeJobRepository(make_job(["A"])), FakeAssembler()
        )

        result = await use_case.execute("other")

        assert result.is_err()
        assert result.error.code == "JOB_NOT_FOUND"


@pytest.mark.asyncio
class TestSettlementFailure:
    async def test_ledger_error_rolls_back(self, mock_uow, mock_ledger, mock_registry):
        mock_ledger.settle = AsyncMock(
            return_value=Return.err(Error(code="SETTLEMENT_CONFLICT", message="Account changed"))
        )
        job_repo = FakeJobRepository(make_job(["A"]))
        use_case = build_use_case(mock_uow, mock_ledger, mock_registry, job_repo, FakeAssembler())

        result = await use_case.execute("job_1")

        assert result.is_err()
        assert result.error.code == "SETTLEMENT_FAILED"
        mock_uow.rollback.assert_called()
        assert job_repo.job.settled_at is None


@pytest.mark.asyncio
class TestFail:
    async def test_gives_up_on_running_job(self, mock_uow, mock_ledger, mock_registry):
        job = make_job(["A", "B"], status=JobStatus.RUNNING)
        job_repo = FakeJobRepository(job)
        use_case = build_use_case(mock_uow, mock_ledger, mock_registry, job_repo, FakeAssembler())

        result = await use_case.fail("job_1", "Processing failed after 3 attempts")

        assert result.is_ok()
        assert result.value.status == JobStatus.FAILED
        assert job_repo.job.error_message == "Processing failed after 3 attempts"
        assert result.value.refunded_credits == 1760

"""Generation Worker Pool

Consumes generation jobs from the message queue and runs them with
ProcessGenerationJob. Each consumer processes one job at a time, so the
pool size bounds how many jobs run concurrently.

Run as a standalone process:
    python -m src.worker.generation_worker --concurrency 5
"""

import asyncio
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories import (
    SqlAlchemyCreditAccountRepository,
    SqlAlchemyLedgerEntryRepository,
    SqlAlchemyGenerationJobRepository,
    SqlAlchemyArticleRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.image_service import ImageService
from src.app.services.message_queue import MessageQueue, QueueMessage, QueueUnavailableError
from src.app.services.provider_registry import ProviderRegistry
from src.app.use_cases.credits.credit_ledger import CreditLedger, OveragePolicy
from src.app.use_cases.generation import ArticleAssembler, ProcessGenerationJob

logger = logging.getLogger(__name__)

QUEUE_RETRY_DELAY_SECONDS = 5


class GenerationWorkerPool:
    """
    Pool of queue consumers for generation jobs

    Message handling:
    - job processed, or job no longer exists: ack
    - infrastructure failure: nack (redelivered) until max_attempts
    - max_attempts exhausted: the job is failed, its reservation settled, then ack

    Usage:
        pool = GenerationWorkerPool(queue, registry)
        await pool.run_once()        # handle at most one message
        await pool.run_forever()     # until stop() is called
    """

    def __init__(
        self,
        queue: MessageQueue,
        registry: ProviderRegistry,
        image_service: Optional[ImageService] = None,
        session_factory: Optional[sessionmaker] = None,
        db_uri: Optional[str] = None,
        concurrency: Optional[int] = None,
        pacing_seconds: Optional[float] = None,
        max_attempts: Optional[int] = None,
        poll_timeout: Optional[float] = None,
        overage_policy: Optional[str] = None,
    ):
        self.queue = queue
        self.registry = registry
        self.image_service = image_service
        self.concurrency = concurrency or ApplicationConfig.WORKER_CONCURRENCY
        self.pacing_seconds = (
            ApplicationConfig.TITLE_PACING_SECONDS if pacing_seconds is None else pacing_seconds
        )
        self.max_attempts = max_attempts or ApplicationConfig.MAX_DELIVERY_ATTEMPTS
        self.poll_timeout = poll_timeout or float(ApplicationConfig.QUEUE_POLL_TIMEOUT_SECONDS)
        self.overage_policy = OveragePolicy(overage_policy or ApplicationConfig.SETTLEMENT_OVERAGE_POLICY)
        self.engine = None

        if session_factory is None:
            self.engine = create_async_engine(db_uri or ApplicationConfig.DB_URI, echo=False, future=True)
            session_factory = sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            )
        self.async_session_factory = session_factory

        self._running = False

        logger.info(
            f"GenerationWorkerPool initialized: concurrency={self.concurrency}, "
            f"max_attempts={self.max_attempts}, pacing={self.pacing_seconds}s"
        )

    def _build_use_case(self, session: AsyncSession) -> ProcessGenerationJob:
        return ProcessGenerationJob(
            uow=SqlAlchemyUnitOfWork(session),
            ledger=CreditLedger(
                SqlAlchemyCreditAccountRepository(session),
                SqlAlchemyLedgerEntryRepository(session),
                overage_policy=self.overage_policy,
            ),
            job_repo=SqlAlchemyGenerationJobRepository(session),
            article_repo=SqlAlchemyArticleRepository(session),
            registry=self.registry,
            assembler=ArticleAssembler(self.image_service),
            pacing_seconds=self.pacing_seconds,
        )

    async def handle(self, message: QueueMessage) -> None:
        """Process one delivered message and ack or nack it"""
        logger.info(f"Processing job {message.job_id} (attempt {message.attempt})")

        async with self.async_session_factory() as session:
            use_case = self._build_use_case(session)
            result = await use_case.execute(message.job_id)

            if result.is_ok():
                await self.queue.ack(message)
                return

            if result.error.code == "JOB_NOT_FOUND":
                logger.warning(f"Job {message.job_id} not found, dropping message")
                await self.queue.ack(message)
                return

            if message.attempt < self.max_attempts:
                logger.warning(
                    f"Job {message.job_id} attempt {message.attempt} failed "
                    f"({result.error.code}: {result.error.reason}), requeueing"
                )
                await self.queue.nack(message)
                return

            logger.error(f"Job {message.job_id} failed after {message.attempt} attempts, giving up")
            failed = await use_case.fail(
                message.job_id, f"Processing failed after {message.attempt} attempts: {result.error.message}"
            )
            if failed.is_err():
                logger.error(f"Could not mark job {message.job_id} as failed: {failed.error.reason}")
            await self.queue.ack(message)

    async def run_once(self) -> bool:
        """Handle at most one message; returns True if a message was processed"""
        message = await self.queue.dequeue(timeout=self.poll_timeout)
        if message is None:
            return False
        await self.handle(message)
        return True

    async def _consume(self, consumer_no: int):
        logger.debug(f"Consumer {consumer_no} started")
        while self._running:
            try:
                await self.run_once()
            except QueueUnavailableError as e:
                logger.error(f"Consumer {consumer_no}: queue unavailable: {e}")
                await asyncio.sleep(QUEUE_RETRY_DELAY_SECONDS)
            except Exception as e:
                logger.error(f"Consumer {consumer_no}: unexpected error: {e}")
        logger.debug(f"Consumer {consumer_no} stopped")

    async def run_forever(self):
        logger.info(f"Starting {self.concurrency} generation consumer(s)")
        self._running = True

        recover = getattr(self.queue, "recover_in_flight", None)
        if recover is not None:
            await recover()

        await asyncio.gather(*(self._consume(i) for i in range(self.concurrency)))

    def stop(self):
        """Consumers exit after their current message or poll timeout"""
        self._running = False

    async def shutdown(self):
        self.stop()
        await self.queue.close()
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("GenerationWorkerPool shutdown complete")


async def main():
    """
    Usage:
        python -m src.worker.generation_worker
        python -m src.worker.generation_worker --concurrency 10
        python -m src.worker.generation_worker --once
    """
    import argparse
    from src.depends import build_image_service, build_message_queue, get_provider_registry

    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Article Generation Worker")
    parser.add_argument("--once", action="store_true", help="Handle one message and exit")
    parser.add_argument(
        "--concurrency", type=int, default=ApplicationConfig.WORKER_CONCURRENCY,
        help="Number of concurrent consumers"
    )
    args = parser.parse_args()

    pool = GenerationWorkerPool(
        queue=build_message_queue(),
        registry=get_provider_registry(),
        image_service=build_image_service(),
        concurrency=args.concurrency,
    )

    try:
        if args.once:
            processed = await pool.run_once()
            print(f"Processed message: {processed}")
        else:
            await pool.run_forever()
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await pool.shutdown()


if __name__ == "__main__":
    asyncio.run(main())

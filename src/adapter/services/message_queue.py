"""Message Queue Implementations

RedisMessageQueue: reliable list queue (LPUSH + BLMOVE into a processing list).
InMemoryMessageQueue: asyncio.Queue, for tests and single-process development.
"""

import asyncio
import json
import logging
from typing import Any, Optional
from redis import asyncio as aioredis
from redis.exceptions import RedisError
from src.app.services.message_queue import MessageQueue, QueueMessage, QueueUnavailableError

logger = logging.getLogger(__name__)


def _encode(job_id: str, payload: dict[str, Any], attempt: int) -> str:
    return json.dumps({"job_id": job_id, "payload": payload, "attempt": attempt})


class RedisMessageQueue(MessageQueue):
    """
    Redis list queue with a processing list

    Messages are moved atomically from the queue to the processing list on
    dequeue and removed from it on ack. Messages left in the processing
    list by a crashed worker are put back by recover_in_flight(), which
    assumes a single consuming process per queue name.
    """

    def __init__(self, redis_url: str, queue_name: str = "generation_jobs"):
        self.redis = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=10,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        self.queue_name = queue_name
        self.processing_name = f"{queue_name}:processing"

    async def enqueue(self, job_id: str, payload: dict[str, Any]) -> None:
        try:
            await self.redis.lpush(self.queue_name, _encode(job_id, payload, 1))
        except RedisError as e:
            raise QueueUnavailableError(f"Failed to enqueue job {job_id}: {e}") from e
        logger.debug(f"Enqueued job {job_id} on {self.queue_name}")

    async def dequeue(self, timeout: float = 5.0) -> Optional[QueueMessage]:
        try:
            raw = await self.redis.blmove(self.queue_name, self.processing_name, timeout, "RIGHT", "LEFT")
        except RedisError as e:
            raise QueueUnavailableError(f"Failed to dequeue from {self.queue_name}: {e}") from e
        if raw is None:
            return None

        try:
            data = json.loads(raw)
            return QueueMessage(
                job_id=data["job_id"],
                payload=data.get("payload") or {},
                attempt=int(data.get("attempt", 1)),
                raw=raw,
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Dropping malformed message from {self.queue_name}: {raw!r} ({e})")
            await self.redis.lrem(self.processing_name, 1, raw)
            return None

    async def ack(self, message: QueueMessage) -> None:
        await self.redis.lrem(self.processing_name, 1, message.raw)

    async def nack(self, message: QueueMessage) -> None:
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.lrem(self.processing_name, 1, message.raw)
            pipe.lpush(self.queue_name, _encode(message.job_id, message.payload, message.attempt + 1))
            await pipe.execute()

    async def recover_in_flight(self) -> int:
        """Requeue messages a previous consumer took but never acked"""
        recovered = 0
        while await self.redis.lmove(self.processing_name, self.queue_name, "RIGHT", "RIGHT"):
            recovered += 1
        if recovered:
            logger.warning(f"Requeued {recovered} in-flight message(s) on {self.queue_name}")
        return recovered

    async def close(self) -> None:
        await self.redis.aclose()


class InMemoryMessageQueue(MessageQueue):
    """Process-local queue with the same at-least-once semantics"""

    def __init__(self):
        self._queue: asyncio.Queue[QueueMessage] = asyncio.Queue()
        self.in_flight: dict[int, QueueMessage] = {}
        self.acked: list[str] = []

    async def enqueue(self, job_id: str, payload: dict[str, Any]) -> None:
        await self._queue.put(QueueMessage(job_id=job_id, payload=dict(payload)))

    async def dequeue(self, timeout: float = 5.0) -> Optional[QueueMessage]:
        try:
            message = await asyncio.wait_for(self._queue.get(), timeout)
        except asyncio.TimeoutError:
            return None
        self.in_flight[id(message)] = message
        return message

    async def ack(self, message: QueueMessage) -> None:
        self.in_flight.pop(id(message), None)
        self.acked.append(message.job_id)

    async def nack(self, message: QueueMessage) -> None:
        self.in_flight.pop(id(message), None)
        await self._queue.put(
            QueueMessage(job_id=message.job_id, payload=message.payload, attempt=message.attempt + 1)
        )

    def qsize(self) -> int:
        return self._queue.qsize()

"""Message Queue Interface

Consumption contract of the durable job queue. Delivery is at-least-once:
a message that is not acked (worker crash, nack) is delivered again, so
consumers must be safe to re-run.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


class QueueUnavailableError(Exception):
    """Raised when the queue backend cannot be reached"""


@dataclass
class QueueMessage:
    """One delivered message"""

    job_id: str
    payload: dict[str, Any] = field(default_factory=dict)
    attempt: int = 1
    raw: Any = None


class MessageQueue(ABC):
    """Durable queue used by the orchestrator (producer) and worker pool (consumers)"""

    @abstractmethod
    async def enqueue(self, job_id: str, payload: dict[str, Any]) -> None:
        """
        Publish a job for processing

        Raises:
            QueueUnavailableError: If the message could not be stored
        """
        pass

    @abstractmethod
    async def dequeue(self, timeout: float = 5.0) -> Optional[QueueMessage]:
        """Wait up to timeout seconds for the next message (None on timeout)"""
        pass

    @abstractmethod
    async def ack(self, message: QueueMessage) -> None:
        """Confirm processing; the message will not be delivered again"""
        pass

    @abstractmethod
    async def nack(self, message: QueueMessage) -> None:
        """Return the message to the queue for another delivery attempt"""
        pass

    async def close(self) -> None:
        pass

"""Generation job state machine

QUEUED -> RUNNING -> {COMPLETED, FAILED}
QUEUED | RUNNING -> CANCELLED
QUEUED -> FAILED

A job fails straight from QUEUED when it never reached a worker (enqueueing
failed at submission) or when its stored configuration no longer validates;
in both cases no title was attempted and the whole reservation is released.

Every status change goes through ``transition`` so that illegal edges are
rejected instead of silently overwriting fields.
"""

from datetime import datetime
from enum import Enum
from typing import Optional


class JobStatus(str, Enum):
    """Generation job status"""
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


class JobKind(str, Enum):
    SINGLE = "single"
    BULK = "bulk"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED})

ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.QUEUED: frozenset({JobStatus.RUNNING, JobStatus.CANCELLED, JobStatus.FAILED}),
    JobStatus.RUNNING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
    JobStatus.CANCELLED: frozenset(),
}


class InvalidTransitionError(Exception):
    """Raised when a status change is not an edge of the state machine"""

    def __init__(self, current: JobStatus, target: JobStatus):
        self.current = current
        self.target = target
        super().__init__(f"Illegal job transition {current.value} -> {target.value}")


def can_transition(current: JobStatus, target: JobStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def sources_for(target: JobStatus) -> list[JobStatus]:
    """Statuses from which ``target`` can be reached (used for compare-and-set updates)"""
    return [status for status, targets in ALLOWED_TRANSITIONS.items() if target in targets]


def transition(job, target: JobStatus, now: Optional[datetime] = None, error_message: Optional[str] = None):
    """
    Move ``job`` to ``target``, stamping timestamps

    Args:
        job: GenerationJob (or any object with status/started_at/completed_at)
        target: Desired status
        now: Timestamp to stamp (defaults to utcnow)
        error_message: Stored on the job for FAILED transitions

    Returns:
        The mutated job

    Raises:
        InvalidTransitionError: If the edge is not allowed
    """
    current = JobStatus(job.status)
    if not can_transition(current, target):
        raise InvalidTransitionError(current, target)

    now = now or datetime.utcnow()
    job.status = target
    if target == JobStatus.RUNNING and job.started_at is None:
        job.started_at = now
    if target.is_terminal:
        job.completed_at = now
    if error_message is not None:
        job.error_message = error_message
    job.updated_at = now
    return job

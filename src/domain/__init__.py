from .base import BaseModel, generate_uuid
from .credit_account import CreditAccount
from .ledger_entry import LedgerEntry, EntryKind, Feature
from .generation_job import GenerationJob
from .job_state import JobStatus, JobKind, InvalidTransitionError
from .article import Article, ArticleStatus
from .generation_config import GenerationConfig, ArticleLength, PointOfView

__all__ = [
    "BaseModel",
    "generate_uuid",
    "CreditAccount",
    "LedgerEntry",
    "EntryKind",
    "Feature",
    "GenerationJob",
    "JobStatus",
    "JobKind",
    "InvalidTransitionError",
    "Article",
    "ArticleStatus",
    "GenerationConfig",
    "ArticleLength",
    "PointOfView",
]

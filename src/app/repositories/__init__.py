from .credit_account_repository import CreditAccountRepository
from .ledger_entry_repository import LedgerEntryRepository
from .generation_job_repository import GenerationJobRepository
from .article_repository import ArticleRepository

__all__ = [
    "CreditAccountRepository",
    "LedgerEntryRepository",
    "GenerationJobRepository",
    "ArticleRepository",
]

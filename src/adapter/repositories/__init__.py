from .credit_account_repository import SqlAlchemyCreditAccountRepository
from .ledger_entry_repository import SqlAlchemyLedgerEntryRepository
from .generation_job_repository import SqlAlchemyGenerationJobRepository
from .article_repository import SqlAlchemyArticleRepository

__all__ = [
    "SqlAlchemyCreditAccountRepository",
    "SqlAlchemyLedgerEntryRepository",
    "SqlAlchemyGenerationJobRepository",
    "SqlAlchemyArticleRepository",
]

"""Article Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional
from src.domain.article import Article


class ArticleRepository(ABC):
    """Repository interface for Article persistence"""

    @abstractmethod
    async def create(self, article: Article) -> Article:
        pass

    @abstractmethod
    async def get_by_job_and_title(self, job_id: str, title: str) -> Optional[Article]:
        """Lookup used to skip titles that already produced an article on redelivery"""
        pass

    @abstractmethod
    async def list_by_job(self, job_id: str) -> list[Article]:
        pass

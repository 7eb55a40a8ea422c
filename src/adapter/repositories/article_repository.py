"""SQLAlchemy implementation of ArticleRepository"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.article_repository import ArticleRepository
from src.domain.article import Article


class SqlAlchemyArticleRepository(ArticleRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, article: Article) -> Article:
        """
        Raises:
            IntegrityError: If the job already produced an article for this title
        """
        self.session.add(article)
        await self.session.flush()
        await self.session.refresh(article)
        return article

    async def get_by_job_and_title(self, job_id: str, title: str) -> Optional[Article]:
        stmt = select(Article).where(Article.job_id == job_id, Article.title == title)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_job(self, job_id: str) -> list[Article]:
        stmt = select(Article).where(Article.job_id == job_id).order_by(Article.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

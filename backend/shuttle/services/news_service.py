"""
Announcement shown on the rider home screen. One current text; saving
overwrites it. If the database is unreachable the text is kept in the
in-process fallback store and served from there until the database answers
again.
"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.core.config import get_settings
from shuttle.core.logging import get_logger
from shuttle.core.metrics import record_store_failure
from shuttle.models.news import News
from shuttle.services.local_store import local_settings

logger = get_logger(__name__)

NEWS_KEY = "news"


async def get_news(db: AsyncSession) -> str:
    try:
        result = await db.execute(select(News).order_by(News.updated_at.desc(), News.id.desc()).limit(1))
        news = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error("store_read_failed", operation="get_news", error=str(e))
        record_store_failure("get_news")
        await db.rollback()
        return local_settings.get(NEWS_KEY) or get_settings().DEFAULT_NEWS

    if news is None:
        return get_settings().DEFAULT_NEWS
    return news.content


async def save_news(db: AsyncSession, content: str) -> bool:
    try:
        result = await db.execute(select(News).limit(1))
        news = result.scalar_one_or_none()
        if news is None:
            db.add(News(content=content))
        else:
            news.content = content
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("store_write_failed", operation="save_news", error=str(e))
        record_store_failure("save_news")
        await db.rollback()
        local_settings.set(NEWS_KEY, content)
        return False

    logger.info("news_saved", length=len(content))
    return True

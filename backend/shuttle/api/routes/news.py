from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.api.deps import require
from shuttle.core.context import SessionContext
from shuttle.core.exceptions import PersistenceFailure
from shuttle.db.session import get_db
from shuttle.schemas.news import NewsOut, NewsUpdate
from shuttle.services.news_service import get_news, save_news

router = APIRouter(prefix="/news", tags=["News"])


@router.get("", response_model=NewsOut)
async def read_news(
    _: SessionContext = Depends(require("view_news")),
    db: AsyncSession = Depends(get_db),
):
    return NewsOut(content=await get_news(db))


@router.put("", response_model=NewsOut)
async def update_news(
    data: NewsUpdate,
    _: SessionContext = Depends(require("edit_news")),
    db: AsyncSession = Depends(get_db),
):
    if not await save_news(db, data.content):
        raise PersistenceFailure("Announcement kept locally; storage is unavailable")
    return NewsOut(content=data.content)

from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from conduit.database import get_db
from conduit.models import Article, Comment, Tag, User, favorites
from conduit.schemas import MetricsResponse

router = APIRouter(prefix="/api/metrics", tags=["metrics"])

@router.get("", response_model=MetricsResponse)
async def get_metrics(db: AsyncSession = Depends(get_db)):

    total_users = (await db.execute(select(func.count()).select_from(User))).scalar_one()

    total_articles = (await db.execute(select(func.count()).select_from(Article))).scalar_one()

    total_comments = (await db.execute(select(func.count()).select_from(Comment))).scalar_one()

    total_tags = (await db.execute(select(func.count()).select_from(Tag))).scalar_one()

    total_favorites = (await db.execute(select(func.count()).select_from(favorites))).scalar_one()

    avg_favorites = total_favorites / total_articles if total_articles > 0 else 0

    return MetricsResponse(
        total_users=total_users,
        total_articles=total_articles,
        total_comments=total_comments,
        total_tags=total_tags,
        total_favorites=total_favorites,
        avg_favorites_per_article=round(avg_favorites, 2),
    )

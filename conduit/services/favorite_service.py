"""
Favorite service — the User <-> Article favorites ledger.

``articles.favorites_count`` is a cached copy of the number of
``favorites`` rows for the article.  Both toggles change the membership
row and the counter in the same unit of work, and the counter moves
through a SQL expression (``favorites_count + 1``) so concurrent favorites
from different users never lose an update.  A racing duplicate favorite
from the same user trips the composite primary key on ``favorites`` and
its whole unit is rolled back, counter included.
"""
import logging

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.models import Article, favorites
from conduit.services import article_service, user_service
from conduit.services.projection import render_article

logger = logging.getLogger(__name__)


async def _is_favorited(db: AsyncSession, user_id: int, article_id: int) -> bool:
    q = select(favorites.c.article_id).where(
        favorites.c.user_id == user_id,
        favorites.c.article_id == article_id,
    )
    return (await db.execute(q)).first() is not None


async def _bump_counter(db: AsyncSession, article: Article, delta: int) -> None:
    await db.execute(
        update(Article)
        .where(Article.id == article.id)
        # Pinning updated_at keeps its onupdate from firing: a favorite is not an edit.
        .values(
            favorites_count=Article.favorites_count + delta,
            updated_at=Article.updated_at,
        )
        .execution_options(synchronize_session=False)
    )
    await db.refresh(article, ["favorites_count"])


async def favorite(db: AsyncSession, user_id: int, slug: str) -> dict:
    """
    Mark the article identified by *slug* as favorited by *user_id*.

    Idempotent: an existing favorite leaves both the membership and the
    counter untouched.
    """
    await user_service.require_user(db, user_id)
    article = await article_service.require_article(db, slug)

    if not await _is_favorited(db, user_id, article.id):
        await db.execute(insert(favorites).values(user_id=user_id, article_id=article.id))
        await _bump_counter(db, article, 1)
        logger.info("User id=%d favorited %r", user_id, slug)

    return {"article": await render_article(db, user_id, article)}


async def unfavorite(db: AsyncSession, user_id: int, slug: str) -> dict:
    """
    Remove *user_id*'s favorite from the article identified by *slug*.

    Idempotent: the counter only moves when a membership row was actually
    deleted.
    """
    await user_service.require_user(db, user_id)
    article = await article_service.require_article(db, slug)

    result = await db.execute(
        delete(favorites).where(
            favorites.c.user_id == user_id,
            favorites.c.article_id == article.id,
        )
    )
    if result.rowcount:
        await _bump_counter(db, article, -1)
        logger.info("User id=%d unfavorited %r", user_id, slug)

    return {"article": await render_article(db, user_id, article)}

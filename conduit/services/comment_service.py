"""
Comment service — comments attached to a single article.

Deleting a comment is scoped by article: the DELETE matches on both the
comment id and the article id, so an id that belongs to another article
(or to nothing) is a silent no-op and never touches someone else's
comment.
"""
import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from conduit.models import Comment
from conduit.schemas import CommentCreate
from conduit.services import article_service, user_service
from conduit.services.projection import render_article, render_comments

logger = logging.getLogger(__name__)


async def add_comment(
    db: AsyncSession,
    author_id: int,
    slug: str,
    data: CommentCreate,
) -> dict:
    """
    Attach a new comment by *author_id* to the article identified by *slug*.

    Returns the serialised comment together with the article projection,
    rendered for the comment author.
    """
    article = await article_service.require_article(db, slug)
    author = await user_service.require_user(db, author_id)

    comment = Comment(body=data.body, article_id=article.id, author=author)
    db.add(comment)
    await db.flush()

    logger.info("User id=%d commented on %r (comment id=%d)", author_id, slug, comment.id)
    return {
        "comment": (await render_comments(db, author_id, [comment]))[0],
        "article": await render_article(db, author_id, article),
    }


async def delete_comment(
    db: AsyncSession,
    user_id: int,
    slug: str,
    comment_id: int,
) -> dict:
    article = await article_service.require_article(db, slug)
    await user_service.require_user(db, user_id)

    result = await db.execute(
        delete(Comment).where(
            Comment.id == comment_id,
            Comment.article_id == article.id,
        )
    )
    if result.rowcount:
        logger.info("Removed comment id=%d from %r", comment_id, slug)
    else:
        logger.debug("Comment id=%d is not attached to %r; nothing to remove", comment_id, slug)

    return {"article": await render_article(db, user_id, article)}


async def list_comments(db: AsyncSession, slug: str, viewer_id: int | None = None) -> dict:
    """Return every comment attached to *slug* in insertion order."""
    article = await article_service.require_article(db, slug)
    if viewer_id is not None:
        await user_service.require_user(db, viewer_id)

    q = (
        select(Comment)
        .where(Comment.article_id == article.id)
        .options(joinedload(Comment.author))
        .order_by(Comment.id)
    )
    comments = (await db.execute(q)).unique().scalars().all()
    return {"comments": await render_comments(db, viewer_id, comments)}

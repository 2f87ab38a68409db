"""
Tag service — the global, deduplicated tag catalog.

The catalog is independent of the articles: each article keeps its own
``tag_list`` snapshot, and catalog rows are only ever listed, never joined
back for rendering.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.models import Tag

logger = logging.getLogger(__name__)


async def ensure_tag(db: AsyncSession, text: str) -> Tag:
    """
    Return the catalog entry whose text equals *text* exactly, creating it
    when absent.

    The new row is flushed immediately, so a second call with the same
    text in the same unit of work finds it instead of inserting a
    duplicate.  The unique constraint on ``tags.tag`` covers concurrent
    units.
    """
    result = await db.execute(select(Tag).where(Tag.tag == text))
    tag = result.scalar_one_or_none()
    if tag is None:
        tag = Tag(tag=text)
        db.add(tag)
        await db.flush()
        logger.debug("Registered tag %r", text)
    return tag


async def list_tags(db: AsyncSession) -> dict:
    result = await db.execute(select(Tag.tag).order_by(Tag.tag))
    return {"tags": list(result.scalars().all())}

"""
Follow service — the directed User -> User "follows" graph.

The feed only reads the graph (``followed_ids_query``); the profile
endpoints are the sole writers.  Both toggles are idempotent: following
twice keeps a single edge, unfollowing a missing edge does nothing.
"""
import logging

from sqlalchemy import Select, delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.exceptions import NotFoundError
from conduit.models import User, follows
from conduit.services import user_service
from conduit.services.projection import followed_user_ids, profile_to_dict

logger = logging.getLogger(__name__)


def followed_ids_query(follower_id: int) -> Select:
    """SELECT of the user ids *follower_id* follows, for use in ``IN (...)``."""
    return select(follows.c.followee_id).where(follows.c.follower_id == follower_id)


async def _require_profile(db: AsyncSession, username: str) -> User:
    user = await user_service.get_user_by_username(db, username)
    if user is None:
        raise NotFoundError("Profile", username)
    return user


async def _render(db: AsyncSession, viewer_id: int | None, user: User) -> dict:
    following = user.id in await followed_user_ids(db, viewer_id, [user.id])
    return {"profile": profile_to_dict(user, following)}


async def get_profile(db: AsyncSession, viewer_id: int | None, username: str) -> dict:
    if viewer_id is not None:
        await user_service.require_user(db, viewer_id)
    return await _render(db, viewer_id, await _require_profile(db, username))


async def follow(db: AsyncSession, follower_id: int, username: str) -> dict:
    await user_service.require_user(db, follower_id)
    followee = await _require_profile(db, username)

    if not await followed_user_ids(db, follower_id, [followee.id]):
        await db.execute(
            insert(follows).values(follower_id=follower_id, followee_id=followee.id)
        )
        logger.info("User id=%d followed %r", follower_id, username)

    return await _render(db, follower_id, followee)


async def unfollow(db: AsyncSession, follower_id: int, username: str) -> dict:
    await user_service.require_user(db, follower_id)
    followee = await _require_profile(db, username)

    result = await db.execute(
        delete(follows).where(
            follows.c.follower_id == follower_id,
            follows.c.followee_id == followee.id,
        )
    )
    if result.rowcount:
        logger.info("User id=%d unfollowed %r", follower_id, username)

    return await _render(db, follower_id, followee)

"""
User service — lookups and registration for the User aggregate.

Password handling and token issuance live in the upstream gateway; this
module only knows users by id and username.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.exceptions import NotFoundError
from conduit.models import User
from conduit.schemas import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def _user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "bio": user.bio,
        "image": user.image,
    }


async def require_user(db: AsyncSession, user_id: int) -> User:
    """Return the User for *user_id* or raise ``NotFoundError``."""
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: int) -> dict:
    return {"user": _user_to_dict(await require_user(db, user_id))}


async def create_user(db: AsyncSession, data: UserCreate) -> dict:
    """
    Create a new user and return its serialised dict.

    Email and username uniqueness is enforced by the database; the router
    translates the resulting ``IntegrityError`` into a 409.
    """
    user = User(
        username=data.username,
        email=data.email,
        bio=data.bio,
        image=data.image,
    )
    db.add(user)
    await db.flush()
    logger.info("Created user id=%d username=%r", user.id, user.username)
    return {"user": _user_to_dict(user)}


async def update_user(db: AsyncSession, user_id: int, data: UserUpdate) -> dict:
    """
    Apply the fields present in *data* to the user.

    ``bio`` and ``image`` may be cleared with an explicit ``null``; a null
    ``username`` or ``email`` is ignored since both columns are required.
    """
    user = await require_user(db, user_id)

    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field in ("username", "email"):
            continue
        setattr(user, field, value)

    await db.flush()
    logger.info("Updated user id=%d", user_id)
    return {"user": _user_to_dict(user)}

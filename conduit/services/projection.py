"""
Viewer-aware projections of articles, comments and profiles.

Relationship flags (``favorited``, ``author.following``) are always
relative to the requesting viewer and default to ``False`` when there is
none.  Flags for a whole page are resolved with at most one query against
``favorites`` and one against ``follows``; nothing here triggers a lazy
load, so callers must pass articles and comments with ``author`` already
loaded.
"""
from datetime import datetime
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.models import Article, Comment, User, favorites, follows


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


# ---------------------------------------------------------------------------
# Membership lookups
# ---------------------------------------------------------------------------

async def favorited_article_ids(
    db: AsyncSession, user_id: int | None, article_ids: Iterable[int]
) -> set[int]:
    """Return the subset of *article_ids* that *user_id* has favorited."""
    article_ids = set(article_ids)
    if user_id is None or not article_ids:
        return set()
    q = select(favorites.c.article_id).where(
        favorites.c.user_id == user_id,
        favorites.c.article_id.in_(article_ids),
    )
    return set((await db.execute(q)).scalars().all())


async def followed_user_ids(
    db: AsyncSession, follower_id: int | None, user_ids: Iterable[int]
) -> set[int]:
    """Return the subset of *user_ids* that *follower_id* follows."""
    user_ids = set(user_ids)
    if follower_id is None or not user_ids:
        return set()
    q = select(follows.c.followee_id).where(
        follows.c.follower_id == follower_id,
        follows.c.followee_id.in_(user_ids),
    )
    return set((await db.execute(q)).scalars().all())


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def profile_to_dict(user: User, following: bool = False) -> dict:
    return {
        "username": user.username,
        "bio": user.bio,
        "image": user.image,
        "following": following,
    }


def article_to_dict(article: Article, favorited: bool = False, following: bool = False) -> dict:
    """Serialise an Article with its author already loaded."""
    return {
        "slug": article.slug,
        "title": article.title,
        "description": article.description,
        "body": article.body,
        "tagList": list(article.tag_list or []),
        "createdAt": _iso(article.created_at),
        "updatedAt": _iso(article.updated_at),
        "favorited": favorited,
        "favoritesCount": article.favorites_count,
        "author": profile_to_dict(article.author, following),
    }


def comment_to_dict(comment: Comment, following: bool = False) -> dict:
    return {
        "id": comment.id,
        "createdAt": _iso(comment.created_at),
        "updatedAt": _iso(comment.updated_at),
        "body": comment.body,
        "author": profile_to_dict(comment.author, following),
    }


# ---------------------------------------------------------------------------
# Viewer-aware rendering
# ---------------------------------------------------------------------------

async def render_articles(
    db: AsyncSession, viewer_id: int | None, articles: Sequence[Article]
) -> list[dict]:
    favorited = await favorited_article_ids(db, viewer_id, (a.id for a in articles))
    following = await followed_user_ids(db, viewer_id, (a.author_id for a in articles))
    return [
        article_to_dict(a, favorited=a.id in favorited, following=a.author_id in following)
        for a in articles
    ]


async def render_article(db: AsyncSession, viewer_id: int | None, article: Article) -> dict:
    (rendered,) = await render_articles(db, viewer_id, [article])
    return rendered


async def render_comments(
    db: AsyncSession, viewer_id: int | None, comments: Sequence[Comment]
) -> list[dict]:
    following = await followed_user_ids(db, viewer_id, (c.author_id for c in comments))
    return [comment_to_dict(c, following=c.author_id in following) for c in comments]

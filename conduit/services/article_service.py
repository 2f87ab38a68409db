"""
Article service — listing, feed, lookup and CRUD for the Article aggregate.

Design notes
------------
- Listing and feed share one shape: build the WHERE clauses, COUNT over
  the filtered but unpaginated set, then fetch the page ordered by
  ``created_at DESC, id DESC``.  The id tie-breaker keeps pages stable
  when several articles share a timestamp.
- The author is always loaded with ``joinedload``; viewer flags are
  resolved per page in ``projection`` so a page costs a fixed number of
  queries.
- An unknown ``author`` or ``favorited`` username is a valid filter that
  matches nothing, not an error.
- Service functions flush but do not commit; the transaction boundary is
  owned by the ``get_db`` dependency in the router layer.
"""
import logging
import re
import secrets

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from conduit.exceptions import NotFoundError, ViewerRequiredError
from conduit.models import Article, Comment, favorites
from conduit.schemas import ArticleCreate, ArticleUpdate
from conduit.services import follow_service, tag_service, user_service
from conduit.services.projection import render_article, render_articles

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_SLUG_STRIP_RE = re.compile(r"[^\w\s-]")
_SLUG_SPACE_RE = re.compile(r"[\s_]+")
_SLUG_DASH_RE = re.compile(r"-+")


def slugify(text: str) -> str:
    """Return a URL-safe, lowercase slug derived from *text*."""
    text = _SLUG_STRIP_RE.sub("", text.lower().strip())
    text = _SLUG_SPACE_RE.sub("-", text)
    return _SLUG_DASH_RE.sub("-", text).strip("-")


async def _unique_slug(db: AsyncSession, title: str) -> str:
    base = slugify(title) or "article"
    slug = base
    while (
        await db.execute(select(Article.id).where(Article.slug == slug))
    ).scalar_one_or_none() is not None:
        slug = f"{base}-{secrets.token_hex(3)}"
    return slug


async def require_article(db: AsyncSession, slug: str) -> Article:
    q = select(Article).where(Article.slug == slug).options(joinedload(Article.author))
    article = (await db.execute(q)).unique().scalar_one_or_none()
    if article is None:
        raise NotFoundError("Article", slug)
    return article


async def _resolve_viewer(db: AsyncSession, viewer_id: int | None) -> None:
    if viewer_id is not None:
        await user_service.require_user(db, viewer_id)


async def _page(
    db: AsyncSession,
    viewer_id: int | None,
    conditions: list,
    limit: int | None,
    offset: int | None,
) -> dict:
    count_q = select(func.count()).select_from(Article).where(*conditions)
    total: int = (await db.execute(count_q)).scalar_one()

    page_q = (
        select(Article)
        .where(*conditions)
        .options(joinedload(Article.author))
        .order_by(Article.created_at.desc(), Article.id.desc())
    )
    if limit is not None:
        page_q = page_q.limit(limit)
    if offset:
        page_q = page_q.offset(offset)
    articles = (await db.execute(page_q)).unique().scalars().all()

    logger.debug(
        "Article page: %d of %d (limit=%s offset=%s)", len(articles), total, limit, offset
    )
    return {
        "articles": await render_articles(db, viewer_id, articles),
        "articlesCount": total,
    }


def _empty_page() -> dict:
    return {"articles": [], "articlesCount": 0}


def _tag_filter(db: AsyncSession, tag: str):
    """
    EXISTS over the elements of ``tag_list``, true when one of them
    contains *tag*.  Each element is compared decoded, so JSON quoting never
    leaks into the match.  instr/strpos keep the match case-sensitive.
    """
    if db.get_bind().dialect.name == "postgresql":
        elements = func.json_array_elements_text(Article.tag_list).table_valued("value")
        found = func.strpos(elements.c.value, tag) > 0
    else:
        elements = func.json_each(Article.tag_list).table_valued("value")
        found = func.instr(elements.c.value, tag) > 0
    return select(elements.c.value).where(found).exists()


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

async def list_articles(
    db: AsyncSession,
    viewer_id: int | None = None,
    tag: str | None = None,
    author: str | None = None,
    favorited: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> dict:
    """
    Return ``{"articles": [...], "articlesCount": N}`` for the filtered set.

    ``tag`` is a substring match against any element of the article's tag
    list; ``author`` and ``favorited`` are exact usernames.  ``N`` counts
    every article matching the filters, independent of *limit*/*offset*.
    """
    await _resolve_viewer(db, viewer_id)
    conditions = []

    if tag is not None:
        conditions.append(_tag_filter(db, tag))

    if author is not None:
        author_user = await user_service.get_user_by_username(db, author)
        if author_user is None:
            return _empty_page()
        conditions.append(Article.author_id == author_user.id)

    if favorited is not None:
        fan = await user_service.get_user_by_username(db, favorited)
        if fan is None:
            return _empty_page()
        conditions.append(
            Article.id.in_(
                select(favorites.c.article_id).where(favorites.c.user_id == fan.id)
            )
        )

    return await _page(db, viewer_id, conditions, limit, offset)


async def list_feed(
    db: AsyncSession,
    viewer_id: int | None,
    limit: int | None = None,
    offset: int | None = None,
) -> dict:
    """Articles written by authors *viewer_id* follows, newest first."""
    if viewer_id is None:
        raise ViewerRequiredError("Feed")
    await user_service.require_user(db, viewer_id)
    conditions = [Article.author_id.in_(follow_service.followed_ids_query(viewer_id))]
    return await _page(db, viewer_id, conditions, limit, offset)


async def get_article(db: AsyncSession, viewer_id: int | None, slug: str) -> dict:
    await _resolve_viewer(db, viewer_id)
    article = await require_article(db, slug)
    return {"article": await render_article(db, viewer_id, article)}


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

async def create_article(db: AsyncSession, author_id: int, data: ArticleCreate) -> dict:
    """
    Create an article owned by *author_id*.

    Every tag is registered in the catalog, while the article keeps the
    caller's ``tagList`` verbatim.  The projection is rendered with the
    author as the viewer.
    """
    author = await user_service.require_user(db, author_id)

    for name in data.tag_list:
        await tag_service.ensure_tag(db, name)

    article = Article(
        slug=await _unique_slug(db, data.title),
        title=data.title,
        description=data.description,
        body=data.body,
        tag_list=list(data.tag_list),
        favorites_count=0,
        author=author,
    )
    db.add(article)
    await db.flush()

    logger.info("Created article slug=%r author_id=%d", article.slug, author_id)
    return {"article": await render_article(db, author_id, article)}


async def update_article(
    db: AsyncSession, viewer_id: int, slug: str, data: ArticleUpdate
) -> dict:
    """
    Apply the fields present in *data* to the article identified by *slug*.

    Unset fields are left unchanged and the slug itself never changes.  A
    new ``tagList`` replaces the snapshot and is registered in the catalog.
    """
    await user_service.require_user(db, viewer_id)
    article = await require_article(db, slug)

    update_data = data.model_dump(exclude_unset=True)
    tag_list = update_data.pop("tag_list", None)

    for field, value in update_data.items():
        if value is not None:
            setattr(article, field, value)

    if tag_list is not None:
        for name in tag_list:
            await tag_service.ensure_tag(db, name)
        article.tag_list = list(tag_list)

    await db.flush()
    logger.info("Updated article slug=%r fields=%s", slug, sorted(data.model_fields_set))
    return {"article": await render_article(db, viewer_id, article)}


async def delete_article(db: AsyncSession, slug: str) -> int:
    """
    Delete the article identified by *slug* and return the number of
    article rows removed (0 when nothing matched).

    Its comments and favorite edges go in the same unit of work.
    """
    article_id = (
        await db.execute(select(Article.id).where(Article.slug == slug))
    ).scalar_one_or_none()
    if article_id is None:
        return 0

    await db.execute(delete(Comment).where(Comment.article_id == article_id))
    await db.execute(delete(favorites).where(favorites.c.article_id == article_id))
    result = await db.execute(delete(Article).where(Article.id == article_id))

    logger.info("Deleted article slug=%r", slug)
    return result.rowcount

from fastapi import Header, Query

from conduit.config import settings
from conduit.exceptions import ViewerRequiredError


class PaginationParams:
    """
    Reusable FastAPI dependency that parses the ``limit`` / ``offset``
    query parameters.

    Usage in a router::

        @router.get("/articles")
        async def list_articles(pagination: PaginationParams = Depends()):
            ...

    Attributes
    ----------
    limit:
        Maximum number of articles on the page, or None for no limit.  A
        supplied value is clamped to ``settings.MAX_PAGE_SIZE``.
    offset:
        Number of articles to skip, or None.
    """

    def __init__(
        self,
        limit: int | None = Query(
            None,
            ge=0,
            description="Maximum number of articles to return.",
        ),
        offset: int | None = Query(
            None,
            ge=0,
            description="Number of articles to skip.",
        ),
    ) -> None:
        self.limit = min(limit, settings.MAX_PAGE_SIZE) if limit is not None else None
        self.offset = offset


class ArticleFilters:
    """Optional listing filters; an absent filter means no restriction."""

    def __init__(
        self,
        tag: str | None = Query(None, description="Substring of any tag."),
        author: str | None = Query(None, description="Exact author username."),
        favorited: str | None = Query(None, description="Exact username of a fan."),
    ) -> None:
        self.tag = tag
        self.author = author
        self.favorited = favorited


def get_viewer_id(
    user_id: str | None = Header(None, alias=settings.IDENTITY_HEADER),
) -> int | None:
    """
    Resolve the caller's identity from the header set by the auth gateway.

    A missing or non-numeric header means an anonymous viewer.
    """
    if user_id is None or not user_id.strip().isdigit():
        return None
    return int(user_id)


def require_viewer_id(
    user_id: str | None = Header(None, alias=settings.IDENTITY_HEADER),
) -> int:
    viewer_id = get_viewer_id(user_id)
    if viewer_id is None:
        raise ViewerRequiredError("This endpoint")
    return viewer_id

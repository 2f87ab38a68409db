from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from conduit.database import get_db
from conduit.dependencies import ArticleFilters, PaginationParams, get_viewer_id, require_viewer_id
from conduit.schemas import ArticleCreateRequest, ArticleUpdateRequest, CommentCreateRequest
from conduit.services import article_service, comment_service, favorite_service

router = APIRouter(prefix="/api/articles", tags=["articles"])

@router.get("")
async def list_articles(
    filters: ArticleFilters = Depends(),
    pagination: PaginationParams = Depends(),
    viewer_id: int | None = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.list_articles(
        db,
        viewer_id,
        tag=filters.tag,
        author=filters.author,
        favorited=filters.favorited,
        limit=pagination.limit,
        offset=pagination.offset,
    )

@router.get("/feed")
async def list_feed(
    pagination: PaginationParams = Depends(),
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.list_feed(db, viewer_id, pagination.limit, pagination.offset)

@router.get("/{slug}")
async def get_article(
    slug: str,
    viewer_id: int | None = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.get_article(db, viewer_id, slug)

@router.post("", status_code=201)
async def create_article(
    payload: ArticleCreateRequest,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.create_article(db, viewer_id, payload.article)

@router.put("/{slug}")
async def update_article(
    slug: str,
    payload: ArticleUpdateRequest,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.update_article(db, viewer_id, slug, payload.article)

@router.delete("/{slug}")
async def delete_article(
    slug: str,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return {"deleted": await article_service.delete_article(db, slug)}

@router.post("/{slug}/favorite")
async def favorite_article(
    slug: str,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await favorite_service.favorite(db, viewer_id, slug)

@router.delete("/{slug}/favorite")
async def unfavorite_article(
    slug: str,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await favorite_service.unfavorite(db, viewer_id, slug)

@router.get("/{slug}/comments")
async def list_comments(
    slug: str,
    viewer_id: int | None = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.list_comments(db, slug, viewer_id)

@router.post("/{slug}/comments", status_code=201)
async def add_comment(
    slug: str,
    payload: CommentCreateRequest,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.add_comment(db, viewer_id, slug, payload.comment)

@router.delete("/{slug}/comments/{comment_id}")
async def delete_comment(
    slug: str,
    comment_id: int,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.delete_comment(db, viewer_id, slug, comment_id)

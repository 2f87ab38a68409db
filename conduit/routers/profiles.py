from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from conduit.database import get_db
from conduit.dependencies import get_viewer_id, require_viewer_id
from conduit.services import follow_service

router = APIRouter(prefix="/api/profiles", tags=["profiles"])

@router.get("/{username}")
async def get_profile(
    username: str,
    viewer_id: int | None = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await follow_service.get_profile(db, viewer_id, username)

@router.post("/{username}/follow")
async def follow_user(
    username: str,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await follow_service.follow(db, viewer_id, username)

@router.delete("/{username}/follow")
async def unfollow_user(
    username: str,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await follow_service.unfollow(db, viewer_id, username)

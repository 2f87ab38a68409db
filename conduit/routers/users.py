from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from conduit.database import get_db
from conduit.dependencies import require_viewer_id
from conduit.schemas import UserCreateRequest, UserUpdateRequest
from conduit.services import user_service

router = APIRouter(prefix="/api", tags=["users"])

@router.post("/users", status_code=201)
async def create_user(payload: UserCreateRequest, db: AsyncSession = Depends(get_db)):
    try:
        return await user_service.create_user(db, payload.user)
    except IntegrityError:
        raise HTTPException(
            status_code=409,
            detail="A user with this username or email already exists",
        )

@router.get("/user")
async def current_user(
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_user(db, viewer_id)

@router.put("/user")
async def update_current_user(
    payload: UserUpdateRequest,
    viewer_id: int = Depends(require_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await user_service.update_user(db, viewer_id, payload.user)
    except IntegrityError:
        raise HTTPException(
            status_code=409,
            detail="A user with this username or email already exists",
        )

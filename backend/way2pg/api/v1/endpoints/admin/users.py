from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from way2pg.core.database import get_db
from way2pg.modules.auth.dependencies import AuthContext, require_admin
from way2pg.schemas.admin import AdminUsersResponse
from way2pg.schemas.auth import MessageResponse
from way2pg.services.user_service import user_service

router = APIRouter()


@router.get("/users", response_model=AdminUsersResponse)
async def list_users(
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return AdminUsersResponse(users=await user_service.list_users(db))


@router.post("/approve-owner/{user_id}", response_model=MessageResponse)
async def approve_owner(
    user_id: str,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await user_service.approve_owner(db, user_id)
    return MessageResponse(message="Owner approved successfully")


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    auth: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Deleting an owner also deletes their listings, images and bookings"""
    await user_service.delete_user(db, user_id)
    return MessageResponse(message="User deleted successfully")

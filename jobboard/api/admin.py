"""
=============================================================================
Admin Routes - behind the admin gate
=============================================================================

Anonymous and non-admin callers are redirected to the sign-in page with a
notice; see jobboard.core.security.require_admin.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.core.database import get_db
from jobboard.core.security import require_admin
from jobboard.models import User
from jobboard.schemas.user import AdminFlagUpdate, UserResponse
from jobboard.services.user_service import UserService

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get(
    "/users",
    response_model=List[UserResponse],
    name="admin_list_users",
    summary="List all users",
)
async def list_users(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    users = await UserService(db).list_users()
    return [UserResponse.model_validate(user) for user in users]


@router.patch(
    "/users/{user_id}",
    response_model=UserResponse,
    name="admin_update_user",
    summary="Grant or revoke admin",
)
async def update_user(
    user_id: int,
    flag: AdminFlagUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    service = UserService(db)

    user = await service.get_user(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    user = await service.set_admin(user, flag.admin)
    await db.commit()
    await db.refresh(user)

    return UserResponse.model_validate(user)

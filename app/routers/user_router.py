# app/routers/user_router.py
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.common_schema import ApiResponse
from app.schemas.user_schema import UserOut, UserProfileUpdate, UserRoleUpdate
from app.services.user_service import UserService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(get_current_user)] # (重要) 整個路由都需要登入
)

@router.get("", response_model=ApiResponse[List[UserOut]])
async def list_users(
    role: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """
    使用者列表，可用 ?role=buyer 篩選
    """
    users = await UserService(db).list_users(role)
    return ApiResponse(data=[UserOut.model_validate(u) for u in users])


# 注意：必須放在 /{user_id} 之前
@router.patch("/profile/update", response_model=ApiResponse[UserOut])
async def update_my_profile(
    data: UserProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    更新自己的姓名與個人資料 (bio / skills / experience / portfolio)
    """
    user = await UserService(db).update_profile(current_user, data)
    return ApiResponse(data=UserOut.model_validate(user))


@router.get("/{user_id}", response_model=ApiResponse[UserOut])
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db)
):
    user = await UserService(db).get_user(user_id)
    return ApiResponse(data=UserOut.model_validate(user))


@router.patch("/{user_id}/role", response_model=ApiResponse[UserOut])
async def update_user_role(
    user_id: str,
    data: UserRoleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    (管理員) 調整使用者角色 (buyer / problem_solver)
    """
    user = await UserService(db).update_user_role(user_id, data.role, current_user)
    return ApiResponse(data=UserOut.model_validate(user))

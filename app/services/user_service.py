# app/services/user_service.py
import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.models.user import User, UserRoleEnum, default_profile
from app.repositories.user_repo import UserRepository
from app.schemas.user_schema import UserProfileUpdate
from app.utils.workflow import parse_status

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    async def list_users(self, role: Optional[str] = None) -> List[User]:
        """
        role 不在列舉內時視為未篩選
        """
        role_filter = None
        if role:
            try:
                role_filter = UserRoleEnum(role)
            except ValueError:
                role_filter = None
        return await self.user_repo.list_users(role_filter)

    async def get_user(self, user_id: str) -> User:
        user = await self.user_repo.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_user_role(self, user_id: str, role: str, admin: User) -> User:
        """
        (管理員) 調整使用者角色
        - 不能指派 admin
        - 不能變更 admin 的角色
        """
        if admin.role != UserRoleEnum.admin:
            raise AuthorizationError("Not authorized to perform this action")

        new_role = parse_status(UserRoleEnum, role, message="Invalid role")
        if new_role == UserRoleEnum.admin:
            raise AuthorizationError("Cannot assign admin role")

        user = await self.get_user(user_id)
        if user.role == UserRoleEnum.admin:
            raise AuthorizationError("Cannot change admin role")

        user.role = new_role
        updated = await self.user_repo.update_user(user)
        logger.info(f"Admin {admin.user_id} set role of {user_id} to {new_role.value}")
        return updated

    async def update_profile(self, user: User, data: UserProfileUpdate) -> User:
        """
        更新自己的姓名與個人資料 (個人資料欄位合併，不整包覆蓋)
        """
        if data.name is not None:
            if not data.name.strip():
                raise ValidationError("Name is required")
            user.name = data.name.strip()

        if data.profile is not None:
            merged = {**default_profile(), **(user.profile or {})}
            merged.update(data.profile.model_dump(exclude_unset=True, exclude_none=True))
            # 指派新的 dict，讓 SQLAlchemy 偵測到 JSON 欄位變更
            user.profile = merged

        return await self.user_repo.update_user(user)

# app/repositories/user_repo.py
# 負責與使用者相關的資料庫操作
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.models.user import User, UserRoleEnum

class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_email(self, email: str) -> User | None:
        """
        透過 email 查詢使用者 (email 一律以小寫儲存)
        """
        stmt = select(User).where(User.email == email.strip().lower())
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def create_user(self, user: User) -> User:
        """
        新增使用者到資料庫
        """
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def get_user_by_id(self, user_id: str) -> User | None:
        """
        透過 user_id 查詢使用者
        """
        stmt = select(User).where(User.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def list_users(self, role: Optional[UserRoleEnum] = None) -> List[User]:
        stmt = select(User)
        if role is not None:
            stmt = stmt.where(User.role == role)
        stmt = stmt.order_by(User.created_at.desc())
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def get_any_admin(self) -> User | None:
        stmt = select(User).where(User.role == UserRoleEnum.admin)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def update_user(self, user: User) -> User:
        """
        儲存對現有 User 物件的變更 (角色、姓名、個人資料)
        """
        await self.db.commit()
        await self.db.refresh(user)
        return user

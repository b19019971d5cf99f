# app/seed.py
# 建立初始管理員帳號：python -m app.seed
import asyncio
import logging

from app.core.config import settings
from app.core.database import AsyncSessionLocal, engine, init_models
from app.core.security import get_password_hash
from app.models.user import User, UserRoleEnum, default_profile
from app.repositories.user_repo import UserRepository

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


async def seed_admin() -> User:
    """
    若資料庫中沒有任何管理員，依設定檔建立一個 (可重複執行)
    """
    async with AsyncSessionLocal() as db:
        repo = UserRepository(db)

        admin = await repo.get_any_admin()
        if admin:
            logger.info(f"Admin already exists: {admin.email}")
            return admin

        admin = User(
            email=settings.ADMIN_EMAIL.lower(),
            password_hash=get_password_hash(settings.ADMIN_PASSWORD),
            name=settings.ADMIN_NAME,
            role=UserRoleEnum.admin,
            profile=default_profile(),
        )
        admin = await repo.create_user(admin)
        logger.info(f"Admin user created: {admin.email}")
        return admin


async def main() -> None:
    await init_models()
    try:
        await seed_admin()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())

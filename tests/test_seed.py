from sqlalchemy import func, select

from app import seed
from app.core.config import settings
from app.core.security import verify_password
from app.models.user import User, UserRoleEnum


async def test_seed_admin_is_idempotent(monkeypatch, session_factory, db_session):
    monkeypatch.setattr(seed, "AsyncSessionLocal", session_factory)

    first = await seed.seed_admin()
    second = await seed.seed_admin()

    assert first.user_id == second.user_id
    assert first.email == settings.ADMIN_EMAIL
    assert first.role == UserRoleEnum.admin
    assert verify_password(settings.ADMIN_PASSWORD, first.password_hash)

    count = await db_session.scalar(select(func.count(User.user_id)).where(User.role == UserRoleEnum.admin))
    assert count == 1


async def test_seed_skips_when_admin_exists(monkeypatch, session_factory, admin):
    monkeypatch.setattr(seed, "AsyncSessionLocal", session_factory)

    existing = await seed.seed_admin()
    assert existing.user_id == admin.user_id

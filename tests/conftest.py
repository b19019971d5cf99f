import io
import os
import sys

# Ensure backend package is on sys.path for imports during tests
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Settings are read at import time, so the test environment must be in place first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import pytest
from fastapi import UploadFile
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from starlette.datastructures import Headers

from app.core.config import settings
from app.core.database import Base, get_db
from app.core.security import create_access_token, get_password_hash
from app.main import app
from app.models.user import User, UserRoleEnum, default_profile

TEST_PASSWORD = "password123"


@pytest.fixture
async def engine():
    # 每個測試一個全新的 in-memory 資料庫，StaticPool 讓所有 session 共用同一條連線
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


async def _make_user(db: AsyncSession, email: str, name: str, role: UserRoleEnum) -> User:
    user = User(
        email=email,
        password_hash=get_password_hash(TEST_PASSWORD),
        name=name,
        role=role,
        profile=default_profile(),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def buyer(db_session):
    return await _make_user(db_session, "buyer@example.com", "Bob Buyer", UserRoleEnum.buyer)


@pytest.fixture
async def other_buyer(db_session):
    return await _make_user(db_session, "buyer2@example.com", "Betty Buyer", UserRoleEnum.buyer)


@pytest.fixture
async def solver(db_session):
    return await _make_user(db_session, "solver@example.com", "Sam Solver", UserRoleEnum.solver)


@pytest.fixture
async def other_solver(db_session):
    return await _make_user(db_session, "solver2@example.com", "Sue Solver", UserRoleEnum.solver)


@pytest.fixture
async def admin(db_session):
    return await _make_user(db_session, "admin@example.com", "Ada Admin", UserRoleEnum.admin)


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        token = create_access_token({"sub": user.user_id, "role": user.role.value})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def make_upload():
    def _upload(
        filename: str = "delivery.zip",
        content: bytes = b"PK\x03\x04 fake zip payload",
        content_type: str = "application/zip",
    ) -> UploadFile:
        return UploadFile(
            file=io.BytesIO(content),
            filename=filename,
            headers=Headers({"content-type": content_type}),
        )
    return _upload


@pytest.fixture
async def client(session_factory):
    # 每個 request 使用獨立的 session，與正式環境的 get_db 行為一致
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

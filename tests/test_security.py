from datetime import datetime, timedelta, timezone

from jose import jwt

from app.core.config import settings
from app.core.security import (
    create_access_token,
    get_password_hash,
    verify_access_token,
    verify_password,
)


def test_password_hash_roundtrip():
    hashed = get_password_hash("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)


def test_token_carries_user_id_and_role():
    token = create_access_token({"sub": "user-1", "role": "buyer"})
    token_data = verify_access_token(token)
    assert token_data is not None
    assert token_data.user_id == "user-1"
    assert token_data.role == "buyer"


def test_tampered_token_is_rejected():
    token = create_access_token({"sub": "user-1", "role": "buyer"})
    assert verify_access_token(token + "x") is None


def test_expired_token_is_rejected():
    expired = jwt.encode(
        {"sub": "user-1", "role": "buyer", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )
    assert verify_access_token(expired) is None


def test_token_without_role_is_rejected():
    token = create_access_token({"sub": "user-1"})
    assert verify_access_token(token) is None

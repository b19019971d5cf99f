import pytest

from app.core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from app.models.user import UserRoleEnum
from app.schemas.user_schema import ProfileUpdate, UserCreate, UserProfileUpdate
from app.services.auth_service import AuthService
from app.services.user_service import UserService


async def test_register_creates_problem_solver(db_session):
    user = await AuthService(db_session).register_user(
        UserCreate(email="New.User@Example.com", password="secret1", name="  New User ")
    )
    assert user.role == UserRoleEnum.solver
    assert user.email == "new.user@example.com"
    assert user.name == "New User"
    assert user.profile["skills"] == []


async def test_register_rejects_duplicate_email(db_session, solver):
    with pytest.raises(ValidationError) as exc:
        await AuthService(db_session).register_user(
            UserCreate(email="SOLVER@example.com", password="secret1", name="Dup")
        )
    assert exc.value.detail == "Email already registered"


async def test_login(db_session, buyer):
    service = AuthService(db_session)
    user = await service.login("buyer@example.com", "password123")
    assert user.user_id == buyer.user_id
    assert await service.verify_credential("buyer@example.com", "password123")

    with pytest.raises(AuthenticationError) as exc:
        await service.login("buyer@example.com", "wrong-password")
    assert exc.value.detail == "Invalid credentials"
    with pytest.raises(AuthenticationError):
        await service.login("nobody@example.com", "password123")


async def test_admin_changes_role(db_session, admin, solver):
    updated = await UserService(db_session).update_user_role(solver.user_id, "buyer", admin)
    assert updated.role == UserRoleEnum.buyer


async def test_role_change_rules(db_session, admin, buyer, solver):
    service = UserService(db_session)

    with pytest.raises(AuthorizationError):
        await service.update_user_role(solver.user_id, "buyer", buyer)
    with pytest.raises(ValidationError) as exc:
        await service.update_user_role(solver.user_id, "owner", admin)
    assert exc.value.detail == "Invalid role"
    with pytest.raises(AuthorizationError) as exc:
        await service.update_user_role(solver.user_id, "admin", admin)
    assert exc.value.detail == "Cannot assign admin role"
    with pytest.raises(NotFoundError):
        await service.update_user_role("missing", "buyer", admin)
    with pytest.raises(AuthorizationError) as exc:
        await service.update_user_role(admin.user_id, "buyer", admin)
    assert exc.value.detail == "Cannot change admin role"


async def test_list_users_by_role(db_session, admin, buyer, solver, other_solver):
    service = UserService(db_session)
    assert len(await service.list_users()) == 4
    solvers = await service.list_users("problem_solver")
    assert {u.user_id for u in solvers} == {solver.user_id, other_solver.user_id}
    # 不合法的角色視為未篩選
    assert len(await service.list_users("wizard")) == 4


async def test_profile_update_merges_fields(db_session, solver):
    service = UserService(db_session)
    await service.update_profile(solver, UserProfileUpdate(profile=ProfileUpdate(bio="Data engineer")))
    updated = await service.update_profile(
        solver, UserProfileUpdate(name="Samuel", profile=ProfileUpdate(skills=["python", "sql"]))
    )

    assert updated.name == "Samuel"
    assert updated.profile["bio"] == "Data engineer"
    assert updated.profile["skills"] == ["python", "sql"]
    assert updated.profile["portfolio"] == ""

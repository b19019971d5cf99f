import pytest
from sqlalchemy import update

from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.models.project import Project, ProjectStatusEnum
from app.schemas.project_schema import ProjectCreate, ProjectStatusUpdate, ProjectUpdate
from app.schemas.request_schema import RequestCreate
from app.services.project_service import ProjectService
from app.services.request_service import RequestService


def project_payload(title="Data pipeline", budget=500.0):
    return ProjectCreate(title=title, description="Build an ETL job", requirements="Python", budget=budget)


async def test_buyer_creates_open_project(db_session, buyer):
    project = await ProjectService(db_session).create_project(project_payload(), buyer)

    assert project.status == ProjectStatusEnum.open
    assert project.buyer_id == buyer.user_id
    assert project.assigned_solver_id is None
    assert float(project.budget) == 500.0


async def test_only_buyers_create_projects(db_session, solver, admin):
    service = ProjectService(db_session)
    for user in (solver, admin):
        with pytest.raises(AuthorizationError) as exc:
            await service.create_project(project_payload(), user)
        assert exc.value.detail == "Only buyers can create projects"


async def test_list_projects_follows_role_visibility(db_session, buyer, other_buyer, solver, other_solver, admin):
    service = ProjectService(db_session)
    mine = await service.create_project(project_payload("Mine"), buyer)
    theirs = await service.create_project(project_payload("Theirs"), other_buyer)

    # theirs 指派給 solver 之後，其他解題者就看不到
    request = await RequestService(db_session).create_request(RequestCreate(project_id=theirs.project_id), solver)
    await RequestService(db_session).accept_request(request.request_id, other_buyer)

    assert [p.project_id for p in await service.list_projects(buyer)] == [mine.project_id]
    assert {p.project_id for p in await service.list_projects(solver)} == {mine.project_id, theirs.project_id}
    assert [p.project_id for p in await service.list_projects(other_solver)] == [mine.project_id]
    assert len(await service.list_projects(admin)) == 2


async def test_status_filter_stays_within_visibility(db_session, buyer, other_buyer, solver, other_solver):
    service = ProjectService(db_session)
    await service.create_project(project_payload("Mine"), buyer)
    theirs = await service.create_project(project_payload("Theirs"), other_buyer)
    request = await RequestService(db_session).create_request(RequestCreate(project_id=theirs.project_id), solver)
    await RequestService(db_session).accept_request(request.request_id, other_buyer)

    assert await service.list_projects(other_solver, "assigned") == []
    assert [p.project_id for p in await service.list_projects(solver, "assigned")] == [theirs.project_id]
    # 不合法的 status 直接忽略
    assert len(await service.list_projects(solver, "bogus")) == 2


async def test_project_details_permissions(db_session, buyer, other_buyer, solver):
    service = ProjectService(db_session)
    project = await service.create_project(project_payload(), buyer)

    assert (await service.get_project_details(project.project_id, solver)).project_id == project.project_id
    with pytest.raises(AuthorizationError):
        await service.get_project_details(project.project_id, other_buyer)
    with pytest.raises(NotFoundError):
        await service.get_project_details("missing", buyer)


async def test_owner_updates_project_fields(db_session, buyer, other_buyer):
    service = ProjectService(db_session)
    project = await service.create_project(project_payload(), buyer)

    updated = await service.update_project(project.project_id, ProjectUpdate(title="Renamed", budget=750), buyer)
    assert updated.title == "Renamed"
    assert float(updated.budget) == 750.0
    assert updated.description == "Build an ETL job"

    with pytest.raises(AuthorizationError):
        await service.update_project(project.project_id, ProjectUpdate(title="Nope"), other_buyer)


async def test_cancel_clears_assignment(db_session, buyer, solver):
    service = ProjectService(db_session)
    project = await service.create_project(project_payload(), buyer)
    request = await RequestService(db_session).create_request(RequestCreate(project_id=project.project_id), solver)
    await RequestService(db_session).accept_request(request.request_id, buyer)

    cancelled = await service.update_project_status(
        project.project_id, ProjectStatusUpdate(status="cancelled"), buyer
    )
    assert cancelled.status == ProjectStatusEnum.cancelled
    assert cancelled.assigned_solver_id is None


async def test_status_update_rules(db_session, buyer, solver, admin):
    service = ProjectService(db_session)
    project = await service.create_project(project_payload(), buyer)

    with pytest.raises(ValidationError):
        await service.update_project_status(project.project_id, ProjectStatusUpdate(status="archived"), buyer)
    with pytest.raises(ConflictError):
        await service.update_project_status(project.project_id, ProjectStatusUpdate(status="assigned"), buyer)
    with pytest.raises(AuthorizationError):
        await service.update_project_status(project.project_id, ProjectStatusUpdate(status="cancelled"), solver)

    # 管理員也可以取消；取消後為終態
    await service.update_project_status(project.project_id, ProjectStatusUpdate(status="cancelled"), admin)
    with pytest.raises(ConflictError):
        await service.update_project_status(project.project_id, ProjectStatusUpdate(status="cancelled"), buyer)


async def test_cancel_loses_race_to_concurrent_assignment(db_session, session_factory, buyer, solver):
    service = ProjectService(db_session)
    project = await service.create_project(project_payload(), buyer)
    project_id, solver_id = project.project_id, solver.user_id

    # 另一個請求已先接受申請並指派
    async with session_factory() as other:
        await other.execute(
            update(Project)
            .where(Project.project_id == project_id)
            .values(status=ProjectStatusEnum.assigned, assigned_solver_id=solver_id)
        )
        await other.commit()

    with pytest.raises(ConflictError) as exc:
        await service.update_project_status(project_id, ProjectStatusUpdate(status="cancelled"), buyer)
    assert exc.value.detail == "Project status changed concurrently, please retry"

    async with session_factory() as check:
        stored = await check.get(Project, project_id)
        assert stored.status == ProjectStatusEnum.assigned
        assert stored.assigned_solver_id == solver_id

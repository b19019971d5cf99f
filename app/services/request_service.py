# app/services/request_service.py

import logging
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from app.models.user import User, UserRoleEnum
from app.models.project import Project, ProjectStatusEnum
from app.models.project_request import ProjectRequest, RequestStatusEnum
from app.repositories.request_repo import RequestRepository
from app.repositories.project_repo import ProjectRepository
from app.schemas.request_schema import RequestCreate
from app.utils.access import is_owner_or_admin, is_project_owner
from app.utils.workflow import check_project_transition, check_request_transition

logger = logging.getLogger(__name__)


class RequestService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.request_repo = RequestRepository(db)
        self.project_repo = ProjectRepository(db)

    async def _get_request_and_project(self, request_id: str) -> tuple[ProjectRequest, Project]:
        request = await self.request_repo.get_request_by_id(request_id)
        if not request:
            raise NotFoundError("Request not found")
        project = await self.project_repo.get_project_by_id(request.project_id)
        if not project:
            raise NotFoundError("Project not found")
        return request, project

    async def create_request(self, data: RequestCreate, solver: User) -> ProjectRequest:
        """
        (解題者) 對「招募中」的案件提出申請
        """
        # 步驟 1: 驗證 (存在 -> 權限 -> 狀態)
        project = await self.project_repo.get_project_by_id(data.project_id)
        if not project:
            raise NotFoundError("Project not found")
        if solver.role != UserRoleEnum.solver:
            raise AuthorizationError("Only problem solvers can request projects")
        if project.status != ProjectStatusEnum.open:
            raise ConflictError("Project is not accepting requests")

        # 不論先前的申請是什麼狀態，都不能再申請
        existing = await self.request_repo.check_existing_request(project.project_id, solver.user_id)
        if existing:
            raise ConflictError("You have already requested to work on this project")

        # 步驟 2: 儲存
        new_request = ProjectRequest(
            project_id=project.project_id,
            solver_id=solver.user_id,
            message=data.message or "",
            status=RequestStatusEnum.pending,
        )
        created = await self.request_repo.create_request(new_request)
        logger.info(f"Solver {solver.user_id} requested project {project.project_id}")
        return created

    async def get_requests_for_project(self, project_id: str, user: User) -> List[ProjectRequest]:
        """
        (買家 / 管理員) 檢視案件收到的所有申請
        """
        project = await self.project_repo.get_project_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")
        if not is_owner_or_admin(user, project):
            raise AuthorizationError("Not authorized to view requests")
        return await self.request_repo.get_requests_by_project_id(project_id)

    async def get_my_requests(self, user: User) -> List[ProjectRequest]:
        if user.role != UserRoleEnum.solver:
            raise AuthorizationError("Only problem solvers have requests")
        return await self.request_repo.get_requests_by_solver_id(user.user_id)

    async def accept_request(self, request_id: str, buyer: User) -> ProjectRequest:
        """
        (買家) 接受申請：
        1. 此申請 -> accepted
        2. 同案件其他 pending 申請 -> rejected
        3. 案件 -> assigned，並記錄被指派的解題者
        三個寫入在同一個交易內完成；案件狀態以 CAS 寫入，
        兩個同時進來的 accept 只會有一個成功。
        """
        request, project = await self._get_request_and_project(request_id)

        if not is_project_owner(buyer, project):
            raise AuthorizationError("Not authorized to accept this request")

        if project.status != ProjectStatusEnum.open:
            raise ConflictError("Project is already assigned")

        check_request_transition(request.status, RequestStatusEnum.accepted)
        check_project_transition(project.status, ProjectStatusEnum.assigned)

        try:
            claimed = await self.project_repo.compare_and_set_status(
                project.project_id,
                ProjectStatusEnum.open,
                ProjectStatusEnum.assigned,
                assigned_solver_id=request.solver_id,
            )
            if not claimed:
                raise ConflictError("Project is already assigned")

            accepted = await self.request_repo.compare_and_set_status(
                request.request_id, RequestStatusEnum.pending, RequestStatusEnum.accepted
            )
            if not accepted:
                raise ConflictError("Request has already been processed")

            rejected_count = await self.request_repo.reject_pending_siblings(
                project.project_id, request.request_id
            )
            await self.db.commit()
        except ConflictError:
            await self.db.rollback()
            raise

        logger.info(
            f"Project {project.project_id} assigned to solver {request.solver_id} "
            f"(request {request.request_id} accepted, {rejected_count} pending rejected)"
        )
        await self.project_repo.refresh(project)
        return await self.request_repo.refresh(request)

    async def reject_request(self, request_id: str, buyer: User) -> ProjectRequest:
        """
        (買家) 拒絕申請，不影響案件狀態
        """
        request, project = await self._get_request_and_project(request_id)

        if not is_project_owner(buyer, project):
            raise AuthorizationError("Not authorized to reject this request")

        check_request_transition(request.status, RequestStatusEnum.rejected)

        changed = await self.request_repo.compare_and_set_status(
            request.request_id, RequestStatusEnum.pending, RequestStatusEnum.rejected
        )
        if not changed:
            await self.db.rollback()
            raise ConflictError("Request has already been processed")

        await self.db.commit()
        return await self.request_repo.refresh(request)

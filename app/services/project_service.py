# app/services/project_service.py
import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

# 匯入 Models
from app.models.user import User, UserRoleEnum
from app.models.project import Project, ProjectStatusEnum

# 匯入 Schemas
from app.schemas.project_schema import ProjectCreate, ProjectUpdate, ProjectStatusUpdate

# 匯入 Repositories
from app.repositories.project_repo import ProjectRepository

from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from app.utils.access import can_view_project, is_owner_or_admin, visible_projects
from app.utils.workflow import check_project_transition, parse_status

logger = logging.getLogger(__name__)

class ProjectService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.project_repo = ProjectRepository(db)

    async def _get_project_or_404(self, project_id: str) -> Project:
        project = await self.project_repo.get_project_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")
        return project

    # 輔助函式：檢查存在與權限 (買家本人或管理員)
    async def _get_and_check_permission(self, project_id: str, user: User, detail: str) -> Project:
        project = await self._get_project_or_404(project_id)
        if not is_owner_or_admin(user, project):
            raise AuthorizationError(detail)
        return project

    async def create_project(self, project_data: ProjectCreate, user: User) -> Project:
        """
        業務邏輯：建立案件 (僅限買家)
        """
        if user.role != UserRoleEnum.buyer:
            raise AuthorizationError("Only buyers can create projects")

        new_project = Project(
            **project_data.model_dump(),
            buyer_id=user.user_id,
            status=ProjectStatusEnum.open,
        )
        created = await self.project_repo.create_project(new_project)
        logger.info(f"Buyer {user.user_id} created project {created.project_id}")
        return created

    async def list_projects(self, user: User, status: Optional[str] = None) -> List[Project]:
        """
        業務邏輯：依角色列出可見的案件，status 不在列舉內時忽略
        """
        status_filter = None
        if status:
            try:
                status_filter = ProjectStatusEnum(status)
            except ValueError:
                status_filter = None
        return await self.project_repo.list_projects(visible_projects(user), status_filter)

    async def get_project_details(self, project_id: str, user: User) -> Project:
        """
        業務邏輯：獲取單一案件詳情
        """
        project = await self._get_project_or_404(project_id)
        if not can_view_project(user, project):
            raise AuthorizationError("Not authorized to view this project")
        return project

    async def update_project(self, project_id: str, data: ProjectUpdate, user: User) -> Project:
        """
        業務邏輯：更新案件內容 (只更新有傳入的欄位)
        """
        project = await self._get_and_check_permission(
            project_id, user, "Not authorized to update this project"
        )

        update_data = data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            # title / description 不接受 null
            if value is None and key in ("title", "description"):
                continue
            if key == "requirements" and value is None:
                value = ""
            setattr(project, key, value)

        return await self.project_repo.update_project(project)

    async def update_project_status(self, project_id: str, data: ProjectStatusUpdate, user: User) -> Project:
        """
        業務邏輯：買家 / 管理員直接更新案件狀態 (目前只允許取消)
        """
        project = await self._get_and_check_permission(
            project_id, user, "Not authorized to update project status"
        )

        new_status = parse_status(ProjectStatusEnum, data.status)
        check_project_transition(project.status, new_status, manual=True)

        current = ProjectStatusEnum(project.status)
        # 取消後不再有指派的解題者
        changed = await self.project_repo.compare_and_set_status(
            project.project_id, current, new_status, assigned_solver_id=None
        )
        if not changed:
            await self.db.rollback()
            raise ConflictError("Project status changed concurrently, please retry")

        await self.db.commit()
        logger.info(f"Project {project.project_id} status {current.value} -> {new_status.value} by {user.user_id}")
        return await self.project_repo.refresh(project)

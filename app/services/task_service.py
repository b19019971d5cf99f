# app/services/task_service.py

import logging
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from app.models.user import User
from app.models.project import Project, ProjectStatusEnum
from app.models.task import Task, TaskStatusEnum
from app.repositories.project_repo import ProjectRepository
from app.repositories.task_repo import TaskRepository
from app.repositories.submission_repo import SubmissionRepository
from app.schemas.task_schema import TaskCreate, TaskUpdate
from app.services.storage_service import StorageService
from app.utils.access import is_assigned_solver, is_project_participant
from app.utils.workflow import check_project_transition, check_task_update, parse_status

logger = logging.getLogger(__name__)

# 可以新增任務的案件狀態
TASK_CREATION_STATUSES = (ProjectStatusEnum.assigned, ProjectStatusEnum.in_progress)


class TaskService:
    def __init__(self, db: AsyncSession, storage: StorageService | None = None):
        self.db = db
        self.task_repo = TaskRepository(db)
        self.project_repo = ProjectRepository(db)
        self.submission_repo = SubmissionRepository(db)
        self.storage = storage or StorageService()

    async def _get_project_or_404(self, project_id: str) -> Project:
        project = await self.project_repo.get_project_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")
        return project

    async def _get_task_and_project(self, task_id: str) -> tuple[Task, Project]:
        task = await self.task_repo.get_task_by_id(task_id)
        if not task:
            raise NotFoundError("Task not found")
        project = await self._get_project_or_404(task.project_id)
        return task, project

    async def create_task(self, data: TaskCreate, solver: User) -> Task:
        """
        (被指派的解題者) 新增任務
        - order = 目前最大 order + 1 (第一個為 0)
        - 案件若還在 assigned，連動改為 in_progress
        """
        project = await self._get_project_or_404(data.project_id)

        if not is_assigned_solver(solver, project):
            raise AuthorizationError("Only assigned problem solver can create tasks")

        if project.status not in TASK_CREATION_STATUSES:
            raise ConflictError("Cannot add tasks to a project that is not assigned or in progress")

        max_order = await self.task_repo.get_max_order(project.project_id)
        order = 0 if max_order is None else max_order + 1

        task = Task(
            project_id=project.project_id,
            title=data.title,
            description=data.description or "",
            deadline=data.deadline,
            status=TaskStatusEnum.todo,
            order=order,
        )
        await self.task_repo.add_task(task)

        if project.status == ProjectStatusEnum.assigned:
            check_project_transition(project.status, ProjectStatusEnum.in_progress)
            # 另一個任務可能已經先把案件改為 in_progress，此時什麼都不用做
            await self.project_repo.compare_and_set_status(
                project.project_id, ProjectStatusEnum.assigned, ProjectStatusEnum.in_progress
            )
            logger.info(f"Project {project.project_id} moved to in_progress by first task")

        await self.db.commit()
        await self.project_repo.refresh(project)
        return await self.task_repo.refresh(task)

    async def get_tasks_for_project(self, project_id: str, user: User) -> List[Task]:
        project = await self._get_project_or_404(project_id)
        if not is_project_participant(user, project):
            raise AuthorizationError("Not authorized to view tasks")
        return await self.task_repo.list_tasks_by_project(project_id)

    async def get_task(self, task_id: str, user: User) -> Task:
        task, project = await self._get_task_and_project(task_id)
        if not is_project_participant(user, project):
            raise AuthorizationError("Not authorized to view this task")
        return task

    async def update_task(self, task_id: str, data: TaskUpdate, solver: User) -> Task:
        """
        (被指派的解題者) 更新任務內容與狀態，不能直接設為 completed
        """
        task, project = await self._get_task_and_project(task_id)

        if not is_assigned_solver(solver, project):
            raise AuthorizationError("Not authorized to update this task")

        update_data = data.model_dump(exclude_unset=True)
        new_status = update_data.pop("status", None)
        if new_status is not None:
            new_status = parse_status(TaskStatusEnum, new_status)
            check_task_update(task.status, new_status)

        for key, value in update_data.items():
            if key == "title" and value is None:
                continue
            if key == "description" and value is None:
                value = ""
            setattr(task, key, value)

        if new_status is not None:
            task.status = new_status

        return await self.task_repo.update_task(task)

    async def delete_task(self, task_id: str, solver: User) -> None:
        """
        (被指派的解題者) 刪除未完成的任務，連同其提交與檔案
        """
        task, project = await self._get_task_and_project(task_id)

        if not is_assigned_solver(solver, project):
            raise AuthorizationError("Not authorized to delete this task")

        if task.status == TaskStatusEnum.completed:
            raise ConflictError("Cannot delete completed task")

        file_keys = await self.submission_repo.list_file_paths_by_task(task.task_id)
        await self.task_repo.delete_task(task)

        # 資料刪除成功後才清檔案
        for key in file_keys:
            self.storage.delete(key)
        logger.info(f"Task {task_id} deleted with {len(file_keys)} stored file(s)")

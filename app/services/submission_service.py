# app/services/submission_service.py

import logging
from pathlib import Path
from typing import List, Optional, Tuple
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import utcnow
from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from app.models.user import User
from app.models.project import Project, ProjectStatusEnum
from app.models.task import Task, TaskStatusEnum
from app.models.submission import Submission, SubmissionStatusEnum
from app.repositories.project_repo import ProjectRepository
from app.repositories.task_repo import TaskRepository
from app.repositories.submission_repo import SubmissionRepository
from app.schemas.submission_schema import SubmissionReview
from app.services.storage_service import StorageService
from app.utils.access import is_assigned_solver, is_owner_or_admin, is_project_participant
from app.utils.workflow import (
    can_transition_project,
    check_submission_review,
    check_task_accepts_submission,
    task_status_after_review,
)

logger = logging.getLogger(__name__)


class SubmissionService:
    def __init__(self, db: AsyncSession, storage: StorageService | None = None):
        self.db = db
        self.submission_repo = SubmissionRepository(db)
        self.task_repo = TaskRepository(db)
        self.project_repo = ProjectRepository(db)
        self.storage = storage or StorageService()

    async def _get_task_and_project(self, task_id: str) -> Tuple[Task, Project]:
        task = await self.task_repo.get_task_by_id(task_id)
        if not task:
            raise NotFoundError("Task not found")
        project = await self.project_repo.get_project_by_id(task.project_id)
        if not project:
            raise NotFoundError("Project not found")
        return task, project

    async def _get_submission_chain(self, submission_id: str) -> Tuple[Submission, Task, Project]:
        submission = await self.submission_repo.get_submission_by_id(submission_id)
        if not submission:
            raise NotFoundError("Submission not found")
        task, project = await self._get_task_and_project(submission.task_id)
        return submission, task, project

    async def create_submission(
        self,
        task_id: str,
        solver: User,
        file: Optional[UploadFile],
        notes: Optional[str] = None
    ) -> Submission:
        """
        (被指派的解題者) 上傳任務的交付檔案 (ZIP)，任務改為 submitted
        """
        task, project = await self._get_task_and_project(task_id)

        if not is_assigned_solver(solver, project):
            raise AuthorizationError("Not authorized to submit for this task")

        check_task_accepts_submission(task.status)

        # 驗證通過才寫檔
        stored = await self.storage.store(file)

        submission = Submission(
            task_id=task.task_id,
            solver_id=solver.user_id,
            file_path=stored.key,
            file_name=stored.file_name,
            file_size=stored.size,
            notes=notes or "",
            status=SubmissionStatusEnum.pending,
        )
        try:
            await self.submission_repo.add_submission(submission)
            task.status = TaskStatusEnum.submitted
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            self.storage.delete(stored.key)
            logger.error(f"Failed to record submission for task {task_id}", exc_info=True)
            raise

        logger.info(f"Solver {solver.user_id} submitted {stored.key} for task {task_id}")
        await self.task_repo.refresh(task)
        return await self.submission_repo.refresh(submission)

    async def get_submissions_for_task(self, task_id: str, user: User) -> List[Submission]:
        task, project = await self._get_task_and_project(task_id)
        if not is_project_participant(user, project):
            raise AuthorizationError("Not authorized to view submissions")
        return await self.submission_repo.list_submissions_by_task(task.task_id)

    async def review_submission(self, submission_id: str, data: SubmissionReview, reviewer: User) -> Submission:
        """
        (買家 / 管理員) 審核提交，只能審核一次
        - approved -> 任務 completed；若案件下已無未完成任務，案件 -> completed
        - rejected -> 任務 revision_requested
        所有寫入在同一個交易內；提交狀態以 CAS 寫入避免重複審核。
        """
        submission, task, project = await self._get_submission_chain(submission_id)

        if not is_owner_or_admin(reviewer, project):
            raise AuthorizationError("Only buyer or admin can review submissions")

        outcome = check_submission_review(submission.status, data.status, task.status)
        new_task_status = task_status_after_review(outcome)

        project_completed = False
        try:
            reviewed = await self.submission_repo.mark_reviewed(
                submission.submission_id,
                outcome,
                review_notes=data.review_notes or "",
                reviewed_at=utcnow(),
            )
            if not reviewed:
                raise ConflictError("Submission has already been reviewed")

            # 已完成的任務不會被改回 (另一個審核可能已先完成此任務)
            moved = await self.task_repo.set_status(task.task_id, new_task_status)
            if not moved:
                raise ConflictError("Task is already completed")

            if outcome == SubmissionStatusEnum.approved:
                remaining = await self.task_repo.count_incomplete_tasks(project.project_id)
                current = ProjectStatusEnum(project.status)
                if remaining == 0 and can_transition_project(current, ProjectStatusEnum.completed):
                    project_completed = await self.project_repo.compare_and_set_status(
                        project.project_id, current, ProjectStatusEnum.completed
                    )

            await self.db.commit()
        except ConflictError:
            await self.db.rollback()
            raise

        logger.info(f"Submission {submission_id} {outcome.value} by {reviewer.user_id}; task {task.task_id} -> {new_task_status.value}")
        if project_completed:
            logger.info(f"Project {project.project_id} completed: all tasks approved")

        await self.task_repo.refresh(task)
        await self.project_repo.refresh(project)
        return await self.submission_repo.refresh(submission)

    async def get_download(self, submission_id: str, user: User) -> Tuple[Path, str]:
        """
        回傳 (實際檔案路徑, 原始檔名)；檔案遺失時回 404
        """
        submission, task, project = await self._get_submission_chain(submission_id)

        if not is_project_participant(user, project):
            raise AuthorizationError("Not authorized to download this file")

        return self.storage.resolve(submission.file_path), submission.file_name

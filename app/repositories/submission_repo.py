# app/repositories/submission_repo.py

from datetime import datetime
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List, Optional

from app.models.submission import Submission, SubmissionStatusEnum


class SubmissionRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_submission_by_id(self, submission_id: str) -> Optional[Submission]:
        stmt = select(Submission).where(Submission.submission_id == submission_id)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def list_submissions_by_task(self, task_id: str) -> List[Submission]:
        """
        最新的提交排在最前面
        """
        stmt = (
            select(Submission)
            .where(Submission.task_id == task_id)
            .order_by(Submission.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def list_file_paths_by_task(self, task_id: str) -> List[str]:
        stmt = select(Submission.file_path).where(Submission.task_id == task_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def add_submission(self, submission: Submission) -> Submission:
        """
        加入 Session 並 flush (不 commit)
        """
        self.db.add(submission)
        await self.db.flush()
        return submission

    async def mark_reviewed(
        self,
        submission_id: str,
        new: SubmissionStatusEnum,
        review_notes: str,
        reviewed_at: datetime
    ) -> bool:
        """
        只有 pending 的提交可以被審核 (UPDATE ... WHERE status = 'pending')，不 commit。
        回傳 False 代表已被其他請求先審核。
        """
        stmt = (
            update(Submission)
            .where(
                Submission.submission_id == submission_id,
                Submission.status == SubmissionStatusEnum.pending,
            )
            .values(status=new, review_notes=review_notes, reviewed_at=reviewed_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def refresh(self, submission: Submission) -> Submission:
        await self.db.refresh(submission)
        return submission

# app/repositories/task_repo.py

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List, Optional

from app.models.task import Task, TaskStatusEnum


class TaskRepository:
    """
    封裝對 'tasks' 資料表的 CRUD 操作
    """
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_task_by_id(self, task_id: str) -> Optional[Task]:
        stmt = select(Task).where(Task.task_id == task_id)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def list_tasks_by_project(self, project_id: str) -> List[Task]:
        """
        依 order 由小到大
        """
        stmt = select(Task).where(Task.project_id == project_id).order_by(Task.order.asc())
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def get_max_order(self, project_id: str) -> Optional[int]:
        """
        目前案件中最大的 order，沒有任務時回傳 None
        """
        stmt = select(func.max(Task.order)).where(Task.project_id == project_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def count_incomplete_tasks(self, project_id: str) -> int:
        stmt = select(func.count(Task.task_id)).where(
            Task.project_id == project_id,
            Task.status != TaskStatusEnum.completed,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one()

    async def add_task(self, task: Task) -> Task:
        """
        加入 Session 並 flush (不 commit)，讓 Service 與案件狀態一起提交
        """
        self.db.add(task)
        await self.db.flush()
        return task

    async def update_task(self, task: Task) -> Task:
        await self.db.commit()
        await self.db.refresh(task)
        return task

    async def set_status(self, task_id: str, new: TaskStatusEnum) -> bool:
        """
        寫入任務狀態 (審核的連動)，不 commit。
        已經 completed 的任務不會被改寫，此時回傳 False。
        """
        stmt = (
            update(Task)
            .where(Task.task_id == task_id, Task.status != TaskStatusEnum.completed)
            .values(status=new)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def delete_task(self, task: Task) -> None:
        await self.db.delete(task)
        await self.db.commit()

    async def refresh(self, task: Task) -> Task:
        await self.db.refresh(task)
        return task

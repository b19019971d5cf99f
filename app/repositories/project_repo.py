# app/repositories/project_repo.py

import logging
from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.sql.elements import ColumnElement

# 匯入 Models
from app.models.project import Project, ProjectStatusEnum

logger = logging.getLogger(__name__)

class ProjectRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    # 建立新案件
    async def create_project(self, project: Project) -> Project:
        """
        新增案件 (status 預設為 open)
        """
        self.db.add(project)
        await self.db.commit()
        await self.db.refresh(project)
        return project

    # 獲取單一案件
    async def get_project_by_id(self, project_id: str) -> Project | None:
        stmt = select(Project).where(Project.project_id == project_id)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    # 條件搜尋案件
    async def list_projects(
        self,
        visibility: ColumnElement,
        status: Optional[ProjectStatusEnum] = None
    ) -> List[Project]:
        """
        依可見範圍 (visible_projects 產生的條件) 與狀態篩選，依建立時間倒序
        """
        stmt = select(Project).where(visibility)
        if status is not None:
            stmt = stmt.where(Project.status == status)
        stmt = stmt.order_by(Project.created_at.desc())

        result = await self.db.execute(stmt)
        return result.scalars().all()

    # 通用的更新方法
    async def update_project(self, project: Project) -> Project:
        """
        (U) 儲存對現有 Project 物件的變更
        """
        await self.db.commit()
        await self.db.refresh(project)
        return project

    async def compare_and_set_status(
        self,
        project_id: str,
        expected: ProjectStatusEnum,
        new: ProjectStatusEnum,
        **values
    ) -> bool:
        """
        只有在目前狀態仍是 expected 時才寫入 (UPDATE ... WHERE status = expected)。
        回傳 False 代表已被其他請求搶先改變狀態。
        不 commit，由上層 Service 決定交易邊界。
        """
        stmt = (
            update(Project)
            .where(Project.project_id == project_id, Project.status == expected)
            .values(status=new, **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            logger.warning(f"Project {project_id} status CAS {expected.value} -> {new.value} lost the race")
            return False
        return True

    async def refresh(self, project: Project) -> Project:
        await self.db.refresh(project)
        return project

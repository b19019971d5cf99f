# app/repositories/request_repo.py

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List, Optional

from app.models.project_request import ProjectRequest, RequestStatusEnum

class RequestRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_request_by_id(self, request_id: str) -> Optional[ProjectRequest]:
        """
        透過 ID 獲取單一申請
        """
        stmt = select(ProjectRequest).where(ProjectRequest.request_id == request_id)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def check_existing_request(self, project_id: str, solver_id: str) -> Optional[ProjectRequest]:
        """
        檢查特定解題者是否已對特定案件提出申請 (不論狀態)
        """
        stmt = select(ProjectRequest).where(
            ProjectRequest.project_id == project_id,
            ProjectRequest.solver_id == solver_id
        )
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_requests_by_project_id(self, project_id: str) -> List[ProjectRequest]:
        """
        獲取特定案件的所有申請 (買家檢視用)
        """
        stmt = (
            select(ProjectRequest)
            .where(ProjectRequest.project_id == project_id)
            .order_by(ProjectRequest.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def get_requests_by_solver_id(self, solver_id: str) -> List[ProjectRequest]:
        """
        獲取特定解題者的所有申請 (「我的申請」)
        """
        stmt = (
            select(ProjectRequest)
            .where(ProjectRequest.solver_id == solver_id)
            .order_by(ProjectRequest.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def create_request(self, request: ProjectRequest) -> ProjectRequest:
        """
        新增申請
        """
        self.db.add(request)
        await self.db.commit()
        await self.db.refresh(request)
        return request

    async def compare_and_set_status(
        self,
        request_id: str,
        expected: RequestStatusEnum,
        new: RequestStatusEnum
    ) -> bool:
        """
        UPDATE ... WHERE status = expected，不 commit
        """
        stmt = (
            update(ProjectRequest)
            .where(ProjectRequest.request_id == request_id, ProjectRequest.status == expected)
            .values(status=new)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1

    async def reject_pending_siblings(self, project_id: str, accepted_request_id: str) -> int:
        """
        將同案件其他 pending 的申請全部改為 rejected，回傳影響筆數 (不 commit)
        已經 accepted / rejected 的申請不受影響
        """
        stmt = (
            update(ProjectRequest)
            .where(
                ProjectRequest.project_id == project_id,
                ProjectRequest.request_id != accepted_request_id,
                ProjectRequest.status == RequestStatusEnum.pending,
            )
            .values(status=RequestStatusEnum.rejected)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    async def refresh(self, request: ProjectRequest) -> ProjectRequest:
        await self.db.refresh(request)
        return request

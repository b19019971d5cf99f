# app/routers/project_router.py
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

# 匯入核心依賴
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User

# 匯入 Service 和 Schemas
from app.services.project_service import ProjectService
from app.schemas.common_schema import ApiResponse
from app.schemas.project_schema import ProjectCreate, ProjectOut, ProjectUpdate, ProjectStatusUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/projects",
    tags=["Projects"],
    # (重要) 該模組下的所有 API 都至少需要登入
    dependencies=[Depends(get_current_user)]
)

@router.post(
    "",
    response_model=ApiResponse[ProjectOut],
    status_code=status.HTTP_201_CREATED
)
async def create_new_project(
    project_data: ProjectCreate, # Request Body
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    刊登新案件。

    - (權限) 僅限「買家」角色。
    """
    service = ProjectService(db)

    # Service 層會自動處理權限 (403)
    new_project = await service.create_project(
        project_data=project_data,
        user=current_user
    )

    return ApiResponse(data=ProjectOut.model_validate(new_project))

@router.get("", response_model=ApiResponse[List[ProjectOut]])
async def list_projects(
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    依角色列出可見案件 (管理員: 全部 / 買家: 自己的 / 解題者: 招募中或指派給自己的)。
    可用 ?status=open 進一步篩選。
    """
    service = ProjectService(db)
    projects = await service.list_projects(current_user, status)
    return ApiResponse(data=[ProjectOut.model_validate(p) for p in projects])

# 拿到特定的案件詳情
@router.get("/{project_id}", response_model=ApiResponse[ProjectOut])
async def get_project_by_id(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    獲取單一案件的詳細資料。
    """
    service = ProjectService(db)

    # Service 層會自動處理 404 / 403
    project = await service.get_project_details(project_id, current_user)

    return ApiResponse(data=ProjectOut.model_validate(project))


# 更新案件內容
@router.patch("/{project_id}", response_model=ApiResponse[ProjectOut])
async def update_project_details(
    project_id: str,
    project_data: ProjectUpdate, # Request Body
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    (買家 / 管理員) 更新案件的詳細內容。
    """
    service = ProjectService(db)
    updated_project = await service.update_project(
        project_id=project_id,
        data=project_data,
        user=current_user
    )
    return ApiResponse(data=ProjectOut.model_validate(updated_project))


# 更新案件狀態 (例如：取消案件)
@router.patch("/{project_id}/status", response_model=ApiResponse[ProjectOut])
async def update_project_status(
    project_id: str,
    status_data: ProjectStatusUpdate, # Request Body
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    (買家 / 管理員) 更新案件狀態。
    其餘狀態 (assigned / in_progress / completed) 由申請與任務流程連動產生。
    """
    service = ProjectService(db)
    updated_project = await service.update_project_status(
        project_id=project_id,
        data=status_data,
        user=current_user
    )
    return ApiResponse(data=ProjectOut.model_validate(updated_project))

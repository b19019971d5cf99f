# app/routers/request_router.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.services.request_service import RequestService
from app.schemas.common_schema import ApiResponse
from app.schemas.request_schema import RequestCreate, RequestOut

# 建立 API Router
router = APIRouter(
    prefix="/requests",
    tags=["Requests"],
    dependencies=[Depends(get_current_user)] # 重要：此 router 下所有 API 都需要登入
)

# 輔助函式：在路由中快速實例化 Service
def get_request_service(db: AsyncSession = Depends(get_db)) -> RequestService:
    return RequestService(db)

# -----------------------------------------------------------------
# 1. (解題者) 提出接案申請
# -----------------------------------------------------------------
@router.post("", response_model=ApiResponse[RequestOut], status_code=status.HTTP_201_CREATED)
async def submit_request(
    data: RequestCreate,
    service: RequestService = Depends(get_request_service),
    current_user: User = Depends(get_current_user)
):
    """
    解題者對「招募中」的案件提出申請。同一案件只能申請一次。
    """
    new_request = await service.create_request(data, current_user)
    return ApiResponse(data=RequestOut.model_validate(new_request))

# -----------------------------------------------------------------
# 2. (解題者) 檢視自己提出的所有申請
# -----------------------------------------------------------------
@router.get("/my", response_model=ApiResponse[List[RequestOut]])
async def get_my_requests(
    service: RequestService = Depends(get_request_service),
    current_user: User = Depends(get_current_user)
):
    requests = await service.get_my_requests(current_user)
    return ApiResponse(data=[RequestOut.model_validate(r) for r in requests])

# -----------------------------------------------------------------
# 3. (買家 / 管理員) 檢視特定案件的所有申請
# -----------------------------------------------------------------
@router.get("/project/{project_id}", response_model=ApiResponse[List[RequestOut]])
async def get_requests_for_project(
    project_id: str,
    service: RequestService = Depends(get_request_service),
    current_user: User = Depends(get_current_user)
):
    requests = await service.get_requests_for_project(project_id, current_user)
    return ApiResponse(data=[RequestOut.model_validate(r) for r in requests])

# -----------------------------------------------------------------
# 4. (買家) 接受 / 拒絕申請
# -----------------------------------------------------------------
@router.patch("/{request_id}/accept", response_model=ApiResponse[RequestOut])
async def accept_request(
    request_id: str,
    service: RequestService = Depends(get_request_service),
    current_user: User = Depends(get_current_user)
):
    """
    接受申請：其他 pending 申請自動拒絕，案件指派給此解題者。
    """
    accepted = await service.accept_request(request_id, current_user)
    return ApiResponse(data=RequestOut.model_validate(accepted))


@router.patch("/{request_id}/reject", response_model=ApiResponse[RequestOut])
async def reject_request(
    request_id: str,
    service: RequestService = Depends(get_request_service),
    current_user: User = Depends(get_current_user)
):
    rejected = await service.reject_request(request_id, current_user)
    return ApiResponse(data=RequestOut.model_validate(rejected))

# app/routers/submission_router.py

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.services.submission_service import SubmissionService
from app.schemas.common_schema import ApiResponse
from app.schemas.submission_schema import SubmissionOut, SubmissionReview

router = APIRouter(
    prefix="/submissions",
    tags=["Submissions"],
    dependencies=[Depends(get_current_user)]
)

def get_submission_service(db: AsyncSession = Depends(get_db)) -> SubmissionService:
    return SubmissionService(db)


@router.post("", response_model=ApiResponse[SubmissionOut], status_code=status.HTTP_201_CREATED)
async def create_submission(
    # (重要) 由於是檔案上傳，欄位必須來自 Form
    task_id: str = Form(...),
    notes: Optional[str] = Form(None),
    # 缺檔案時由 Service 回傳 "ZIP file is required"
    file: Optional[UploadFile] = File(None),
    service: SubmissionService = Depends(get_submission_service),
    current_user: User = Depends(get_current_user)
):
    """
    (被指派的解題者) 上傳任務交付檔案。

    - 必須傳送 form-data。
    - 檔案 (file) 必須是 ZIP，上限 50MB。
    """
    submission = await service.create_submission(task_id, current_user, file, notes)
    return ApiResponse(data=SubmissionOut.model_validate(submission))


@router.get("/task/{task_id}", response_model=ApiResponse[List[SubmissionOut]])
async def get_submissions_for_task(
    task_id: str,
    service: SubmissionService = Depends(get_submission_service),
    current_user: User = Depends(get_current_user)
):
    submissions = await service.get_submissions_for_task(task_id, current_user)
    return ApiResponse(data=[SubmissionOut.model_validate(s) for s in submissions])


@router.patch("/{submission_id}/review", response_model=ApiResponse[SubmissionOut])
async def review_submission(
    submission_id: str,
    data: SubmissionReview,
    service: SubmissionService = Depends(get_submission_service),
    current_user: User = Depends(get_current_user)
):
    """
    (買家 / 管理員) 審核提交：status 傳入 "approved" 或 "rejected"。
    核准最後一個未完成的任務時，案件會自動完成。
    """
    submission = await service.review_submission(submission_id, data, current_user)
    return ApiResponse(data=SubmissionOut.model_validate(submission))


@router.get("/{submission_id}/download")
async def download_submission(
    submission_id: str,
    service: SubmissionService = Depends(get_submission_service),
    current_user: User = Depends(get_current_user)
):
    file_path, file_name = await service.get_download(submission_id, current_user)
    return FileResponse(file_path, filename=file_name, media_type="application/zip")

# app/routers/task_router.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.services.task_service import TaskService
from app.schemas.common_schema import ApiResponse
from app.schemas.task_schema import TaskCreate, TaskOut, TaskUpdate

router = APIRouter(
    prefix="/tasks",
    tags=["Tasks"],
    dependencies=[Depends(get_current_user)]
)

def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.post("", response_model=ApiResponse[TaskOut], status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    service: TaskService = Depends(get_task_service),
    current_user: User = Depends(get_current_user)
):
    """
    (被指派的解題者) 在案件下新增任務。第一個任務會讓案件進入 in_progress。
    """
    task = await service.create_task(data, current_user)
    return ApiResponse(data=TaskOut.model_validate(task))


@router.get("/project/{project_id}", response_model=ApiResponse[List[TaskOut]])
async def get_tasks_for_project(
    project_id: str,
    service: TaskService = Depends(get_task_service),
    current_user: User = Depends(get_current_user)
):
    tasks = await service.get_tasks_for_project(project_id, current_user)
    return ApiResponse(data=[TaskOut.model_validate(t) for t in tasks])


@router.get("/{task_id}", response_model=ApiResponse[TaskOut])
async def get_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
    current_user: User = Depends(get_current_user)
):
    task = await service.get_task(task_id, current_user)
    return ApiResponse(data=TaskOut.model_validate(task))


@router.patch("/{task_id}", response_model=ApiResponse[TaskOut])
async def update_task(
    task_id: str,
    data: TaskUpdate,
    service: TaskService = Depends(get_task_service),
    current_user: User = Depends(get_current_user)
):
    """
    (被指派的解題者) 更新任務。status 不能設為 completed (需經買家核准提交)。
    """
    task = await service.update_task(task_id, data, current_user)
    return ApiResponse(data=TaskOut.model_validate(task))


@router.delete("/{task_id}", response_model=ApiResponse[None])
async def delete_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
    current_user: User = Depends(get_current_user)
):
    await service.delete_task(task_id, current_user)
    return ApiResponse(message="Task deleted successfully")

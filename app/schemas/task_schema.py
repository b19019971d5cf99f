# app/schemas/task_schema.py
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from app.models.task import TaskStatusEnum


class TaskCreate(BaseModel):
    project_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = ""
    deadline: Optional[datetime] = None


# 解題者更新任務 (status 不能直接設為 completed)
class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    deadline: Optional[datetime] = None
    status: Optional[str] = None


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    task_id: str
    project_id: str
    title: str
    description: str = ""
    deadline: Optional[datetime] = None
    status: TaskStatusEnum
    order: int
    created_at: datetime
    updated_at: datetime

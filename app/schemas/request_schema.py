# app/schemas/request_schema.py
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from app.models.project_request import RequestStatusEnum

# --- 建立 (Create) ---
# solver_id 從 Token 中取得
class RequestCreate(BaseModel):
    project_id: str = Field(..., min_length=1)
    message: Optional[str] = ""

# --- 讀取 (Read / Out) ---
class RequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    request_id: str
    project_id: str
    solver_id: str
    message: str = ""
    status: RequestStatusEnum
    created_at: datetime
    updated_at: datetime

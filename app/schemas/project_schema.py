# app/schemas/project_schema.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
from app.models.project import ProjectStatusEnum

# 1. 基礎欄位 (對應 Model)
class ProjectBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    requirements: str = ""
    budget: Optional[float] = Field(None, gt=0)
    deadline: Optional[datetime] = None

# 2. 買家刊登案件時的 Request Body (Input)
class ProjectCreate(ProjectBase):
    pass

# 3. 買家更新案件時的 Request Body (Input)
# (所有欄位皆可選，只更新有傳入的欄位)
class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    requirements: Optional[str] = None
    budget: Optional[float] = Field(None, gt=0)
    deadline: Optional[datetime] = None

# 4. 更新案件狀態 (Service 會驗證是否為合法列舉與合法轉移)
class ProjectStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1)

# 5. 回傳給前端的案件資料 (Output)
class ProjectOut(BaseModel):
    project_id: str
    buyer_id: str
    assigned_solver_id: Optional[str] = None
    title: str
    description: str
    requirements: str = ""
    budget: Optional[float] = None
    deadline: Optional[datetime] = None
    status: ProjectStatusEnum
    created_at: datetime
    updated_at: datetime

    @field_validator('budget', mode='before')
    @classmethod
    def decimal_to_float(cls, v):
        # DECIMAL 欄位讀出來是 Decimal
        if isinstance(v, Decimal):
            return float(v)
        return v

    class Config:
        from_attributes = True # 啟用 ORM 模式

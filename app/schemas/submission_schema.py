# app/schemas/submission_schema.py
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from app.models.submission import SubmissionStatusEnum


# 買家審核 (status 必須是 approved 或 rejected)
class SubmissionReview(BaseModel):
    status: str = Field(..., min_length=1)
    review_notes: Optional[str] = None


class SubmissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    submission_id: str
    task_id: str
    solver_id: str
    file_name: str
    file_size: int
    notes: str = ""
    status: SubmissionStatusEnum
    review_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

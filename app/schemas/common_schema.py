# app/schemas/common_schema.py
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")

# 所有 API 共用的回應外框: {success, data, message}
class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


# 錯誤回應 (由 main.py 的 exception handler 產生)
class ErrorResponse(BaseModel):
    success: bool = False
    message: str

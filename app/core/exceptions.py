# app/core/exceptions.py
# 業務錯誤分類：Service 層直接 raise，FastAPI 會統一轉成 HTTP 回應
from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """輸入格式錯誤、列舉值不合法、缺少必要欄位 (400)"""
    def __init__(self, detail: str = "Validation failed"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class AuthenticationError(HTTPException):
    """未登入、Token 無效或過期、帳密錯誤 (401)"""
    def __init__(self, detail: str = "Not authorized to access this route"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(HTTPException):
    """已登入，但角色或擁有者檢查未通過 (403)"""
    def __init__(self, detail: str = "Not authorized to perform this action"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    """引用的資源不存在 (404)"""
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """
    狀態前置條件不符 (重複申請、案件已指派、提交已審核...)。
    沿用 400，不另外使用 409。
    """
    def __init__(self, detail: str = "Resource conflict"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

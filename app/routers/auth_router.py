import logging
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.services.auth_service import AuthService
from app.schemas.common_schema import ApiResponse
from app.schemas.user_schema import AuthOut, Token, UserCreate, UserLogin, UserOut


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth", # 路由前綴
    tags=["Auth"]    # API 文件分類標籤
)


# 註冊 API 端點
@router.post("/register", response_model=ApiResponse[AuthOut], status_code=status.HTTP_201_CREATED)
async def register_new_user(
    user_data: UserCreate, # Request Body 會被 Pydantic 驗證
    db: AsyncSession = Depends(get_db)
):
    """
    註冊新使用者 (一律為 problem_solver，買家身分由管理員指派)

    - 密碼至少 6 碼。
    """
    auth_service = AuthService(db)

    # 服務層中的 HTTPException 會自動被 FastAPI 捕捉並回傳
    new_user = await auth_service.register_user(user_data)
    token = auth_service.create_login_token(new_user)

    return ApiResponse(data=AuthOut(user=UserOut.model_validate(new_user), token=token))


@router.post("/login", response_model=ApiResponse[AuthOut])
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """
    以 JSON (email / password) 登入，回傳使用者資料與 token
    """
    auth_service = AuthService(db)
    user = await auth_service.login(credentials.email, credentials.password)
    token = auth_service.create_login_token(user)
    return ApiResponse(data=AuthOut(user=UserOut.model_validate(user), token=token))


@router.post("/token", response_model=Token)
async def login_for_access_token(
    # (重要) 使用 OAuth2PasswordRequestForm 會強制 API 只接受 form-data
    # 格式為 username=...&password=... (給 Swagger UI 的 Authorize 使用)
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db)
):
    """
    提供帳號 (username 欄位傳 email) 和密碼以取得 Access Token
    """
    auth_service = AuthService(db)

    # form_data.username 欄位就是我們的 email
    user = await auth_service.login(form_data.username, form_data.password)
    access_token = auth_service.create_login_token(user)

    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/me", response_model=ApiResponse[UserOut])
async def read_me(
    current_user: User = Depends(get_current_user)
):
    """
    獲取當前登入使用者的基本資料 (不含密碼)
    """
    return ApiResponse(data=UserOut.model_validate(current_user))

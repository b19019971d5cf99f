import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.config import settings
from app.core.database import init_models
from app.schemas.common_schema import ErrorResponse
from app.routers import (
    auth_router, user_router,
    project_router, request_router,
    task_router, submission_router
)

# --- 匯入所有 Model 檔案 ---
# 都在應用程式啟動時被 SQLAlchemy 註冊。
from app.models import user
from app.models import project
from app.models import project_request
from app.models import task
from app.models import submission


# 設定基礎日誌
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__) # 建立一個 logger 實例


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        await init_models()
        logger.info("Database tables ensured")
    yield


app = FastAPI(title="Project Marketplace API", lifespan=lifespan)

# --- 設定 CORS (跨來源資源共用) ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list, # 由 CORS_ORIGINS 設定 (逗號分隔)
    allow_credentials=True,
    allow_methods=["*"], # 允許所有 HTTP 方法
    allow_headers=["*"], # 允許所有 HTTP 標頭
)


# --- 統一錯誤格式 {"success": false, "message": ...} ---
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = ", ".join(str(error.get("msg", "")) for error in exc.errors())
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(message=message or "Validation error").model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(message="Internal server error").model_dump(),
    )


# --- 根路徑 ---
@app.get("/")
def read_root():
    return {"success": True, "message": "Backend is running!"}


@app.get("/health")
def health_check():
    return {"status": "OK"}


# --- 載入 API 路由 ---
app.include_router(auth_router.router, prefix=settings.API_PREFIX)
app.include_router(user_router.router, prefix=settings.API_PREFIX)
app.include_router(project_router.router, prefix=settings.API_PREFIX)
app.include_router(request_router.router, prefix=settings.API_PREFIX)
app.include_router(task_router.router, prefix=settings.API_PREFIX)
app.include_router(submission_router.router, prefix=settings.API_PREFIX)

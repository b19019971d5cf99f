# app/core/config.py
# 應用程式設定 (資料庫連線字串、JWT 秘鑰、上傳目錄等)
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # 資料庫設定 (非同步驅動，例如 mysql+aiomysql://user:pw@host/db)
    DATABASE_URL: str
    # 設為 True 會在 console 印出 SQL 語句
    DB_ECHO: bool = False
    # 啟動時自動建立資料表 (無 migration 工具時使用)
    AUTO_CREATE_TABLES: bool = True

    # JWT 設定
    JWT_SECRET_KEY: str
    # JWT 演算法
    JWT_ALGORITHM: str = "HS256"
    # 存取令牌過期時間（分鐘），預設 7 天
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # API 路徑前綴
    API_PREFIX: str = "/api"
    # CORS 允許的來源 (逗號分隔)
    CORS_ORIGINS: str = "*"

    # 交付檔案 (ZIP) 儲存位置與大小上限
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE_MB: int = 50

    # 日誌等級
    LOG_LEVEL: str = "INFO"

    # 預設管理員 (python -m app.seed)
    ADMIN_EMAIL: str = "admin@marketplace.com"
    ADMIN_PASSWORD: str = "admin123"
    ADMIN_NAME: str = "Admin User"

    # 環境變數檔案
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

# 建立設定實例
settings = Settings()

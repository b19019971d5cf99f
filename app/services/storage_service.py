# app/services/storage_service.py
# 交付檔案 (ZIP) 的儲存與讀取

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles
from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import ValidationError, NotFoundError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"application/zip", "application/x-zip-compressed"}
CHUNK_SIZE = 1024 * 1024


@dataclass
class StoredFile:
    key: str        # UPLOAD_DIR 底下的檔名 (寫入 Submission.file_path)
    file_name: str  # 使用者上傳時的原始檔名
    size: int


def is_zip_upload(file: UploadFile) -> bool:
    filename = (file.filename or "").lower()
    return file.content_type in ALLOWED_CONTENT_TYPES or filename.endswith(".zip")


class StorageService:
    def __init__(self, upload_dir: Optional[str] = None, max_size: Optional[int] = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.max_size = max_size or settings.max_upload_size_bytes

    async def store(self, file: Optional[UploadFile]) -> StoredFile:
        """
        驗證並寫入上傳檔案，回傳儲存後的 key
        - 只接受 ZIP
        - 超過大小上限時刪除寫到一半的檔案並回 400
        """
        if file is None or not file.filename:
            raise ValidationError("ZIP file is required")
        if not is_zip_upload(file):
            raise ValidationError("Only ZIP files are allowed")

        extension = Path(file.filename).suffix or ".zip"
        key = f"{uuid.uuid4()}{extension}"
        # 第一次寫入時才建立上傳目錄
        os.makedirs(self.upload_dir, exist_ok=True)
        file_path = self.upload_dir / key

        size = 0
        try:
            async with aiofiles.open(file_path, 'wb') as f:
                while True:
                    chunk = await file.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_size:
                        break
                    await f.write(chunk)
        except Exception:
            # 串流中斷時不留下寫到一半的檔案
            if os.path.exists(file_path):
                os.remove(file_path)
            logger.error(f"Failed to store upload '{file.filename}'", exc_info=True)
            raise

        if size > self.max_size:
            os.remove(file_path)
            raise ValidationError(f"File too large. Maximum size is {self.max_size // (1024 * 1024)}MB")

        logger.info(f"Stored upload '{file.filename}' as {key} ({size} bytes)")
        return StoredFile(key=key, file_name=file.filename, size=size)

    def resolve(self, key: str) -> Path:
        """
        key 對應的實際路徑，檔案不存在時回 404
        """
        # key 只能是單純檔名，避免 ../ 跳出上傳目錄
        if not key or Path(key).name != key:
            raise NotFoundError("File not found")
        file_path = self.upload_dir / key
        if not file_path.is_file():
            raise NotFoundError("File not found")
        return file_path

    async def retrieve(self, key: str) -> bytes:
        file_path = self.resolve(key)
        async with aiofiles.open(file_path, 'rb') as f:
            return await f.read()

    def delete(self, key: str) -> None:
        file_path = self.upload_dir / Path(key).name
        if os.path.exists(file_path):
            os.remove(file_path)

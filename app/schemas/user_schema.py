# app/schemas/user_schema.py
from pydantic import BaseModel, EmailStr, Field, field_validator, ConfigDict
from datetime import datetime
from typing import List, Optional
from app.models.user import UserRoleEnum

# 登入請求的格式
class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

# Token 回應的格式 (OAuth2 /auth/token)
class Token(BaseModel):
    access_token: str
    token_type: str

# Token 內的資料
class TokenData(BaseModel):
    user_id: str
    role: str


# 註冊請求 Body
# (角色一律為 problem_solver，由管理員另外調整)
class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=255)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Name is required')
        return v.strip()


class ProfileOut(BaseModel):
    bio: str = ""
    skills: List[str] = []
    experience: str = ""
    portfolio: str = ""


# 個人資料部分更新 (只覆蓋有傳入的欄位)
class ProfileUpdate(BaseModel):
    bio: Optional[str] = None
    skills: Optional[List[str]] = None
    experience: Optional[str] = None
    portfolio: Optional[str] = None


class UserProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    profile: Optional[ProfileUpdate] = None


class UserRoleUpdate(BaseModel):
    role: str = Field(..., min_length=1)


# 查詢使用者的安全回應 (不含密碼)
class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    email: EmailStr
    name: str
    role: UserRoleEnum
    profile: ProfileOut = ProfileOut()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator('profile', mode='before')
    @classmethod
    def fill_profile(cls, v):
        # 舊資料可能是 NULL
        return v or {}


# 註冊 / 登入成功時回傳使用者與 token
class AuthOut(BaseModel):
    user: UserOut
    token: str

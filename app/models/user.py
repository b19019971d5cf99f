# models/user.py
import enum
import uuid
from sqlalchemy import Column, String, Enum, JSON, TIMESTAMP, CHAR
from sqlalchemy.orm import relationship
from app.core.database import Base, utcnow

# 對應 SQL 中的 ENUM 型別
class UserRoleEnum(str, enum.Enum):
    admin = "admin"
    buyer = "buyer"
    solver = "problem_solver"


def default_profile() -> dict:
    return {"bio": "", "skills": [], "experience": "", "portfolio": ""}


class User(Base):
    __tablename__ = "users"

    # 基本欄位
    user_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(
        Enum(UserRoleEnum, values_callable=lambda obj: [e.value for e in obj], name="user_role_enum"),
        nullable=False,
        default=UserRoleEnum.solver,
    )
    # bio / skills / experience / portfolio
    profile = Column(JSON, nullable=False, default=default_profile)

    created_at = Column(TIMESTAMP, default=utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=utcnow, onupdate=utcnow, nullable=False)

    # 關聯設定
    # 身為買家刊登的案件
    projects_owned = relationship(
        "Project",
        foreign_keys="[Project.buyer_id]",
        back_populates="buyer",
    )

    # 身為解題者被指派的案件
    projects_assigned = relationship(
        "Project",
        foreign_keys="[Project.assigned_solver_id]",
        back_populates="assigned_solver",
    )

    # 身為解題者送出的接案申請
    requests = relationship(
        "ProjectRequest",
        back_populates="solver",
    )

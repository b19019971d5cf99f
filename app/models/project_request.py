# app/models/project_request.py
import enum
import uuid
from sqlalchemy import Column, TEXT, ForeignKey, TIMESTAMP, Enum, CHAR, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from app.core.database import Base, utcnow


class RequestStatusEnum(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


class ProjectRequest(Base):
    """解題者對「招募中」案件提出的接案申請"""
    __tablename__ = "project_requests"
    __table_args__ = (
        # 同一位解題者對同一案件只能申請一次
        UniqueConstraint("project_id", "solver_id", name="uq_project_requests_project_solver"),
        Index("ix_project_requests_project_status", "project_id", "status"),
    )

    request_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # ForeignKey 指向 "tablename.columnname"
    project_id = Column(CHAR(36), ForeignKey("projects.project_id"), nullable=False, index=True)
    solver_id = Column(CHAR(36), ForeignKey("users.user_id"), nullable=False, index=True)

    message = Column(TEXT, nullable=False, default="")
    status = Column(
        Enum(RequestStatusEnum, values_callable=lambda obj: [e.value for e in obj], name="request_status_enum"),
        nullable=False,
        default=RequestStatusEnum.pending,
    )

    created_at = Column(TIMESTAMP, default=utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=utcnow, onupdate=utcnow, nullable=False)

    # --- 建立關聯 (Relationships) ---
    project = relationship("Project", back_populates="requests")
    solver = relationship("User", back_populates="requests")

# app/models/submission.py
import enum
import uuid
from sqlalchemy import Column, String, TEXT, BIGINT, TIMESTAMP, ForeignKey, Enum, CHAR
from sqlalchemy.orm import relationship
from app.core.database import Base, utcnow


class SubmissionStatusEnum(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class Submission(Base):
    __tablename__ = "submissions"

    submission_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    task_id = Column(CHAR(36), ForeignKey("tasks.task_id", ondelete="CASCADE"), nullable=False, index=True)
    solver_id = Column(CHAR(36), ForeignKey("users.user_id"), nullable=False, index=True)

    # file_path 是儲存層的 key (UPLOAD_DIR 底下的檔名)，file_name 是使用者上傳時的原始檔名
    file_path = Column(String(500), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_size = Column(BIGINT, nullable=False)
    notes = Column(TEXT, nullable=False, default="")

    status = Column(
        Enum(SubmissionStatusEnum, values_callable=lambda obj: [e.value for e in obj], name="submission_status_enum"),
        nullable=False,
        default=SubmissionStatusEnum.pending,
    )
    review_notes = Column(TEXT, nullable=True)
    reviewed_at = Column(TIMESTAMP, nullable=True)

    created_at = Column(TIMESTAMP, default=utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=utcnow, onupdate=utcnow, nullable=False)

    task = relationship("Task", back_populates="submissions")

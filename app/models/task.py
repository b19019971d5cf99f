# app/models/task.py
import enum
import uuid
from sqlalchemy import Column, String, TEXT, INT, TIMESTAMP, ForeignKey, Enum, CHAR, Index
from sqlalchemy.orm import relationship
from app.core.database import Base, utcnow


class TaskStatusEnum(str, enum.Enum):
    todo = "todo"
    in_progress = "in_progress"
    submitted = "submitted"
    revision_requested = "revision_requested"
    completed = "completed"


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_project_order", "project_id", "order"),
    )

    task_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(CHAR(36), ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(TEXT, nullable=False, default="")
    deadline = Column(TIMESTAMP, nullable=True)
    status = Column(
        Enum(TaskStatusEnum, values_callable=lambda obj: [e.value for e in obj], name="task_status_enum"),
        nullable=False,
        default=TaskStatusEnum.todo,
    )
    # 案件內排序 (建立時 = 目前最大值 + 1，第一個任務為 0)
    order = Column(INT, nullable=False, default=0)

    created_at = Column(TIMESTAMP, default=utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=utcnow, onupdate=utcnow, nullable=False)

    project = relationship("Project", back_populates="tasks")

    # 刪除任務時，一併刪除其提交紀錄
    submissions = relationship(
        "Submission",
        back_populates="task",
        cascade="all, delete-orphan",
    )

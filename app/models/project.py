# models/project.py
import enum
import uuid
from sqlalchemy import Column, String, TEXT, DECIMAL, TIMESTAMP, ForeignKey, Enum, CHAR
from sqlalchemy.orm import relationship
from app.core.database import Base, utcnow


class ProjectStatusEnum(str, enum.Enum):
    open = "open"
    assigned = "assigned"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class Project(Base):
    # 告訴 SQLAlchemy，這個類別對應到資料庫中名為 projects 的表格 (table)
    __tablename__ = "projects"

    project_id = Column(CHAR(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # 加上 index=True 提升 FK 查詢效能
    buyer_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    # 只有在 assigned / in_progress / completed 時才會有值
    assigned_solver_id = Column(CHAR(36), ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True, index=True)

    title = Column(String(255), nullable=False)
    description = Column(TEXT, nullable=False)
    requirements = Column(TEXT, nullable=False, default="")
    budget = Column(DECIMAL(12, 2), nullable=True)
    deadline = Column(TIMESTAMP, nullable=True)
    status = Column(
        Enum(ProjectStatusEnum, values_callable=lambda obj: [e.value for e in obj], name="project_status_enum"),
        nullable=False,
        default=ProjectStatusEnum.open,
        index=True,
    )

    created_at = Column(TIMESTAMP, default=utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=utcnow, onupdate=utcnow, nullable=False)

    # 建立與 User (買家) 的 '一' 關聯，呼應 user.py 中的 'projects_owned'
    buyer = relationship(
        "User",
        foreign_keys=[buyer_id],
        back_populates="projects_owned",
    )

    # 被指派的解題者
    assigned_solver = relationship(
        "User",
        foreign_keys=[assigned_solver_id],
        back_populates="projects_assigned",
    )

    # 接案申請 (只以 id 參照，不隨案件刪除)
    requests = relationship(
        "ProjectRequest",
        back_populates="project",
    )

    # 任務的生命週期綁定在案件上
    tasks = relationship(
        "Task",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="Task.order",
    )

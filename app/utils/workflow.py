# app/utils/workflow.py
# 案件 / 申請 / 任務 / 提交 四種實體的狀態機
# 每個實體只有一個權威的檢查函式，Service 層不自行判斷轉移是否合法
from typing import Dict, FrozenSet, Type, TypeVar
import enum

from app.core.exceptions import ConflictError, ValidationError
from app.models.project import ProjectStatusEnum
from app.models.project_request import RequestStatusEnum
from app.models.task import TaskStatusEnum
from app.models.submission import SubmissionStatusEnum

E = TypeVar("E", bound=enum.Enum)


def parse_status(enum_cls: Type[E], value, message: str = "Invalid status") -> E:
    """將字串轉成狀態 Enum，不在列舉內則回 400"""
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(message)


# --- 案件 ---
PROJECT_TRANSITIONS: Dict[ProjectStatusEnum, FrozenSet[ProjectStatusEnum]] = {
    ProjectStatusEnum.open: frozenset({ProjectStatusEnum.assigned, ProjectStatusEnum.cancelled}),
    ProjectStatusEnum.assigned: frozenset({ProjectStatusEnum.in_progress, ProjectStatusEnum.cancelled}),
    ProjectStatusEnum.in_progress: frozenset({ProjectStatusEnum.completed, ProjectStatusEnum.cancelled}),
    ProjectStatusEnum.completed: frozenset(),
    ProjectStatusEnum.cancelled: frozenset(),
}

# 買家 / 管理員透過 PATCH /projects/{id}/status 只能做的轉移
# (assigned / in_progress / completed 只能由申請、任務、審核的連動產生)
PROJECT_MANUAL_TARGETS = frozenset({ProjectStatusEnum.cancelled})


def can_transition_project(current: ProjectStatusEnum, new: ProjectStatusEnum) -> bool:
    return new in PROJECT_TRANSITIONS[ProjectStatusEnum(current)]


def check_project_transition(current, new, manual: bool = False) -> None:
    """
    檢查案件狀態轉移。
    manual=True 代表來自使用者直接更新狀態 (只允許取消)。
    """
    current = ProjectStatusEnum(current)
    new = ProjectStatusEnum(new)
    if manual and new not in PROJECT_MANUAL_TARGETS:
        raise ConflictError(f"Project status cannot be set to '{new.value}' directly")
    if not can_transition_project(current, new):
        raise ConflictError(f"Cannot change project status from '{current.value}' to '{new.value}'")


# --- 接案申請 ---
REQUEST_TRANSITIONS: Dict[RequestStatusEnum, FrozenSet[RequestStatusEnum]] = {
    RequestStatusEnum.pending: frozenset({RequestStatusEnum.accepted, RequestStatusEnum.rejected}),
    RequestStatusEnum.accepted: frozenset(),
    RequestStatusEnum.rejected: frozenset(),
}


def check_request_transition(current, new) -> None:
    """申請一旦被處理 (accepted / rejected) 就是終態"""
    current = RequestStatusEnum(current)
    new = RequestStatusEnum(new)
    if new not in REQUEST_TRANSITIONS[current]:
        raise ConflictError("Request has already been processed")


# --- 任務 ---
def check_task_update(current, new) -> None:
    """
    解題者直接更新任務狀態。
    completed 只能經由買家核准提交而來。
    """
    current = TaskStatusEnum(current)
    new = TaskStatusEnum(new)
    if new == TaskStatusEnum.completed:
        raise ValidationError("Task can only be marked complete by buyer")
    if current == TaskStatusEnum.completed:
        raise ConflictError("Task is already completed")


def check_task_accepts_submission(current) -> None:
    if TaskStatusEnum(current) == TaskStatusEnum.completed:
        raise ConflictError("Task is already completed")


def task_status_after_review(review_status) -> TaskStatusEnum:
    """審核結果對應到任務狀態"""
    if SubmissionStatusEnum(review_status) == SubmissionStatusEnum.approved:
        return TaskStatusEnum.completed
    return TaskStatusEnum.revision_requested


# --- 提交 ---
REVIEW_OUTCOMES = frozenset({SubmissionStatusEnum.approved, SubmissionStatusEnum.rejected})


def check_submission_review(current, new, task_status) -> SubmissionStatusEnum:
    """
    一份提交只能審核一次，且結果只能是 approved / rejected。
    任務已完成時，同任務其他仍為 pending 的提交不能再審核 (否則任務會被改回 revision_requested)。
    """
    if SubmissionStatusEnum(current) != SubmissionStatusEnum.pending:
        raise ConflictError("Submission has already been reviewed")
    check_task_accepts_submission(task_status)
    outcome = parse_status(SubmissionStatusEnum, new)
    if outcome not in REVIEW_OUTCOMES:
        raise ValidationError("Invalid status")
    return outcome

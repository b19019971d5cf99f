# app/utils/access.py
# 依角色決定使用者能看到 / 操作哪些案件
from sqlalchemy import or_, true
from sqlalchemy.sql.elements import ColumnElement

from app.models.user import User, UserRoleEnum
from app.models.project import Project, ProjectStatusEnum


def is_admin(user: User) -> bool:
    return user.role == UserRoleEnum.admin


def is_project_owner(user: User, project: Project) -> bool:
    return project.buyer_id == user.user_id


def is_assigned_solver(user: User, project: Project) -> bool:
    return project.assigned_solver_id is not None and project.assigned_solver_id == user.user_id


def is_owner_or_admin(user: User, project: Project) -> bool:
    return is_project_owner(user, project) or is_admin(user)


def is_project_participant(user: User, project: Project) -> bool:
    """買家本人、被指派的解題者、管理員"""
    return is_project_owner(user, project) or is_assigned_solver(user, project) or is_admin(user)


def visible_projects(user: User) -> ColumnElement:
    """
    回傳案件列表的篩選條件 (SQLAlchemy where 子句)
    - 管理員: 全部
    - 買家: 自己刊登的
    - 解題者: 招募中的，或指派給自己的
    """
    if user.role == UserRoleEnum.admin:
        return true()
    if user.role == UserRoleEnum.buyer:
        return Project.buyer_id == user.user_id
    return or_(
        Project.status == ProjectStatusEnum.open,
        Project.assigned_solver_id == user.user_id,
    )


def can_view_project(user: User, project: Project) -> bool:
    """與 visible_projects 相同的規則，套用在單一物件上"""
    if user.role == UserRoleEnum.admin:
        return True
    if user.role == UserRoleEnum.buyer:
        return is_project_owner(user, project)
    return project.status == ProjectStatusEnum.open or is_assigned_solver(user, project)

# Overview: Service-layer operations for projects.

from __future__ import annotations

from ..extensions import db
from ..models import Project
from ..validation import NotFoundError


PROJECT_MUTABLE_FIELDS = {
    "name", "type", "amount", "status", "description", "client_name", "start_date", "end_date",
}


def list_projects(user_id: str, type: str | None = None, status: str | None = None) -> list[Project]:
    query = db.session.query(Project).filter(Project.user_id == user_id)
    if type:
        query = query.filter(Project.type == type)
    if status:
        query = query.filter(Project.status == status)
    return query.order_by(Project.start_date.desc()).all()


def get_project(user_id: str, project_id: str) -> Project:
    project = db.session.get(Project, project_id)
    if not project or project.user_id != user_id:
        raise NotFoundError("Project not found")
    return project


def create_project(user_id: str, patch: dict) -> Project:
    project = Project(user_id=user_id, status="active")
    for k, v in patch.items():
        if k in PROJECT_MUTABLE_FIELDS:
            setattr(project, k, v)
    db.session.add(project)
    db.session.commit()
    return project


def update_project(user_id: str, project_id: str, patch: dict) -> Project:
    project = get_project(user_id, project_id)
    for k, v in patch.items():
        if k in PROJECT_MUTABLE_FIELDS:
            setattr(project, k, v)
    db.session.commit()
    return project


def delete_project(user_id: str, project_id: str) -> None:
    project = get_project(user_id, project_id)
    db.session.delete(project)
    db.session.commit()

from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hrportal.core import roles
from hrportal.core.exceptions import AccessDeniedError
from hrportal.core.security import sanitize_input
from hrportal.database import get_db
from hrportal.models.project import Project, ProjectStatus
from hrportal.schemas.project import ProjectCreate, ProjectResponse, ProjectStatusUpdate
from hrportal.routers.auth_deps import RequestContext, get_request_context, require_tier
from hrportal.services.audit import AuditService

router = APIRouter(prefix="/projects", tags=["projects"])


def _director_or_manager(role: str) -> bool:
    return roles.is_director(role) or roles.is_manager(role)


@router.post("/", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectCreate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_tier(_director_or_manager, "directors and managers"))
):
    # Directors start work straight away; manager projects begin in planning
    initial = ProjectStatus.ACTIVE if roles.is_director(ctx.user.role) else ProjectStatus.PLANNING
    project = Project(
        title=data.title,
        description=sanitize_input(data.description),
        owner_id=ctx.user_id,
        start_date=data.start_date,
        end_date=data.end_date,
        status=initial.value,
    )
    try:
        db.add(project)
        db.flush()
        AuditService.log(
            db,
            action="create_project",
            entity_type="project",
            entity_id=project.id,
            user_id=ctx.user_id,
            user_role=ctx.user.role,
            details={"title": project.title, "status": project.status}
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(project)
    return project


@router.get("/active", response_model=List[ProjectResponse])
def active_projects(
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    return db.query(Project).filter(
        Project.owner_id == ctx.user_id,
        Project.status == ProjectStatus.ACTIVE.value
    ).order_by(Project.start_date.desc()).all()


@router.patch("/{project_id}/status", response_model=ProjectResponse)
def update_project_status(
    project_id: int,
    data: ProjectStatusUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    project = db.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    if project.owner_id != ctx.user_id:
        raise AccessDeniedError("Only the project owner can change its status")

    before_state = {"status": project.status}
    project.status = data.status.value
    AuditService.log(
        db,
        action="update_project_status",
        entity_type="project",
        entity_id=project.id,
        user_id=ctx.user_id,
        user_role=ctx.user.role,
        details={"title": project.title},
        before_state=before_state,
        after_state={"status": project.status}
    )
    db.commit()
    db.refresh(project)
    return project

from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hrportal.core import roles
from hrportal.core.exceptions import AccessDeniedError
from hrportal.core.security import sanitize_input
from hrportal.database import get_db
from hrportal.models.project import Project
from hrportal.models.task import Task, TaskStatus
from hrportal.schemas.task import TaskCreate, TaskProgressUpdate, TaskResponse
from hrportal.routers.auth_deps import RequestContext, get_request_context, require_approver
from hrportal.services.audit import AuditService
from hrportal.services.notification import NotificationService
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _may_assign(ctx: RequestContext, assignee_id: str) -> bool:
    """Direct approvers assign to their reports; directors to anyone in scope."""
    if ctx.can_approve(assignee_id):
        return True
    return roles.is_director(ctx.user.role) and assignee_id != ctx.user_id and ctx.can_see(assignee_id)


@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def assign_task(
    data: TaskCreate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_approver())
):
    if not _may_assign(ctx, data.assignee_id):
        raise AccessDeniedError("You can only assign tasks to people who report to you")

    if data.project_id is not None and not db.get(Project, data.project_id):
        raise HTTPException(status_code=404, detail="Project not found")

    try:
        task = Task(
            project_id=data.project_id,
            user_id=data.assignee_id,
            assigned_by=ctx.user_id,
            title=data.title,
            description=sanitize_input(data.description),
            priority=data.priority.value,
            due_date=data.due_date,
            status=TaskStatus.ASSIGNED.value,
            progress=0,
        )
        db.add(task)
        db.flush()
        AuditService.log(
            db,
            action="assign_task",
            entity_type="task",
            entity_id=task.id,
            user_id=ctx.user_id,
            user_role=ctx.user.role,
            details={"assignee_id": data.assignee_id, "title": data.title}
        )
        NotificationService.notify_user(
            db, data.assignee_id, "New Task",
            f"{ctx.user.name} assigned you: {data.title}", "info", link=f"/tasks/{task.id}"
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(task)
    return task


@router.get("/", response_model=List[TaskResponse])
def my_tasks(
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    return db.query(Task).filter(Task.user_id == ctx.user_id).order_by(Task.created_at.desc(), Task.id.desc()).all()


@router.get("/team", response_model=List[TaskResponse])
def team_tasks(
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    """Tasks of everyone the caller can see, excluding the caller's own."""
    ids = [pid for pid in ctx.scope() if pid != ctx.user_id]
    if not ids:
        return []
    return db.query(Task).filter(Task.user_id.in_(ids)).order_by(Task.created_at.desc(), Task.id.desc()).all()


@router.patch("/{task_id}/progress", response_model=TaskResponse)
def update_progress(
    task_id: int,
    data: TaskProgressUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    task = db.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    if task.user_id != ctx.user_id:
        raise AccessDeniedError("Only the assignee can update task progress")

    task.progress = data.progress
    task.status = TaskStatus.COMPLETED.value if data.progress == 100 else TaskStatus.IN_PROGRESS.value
    if task.status == TaskStatus.COMPLETED.value:
        try:
            NotificationService.notify_user(
                db, task.assigned_by, "Task Completed", f"{ctx.user.name} completed: {task.title}", "success"
            )
        except Exception as e:
            logger.warning(f"Notification failed: {e}", exc_info=True)
    db.commit()
    db.refresh(task)
    return task

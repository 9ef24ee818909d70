from typing import List, Optional
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from hrportal.core.exceptions import AccessDeniedError, NotFoundError
from hrportal.core.security import sanitize_input
from hrportal.database import get_db
from hrportal.models.progress_report import ProgressReport
from hrportal.models.task import Task
from hrportal.schemas.progress import ProgressReportCreate, ProgressReportResponse
from hrportal.routers.auth_deps import RequestContext, get_request_context
from hrportal.services.audit import AuditService
from hrportal.services.progress import score_daily_progress

router = APIRouter(prefix="/progress", tags=["progress"])


@router.post("/reports", response_model=ProgressReportResponse, status_code=status.HTTP_201_CREATED)
def submit_report(
    data: ProgressReportCreate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    if data.task_id is not None:
        task = db.get(Task, data.task_id)
        if not task or task.user_id != ctx.user_id:
            raise NotFoundError("Task not found")

    report = ProgressReport(
        user_id=ctx.user_id,
        task_id=data.task_id,
        date=data.date,
        accomplishments=sanitize_input(data.accomplishments),
        daily_progress=score_daily_progress(data.accomplishments),
    )
    db.add(report)
    db.commit()
    db.refresh(report)
    return report


@router.get("/reports", response_model=List[ProgressReportResponse])
def list_reports(
    user_id: Optional[str] = None,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    if user_id is not None:
        ctx.require_visible(user_id)
        ids = [user_id]
    else:
        ids = list(ctx.scope())
    if not ids:
        return []
    return db.query(ProgressReport).filter(
        ProgressReport.user_id.in_(ids)
    ).order_by(ProgressReport.date.desc(), ProgressReport.id.desc()).all()


@router.post("/reports/{report_id}/approve", response_model=ProgressReportResponse)
def approve_report(
    report_id: int,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    report = db.get(ProgressReport, report_id)
    if not report:
        raise NotFoundError("Progress report not found")
    if not ctx.can_approve(report.user_id):
        raise AccessDeniedError("Only the author's direct manager can approve this report")

    report.approved = True
    report.reviewed_by = ctx.user_id
    report.reviewed_at = datetime.now(timezone.utc)
    AuditService.log(
        db,
        action="approve_progress_report",
        entity_type="progress_report",
        entity_id=report.id,
        user_id=ctx.user_id,
        user_role=ctx.user.role,
        details={"author_id": report.user_id, "date": report.date}
    )
    db.commit()
    db.refresh(report)
    return report

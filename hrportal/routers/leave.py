from typing import List, Optional
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hrportal.core.exceptions import AccessDeniedError
from hrportal.core.security import sanitize_input
from hrportal.database import get_db
from hrportal.models.leave_request import LeaveRequest, LeaveStatus
from hrportal.schemas.leave import LeaveDecision, LeaveRequestCreate, LeaveRequestResponse
from hrportal.routers.auth_deps import RequestContext, get_request_context
from hrportal.services.audit import AuditService
from hrportal.services.notification import NotificationService
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leave", tags=["leave"])

MANAGER_STAGE = "manager"
DIRECTOR_STAGE = "director"


def _snapshot(leave: LeaveRequest) -> dict:
    return {
        "manager_approval": leave.manager_approval,
        "director_approval": leave.director_approval,
        "status": leave.status,
    }


def _get_leave(db: Session, leave_id: int) -> LeaveRequest:
    leave = db.get(LeaveRequest, leave_id)
    if not leave:
        raise HTTPException(status_code=404, detail="Leave request not found")
    return leave


@router.post("/requests", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
def apply_leave(
    request: LeaveRequestCreate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    chain = ctx.approval_chain(ctx.user_id)
    leave = LeaveRequest(
        user_id=ctx.user_id,
        leave_type=request.leave_type.value,
        start_date=request.start_date,
        end_date=request.end_date,
        reason=sanitize_input(request.reason),
        manager_approval=LeaveStatus.PENDING.value,
        director_approval=LeaveStatus.PENDING.value,
        required_levels=ctx.required_approvals(ctx.user_id),
    )
    leave.recompute_status()
    try:
        db.add(leave)
        db.flush()
        AuditService.log(
            db,
            action="apply_leave",
            entity_type="leave_request",
            entity_id=leave.id,
            user_id=ctx.user_id,
            user_role=ctx.user.role,
            details={"leave_type": leave.leave_type, "approvers": chain},
            after_state=_snapshot(leave)
        )
        if chain:
            NotificationService.notify_user(
                db, chain[0], "Leave Request",
                f"{ctx.user.name} requested {leave.leave_type} leave from {leave.start_date} to {leave.end_date}.",
                "info", link=f"/leave/requests/{leave.id}"
            )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(leave)
    return leave


@router.get("/requests", response_model=List[LeaveRequestResponse])
def list_leave_requests(
    status: Optional[LeaveStatus] = None,
    user_id: Optional[str] = None,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    """Leave requests of everyone in the caller's scope (staff see only their own)."""
    if user_id is not None:
        ctx.require_visible(user_id)
        ids = [user_id]
    else:
        ids = list(ctx.scope())
    if not ids:
        return []
    query = db.query(LeaveRequest).filter(LeaveRequest.user_id.in_(ids))
    if status:
        query = query.filter(LeaveRequest.status == status.value)
    return query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc()).all()


@router.get("/requests/mine", response_model=List[LeaveRequestResponse])
def my_leave_requests(
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    return db.query(LeaveRequest).filter(
        LeaveRequest.user_id == ctx.user_id
    ).order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc()).all()


def _decide(db: Session, ctx: RequestContext, leave: LeaveRequest, stage: str, decision: LeaveDecision) -> LeaveRequest:
    """Apply one stage's decision. A later decision on the same stage supersedes the earlier one."""
    before_state = _snapshot(leave)
    verdict = LeaveStatus.APPROVED.value if decision.approve else LeaveStatus.REJECTED.value
    now = datetime.now(timezone.utc)
    comment = sanitize_input(decision.comment)

    if stage == MANAGER_STAGE:
        leave.manager_approval = verdict
        leave.manager_approver_id = ctx.user_id
        leave.manager_decided_at = now
        leave.manager_comment = comment
    else:
        leave.director_approval = verdict
        leave.director_approver_id = ctx.user_id
        leave.director_decided_at = now
        leave.director_comment = comment
    leave.recompute_status()

    AuditService.log(
        db,
        action=f"{stage}_{'approve' if decision.approve else 'reject'}_leave",
        entity_type="leave_request",
        entity_id=leave.id,
        user_id=ctx.user_id,
        user_role=ctx.user.role,
        details={"requester_id": leave.user_id, "comment": comment},
        before_state=before_state,
        after_state=_snapshot(leave)
    )

    try:
        if leave.status == LeaveStatus.APPROVED.value:
            NotificationService.notify_user(
                db, leave.user_id, "Leave Approved",
                f"Your {leave.leave_type} leave for {leave.days_count} day(s) has been APPROVED.", "success"
            )
        elif leave.status == LeaveStatus.REJECTED.value:
            NotificationService.notify_user(
                db, leave.user_id, "Leave Rejected",
                f"Your {leave.leave_type} leave has been REJECTED. Reason: {comment or 'not given'}", "error"
            )
        else:
            NotificationService.notify_user(
                db, leave.user_id, "Leave Update",
                f"Your {leave.leave_type} leave was approved at the {stage} stage and awaits final approval.", "info"
            )
    except Exception as e:
        # Don't fail the decision if notification fails
        logger.warning(f"Notification failed: {e}", exc_info=True)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(leave)
    return leave


@router.post("/requests/{leave_id}/manager-decision", response_model=LeaveRequestResponse)
def manager_decision(
    leave_id: int,
    decision: LeaveDecision,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    """First stage: only the requester's direct manager."""
    leave = _get_leave(db, leave_id)
    if not ctx.can_approve(leave.user_id):
        logger.info(
            f"Manager decision refused: not the direct approver of {leave.user_id}", extra={"actor_id": ctx.user_id}
        )
        raise AccessDeniedError("Not authorized to approve this leave")
    return _decide(db, ctx, leave, MANAGER_STAGE, decision)


@router.post("/requests/{leave_id}/director-decision", response_model=LeaveRequestResponse)
def director_decision(
    leave_id: int,
    decision: LeaveDecision,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    """Second stage: the director two levels above the requester."""
    leave = _get_leave(db, leave_id)
    if not ctx.can_finalize(leave.user_id):
        logger.info(
            f"Director decision refused: not the final approver of {leave.user_id}", extra={"actor_id": ctx.user_id}
        )
        raise AccessDeniedError("Not authorized to give final approval for this leave")
    return _decide(db, ctx, leave, DIRECTOR_STAGE, decision)

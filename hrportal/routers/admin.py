from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime

from hrportal.core.exceptions import NotFoundError
from hrportal.database import get_db
from hrportal.models.audit_log import AuditLog
from hrportal.routers.auth_deps import require_director

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_director())]
)


class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: str
    entity_type: str
    entity_id: Optional[str] = None
    user_id: Optional[str] = None
    user_role: Optional[str] = None
    details: Optional[dict] = None
    before_state: Optional[dict] = None
    after_state: Optional[dict] = None
    timestamp: Optional[datetime] = None


@router.get("/audit-logs", response_model=List[AuditLogResponse])
def get_audit_logs(
    db: Session = Depends(get_db),
    entity_type: Optional[str] = Query(None, description="Filter by entity type (e.g. 'leave_request')"),
    action: Optional[str] = Query(None, description="Filter by action name"),
    user_id: Optional[str] = Query(None, description="Filter by acting user ID"),
    limit: int = Query(100, ge=1, le=500),
    skip: int = Query(0, ge=0)
):
    """
    Get audit logs. READ-ONLY.
    Restricted to directors.
    """
    query = db.query(AuditLog)
    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)
    if action:
        query = query.filter(AuditLog.action == action)
    if user_id:
        query = query.filter(AuditLog.user_id == user_id)

    return query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).offset(skip).limit(limit).all()


@router.get("/audit-logs/{log_id}", response_model=AuditLogResponse)
def get_audit_log_detail(log_id: int, db: Session = Depends(get_db)):
    log_entry = db.get(AuditLog, log_id)
    if not log_entry:
        raise NotFoundError("Audit log entry not found")
    return log_entry

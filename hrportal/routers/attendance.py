from typing import List, Optional
from datetime import date as date_type
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from hrportal.core.exceptions import ConflictError, NotFoundError
from hrportal.database import get_db
from hrportal.models.attendance import Attendance
from hrportal.schemas.attendance import AttendanceCreate, AttendanceResponse, PunchOut
from hrportal.routers.auth_deps import RequestContext, get_request_context
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post("/", response_model=AttendanceResponse, status_code=status.HTTP_201_CREATED)
def mark_attendance(
    data: AttendanceCreate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    existing = db.query(Attendance).filter(
        Attendance.user_id == ctx.user_id,
        Attendance.date == data.date
    ).first()
    if existing:
        raise ConflictError("Attendance already marked for this date", details={"date": data.date.isoformat()})

    record = Attendance(
        user_id=ctx.user_id,
        date=data.date,
        punch_in=data.punch_in,
        punch_out=data.punch_out,
        status=data.status.value,
    )
    try:
        db.add(record)
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent request for the same day
        db.rollback()
        raise ConflictError("Attendance already marked for this date", details={"date": data.date.isoformat()})
    db.refresh(record)
    return record


@router.put("/{day}", response_model=AttendanceResponse)
def punch_out(
    day: date_type,
    data: PunchOut,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    record = db.query(Attendance).filter(
        Attendance.user_id == ctx.user_id,
        Attendance.date == day
    ).first()
    if not record:
        raise NotFoundError("No attendance record for this date")
    if record.punch_in and data.punch_out < record.punch_in:
        raise HTTPException(status_code=400, detail="Punch out cannot be before punch in")

    record.punch_out = data.punch_out
    db.commit()
    db.refresh(record)
    return record


@router.get("/", response_model=List[AttendanceResponse])
def my_attendance(
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    return db.query(Attendance).filter(Attendance.user_id == ctx.user_id).order_by(Attendance.date.desc()).all()


@router.get("/team", response_model=List[AttendanceResponse])
def team_attendance(
    day: Optional[date_type] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    """Attendance of everyone in scope, optionally for a single day."""
    ids = list(ctx.scope())
    if not ids:
        return []
    query = db.query(Attendance).filter(Attendance.user_id.in_(ids))
    if day:
        query = query.filter(Attendance.date == day)
    return query.order_by(Attendance.date.desc(), Attendance.user_id).all()

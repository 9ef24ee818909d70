"""
Employee directory endpoints.
Listing and lookups are limited to the caller's access scope.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from hrportal.core import roles
from hrportal.core.exceptions import AccessDeniedError, ConflictError
from hrportal.core.security import sanitize_input
from hrportal.database import get_db
from hrportal.models.user import User
from hrportal.routers.auth_deps import RequestContext, get_request_context, require_approver, require_director
from hrportal.schemas.employee import (
    ApprovalChainResponse, ApproverInfo, EmployeeCreate, EmployeeResponse, RoleUpdate
)
from hrportal.services import access_control
from hrportal.services import auth as auth_service
from hrportal.services.audit import AuditService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


def _resolve_manager(data: EmployeeCreate, ctx: RequestContext) -> Optional[str]:
    """
    Reporting line for a new person.
    Managers and team leads always become the manager of whoever they add.
    Managers a director adds report to that director, as do team leads added
    without a manager_id. Employee-level staff must be placed under one of the
    director's managers, otherwise they would fall outside the director's view.
    """
    creator = ctx.user
    if not roles.is_director(creator.role):
        return creator.id

    if roles.is_manager(data.role):
        return creator.id

    if data.manager_id is None:
        if roles.access_level(data.role) == roles.AccessLevel.MANAGER:
            return creator.id
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="manager_id is required when a director adds employee-level staff"
        )

    manager = ctx.directory.get(data.manager_id)
    if (
        manager is None
        or roles.access_level(manager.role) != roles.AccessLevel.MANAGER
        or manager.manager_id != creator.id
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid manager ID or manager not under this director"
        )
    return manager.id


@router.post("/", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
def add_employee(
    data: EmployeeCreate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_approver())
):
    if data.role not in {r.value for r in roles.roles_addable_by(ctx.user.role)}:
        raise AccessDeniedError(f"{ctx.user.display_role} cannot add a {roles.display_name(data.role)}")

    email = data.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already registered", details={"email": email})
    if db.query(User).filter(User.employee_code == data.employee_code).first():
        raise ConflictError("Employee code already in use", details={"employee_code": data.employee_code})

    manager_id = _resolve_manager(data, ctx)

    try:
        user = User(
            email=email,
            hashed_password=auth_service.get_password_hash(data.password),
            name=data.name,
            role=data.role,
            manager_id=manager_id,
            department=data.department,
            position=data.position,
            employee_code=data.employee_code,
            phone=data.phone,
            address=sanitize_input(data.address),
            emergency_contact_name=data.emergency_contact_name,
            emergency_contact_phone=data.emergency_contact_phone,
            join_date=data.join_date,
            annual_leave_balance=data.annual_leave_balance,
            annual_salary=data.annual_salary,
            college=data.college,
            internship_start_date=data.internship_start_date,
            internship_end_date=data.internship_end_date,
        )
        db.add(user)
        db.flush()
        AuditService.log(
            db,
            action="add_employee",
            entity_type="user",
            entity_id=user.id,
            user_id=ctx.user.id,
            user_role=ctx.user.role,
            details={"email": email, "role": data.role, "manager_id": manager_id}
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    logger.info(f"{data.role} {email} added", extra={"actor_id": ctx.user.id})
    return user


@router.get("/", response_model=List[EmployeeResponse])
def list_employees(
    role: Optional[str] = None,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    """People visible to the caller; an empty scope is an empty list."""
    ids = list(ctx.scope())
    if not ids:
        return []
    query = db.query(User).filter(User.id.in_(ids))
    if role:
        query = query.filter(User.role == roles.normalize_role(role))
    return query.order_by(User.name).all()


@router.get("/{user_id}", response_model=EmployeeResponse)
def get_employee(
    user_id: str,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context)
):
    ctx.require_visible(user_id)
    return db.get(User, user_id)


@router.patch("/{user_id}/role", response_model=EmployeeResponse)
def update_role(
    user_id: str,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_director())
):
    """
    Only directors change roles, and only for people they can see.
    The new role must be one the director could hire into, and anyone who
    still has direct reports keeps an approving role.
    """
    if user_id == ctx.user.id:
        raise AccessDeniedError("Directors cannot change their own role")
    ctx.require_visible(user_id)

    if data.role not in {r.value for r in roles.roles_addable_by(ctx.user.role)}:
        raise AccessDeniedError(f"{ctx.user.display_role} cannot assign the {roles.display_name(data.role)} role")
    if (
        roles.access_level(data.role) == roles.AccessLevel.EMPLOYEE
        and access_control.direct_reports(user_id, ctx.directory)
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Reassign this person's direct reports before moving them to a staff role"
        )

    user = db.get(User, user_id)
    before_state = {"role": user.role}
    user.role = data.role
    AuditService.log(
        db,
        action="update_role",
        entity_type="user",
        entity_id=user.id,
        user_id=ctx.user.id,
        user_role=ctx.user.role,
        details={"email": user.email},
        before_state=before_state,
        after_state={"role": user.role}
    )
    db.commit()
    db.refresh(user)
    return user


@router.get("/{user_id}/approval-chain", response_model=ApprovalChainResponse)
def get_approval_chain(
    user_id: str,
    ctx: RequestContext = Depends(get_request_context)
):
    ctx.require_visible(user_id)
    approvers = []
    for approver_id in ctx.approval_chain(user_id):
        person = ctx.directory[approver_id]
        approvers.append(ApproverInfo(
            id=person.id,
            name=person.name,
            role=person.role,
            display_role=roles.display_name(person.role),
        ))
    return ApprovalChainResponse(user_id=user_id, approvers=approvers)

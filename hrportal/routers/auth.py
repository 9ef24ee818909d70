from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from datetime import datetime, timedelta, timezone
import logging
from hrportal.core.config import settings
from hrportal.core.exceptions import AuthenticationError
from hrportal.core.limiter import limiter
from hrportal.database import get_db
from hrportal.models.user import User, UserSession
from hrportal.services import auth as auth_service
from hrportal.services.audit import AuditService
from hrportal.schemas.auth import (
    DirectorSignup, LoginRequest, PasswordChange, RefreshRequest, Token, UserResponse, UserSummary
)
from hrportal.routers.auth_deps import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


def _summary(user: User) -> UserSummary:
    return UserSummary(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        display_role=user.display_role,
        designation=user.designation,
        access_level=user.access_level,
    )


def _issue_tokens(db: Session, user: User) -> dict:
    """Create an access/refresh pair and persist the refresh session. Caller commits."""
    access_token = auth_service.create_access_token(data={"sub": user.id, "role": user.role})
    refresh_token = auth_service.create_refresh_token(data={"sub": user.id})
    db.add(UserSession(
        user_id=user.id,
        refresh_token=refresh_token,
        expires_at=datetime.now(timezone.utc) + timedelta(days=auth_service.REFRESH_TOKEN_EXPIRE_DAYS)
    ))
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "user": _summary(user),
    }


@router.post("/signup/director", response_model=Token, status_code=status.HTTP_201_CREATED)
def signup_director(data: DirectorSignup, db: Session = Depends(get_db)):
    """Register a director account. Directors sit at the top of the hierarchy and have no manager."""
    email = data.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    try:
        user = User(
            email=email,
            hashed_password=auth_service.get_password_hash(data.password),
            name=data.name,
            role=data.director_title,
            phone=data.phone,
            join_date=data.join_date,
            position=data.designation,
            department=data.department,
            emergency_contact_name=data.emergency_contact_name,
            emergency_contact_phone=data.emergency_contact_phone,
        )
        db.add(user)
        db.flush()
        tokens = _issue_tokens(db, user)
        AuditService.log(
            db,
            action="signup_director",
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            user_role=user.role,
            details={"email": user.email}
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(f"Director account created: {email}")
    return tokens


@router.post("/login", response_model=Token)
@limiter.limit(settings.login_rate_limit)
def login(request: Request, login_data: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == login_data.email.lower()).first()
    if not user or not auth_service.verify_password(login_data.password, user.hashed_password):
        AuditService.log(
            db,
            action="failed_login",
            entity_type="user",
            entity_id=None,
            user_id=None,
            user_role=None,
            details={"email": login_data.email, "reason": "invalid_credentials"}
        )
        db.commit()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is inactive")

    try:
        tokens = _issue_tokens(db, user)
        AuditService.log(
            db,
            action="login",
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            user_role=user.role,
            details={"email": user.email}
        )
        db.commit()
        return tokens
    except Exception as e:
        # Catch DB or other unexpected errors
        db.rollback()
        logger.error(f"Login error: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal login error. Please check server logs."
        )


@router.post("/refresh", response_model=Token)
def refresh_token(data: RefreshRequest, db: Session = Depends(get_db)):
    payload = auth_service.decode_access_token(data.refresh_token)
    if payload is None or payload.get("type") != "refresh":
        raise AuthenticationError("Invalid refresh token")

    session = db.query(UserSession).filter(
        UserSession.refresh_token == data.refresh_token,
        UserSession.is_revoked == False  # noqa: E712
    ).first()
    if not session:
        raise AuthenticationError("Session expired or revoked")

    user = session.user
    if not user or not user.is_active:
        raise AuthenticationError("User inactive or not found")

    # Rotation: Revoke old, create new
    session.is_revoked = True
    tokens = _issue_tokens(db, user)
    db.commit()
    return tokens


@router.post("/logout")
def logout(data: RefreshRequest, db: Session = Depends(get_db)):
    session = db.query(UserSession).filter(UserSession.refresh_token == data.refresh_token).first()
    if session:
        session.is_revoked = True
        db.commit()
    return {"message": "Successfully logged out"}


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return UserResponse.model_validate(current_user)


@router.post("/change-password")
def change_password(
    data: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Securely update current user's password."""
    if not auth_service.verify_password(data.current_password, current_user.hashed_password):
        raise HTTPException(status_code=400, detail="Incorrect current password")

    current_user.hashed_password = auth_service.get_password_hash(data.new_password)
    AuditService.log(
        db,
        action="change_password",
        entity_type="user",
        entity_id=current_user.id,
        user_id=current_user.id,
        user_role=current_user.role,
        details={"status": "success"}
    )
    db.commit()
    return {"success": True, "message": "Password updated successfully"}

"""
Authentication and request-context dependencies.

Every endpoint receives the caller through these dependencies instead of
reading a process-wide "current user". Access decisions go through
RequestContext, which delegates to the rules in services.access_control.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from hrportal.core import roles
from hrportal.core.exceptions import AccessDeniedError
from hrportal.database import get_db
from hrportal.models.user import User
from hrportal.schemas.person import PersonSnapshot
from hrportal.services import access_control
from hrportal.services import auth as auth_service
from hrportal.services.directory import load_directory

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """
    Extracts and validates the current user from the JWT token.
    """
    payload = auth_service.decode_access_token(token)

    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="TOKEN_EXPIRED",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id: Optional[str] = payload.get("sub")
    if user_id is None:
        logger.warning("Authentication failed: Missing subject in token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing subject in token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.get(User, user_id)
    if user is None:
        logger.warning(f"Authentication failed: User {user_id} not found in database")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        logger.warning("Authentication failed: user is inactive", extra={"actor_id": user.id})
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is inactive"
        )
    return user


@dataclass
class RequestContext:
    """
    Per-request session: the authenticated user plus the directory snapshot
    the access rules evaluate against.
    """
    user: User
    directory: Dict[str, PersonSnapshot]
    _scope: Optional[Dict[str, PersonSnapshot]] = field(default=None, repr=False)

    @property
    def user_id(self) -> str:
        return self.user.id

    def scope(self) -> Dict[str, PersonSnapshot]:
        if self._scope is None:
            self._scope = access_control.access_scope(self.user.id, self.directory)
        return self._scope

    def can_see(self, person_id: Optional[str]) -> bool:
        return person_id is not None and person_id in self.scope()

    def require_visible(self, person_id: str, message: str = "Person is outside your access scope") -> None:
        if not self.can_see(person_id):
            raise AccessDeniedError(message)

    def can_approve(self, requester_id: str) -> bool:
        return access_control.can_approve(self.user.id, requester_id, self.directory)

    def can_finalize(self, requester_id: str) -> bool:
        return access_control.can_finalize(self.user.id, requester_id, self.directory)

    def approval_chain(self, person_id: str):
        return access_control.resolve_approval_chain(person_id, self.directory)

    def required_approvals(self, person_id: str) -> int:
        return access_control.required_approvals(person_id, self.directory)


def get_request_context(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> RequestContext:
    return RequestContext(user=current_user, directory=load_directory(db))


def require_tier(predicate: Callable[[str], bool], label: str) -> Callable:
    """
    Dependency factory that checks the caller's role against a predicate from core.roles.

    Usage:
        @router.get("/audit-logs")
        def audit(ctx: RequestContext = Depends(require_tier(roles.is_director, "directors"))):
            ...
    """
    def tier_checker(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        if not predicate(ctx.user.role):
            raise AccessDeniedError(f"Access denied. Only {label} may perform this action")
        return ctx
    return tier_checker


def require_director():
    return require_tier(roles.is_director, "directors")


def require_approver():
    """Directors, managers and team leads."""
    return require_tier(roles.can_hold_approvals, "directors, managers and team leads")

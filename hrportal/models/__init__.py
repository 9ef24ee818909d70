# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    user, leave_request, task, project, progress_report,
    attendance, document, notification, audit_log
)

# Explicit class exports for cleaner imports
from .user import User, UserSession
from .leave_request import LeaveRequest
from .notification import Notification

__all__ = [
    "User",
    "UserSession",
    "LeaveRequest",
    "Notification",
]

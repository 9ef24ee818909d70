from typing import Optional
from sqlalchemy.orm import Session
from hrportal.models.notification import Notification


class NotificationService:
    @staticmethod
    def create_notification(
        db: Session,
        user_id: str,
        title: str,
        message: str,
        type: str = "info",
        link: Optional[str] = None
    ) -> Notification:
        """
        Internal utility for creating notifications.
        Added to the caller's session; committed with the surrounding action.
        """
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            link=link
        )
        db.add(notification)
        db.flush()
        return notification

    @staticmethod
    def notify_user(
        db: Session,
        user_id: str,
        title: str,
        message: str,
        type: str = "info",
        link: Optional[str] = None
    ) -> Notification:
        """
        Standardized notification trigger.
        """
        return NotificationService.create_notification(db, user_id, title, message, type, link)

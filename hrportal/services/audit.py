import logging
from typing import Any, Optional
from sqlalchemy.orm import Session
from hrportal.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def _sanitize(obj: Any) -> Any:
    # Ensure serialization of nested Pydantic models, enums and dates in details/states
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    if hasattr(obj, "value"):
        return obj.value
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    return obj


class AuditService:
    def __init__(self, db: Session):
        self.db = db

    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[Any],
        user_id: Optional[str],
        user_role: Optional[str],
        details: dict,
        before_state: Optional[dict] = None,
        after_state: Optional[dict] = None
    ) -> Optional[AuditLog]:
        """
        Create a centralized audit log entry.
        Strictly append-only. The entry joins the caller's transaction and is
        committed together with the action it describes.
        """
        try:
            db_log = AuditLog(
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else None,
                user_id=user_id,
                user_role=_sanitize(user_role),
                details=_sanitize(details),
                before_state=_sanitize(before_state),
                after_state=_sanitize(after_state)
            )
            self.db.add(db_log)
            self.db.flush()
            return db_log
        except Exception as e:
            # Never break the main app flow because of a logging failure
            logger.error(f"FAILED TO AUDIT LOG: {e}", exc_info=True)
            return None

    # Static wrapper for call sites without a service instance
    @staticmethod
    def log(db: Session, *args, **kwargs) -> Optional[AuditLog]:
        return AuditService(db).log_action(*args, **kwargs)

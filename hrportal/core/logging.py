import logging
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from contextvars import ContextVar
from hrportal.core.config import settings

# Correlation ID of the request currently being served
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    One JSON object per line, stamped with the service identity and request id.
    Routers pass the acting user as ``extra={"actor_id": ...}``; records
    without one are logged as coming from the system.
    """

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)

        req_id = request_id_var.get()
        if req_id:
            log_record["request_id"] = req_id

        log_record.setdefault("actor_id", "system")
        log_record["service"] = settings.app_name
        log_record["environment"] = settings.environment

        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = (log_record.get("level") or record.levelname).upper()


def setup_logging(level: int = logging.INFO):
    logger = logging.getLogger()
    # Importing the app twice must not stack handlers
    if not any(isinstance(h.formatter, CustomJsonFormatter) for h in logger.handlers):
        log_handler = logging.StreamHandler()
        log_handler.setFormatter(CustomJsonFormatter("%(timestamp) %(level) %(name) %(message)"))
        logger.addHandler(log_handler)
    logger.setLevel(level)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

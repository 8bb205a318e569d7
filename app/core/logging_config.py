import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

SECURITY_LOGGER_NAME = "gymflow.security"

security_logger = logging.getLogger(SECURITY_LOGGER_NAME)
logger = logging.getLogger(__name__)


class JSONFormatter(logging.Formatter):
    """Formatter that dumps records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "service": "gymflow-api",
        }

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger to write JSON lines to stdout.

    Safe to call more than once; existing handlers are replaced.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())

    # Reduce SQLAlchemy noise in logs
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def log_security_event(event: str, request=None, **fields: Any) -> dict[str, Any] | None:
    """
    Record a security-relevant event as a structured log entry.

    Fire-and-forget: a failure while building or emitting the entry is
    reported on the module logger and never propagates to the caller.

    Args:
        event: Event name, e.g. ``login_failed`` or ``member_created``
        request: Optional Starlette request for client/url/tenant details
        **fields: Additional event attributes

    Returns:
        The logged entry, or None if it could not be recorded
    """
    try:
        entry: dict[str, Any] = {
            "event": event,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if request is not None:
            claims = getattr(request.state, "claims", None)
            entry.update(
                {
                    "ip": request.client.host if request.client else None,
                    "user_agent": request.headers.get("user-agent"),
                    "user": claims.user_id if claims else "anonymous",
                    "tenant": getattr(request.state, "tenant_id", None) or "unknown",
                    "url": str(request.url.path),
                    "method": request.method,
                }
            )
        entry.update(fields)
        security_logger.info("security_event", extra={"extra_data": entry})
        return entry
    except Exception:
        logger.warning("Failed to record security event %s", event, exc_info=True)
        return None

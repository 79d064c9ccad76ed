"""
Structured logging for the CRM backend.

Every record is written as a single JSON line on stderr. Security-sensitive
actions (register, login, logout, user creation, provisioning rollback) go
through `log_security_event` so they always carry action/result and, when
known, user_id and tenant_id.

Passwords, password hashes and session tokens are never passed to the logger.
"""
import logging
import json
from typing import Any, Dict, Optional
from datetime import datetime, timezone

SERVICE_NAME = "crm-api"

# Attributes copied from `extra=` into the JSON payload.
_EXTRA_FIELDS = ("user_id", "tenant_id", "action", "result", "meta")

logger = logging.getLogger("crm")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(
            {field: getattr(record, field) for field in _EXTRA_FIELDS if hasattr(record, field)}
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach the JSON handler once and apply `level` to the crm logger."""
    if not any(getattr(h, "_crm_json", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        handler._crm_json = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger


def log_security_event(
    action: str,
    result: str,
    user_id: Optional[str] = None,
    tenant_id: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
    level: str = "info",
) -> None:
    """
    Emit a structured security log line.

    `result` is a short status such as "success", "failure", "denied" or
    "rolled_back". `meta` must never contain credentials.
    """
    extra: Dict[str, Any] = {"action": action, "result": result}
    if user_id:
        extra["user_id"] = str(user_id)
    if tenant_id:
        extra["tenant_id"] = str(tenant_id)
    if meta:
        extra["meta"] = meta

    logger.log(logging.getLevelName(level.upper()), "Security event", extra=extra)

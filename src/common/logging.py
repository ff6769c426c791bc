"""Structured JSON logging shared by the guardrails, compliance and prediction services.

Every line is one JSON object. Structured context travels through the
``extra`` kwarg and is flattened into the top-level object next to the
timestamp, level, logger name and message.

Set LOG_LEVEL (DEBUG, INFO, WARNING, ...) to change the root level.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else on a record came from `extra`.
_STANDARD_RECORD_KEYS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            {key: value for key, value in vars(record).items() if key not in _STANDARD_RECORD_KEYS}
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=True)


def _level_from_env(default: int) -> int:
    name = os.getenv("LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


def _ensure_configured(level: int = logging.INFO) -> None:
    root = logging.getLogger()
    if root.handlers:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.setLevel(_level_from_env(level))
    root.addHandler(handler)


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Return a module logger whose records reach the shared JSON handler."""
    _ensure_configured(level)
    return logging.getLogger(name)


def _context(fields: Dict[str, Any]) -> Dict[str, Any]:
    # logging refuses extra keys that shadow LogRecord attributes
    return {
        (f"ctx_{key}" if key in _STANDARD_RECORD_KEYS else key): value for key, value in fields.items()
    }


def log_decision(
    logger: logging.Logger,
    *,
    content_id: Optional[str],
    action: str,
    outcome: str,
    **context: Any,
) -> None:
    """Record the outcome of a merge, compliance check or prediction."""
    logger.info(
        "decision",
        extra=_context({"event": "decision", "content_id": content_id, "action": action, "outcome": outcome, **context}),
    )


def log_error(
    logger: logging.Logger,
    message: str,
    *,
    content_id: Optional[str] = None,
    error: Optional[BaseException] = None,
    **context: Any,
) -> None:
    logger.error(
        message,
        extra=_context({"content_id": content_id, "error_type": type(error).__name__ if error else None, **context}),
        exc_info=error,
    )


def log_audit(
    logger: logging.Logger,
    *,
    actor: Optional[str],
    action: str,
    target: Optional[str] = None,
    status: str = "succeeded",
    **context: Any,
) -> None:
    """Emit an audit line for guardrail edits and recorded compliance checks."""
    logger.info(
        "audit",
        extra=_context(
            {"event": "audit", "actor": actor or "anonymous", "action": action, "target": target, "status": status, **context}
        ),
    )

"""Structured logging configuration for SciGen."""

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any

_EXTRA_FIELDS = (
    "topic",
    "difficulty",
    "model",
    "status_code",
    "duration_ms",
    "error_type",
    "metrics",
)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                log_obj[key] = getattr(record, key)

        if record.exc_info:
            log_obj["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info)
            }

        return json.dumps(log_obj, default=str)


class MetricsLogger:
    """Logger for API-call and scoring events."""

    def __init__(self, logger_name: str = "scigen.metrics"):
        self.logger = logging.getLogger(logger_name)

    def log_api_call(
        self,
        provider: str,
        model: str,
        duration_ms: float,
        tokens_used: int | None = None,
        success: bool = True,
        error: str | None = None
    ):
        """Log API call metrics.

        Args:
            provider: API endpoint host
            model: Model name
            duration_ms: Call duration
            tokens_used: Tokens consumed
            success: Whether call succeeded
            error: Error message if failed
        """
        level = logging.INFO if success else logging.ERROR
        metrics: dict[str, Any] = {
            "provider": provider,
            "model": model,
            "duration_ms": duration_ms,
            "success": success
        }

        if tokens_used:
            metrics["tokens_used"] = tokens_used
        if error:
            metrics["error"] = error

        self.logger.log(
            level,
            "API call" if success else "API call failed",
            extra={"metrics": metrics}
        )

    def log_answer(self, topic: str, difficulty: int, correct: bool, streak: int, accuracy: float):
        """Log a revealed answer with the running score."""
        self.logger.info(
            "Answer revealed",
            extra={
                "topic": topic,
                "difficulty": difficulty,
                "metrics": {
                    "correct": correct,
                    "streak": streak,
                    "accuracy": round(accuracy, 4),
                },
            },
        )


def get_api_logger() -> logging.Logger:
    """Get logger for API operations."""
    return logging.getLogger("scigen.api")


def get_session_logger() -> logging.Logger:
    """Get logger for session state changes."""
    return logging.getLogger("scigen.session")

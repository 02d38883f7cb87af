"""Utilities for SciGen."""

from .logging import reset_logging, setup_logging
from .logging_config import MetricsLogger, StructuredFormatter

__all__ = [
    "setup_logging",
    "reset_logging",
    "MetricsLogger",
    "StructuredFormatter",
]

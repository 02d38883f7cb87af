"""Data handling modules for SciGen."""

from .schemas import (
    DEFAULT_TOPICS,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    NUM_OPTIONS,
    Question,
    Statistics,
    Topic,
    clamp_difficulty,
    normalize_topics,
)

__all__ = [
    "DEFAULT_TOPICS",
    "MAX_DIFFICULTY",
    "MIN_DIFFICULTY",
    "NUM_OPTIONS",
    "Question",
    "Statistics",
    "Topic",
    "clamp_difficulty",
    "normalize_topics",
]

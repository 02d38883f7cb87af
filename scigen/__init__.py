"""SciGen.

AI-generated multiple-choice science practice: a question provider backed by
an OpenAI-compatible chat completions API and a scored quiz session.
"""

from .config import AppConfig, default_app_config, resolve_api_key
from .data import Question, Statistics, Topic
from .errors import (
    FetchError,
    MalformedResponseError,
    MissingCredentialError,
    SciGenError,
    TransportError,
    ValidationError,
)
from .provider import ProblemProvider
from .session import SessionSnapshot, SessionState
from .utils import setup_logging

__all__ = [
    "__version__",
    "AppConfig",
    "default_app_config",
    "resolve_api_key",
    "Question",
    "Statistics",
    "Topic",
    "SciGenError",
    "FetchError",
    "TransportError",
    "MalformedResponseError",
    "ValidationError",
    "MissingCredentialError",
    "ProblemProvider",
    "SessionState",
    "SessionSnapshot",
    "setup_logging",
]

__version__ = "0.1.0"

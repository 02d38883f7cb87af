from __future__ import annotations

import io
import json
import sys
import urllib.error
from pathlib import Path
from typing import Any, Dict
from unittest.mock import MagicMock

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scigen.data.schemas import Question, Topic  # noqa: E402
from scigen.utils.logging import reset_logging  # noqa: E402


# ====================
# Payload Fixtures
# ====================

@pytest.fixture
def problem_payload() -> Dict[str, Any]:
    """A well-formed generated question, as the model would emit it."""
    return {
        "question": "  Which organelle produces most of a cell's ATP?  ",
        "options": [" Nucleus", "Ribosome ", "Mitochondrion", "Golgi apparatus"],
        "correctAnswer": 2,
        "explanation": "\nMitochondria carry out oxidative phosphorylation.\n",
    }


@pytest.fixture
def sample_question() -> Question:
    return Question(
        question="What is the chemical symbol for sodium?",
        options=("S", "Na", "So", "Sd"),
        correct_answer=1,
        explanation="Sodium's symbol comes from the Latin natrium.",
        topic=Topic.CHEMISTRY,
        difficulty=3,
    )


def make_envelope(payload: Any, usage: Dict[str, int] | None = None) -> Dict[str, Any]:
    """Wrap generated content in a chat-completions response envelope."""
    content = payload if isinstance(payload, str) else json.dumps(payload)
    envelope: Dict[str, Any] = {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
    }
    if usage is not None:
        envelope["usage"] = usage
    return envelope


def make_urlopen_response(body: Any, status: int = 200) -> MagicMock:
    """Build a context-manager mock mimicking ``urllib.request.urlopen``'s return value."""
    raw = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
    resp = MagicMock()
    resp.status = status
    resp.read.return_value = raw
    cm = MagicMock()
    cm.__enter__.return_value = resp
    cm.__exit__.return_value = False
    return cm


def make_http_error(status: int, body: bytes = b"") -> urllib.error.HTTPError:
    return urllib.error.HTTPError(
        "https://api.example.test/v1/chat/completions",
        status,
        "error",
        {},  # type: ignore[arg-type]
        io.BytesIO(body),
    )


# ====================
# Environment Fixtures
# ====================

@pytest.fixture(autouse=True)
def _clean_logging():
    """Detach scigen log handlers between tests."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def config_file(tmp_path):
    """Write a JSON config whose logs land under tmp_path."""
    def _write(**sections) -> Path:
        payload = {"logging": {"log_dir": str(tmp_path / "logs"), "filename": "test.log"}}
        for key, value in sections.items():
            payload.setdefault(key, {}).update(value)
        path = tmp_path / "scigen.json"
        path.write_text(json.dumps(payload))
        return path
    return _write

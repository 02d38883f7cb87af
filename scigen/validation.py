"""Validation of generated-question payloads.

The remote model returns a chat-completions envelope whose first choice
carries a JSON-encoded question object. Parsing happens in three stages,
each with its own failure type:

1. ``extract_content`` locates ``choices[0].message.content`` in the
   envelope (``MalformedResponseError`` when it is missing).
2. ``parse_problem_payload`` decodes the content and checks that every
   required field is present with the right type
   (``MalformedResponseError``).
3. ``build_question`` enforces the semantic rules (four options, answer
   index in range, non-empty text) and normalizes whitespace
   (``ValidationError``).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .data.schemas import NUM_OPTIONS, Question, Topic
from .errors import MalformedResponseError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class FieldSpec:
    """Specification for a payload field."""
    name: str
    type: type
    item_type: Optional[type] = None


PROBLEM_PAYLOAD_FIELDS = [
    FieldSpec(name="question", type=str),
    FieldSpec(name="options", type=list, item_type=str),
    FieldSpec(name="correctAnswer", type=int),
    FieldSpec(name="explanation", type=str),
]


def _is_instance(value: Any, expected: type) -> bool:
    # bool is an int subclass; reject it where an int is expected
    if expected is int and isinstance(value, bool):
        return False
    return isinstance(value, expected)


def validate_record(record: Dict[str, Any], fields: List[FieldSpec]) -> List[str]:
    """Validate a decoded payload against field specs.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []
    for spec in fields:
        if spec.name not in record or record[spec.name] is None:
            errors.append(f"Missing required field: {spec.name}")
            continue
        value = record[spec.name]
        if not _is_instance(value, spec.type):
            errors.append(
                f"Field {spec.name} has wrong type: expected {spec.type.__name__}, "
                f"got {type(value).__name__}"
            )
            continue
        if spec.item_type is not None:
            for i, item in enumerate(value):
                if not _is_instance(item, spec.item_type):
                    errors.append(
                        f"Field {spec.name}[{i}] has wrong type: expected "
                        f"{spec.item_type.__name__}, got {type(item).__name__}"
                    )
    return errors


def extract_content(envelope: Any) -> str:
    """Return the generated message content from a chat-completions envelope."""
    try:
        content = envelope["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponseError("response has no choices[0].message.content") from e
    if not isinstance(content, str):
        raise MalformedResponseError(
            f"message content has wrong type: expected str, got {type(content).__name__}"
        )
    return content


def parse_problem_payload(content: str) -> Dict[str, Any]:
    """Decode the generated JSON and check required fields and their types."""
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"generated content is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise MalformedResponseError(
            f"generated content must be a JSON object, got {type(payload).__name__}"
        )
    errors = validate_record(payload, PROBLEM_PAYLOAD_FIELDS)
    if errors:
        raise MalformedResponseError("; ".join(errors))
    return payload


def build_question(payload: Dict[str, Any], topic: Topic, difficulty: int) -> Question:
    """Apply semantic checks, trim text and tag with the requested topic/difficulty."""
    options = payload["options"]
    if len(options) != NUM_OPTIONS:
        raise ValidationError(f"expected {NUM_OPTIONS} options, got {len(options)}")
    answer = payload["correctAnswer"]
    if not 0 <= answer < NUM_OPTIONS:
        raise ValidationError(f"invalid correctAnswer: {answer}")

    question = Question(
        question=payload["question"].strip(),
        options=tuple(opt.strip() for opt in options),
        correct_answer=answer,
        explanation=payload["explanation"].strip(),
        topic=topic,
        difficulty=difficulty,
    )
    logger.debug("Validated question for %s (difficulty %d)", topic.display_name, difficulty)
    return question

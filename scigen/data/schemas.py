"""Data schemas for SciGen."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Tuple

from ..errors import ValidationError

NUM_OPTIONS = 4
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 10
OPTION_LABELS = ("A", "B", "C", "D")


class Topic(Enum):
    """Science subject areas a question can be generated for."""

    BIOLOGY = "Biology"
    CHEMISTRY = "Chemistry"
    PHYSICS = "Physics"
    EARTH = "Earth Science"
    ASTRONOMY = "Astronomy"
    ENVIRONMENTAL = "Environmental"

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def short_label(self) -> str:
        return self.value.split(" ")[0]

    @classmethod
    def from_name(cls, name: str) -> "Topic":
        """Look up a topic by enum name, display name or short label."""
        key = name.strip().lower()
        for topic in cls:
            if key in {topic.name.lower(), topic.value.lower(), topic.short_label.lower()}:
                return topic
        valid = ", ".join(t.short_label.lower() for t in cls)
        raise ValueError(f"Unknown topic '{name}' (expected one of: {valid})")


DEFAULT_TOPICS = frozenset({Topic.BIOLOGY, Topic.CHEMISTRY, Topic.PHYSICS})


@dataclass(frozen=True)
class Question:
    """A single multiple-choice question."""

    question: str
    options: Tuple[str, ...]
    correct_answer: int
    explanation: str
    topic: Topic
    difficulty: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", tuple(self.options))
        if len(self.options) != NUM_OPTIONS:
            raise ValidationError(f"expected {NUM_OPTIONS} options, got {len(self.options)}")
        if not 0 <= self.correct_answer < NUM_OPTIONS:
            raise ValidationError(f"invalid correctAnswer: {self.correct_answer}")
        if not self.question.strip():
            raise ValidationError("question text is empty")
        if not self.explanation.strip():
            raise ValidationError("explanation text is empty")
        for i, opt in enumerate(self.options):
            if not opt.strip():
                raise ValidationError(f"option {OPTION_LABELS[i]} is empty")
        if not MIN_DIFFICULTY <= self.difficulty <= MAX_DIFFICULTY:
            raise ValidationError(f"invalid difficulty: {self.difficulty}")

    @staticmethod
    def option_label(index: int) -> str:
        return OPTION_LABELS[index]

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_answer]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "options": list(self.options),
            "correctAnswer": self.correct_answer,
            "explanation": self.explanation,
            "topic": self.topic.display_name,
            "difficulty": self.difficulty,
        }


@dataclass
class Statistics:
    """Running score for a session."""

    correct: int = 0
    total: int = 0
    streak: int = 0
    best_streak: int = 0

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total > 0 else 0.0

    @property
    def accuracy_percent(self) -> int:
        return int(self.accuracy * 100)

    def record_question(self) -> None:
        self.total += 1

    def record_answer(self, correct: bool) -> None:
        if correct:
            self.correct += 1
            self.streak += 1
            self.best_streak = max(self.best_streak, self.streak)
        else:
            self.streak = 0

    def reset(self) -> None:
        self.correct = 0
        self.total = 0
        self.streak = 0
        self.best_streak = 0

    def copy(self) -> "Statistics":
        return Statistics(self.correct, self.total, self.streak, self.best_streak)


def normalize_topics(topics: Iterable[Topic | str]) -> frozenset:
    """Coerce an iterable of topics (or topic names) to a frozenset of Topic."""
    out = set()
    for t in topics:
        out.add(t if isinstance(t, Topic) else Topic.from_name(str(t)))
    return frozenset(out)


def clamp_difficulty(value: float | int) -> int:
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, int(round(value))))

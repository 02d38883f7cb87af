"""Session state: current question, answer selection and running statistics."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Protocol

from .data.schemas import (
    DEFAULT_TOPICS,
    Question,
    Statistics,
    Topic,
    clamp_difficulty,
    normalize_topics,
)
from .errors import FetchError, NoTopicsSelectedError
from .utils.logging_config import MetricsLogger, get_session_logger

logger = get_session_logger()

_TOPIC_ORDER = list(Topic)


class QuestionSource(Protocol):
    async def fetch(self, topic: Topic, difficulty: int) -> Question: ...


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session handed to renderers."""

    question: Optional[Question]
    selected_answer: Optional[int]
    show_solution: bool
    is_loading: bool
    error: Optional[str]
    topics: frozenset
    difficulty: int
    stats: Statistics

    @property
    def is_correct(self) -> Optional[bool]:
        if not self.show_solution or self.question is None or self.selected_answer is None:
            return None
        return self.selected_answer == self.question.correct_answer


Listener = Callable[[SessionSnapshot], None]


class SessionState:
    """Mutable state of one quiz session.

    A single task is expected to drive all mutating calls. ``generate`` is
    the only coroutine; a call made while another fetch is still in flight
    is rejected (returns False) rather than queued or raced.
    """

    def __init__(
        self,
        provider: QuestionSource,
        topics: Iterable[Topic | str] = DEFAULT_TOPICS,
        difficulty: int = 5,
        rng: random.Random | None = None,
        metrics: MetricsLogger | None = None,
    ):
        self.provider = provider
        self.stats = Statistics()
        self._topics = normalize_topics(topics)
        self._difficulty = clamp_difficulty(difficulty)
        self._question: Optional[Question] = None
        self._selected: Optional[int] = None
        self._show_solution = False
        self._scorable = False
        self._loading = False
        self._error: Optional[str] = None
        self._rng = rng or random.Random()
        self._metrics = metrics or MetricsLogger()
        self._listeners: List[Listener] = []

    # -- read API -----------------------------------------------------

    @property
    def current_question(self) -> Optional[Question]:
        return self._question

    @property
    def selected_answer(self) -> Optional[int]:
        return self._selected

    @property
    def show_solution(self) -> bool:
        return self._show_solution

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def selected_topics(self) -> frozenset:
        return self._topics

    @property
    def difficulty(self) -> int:
        return self._difficulty

    @property
    def is_correct(self) -> Optional[bool]:
        return self.snapshot().is_correct

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            question=self._question,
            selected_answer=self._selected,
            show_solution=self._show_solution,
            is_loading=self._loading,
            error=self._error,
            topics=self._topics,
            difficulty=self._difficulty,
            stats=self.stats.copy(),
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)

    # -- settings -----------------------------------------------------

    def select_topics(self, topics: Iterable[Topic | str]) -> None:
        self._topics = normalize_topics(topics)
        self._notify()

    def toggle_topic(self, topic: Topic) -> None:
        if topic in self._topics:
            self._topics = self._topics - {topic}
        else:
            self._topics = self._topics | {topic}
        self._notify()

    def set_difficulty(self, value: float | int) -> None:
        self._difficulty = clamp_difficulty(value)
        self._notify()

    # -- question cycle -----------------------------------------------

    def _pick_topic(self) -> Topic:
        # Fixed ordering keeps seeded sessions reproducible.
        candidates = [t for t in _TOPIC_ORDER if t in self._topics]
        return self._rng.choice(candidates)

    async def generate(self) -> bool:
        """Fetch and install a new question.

        Returns:
            True if a new question was installed, False otherwise (the
            reason, if any, is available as ``error``)
        """
        if self._loading:
            logger.debug("generate() ignored: a fetch is already in flight")
            return False
        if not self._topics:
            self._error = str(NoTopicsSelectedError())
            self._notify()
            return False

        self._loading = True
        self._selected = None
        self._show_solution = False
        self._error = None
        topic = self._pick_topic()
        difficulty = self._difficulty
        self._notify()

        question: Optional[Question] = None
        try:
            question = await self.provider.fetch(topic, difficulty)
        except FetchError as e:
            self._error = e.user_message
            logger.warning(
                "Question fetch failed: %s",
                e,
                extra={"topic": topic.display_name, "error_type": type(e).__name__},
            )
        finally:
            self._loading = False

        if question is None:
            self._notify()
            return False

        self._question = question
        self._scorable = True
        self.stats.record_question()
        logger.info(
            "Installed %s question (difficulty %d)", topic.display_name, difficulty,
            extra={"topic": topic.display_name, "difficulty": difficulty},
        )
        self._notify()
        return True

    def select_answer(self, index: int) -> None:
        """Record a tentative answer.

        Ignored once the solution is revealed, while loading, or before any
        question exists.

        Raises:
            IndexError: If ``index`` is not a valid option index
        """
        if self._show_solution or self._loading or self._question is None:
            return
        if not 0 <= index < len(self._question.options):
            raise IndexError(
                f"answer index {index} out of range for {len(self._question.options)} options"
            )
        self._selected = index
        self._notify()

    def reveal(self) -> Optional[bool]:
        """Show the solution and score the selected answer.

        A question that is not counted in ``total`` (installed before the
        last ``reset_statistics``, or already scored) is revealed but not
        scored.

        Returns:
            True/False for a correct/incorrect answer, or None when there is
            nothing to check (no question, no selection, or already revealed)
        """
        question = self._question
        if question is None or self._selected is None or self._show_solution:
            return None

        self._show_solution = True
        correct = self._selected == question.correct_answer
        if self._scorable:
            self._scorable = False
            self.stats.record_answer(correct)
            self._metrics.log_answer(
                topic=question.topic.display_name,
                difficulty=question.difficulty,
                correct=correct,
                streak=self.stats.streak,
                accuracy=self.stats.accuracy,
            )
        else:
            logger.debug("Revealed a question that is not counted in the statistics")
        self._notify()
        return correct

    def reset_statistics(self) -> None:
        self.stats.reset()
        self._scorable = False
        logger.info("Statistics reset")
        self._notify()

"""Tests for SessionState: question cycle, scoring and overlap policy."""

import asyncio
import random

import pytest

from mock_provider import FakeProvider, make_question
from scigen.data.schemas import DEFAULT_TOPICS, Topic
from scigen.errors import MalformedResponseError, TransportError, ValidationError
from scigen.session import SessionState


def _session(results=None, **kwargs) -> SessionState:
    kwargs.setdefault("rng", random.Random(7))
    return SessionState(FakeProvider(results), **kwargs)


def _generate(session: SessionState) -> bool:
    return asyncio.run(session.generate())


def _answered(correct: bool) -> SessionState:
    """A session holding one fetched question with an answer selected."""
    session = _session([make_question(correct_answer=2)])
    assert _generate(session)
    session.select_answer(2 if correct else 0)
    return session


class TestDefaults:
    def test_initial_state(self):
        session = _session()
        assert session.selected_topics == DEFAULT_TOPICS
        assert session.difficulty == 5
        assert session.current_question is None
        assert session.selected_answer is None
        assert not session.show_solution
        assert not session.is_loading
        assert session.error is None
        assert session.stats.total == 0

    @pytest.mark.parametrize("value,expected", [(0, 1), (3, 3), (10, 10), (15, 10), (6.6, 7)])
    def test_set_difficulty_clamps(self, value, expected):
        session = _session()
        session.set_difficulty(value)
        assert session.difficulty == expected

    def test_toggle_topic(self):
        session = _session()
        session.toggle_topic(Topic.PHYSICS)
        assert Topic.PHYSICS not in session.selected_topics
        session.toggle_topic(Topic.ASTRONOMY)
        assert Topic.ASTRONOMY in session.selected_topics

    def test_select_topics_replaces(self):
        session = _session()
        session.select_topics(["earth"])
        assert session.selected_topics == {Topic.EARTH}


class TestGenerate:
    def test_no_topics_sets_error_without_fetching(self):
        session = _session()
        session.select_topics([])
        assert _generate(session) is False
        assert session.error == "Please select at least one topic"
        assert session.provider.calls == []
        assert session.stats.total == 0
        assert not session.is_loading

    def test_success_installs_question_and_counts(self):
        session = _session()
        assert _generate(session) is True
        q = session.current_question
        assert q is not None
        assert q.topic in DEFAULT_TOPICS
        assert q.difficulty == 5
        assert session.stats.total == 1
        assert session.stats.correct == 0
        assert session.stats.streak == 0
        assert not session.is_loading
        assert session.error is None

    def test_uses_current_difficulty_and_selected_topic(self):
        session = _session()
        session.select_topics([Topic.ASTRONOMY])
        session.set_difficulty(9)
        _generate(session)
        assert session.provider.calls == [(Topic.ASTRONOMY, 9)]

    def test_topic_choice_is_reproducible_with_seed(self):
        first = _session(rng=random.Random(123))
        second = _session(rng=random.Random(123))
        for _ in range(5):
            _generate(first)
            _generate(second)
        assert first.provider.calls == second.provider.calls

    def test_topic_drawn_from_whole_selection(self):
        session = _session(topics=list(Topic), rng=random.Random(0))
        for _ in range(200):
            _generate(session)
        assert {topic for topic, _ in session.provider.calls} == set(Topic)

    @pytest.mark.parametrize(
        "error",
        [
            TransportError("HTTP 500", status_code=500, body="boom"),
            MalformedResponseError("response has no choices[0].message.content"),
            ValidationError("expected 4 options, got 3"),
        ],
    )
    def test_failure_keeps_previous_question(self, error):
        previous = make_question(text="Previous question?")
        session = _session([previous, error])
        _generate(session)
        assert _generate(session) is False
        assert session.current_question is previous
        assert session.stats.total == 1
        assert not session.is_loading
        assert session.error == f"API Error: {error}"

    def test_http_500_message_contains_status(self):
        session = _session([TransportError("HTTP 500", status_code=500, body="Internal error")])
        _generate(session)
        assert "500" in session.error
        assert session.stats.total == 0

    def test_three_option_payload_message(self):
        session = _session([ValidationError("expected 4 options, got 3")])
        _generate(session)
        assert session.error == "API Error: expected 4 options, got 3"

    def test_error_replaced_not_accumulated(self):
        session = _session([
            TransportError("HTTP 500", status_code=500, body="first"),
            ValidationError("invalid correctAnswer: 9"),
        ])
        _generate(session)
        _generate(session)
        assert session.error == "API Error: invalid correctAnswer: 9"

    def test_error_cleared_by_next_success(self):
        session = _session([TransportError("HTTP 502", status_code=502, body="bad gateway"), None])
        _generate(session)
        assert session.error
        _generate(session)
        assert session.error is None

    def test_generate_resets_selection_and_reveal(self):
        session = _answered(correct=True)
        session.reveal()
        _generate(session)
        assert session.selected_answer is None
        assert not session.show_solution

    def test_overlapping_generate_is_rejected(self):
        provider = FakeProvider()
        session = SessionState(provider, rng=random.Random(1))

        async def scenario():
            provider.gate = asyncio.Event()
            first = asyncio.create_task(session.generate())
            await asyncio.sleep(0)
            assert session.is_loading
            second = await session.generate()
            provider.gate.set()
            return await first, second

        first, second = asyncio.run(scenario())
        assert first is True
        assert second is False
        assert len(provider.calls) == 1
        assert session.stats.total == 1


class TestAnswering:
    def test_select_before_question_is_ignored(self):
        session = _session()
        session.select_answer(1)
        assert session.selected_answer is None

    def test_select_out_of_range_raises(self):
        session = _session()
        _generate(session)
        with pytest.raises(IndexError):
            session.select_answer(4)
        with pytest.raises(IndexError):
            session.select_answer(-1)

    def test_reveal_correct(self):
        session = _answered(correct=True)
        assert session.reveal() is True
        assert session.show_solution
        assert session.stats.correct == 1
        assert session.stats.streak == 1
        assert session.stats.best_streak == 1
        assert session.stats.total == 1
        assert session.is_correct is True

    def test_reveal_wrong_resets_streak(self):
        session = _session([make_question(correct_answer=2), make_question(correct_answer=2)])
        _generate(session)
        session.select_answer(2)
        session.reveal()
        _generate(session)
        session.select_answer(1)
        assert session.reveal() is False
        assert session.stats.correct == 1
        assert session.stats.streak == 0
        assert session.stats.best_streak == 1
        assert session.is_correct is False

    def test_reveal_twice_does_not_double_count(self):
        session = _answered(correct=True)
        session.reveal()
        assert session.reveal() is None
        assert session.stats.correct == 1
        assert session.stats.streak == 1

    def test_reveal_without_selection_is_noop(self):
        session = _session()
        _generate(session)
        assert session.reveal() is None
        assert not session.show_solution

    def test_reveal_without_question_is_noop(self):
        session = _session()
        assert session.reveal() is None

    def test_selection_locked_after_reveal(self):
        session = _answered(correct=False)
        session.reveal()
        session.select_answer(2)
        assert session.selected_answer == 0

    def test_best_streak_tracks_maximum(self):
        outcomes = [True, True, True, False, True]
        session = _session([make_question(correct_answer=2) for _ in outcomes])
        for ok in outcomes:
            _generate(session)
            session.select_answer(2 if ok else 3)
            session.reveal()
        stats = session.stats
        assert (stats.correct, stats.total, stats.streak, stats.best_streak) == (4, 5, 1, 3)
        assert stats.correct <= stats.total
        assert stats.best_streak >= stats.streak

    def test_reset_statistics(self):
        session = _answered(correct=True)
        session.reveal()
        session.reset_statistics()
        stats = session.stats
        assert (stats.correct, stats.total, stats.streak, stats.best_streak) == (0, 0, 0, 0)
        assert stats.accuracy == 0.0

    def test_reset_before_reveal_keeps_correct_within_total(self):
        session = _answered(correct=True)
        session.reset_statistics()
        assert session.reveal() is True
        assert session.show_solution
        stats = session.stats
        assert (stats.correct, stats.total, stats.streak, stats.best_streak) == (0, 0, 0, 0)
        assert stats.correct <= stats.total

    def test_scoring_resumes_after_reset(self):
        session = _session([make_question(correct_answer=2), make_question(correct_answer=2)])
        _generate(session)
        session.reset_statistics()
        _generate(session)
        session.select_answer(2)
        session.reveal()
        stats = session.stats
        assert (stats.correct, stats.total, stats.streak) == (1, 1, 1)


class TestSubscribers:
    def test_listener_sees_loading_then_ready(self):
        session = _session()
        seen = []
        session.subscribe(lambda snap: seen.append((snap.is_loading, snap.question is not None)))
        _generate(session)
        assert seen == [(True, False), (False, True)]

    def test_unsubscribe(self):
        session = _session()
        seen = []
        unsubscribe = session.subscribe(seen.append)
        unsubscribe()
        _generate(session)
        assert seen == []

    def test_snapshot_is_detached(self):
        session = _answered(correct=True)
        snap = session.snapshot()
        session.reveal()
        assert snap.stats.correct == 0
        assert not snap.show_solution
        assert snap.is_correct is None

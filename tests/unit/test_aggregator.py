"""Unit tests for SegmentAggregator."""

import pytest
from unittest.mock import Mock

from notetaker.models.events import EventKind, SpeechEvent
from notetaker.models.session import WorkingState
from notetaker.transcription.aggregator import SegmentAggregator


@pytest.fixture
def state():
    return WorkingState()


@pytest.fixture
def on_pause_commit():
    return Mock()


@pytest.fixture
def aggregator(state, scheduler, on_pause_commit):
    return SegmentAggregator(state, scheduler, pause_interval=2.0, on_pause_commit=on_pause_commit)


@pytest.mark.unit
class TestSegmentAggregator:
    """Test cases for SegmentAggregator."""

    def test_partial_sets_current_segment(self, aggregator, state):
        result = aggregator.handle_event(SpeechEvent.partial("hello"))

        assert result.live_text == "hello"
        assert result.committed == ()
        assert result.event_kind is EventKind.PARTIAL
        assert state.current_segment == "hello"
        assert state.last_partial_text == "hello"
        assert state.accumulated_segments == []

    def test_pause_commits_partial(self, aggregator, state, scheduler, on_pause_commit):
        aggregator.handle_event(SpeechEvent.partial("hello"))
        scheduler.advance(2.0)

        assert state.accumulated_segments == ["hello"]
        assert state.current_segment == ""
        assert aggregator.live_text == "hello"
        on_pause_commit.assert_called_once()
        assert on_pause_commit.call_args[0][0].committed == ("hello",)

    def test_pause_commit_happens_once(self, aggregator, state, scheduler, on_pause_commit):
        aggregator.handle_event(SpeechEvent.partial("hello"))
        scheduler.advance(2.0)
        scheduler.advance(10.0)

        assert state.accumulated_segments == ["hello"]
        assert on_pause_commit.call_count == 1
        assert not aggregator.has_pending_pause

    def test_new_partial_restarts_pause_timer(self, aggregator, state, scheduler):
        aggregator.handle_event(SpeechEvent.partial("hello"))
        scheduler.advance(1.5)
        aggregator.handle_event(SpeechEvent.partial("hello there"))
        scheduler.advance(1.5)

        assert state.accumulated_segments == []

        scheduler.advance(0.5)
        assert state.accumulated_segments == ["hello there"]

    def test_superseded_timer_is_ignored(self, aggregator, state, scheduler):
        aggregator.handle_event(SpeechEvent.partial("hello"))
        stale_task = scheduler.tasks[0]
        aggregator.handle_event(SpeechEvent.partial("hello there"))

        # Simulate a timer that fired just before it was cancelled
        stale_task.callback()

        assert state.accumulated_segments == []
        assert state.current_segment == "hello there"

    def test_regressing_partial_commits_previous(self, aggregator, state):
        aggregator.handle_event(SpeechEvent.partial("remind me to buy milk"))
        result = aggregator.handle_event(SpeechEvent.partial("what"))

        assert result.committed == ("remind me to buy milk",)
        assert state.accumulated_segments == ["remind me to buy milk"]
        assert state.current_segment == "what"
        assert result.live_text == "remind me to buy milk what"

    def test_restart_from_single_word_commits_previous(self, aggregator, state):
        aggregator.handle_event(SpeechEvent.partial("I like turtles and frogs"))
        result = aggregator.handle_event(SpeechEvent.partial("I"))

        assert state.accumulated_segments == ["I like turtles and frogs"]
        assert state.current_segment == "I"
        assert result.live_text == "I like turtles and frogs I"

    def test_regression_after_pause_commit_is_not_duplicated(self, aggregator, state, scheduler):
        aggregator.handle_event(SpeechEvent.partial("remind me to buy milk"))
        scheduler.advance(2.0)
        aggregator.handle_event(SpeechEvent.partial("what"))

        assert state.accumulated_segments == ["remind me to buy milk"]
        assert state.current_segment == "what"

    def test_final_commits_and_cancels_timer(self, aggregator, state, scheduler):
        aggregator.handle_event(SpeechEvent.partial("hello"))
        result = aggregator.handle_event(SpeechEvent.final("hello"))

        assert result.committed == ("hello",)
        assert state.accumulated_segments == ["hello"]
        assert state.current_segment == ""
        assert scheduler.pending == []

    def test_duplicate_final_is_suppressed(self, aggregator, state):
        aggregator.handle_event(SpeechEvent.final("hello"))
        result = aggregator.handle_event(SpeechEvent.final("hello"))

        assert result.committed == ()
        assert state.accumulated_segments == ["hello"]

    def test_final_after_pause_commit_is_suppressed(self, aggregator, state, scheduler):
        aggregator.handle_event(SpeechEvent.partial("hello"))
        scheduler.advance(2.0)
        aggregator.handle_event(SpeechEvent.final("hello"))

        assert state.accumulated_segments == ["hello"]

    def test_empty_partial_resets_timer_without_commit(self, aggregator, state, scheduler):
        aggregator.handle_event(SpeechEvent.partial("hello"))
        scheduler.advance(1.0)
        aggregator.handle_event(SpeechEvent.partial(""))

        assert len(scheduler.pending) == 1
        assert scheduler.pending[0].due == 3.0

        scheduler.advance(2.0)
        assert state.accumulated_segments == []
        assert state.current_segment == ""

    def test_empty_final_commits_nothing(self, aggregator, state):
        aggregator.handle_event(SpeechEvent.partial("hello"))
        aggregator.handle_event(SpeechEvent.final(""))

        assert state.accumulated_segments == []
        assert state.current_segment == ""

    def test_reset_clears_state(self, aggregator, state, scheduler):
        aggregator.handle_event(SpeechEvent.final("first"))
        aggregator.handle_event(SpeechEvent.partial("second"))
        result = aggregator.handle_event(SpeechEvent.reset())

        assert result.live_text == ""
        assert state.accumulated_segments == []
        assert state.last_partial_text == ""
        assert scheduler.pending == []

    def test_interrupted_commits_current(self, aggregator, state, scheduler):
        aggregator.handle_event(SpeechEvent.final("first"))
        aggregator.handle_event(SpeechEvent.partial("second"))
        result = aggregator.handle_event(SpeechEvent.interrupted())

        assert result.committed == ("second",)
        assert state.accumulated_segments == ["first", "second"]
        assert scheduler.pending == []

    def test_interrupted_commits_repeated_text(self, aggregator, state):
        aggregator.handle_event(SpeechEvent.final("hello"))
        aggregator.handle_event(SpeechEvent.partial("hello"))
        result = aggregator.handle_event(SpeechEvent.interrupted())

        assert result.committed == ("hello",)
        assert state.accumulated_segments == ["hello", "hello"]
        assert state.current_segment == ""

    def test_flush_commits_current(self, aggregator, state, scheduler):
        aggregator.handle_event(SpeechEvent.partial("hello"))
        result = aggregator.flush()

        assert result.live_text == "hello"
        assert result.committed == ("hello",)
        assert scheduler.pending == []

    def test_closed_aggregator_drops_events(self, aggregator, state, scheduler, on_pause_commit):
        aggregator.handle_event(SpeechEvent.partial("hello"))
        aggregator.close()
        aggregator.handle_event(SpeechEvent.partial("hello there"))
        scheduler.advance(5.0)

        assert state.current_segment == "hello"
        assert state.accumulated_segments == []
        on_pause_commit.assert_not_called()

    def test_live_text_joins_segments_and_current(self, aggregator):
        aggregator.handle_event(SpeechEvent.final("first"))
        aggregator.handle_event(SpeechEvent.final("second"))
        result = aggregator.handle_event(SpeechEvent.partial("third"))

        assert result.live_text == "first second third"

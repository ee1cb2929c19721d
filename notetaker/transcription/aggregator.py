"""Segment aggregator that folds recognizer hypotheses into stable text.

The aggregator consumes speech events one at a time and keeps the working
text of a recording: committed segments plus the latest uncommitted
partial. A partial that goes quiet for ``pause_interval`` seconds is
committed by a one-shot pause timer.

Every mutation, including the pause timer firing, happens under one lock.
Rescheduling the timer bumps a generation counter in the same critical
section, so a timer that fires after it was superseded finds a stale
generation and does nothing.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..models.events import EventKind, SpeechEvent
from ..models.session import WorkingState
from .hypothesis import DEFAULT_REGRESSION_RATIO, HypothesisDecision, classify_partial
from .scheduler import PauseScheduler, ScheduledTask

logger = logging.getLogger(__name__)

DEFAULT_PAUSE_INTERVAL = 2.0


@dataclass(frozen=True)
class AggregationResult:
    """Outcome of one aggregation step."""
    live_text: str
    committed: Tuple[str, ...] = ()
    event_kind: Optional[EventKind] = None  # None for pause-timer commits


class SegmentAggregator:
    """Folds partial and final hypotheses into committed segments."""

    def __init__(
        self,
        state: WorkingState,
        scheduler: PauseScheduler,
        pause_interval: float = DEFAULT_PAUSE_INTERVAL,
        regression_ratio: float = DEFAULT_REGRESSION_RATIO,
        on_pause_commit: Optional[Callable[[AggregationResult], None]] = None,
        lock: Optional[threading.RLock] = None,
    ):
        """Initialize segment aggregator.

        Args:
            state: Working state to mutate. The aggregator is its only writer.
            scheduler: Scheduler for the pause timer
            pause_interval: Seconds of silence after a partial before it is committed
            regression_ratio: Shrink ratio passed to ``classify_partial``
            on_pause_commit: Called (under ``lock``) when the pause timer commits text
            lock: Lock shared with the owner so timer callbacks serialize with events
        """
        self.state = state
        self.scheduler = scheduler
        self.pause_interval = pause_interval
        self.regression_ratio = regression_ratio
        self.on_pause_commit = on_pause_commit
        self.lock = lock or threading.RLock()

        self._pause_task: Optional[ScheduledTask] = None
        self._pause_generation = 0
        self._closed = False

    @property
    def has_pending_pause(self) -> bool:
        with self.lock:
            return self._pause_task is not None

    @property
    def live_text(self) -> str:
        with self.lock:
            return self.state.live_text

    def handle_event(self, event: SpeechEvent) -> AggregationResult:
        """Apply a single speech event to the working state."""
        with self.lock:
            if self._closed:
                logger.debug(f"Aggregator closed, dropping {event.kind.value} event")
                return AggregationResult(self.state.live_text, event_kind=event.kind)

            if event.kind is EventKind.PARTIAL:
                committed = self._handle_partial(event.text)
            elif event.kind is EventKind.FINAL:
                committed = self._handle_final(event.text)
            elif event.kind is EventKind.RESET:
                committed = self._handle_reset()
            elif event.kind is EventKind.INTERRUPTED:
                committed = self._handle_interrupted()
            else:
                raise ValueError(f"Unknown event kind: {event.kind}")

            return AggregationResult(self.state.live_text, tuple(committed), event.kind)

    def flush(self) -> AggregationResult:
        """Commit the current segment and stop the pause timer."""
        with self.lock:
            self._cancel_pause_timer()
            committed = self._commit_current()
            return AggregationResult(self.state.live_text, tuple(committed))

    def close(self) -> None:
        """Cancel the pause timer and ignore any further events."""
        with self.lock:
            self._cancel_pause_timer()
            self._closed = True

    def _handle_partial(self, text: str) -> List[str]:
        committed = []
        decision = classify_partial(self.state.last_partial_text, text, self.regression_ratio)
        if decision is HypothesisDecision.COMMIT_PREVIOUS:
            previous = self.state.last_partial_text
            if self.state.commit(previous):
                committed.append(previous)
                logger.debug(f"Regressing partial, committed previous hypothesis: {previous[:50]}")

        self.state.last_partial_text = text
        self.state.current_segment = text
        self._schedule_pause_timer()
        return committed

    def _handle_final(self, text: str) -> List[str]:
        committed = []
        if self.state.commit(text):
            committed.append(text)
            logger.debug(f"Final result committed: {text[:50]}")
        self.state.current_segment = ""
        self._cancel_pause_timer()
        return committed

    def _handle_reset(self) -> List[str]:
        self._cancel_pause_timer()
        self.state.clear()
        logger.debug("Working state reset")
        return []

    def _handle_interrupted(self) -> List[str]:
        # No duplicate check here
        self._cancel_pause_timer()
        current = self.state.current_segment
        self.state.current_segment = ""
        if not current:
            return []
        self.state.accumulated_segments.append(current)
        return [current]

    def _commit_current(self) -> List[str]:
        current = self.state.current_segment
        self.state.current_segment = ""
        if self.state.commit(current):
            return [current]
        return []

    def _schedule_pause_timer(self) -> None:
        self._cancel_pause_timer()
        self._pause_generation += 1
        generation = self._pause_generation
        self._pause_task = self.scheduler.schedule(
            self.pause_interval, lambda: self._on_pause_timer(generation)
        )

    def _cancel_pause_timer(self) -> None:
        if self._pause_task is not None:
            self._pause_task.cancel()
            self._pause_task = None
        self._pause_generation += 1

    def _on_pause_timer(self, generation: int) -> None:
        with self.lock:
            if self._closed or generation != self._pause_generation:
                logger.debug("Stale pause timer ignored")
                return

            self._pause_task = None
            committed = self._commit_current()
            if not committed:
                return

            logger.debug(f"Pause detected, committed segment: {committed[0][:50]}")
            result = AggregationResult(self.state.live_text, tuple(committed))
            if self.on_pause_commit:
                self.on_pause_commit(result)

"""Transcription session: the recording state machine.

The session ties a speech recognizer to the segment aggregator, the text
analyzer and transcript storage:

    IDLE -> REQUESTING_PERMISSION -> RECORDING -> STOPPING -> IDLE
                                     RECORDING -> INTERRUPTED -> IDLE

Recognizer events, pause-timer commits and public calls all serialize on
``self.lock``. Permission requests, recognizer startup and storage I/O run
outside the lock; their results are applied under it afterwards.
"""

import logging
import threading
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ..config import NoteTakerConfig
from ..errors import PersistenceFailure, TranscriptionError, UnknownTranscriptionError
from ..models.events import AudioSessionSignal, EventKind, SpeechEvent
from ..models.session import Notice, SessionSnapshot, SessionState, WorkingState
from ..models.transcript import RecordingMetadata, Transcript
from ..storage.transcript_repository import TranscriptRepository
from ..text.analyzer import TextAnalyzer
from ..text.lexicons import Lexicons
from ..transcription.aggregator import AggregationResult, SegmentAggregator
from ..transcription.base import AbstractSpeechRecognizer
from ..transcription.scheduler import PauseScheduler, ThreadingPauseScheduler
from .publisher import SessionPublisher

logger = logging.getLogger(__name__)

STATUS_READY = "Ready to record"
STATUS_LISTENING = "Listening..."
STATUS_SAVED = "Transcript saved"
STATUS_SAVE_FAILED = "Save failed"
STATUS_INTERRUPTED = "Recording interrupted"

INTERRUPTED_SAVED_MESSAGE = "Your transcript has been saved. Tap record to continue."
INTERRUPTED_EMPTY_MESSAGE = "Recording stopped before any speech was captured."
INTERRUPTED_UNSAVED_MESSAGE = "Your transcript is still on screen but could not be saved."


class TranscriptionSession:
    """Drives recording sessions and keeps the observable session state."""

    def __init__(
        self,
        config: NoteTakerConfig,
        recognizer: AbstractSpeechRecognizer,
        repository: TranscriptRepository,
        text_analyzer: Optional[TextAnalyzer] = None,
        scheduler: Optional[PauseScheduler] = None,
        audio_monitor=None,
        publisher: Optional[SessionPublisher] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize transcription session.

        Args:
            config: Application configuration
            recognizer: Speech event source
            repository: Transcript storage
            text_analyzer: Normalizer for the editable text (built from config if None)
            scheduler: Pause timer scheduler (threading timers if None)
            audio_monitor: Optional AudioSessionMonitor delivering interruptions
            publisher: Snapshot/notice publisher (built from config if None)
            clock: Source of timestamps for recording metadata
        """
        self.config = config
        self.recognizer = recognizer
        self.repository = repository
        self.text_analyzer = text_analyzer or TextAnalyzer(Lexicons.from_config(config))
        self.scheduler = scheduler or ThreadingPauseScheduler()
        self.publisher = publisher or SessionPublisher(config.get('events.topic_prefix', 'notetaker'))
        self.clock = clock

        self.pause_interval = config.get_pause_interval()
        self.regression_ratio = config.get_regression_ratio()
        self.history_limit = int(config.get('session.history_limit', 25))
        self.locale = config.get('session.locale', 'en_US')
        self.force_on_device = bool(config.get('session.force_on_device', True))
        self.use_intelligent_analysis = bool(config.get('session.use_intelligent_analysis', True))
        self.ignorable_error_codes = frozenset(config.get_ignorable_error_codes())

        self.lock = threading.RLock()

        # Observable state
        self.state = SessionState.IDLE
        self.is_editing = False
        self.live_text = ""
        self.editable_text = ""
        self.status_message = STATUS_READY
        self.notice: Optional[Notice] = None
        self._history: List[Transcript] = []

        # Recording state
        self._working_state: Optional[WorkingState] = None
        self._aggregator: Optional[SegmentAggregator] = None
        self._permissions_confirmed = False
        self._start_attempt = 0
        self._start_in_flight = False
        self._started_at: Optional[datetime] = None
        self._transcript_id: Optional[str] = None
        self._metadata: Optional[RecordingMetadata] = None

        self.audio_monitor = audio_monitor
        if audio_monitor is not None:
            audio_monitor.attach(self.handle_audio_signal)

        logger.info(
            f"TranscriptionSession initialized: locale={self.locale}, "
            f"pause={self.pause_interval}s, on_device={self.force_on_device}"
        )

    @property
    def is_recording(self) -> bool:
        return self.state is SessionState.RECORDING

    @property
    def history(self) -> Tuple[Transcript, ...]:
        with self.lock:
            return tuple(self._history)

    @property
    def working_state(self) -> Optional[WorkingState]:
        """Working text of the active recording, None when not recording."""
        return self._working_state

    def snapshot(self) -> SessionSnapshot:
        with self.lock:
            return SessionSnapshot(
                state=self.state,
                is_recording=self.is_recording,
                is_editing=self.is_editing,
                live_text=self.live_text,
                editable_text=self.editable_text,
                status_message=self.status_message,
                history=tuple(self._history),
            )

    # Lifecycle

    async def prepare(self) -> None:
        """Request permissions up front and load the history."""
        try:
            await self._ensure_permissions()
        except TranscriptionError as e:
            with self.lock:
                self._report_error(e)
        self.load_history()

    async def start(self) -> bool:
        """Start a recording.

        Returns:
            True if the session is now recording
        """
        with self.lock:
            if self.state is not SessionState.IDLE:
                logger.warning(f"Cannot start recording from state {self.state.value}")
                return False
            if self._start_in_flight:
                logger.warning("Cannot start recording while a cancelled start is still finishing")
                return False

            self._start_attempt += 1
            attempt = self._start_attempt
            self._start_in_flight = True
            self._discard_working_state()
            self.live_text = ""
            self.editable_text = ""
            self._set_state(SessionState.REQUESTING_PERMISSION, "Preparing...")

        try:
            return await self._run_start(attempt)
        finally:
            with self.lock:
                self._start_in_flight = False

    async def _run_start(self, attempt: int) -> bool:
        try:
            await self._ensure_permissions()

            with self.lock:
                if not self._is_current_attempt(attempt):
                    logger.info("Start cancelled while requesting permissions")
                    return False
                self._begin_working_state()

            await self.recognizer.start(
                self.locale, self.force_on_device, self.handle_event, self.handle_recognizer_error
            )
        except TranscriptionError as e:
            self._abort_start(attempt, e)
            return False
        except Exception as e:
            logger.error(f"Unexpected error starting recording: {e}", exc_info=True)
            self._abort_start(attempt, UnknownTranscriptionError(e))
            return False

        with self.lock:
            if not self._is_current_attempt(attempt):
                logger.info("Start cancelled while the recognizer was starting, stopping capture")
                self.recognizer.stop()
                return False

            status = "Recording (On-Device)" if self.force_on_device else "Recording"
            self._set_state(SessionState.RECORDING, status)

        logger.info(f"Started recording: {self._transcript_id}")
        return True

    def stop(self) -> Optional[Transcript]:
        """Stop recording, then persist and return the transcript.

        Stopping while a start is still in flight cancels that start.
        Otherwise a no-op unless recording.
        """
        with self.lock:
            if self.state is SessionState.REQUESTING_PERMISSION:
                # The pending start() sees a stale attempt and stops capture itself
                self._start_attempt += 1
                self._set_state(SessionState.STOPPING, "Processing transcript...")
                transcript = self._flush_working_state()
                logger.info("Pending start cancelled by stop()")
            elif self.state is SessionState.RECORDING:
                self._set_state(SessionState.STOPPING, "Processing transcript...")
                transcript = self._flush_working_state()
                self.recognizer.stop()
            else:
                logger.debug(f"stop() ignored in state {self.state.value}")
                return None

        return self._finalize(transcript, STATUS_SAVED)

    async def toggle(self) -> None:
        """Stop when recording, start otherwise."""
        with self.lock:
            recording = self.is_recording
        if recording:
            self.stop()
        else:
            await self.start()

    def close(self) -> None:
        """Stop any recording and detach from the audio session."""
        with self.lock:
            recording = self.is_recording
        if recording:
            self.stop()
        if self.audio_monitor is not None:
            self.audio_monitor.detach()
        logger.info("TranscriptionSession closed")

    # Event source callbacks

    def handle_event(self, event: SpeechEvent) -> None:
        """Apply one recognizer event. Safe to call from any thread."""
        if event.kind is EventKind.INTERRUPTED:
            self.interrupt()
            return

        with self.lock:
            if event.kind is EventKind.RESET and self.state is SessionState.RECORDING:
                logger.warning("Recognizer reset during recording, discarding working text")
                self._discard_working_state()
                self.live_text = ""
                if not self.is_editing:
                    self.editable_text = ""
                self._set_state(SessionState.IDLE, STATUS_READY)
                self.recognizer.stop()
            else:
                self._apply_event(event)

    def handle_recognizer_error(self, code: int, message: str = "") -> None:
        """Handle an error reported by the recognizer."""
        if code in self.ignorable_error_codes:
            logger.debug(f"Ignoring recognizer error {code}: {message}")
            return

        logger.warning(f"Recognizer error {code}: {message}")
        self.interrupt()

    def handle_audio_signal(self, signal: AudioSessionSignal) -> None:
        """Handle an interruption or route change from the audio session."""
        if not signal.should_interrupt:
            logger.debug(f"Audio session signal ignored: {signal.kind.value} ({signal.reason})")
            return

        logger.info(f"Audio session signal interrupts recording: {signal.kind.value} ({signal.reason})")
        self.interrupt()

    def interrupt(self) -> Optional[Transcript]:
        """Flush and persist the recording after an external interruption."""
        with self.lock:
            if self._aggregator is None or self.state not in (
                SessionState.RECORDING, SessionState.REQUESTING_PERMISSION
            ):
                logger.debug(f"Interruption ignored in state {self.state.value}")
                return None

            if self.state is SessionState.REQUESTING_PERMISSION:
                # The pending start() sees a stale attempt and stops capture itself
                self._start_attempt += 1

            self._set_state(SessionState.INTERRUPTED, "Analyzing interrupted text...")
            self._aggregator.handle_event(SpeechEvent.interrupted())
            transcript = self._flush_working_state()
            self.recognizer.stop()

        saved = self._finalize(transcript, STATUS_INTERRUPTED)

        if transcript is None:
            message = INTERRUPTED_EMPTY_MESSAGE
        elif saved is None:
            message = INTERRUPTED_UNSAVED_MESSAGE
        else:
            message = INTERRUPTED_SAVED_MESSAGE
        with self.lock:
            self._report_notice(Notice("Recording Interrupted", message))
        return saved

    # Editing

    def set_editing(self, editing: bool) -> None:
        """Enter or leave edit mode. Leaving discards unsaved edits."""
        with self.lock:
            self.is_editing = editing
            if not editing:
                self.editable_text = self._derive_editable_text(self.live_text)
            self._publish_snapshot()

    def update_edited_text(self, text: str) -> None:
        with self.lock:
            self.editable_text = text
            self._publish_snapshot()

    def set_intelligent_analysis(self, enabled: bool) -> None:
        with self.lock:
            self.use_intelligent_analysis = enabled
            if not self.is_editing:
                self.editable_text = self._derive_editable_text(self.live_text)
            self._publish_snapshot()

    def persist_changes(self) -> Optional[Transcript]:
        """Save the current live and edited text under the current transcript id."""
        with self.lock:
            if not self.live_text:
                return None

            metadata = self._metadata or RecordingMetadata.placeholder(self.locale)
            transcript = Transcript(
                id=self._transcript_id or str(uuid.uuid4()),
                original_text=self.live_text,
                edited_text=self.editable_text,
                created_at=metadata.start_time,
                updated_at=self.clock(),
                metadata=metadata,
            )
            self._transcript_id = transcript.id

        if not self._persist(transcript):
            return None

        with self.lock:
            self._upsert_history(transcript)
            self._publish_snapshot()
        return transcript

    # History

    def load_history(self) -> Tuple[Transcript, ...]:
        """Reload the history cache from storage."""
        items = self._fetch_history()
        with self.lock:
            if items is not None:
                self._history = items
                self._publish_snapshot()
            return tuple(self._history)

    def update_transcript_text(self, transcript: Transcript, new_text: str) -> Optional[Transcript]:
        """Store a new edited text for a history entry."""
        updated = transcript.with_edited_text(new_text, self.clock())
        try:
            self.repository.update(updated)
        except Exception as e:
            failure = self._as_persistence_failure(e, "update")
            logger.error(f"Error updating transcript {transcript.id}: {failure}")
            with self.lock:
                self._report_notice(Notice("Update Failed", failure.message))
            return None

        with self.lock:
            for index, existing in enumerate(self._history):
                if existing.id == updated.id:
                    self._history[index] = updated
                    break
            self._publish_snapshot()
        logger.info(f"Transcript text updated: {updated.id}")
        return updated

    def delete_transcript(self, transcript: Transcript) -> bool:
        """Delete a history entry from storage and the cache."""
        try:
            self.repository.delete(transcript)
        except Exception as e:
            failure = self._as_persistence_failure(e, "delete")
            logger.error(f"Error deleting transcript {transcript.id}: {failure}")
            with self.lock:
                self._report_notice(Notice("Delete Failed", failure.message))
            return False

        with self.lock:
            self._history = [t for t in self._history if t.id != transcript.id]
            self._publish_snapshot()
        logger.info(f"Transcript deleted: {transcript.id}")
        return True

    # Internal helpers

    async def _ensure_permissions(self) -> None:
        if self._permissions_confirmed:
            return
        await self.recognizer.request_permissions()
        self._permissions_confirmed = True
        logger.info("Speech and microphone permissions confirmed")

    def _is_current_attempt(self, attempt: int) -> bool:
        return attempt == self._start_attempt and self.state is SessionState.REQUESTING_PERMISSION

    def _begin_working_state(self) -> None:
        self._working_state = WorkingState()
        self._aggregator = SegmentAggregator(
            self._working_state,
            self.scheduler,
            pause_interval=self.pause_interval,
            regression_ratio=self.regression_ratio,
            on_pause_commit=self._on_pause_commit,
            lock=self.lock,
        )
        self._started_at = self.clock()
        self._transcript_id = str(uuid.uuid4())
        self._metadata = None

    def _discard_working_state(self) -> None:
        if self._aggregator is not None:
            self._aggregator.close()
        self._aggregator = None
        self._working_state = None

    def _abort_start(self, attempt: int, error: TranscriptionError) -> None:
        with self.lock:
            if attempt != self._start_attempt:
                logger.warning(f"Start attempt {attempt} failed after it was cancelled: {error}")
                return

            logger.error(f"Failed to start recording: {error}")
            self._discard_working_state()
            self.state = SessionState.IDLE
            self._report_error(error)

    def _apply_event(self, event: SpeechEvent) -> None:
        if self._aggregator is None:
            logger.debug(f"No active recording, dropping {event.kind.value} event")
            return

        if event.kind is EventKind.RESET:
            self._aggregator.handle_event(event)
            return

        if self.state not in (SessionState.RECORDING, SessionState.REQUESTING_PERMISSION):
            logger.debug(f"Ignoring {event.kind.value} event in state {self.state.value}")
            return

        result = self._aggregator.handle_event(event)
        status = STATUS_LISTENING if self.state is SessionState.RECORDING else None
        self._publish_live_text(result.live_text, status)

    def _on_pause_commit(self, result: AggregationResult) -> None:
        # Runs under self.lock on the timer thread
        if self.state is not SessionState.RECORDING:
            return
        self._publish_live_text(result.live_text, None)

    def _publish_live_text(self, live_text: str, status: Optional[str]) -> None:
        self.live_text = live_text
        if not self.is_editing:
            self.editable_text = self._derive_editable_text(live_text)
        if status:
            self.status_message = status
        self._publish_snapshot()

    def _derive_editable_text(self, text: str) -> str:
        if not text:
            return ""
        if self.use_intelligent_analysis:
            return self.text_analyzer.analyze(text)
        return text

    def _flush_working_state(self) -> Optional[Transcript]:
        """Commit pending text and turn the working state into a transcript.

        Must be called under self.lock. Clears the working state.
        """
        if self._aggregator is None:
            return None

        result = self._aggregator.flush()
        self._discard_working_state()

        self.live_text = result.live_text
        if self.live_text and not self.is_editing:
            self.editable_text = self._derive_editable_text(self.live_text)
        self._publish_snapshot()

        if not self.live_text:
            return None
        return self._build_transcript()

    def _build_transcript(self) -> Transcript:
        end_time = self.clock()
        start_time = self._started_at or end_time
        self._metadata = RecordingMetadata(
            start_time=start_time,
            end_time=end_time,
            duration=(end_time - start_time).total_seconds(),
            audio_path=self.recognizer.recorded_audio_path,
            locale_identifier=self.locale,
            used_on_device_recognition=self.force_on_device,
        )
        return Transcript(
            id=self._transcript_id or str(uuid.uuid4()),
            original_text=self.live_text,
            edited_text=self.editable_text,
            created_at=start_time,
            updated_at=end_time,
            metadata=self._metadata,
        )

    def _finalize(self, transcript: Optional[Transcript], final_status: str) -> Optional[Transcript]:
        """Persist a flushed transcript, refresh history and return to IDLE.

        Called without the lock held.
        """
        if transcript is None:
            with self.lock:
                status = STATUS_INTERRUPTED if final_status == STATUS_INTERRUPTED else STATUS_READY
                self._set_state(SessionState.IDLE, status)
            return None

        saved = self._persist(transcript)
        items = self._fetch_history()

        with self.lock:
            if saved:
                self._upsert_history(transcript)
            if items is not None:
                self._history = items
            self._set_state(SessionState.IDLE, final_status if saved else STATUS_SAVE_FAILED)

        return transcript if saved else None

    def _persist(self, transcript: Transcript) -> bool:
        """Save a new transcript or update a known one."""
        with self.lock:
            known = any(t.id == transcript.id for t in self._history)
        operation = "update" if known else "save"

        try:
            if known:
                self.repository.update(transcript)
            else:
                self.repository.save(transcript)
        except Exception as e:
            failure = self._as_persistence_failure(e, operation)
            logger.error(f"Error persisting transcript {transcript.id} ({operation}): {failure}")
            with self.lock:
                self._report_notice(Notice("Save Failed", failure.message))
            return False

        logger.info(f"Transcript persisted ({operation}): {transcript.id}")
        return True

    def _fetch_history(self) -> Optional[List[Transcript]]:
        try:
            return list(self.repository.fetch_recent(self.history_limit))
        except Exception as e:
            failure = self._as_persistence_failure(e, "fetch")
            logger.error(f"Error loading history: {failure}")
            with self.lock:
                self._report_notice(Notice("Unable to load history", failure.message))
            return None

    def _upsert_history(self, transcript: Transcript) -> None:
        for index, existing in enumerate(self._history):
            if existing.id == transcript.id:
                self._history[index] = transcript
                return
        self._history.insert(0, transcript)

    @staticmethod
    def _as_persistence_failure(error: Exception, operation: str) -> PersistenceFailure:
        if isinstance(error, PersistenceFailure):
            return error
        return PersistenceFailure(str(error) or error.__class__.__name__, operation)

    def _set_state(self, state: SessionState, status: str) -> None:
        self.state = state
        self.status_message = status
        logger.info(f"Session state -> {state.value}: {status}")
        self._publish_snapshot()

    def _report_error(self, error: TranscriptionError) -> None:
        self.status_message = f"Error: {error.message}"
        self._publish_snapshot()
        self._report_notice(Notice(error.title, error.message))

    def _report_notice(self, notice: Notice) -> None:
        self.notice = notice
        logger.warning(f"{notice.title}: {notice.message}")
        self.publisher.publish_notice(notice)

    def _publish_snapshot(self) -> None:
        self.publisher.publish_snapshot(self.snapshot())

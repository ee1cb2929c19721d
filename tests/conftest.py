"""Pytest configuration and fixtures for NoteTaker tests."""

import pytest
import tempfile
import logging
import uuid
from pathlib import Path
from typing import Callable, List, Optional

import yaml
from pubsub import pub

from notetaker.config import NoteTakerConfig
from notetaker.errors import PermissionDenied
from notetaker.models.events import SpeechEvent
from notetaker.storage.transcript_repository import FileTranscriptRepository
from notetaker.transcription.base import AbstractSpeechRecognizer
from notetaker.transcription.scheduler import PauseScheduler, ScheduledTask


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: tests wiring several components together")


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def topic_prefix():
    """Unique pub/sub namespace so tests never see each other's messages."""
    return f"test_{uuid.uuid4().hex}"


@pytest.fixture
def config_data(temp_data_dir, topic_prefix):
    """Configuration settings written to the test config file."""
    return {
        "session": {
            "pause_interval_seconds": 2.0,
            "regression_ratio": 0.5,
            "history_limit": 25,
            "locale": "en_US",
            "force_on_device": True,
            "use_intelligent_analysis": True,
        },
        "storage": {
            "data_directory": str(Path(temp_data_dir) / "data"),
            "transcripts_file": "transcripts.json",
        },
        "logging": {
            "level": "DEBUG",
            "file_path": str(Path(temp_data_dir) / "logs" / "notetaker.log"),
            "console_output": False,
        },
        "events": {
            "topic_prefix": topic_prefix,
            "audio_topic": f"{topic_prefix}_audio",
        },
    }


@pytest.fixture
def config_file(temp_data_dir, config_data):
    path = Path(temp_data_dir) / "notetaker.yaml"
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config_data, f)
    return str(path)


@pytest.fixture
def config(config_file):
    return NoteTakerConfig(config_file)


@pytest.fixture
def repository(config):
    return FileTranscriptRepository(config.get_data_directory(), config.get_transcripts_file())


class ManualTask(ScheduledTask):

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(PauseScheduler):
    """Pause scheduler driven by an explicit clock."""

    def __init__(self):
        self.now = 0.0
        self.tasks: List[ManualTask] = []

    def schedule(self, delay: float, callback: Callable[[], None]) -> ManualTask:
        task = ManualTask(self.now + delay, callback)
        self.tasks.append(task)
        return task

    @property
    def pending(self) -> List[ManualTask]:
        return [t for t in self.tasks if not t.cancelled]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, running every task that falls due in order."""
        target = self.now + seconds
        while True:
            due = [t for t in self.tasks if not t.cancelled and t.due <= target]
            if not due:
                break
            task = min(due, key=lambda t: t.due)
            self.tasks.remove(task)
            self.now = task.due
            task.callback()
        self.now = target


@pytest.fixture
def scheduler():
    return ManualScheduler()


class FakeRecognizer(AbstractSpeechRecognizer):
    """Speech recognizer double that records calls and emits on demand."""

    def __init__(self):
        self.permission_error: Optional[Exception] = None
        self.start_error: Optional[Exception] = None
        self.on_start: Optional[Callable[[], None]] = None
        self.start_gate = None  # asyncio.Event holding start() open until set
        self.emit_reset_on_stop = False
        self.audio_path: Optional[str] = None

        self.permission_requests = 0
        self.start_calls = []
        self.stop_calls = 0
        self._on_event = None
        self._on_error = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def recorded_audio_path(self) -> Optional[str]:
        return self.audio_path

    async def request_permissions(self) -> None:
        self.permission_requests += 1
        if self.permission_error is not None:
            raise self.permission_error

    async def start(self, locale, force_on_device, on_event, on_error) -> None:
        self.start_calls.append((locale, force_on_device))
        if self.on_start is not None:
            self.on_start()
        self._on_event = on_event
        self._on_error = on_error
        if self.start_gate is not None:
            await self.start_gate.wait()
        if self.start_error is not None:
            raise self.start_error
        self._running = True

    def stop(self) -> None:
        self.stop_calls += 1
        was_running = self._running
        self._running = False
        if was_running and self.emit_reset_on_stop and self._on_event is not None:
            self._on_event(SpeechEvent.reset())

    def emit(self, event: SpeechEvent) -> None:
        self._on_event(event)

    def partial(self, text: str) -> None:
        self.emit(SpeechEvent.partial(text))

    def final(self, text: str) -> None:
        self.emit(SpeechEvent.final(text))

    def error(self, code: int, message: str = "") -> None:
        self._on_error(code, message)


@pytest.fixture
def recognizer():
    return FakeRecognizer()


@pytest.fixture
def denied_recognizer():
    fake = FakeRecognizer()
    fake.permission_error = PermissionDenied()
    return fake


class SnapshotRecorder:
    """Collects everything published on a session's state and notice topics."""

    def __init__(self, topic_prefix: str):
        self.state_topic = f"{topic_prefix}.state"
        self.notice_topic = f"{topic_prefix}.notice"
        self.snapshots = []
        self.notices = []
        pub.subscribe(self.on_snapshot, self.state_topic)
        pub.subscribe(self.on_notice, self.notice_topic)

    def on_snapshot(self, snapshot):
        self.snapshots.append(snapshot)

    def on_notice(self, notice):
        self.notices.append(notice)

    @property
    def states(self):
        return [s.state for s in self.snapshots]

    @property
    def notice_titles(self):
        return [n.title for n in self.notices]

    def close(self):
        pub.unsubscribe(self.on_snapshot, self.state_topic)
        pub.unsubscribe(self.on_notice, self.notice_topic)


@pytest.fixture
def recorder(topic_prefix):
    snapshot_recorder = SnapshotRecorder(topic_prefix)
    yield snapshot_recorder
    snapshot_recorder.close()

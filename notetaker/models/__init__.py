"""Data models for the NoteTaker application."""

from .transcript import Transcript, RecordingMetadata
from .events import (
    EventKind,
    SpeechEvent,
    AudioSignalKind,
    RouteChangeReason,
    AudioSessionSignal,
)
from .session import SessionState, WorkingState, Notice, SessionSnapshot

__all__ = [
    "Transcript",
    "RecordingMetadata",
    "EventKind",
    "SpeechEvent",
    "AudioSignalKind",
    "RouteChangeReason",
    "AudioSessionSignal",
    "SessionState",
    "WorkingState",
    "Notice",
    "SessionSnapshot",
]

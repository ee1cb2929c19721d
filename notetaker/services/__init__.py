"""Services layer for NoteTaker application logic."""

from .publisher import SessionPublisher
from .transcription_session import TranscriptionSession

__all__ = [
    "SessionPublisher",
    "TranscriptionSession",
]

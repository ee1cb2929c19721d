"""Transcript persistence for NoteTaker."""

from .transcript_repository import TranscriptRepository, FileTranscriptRepository

__all__ = ["TranscriptRepository", "FileTranscriptRepository"]

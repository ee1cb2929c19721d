"""Transcript record models."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class RecordingMetadata:
    """Details about the recording a transcript came from."""
    start_time: datetime
    end_time: datetime
    duration: float  # Seconds
    locale_identifier: str
    used_on_device_recognition: bool
    audio_path: Optional[str] = None

    @classmethod
    def placeholder(cls, locale_identifier: str = "en_US") -> "RecordingMetadata":
        now = datetime.now()
        return cls(
            start_time=now,
            end_time=now,
            duration=0.0,
            locale_identifier=locale_identifier,
            used_on_device_recognition=False,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration": self.duration,
            "audio_path": self.audio_path,
            "locale_identifier": self.locale_identifier,
            "used_on_device_recognition": self.used_on_device_recognition,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecordingMetadata":
        return cls(
            start_time=datetime.fromisoformat(data["start_time"]),
            end_time=datetime.fromisoformat(data["end_time"]),
            duration=float(data["duration"]),
            audio_path=data.get("audio_path"),
            locale_identifier=data["locale_identifier"],
            used_on_device_recognition=bool(data["used_on_device_recognition"]),
        )


@dataclass(frozen=True)
class Transcript:
    """A finished dictation.

    ``original_text`` never changes once the transcript exists; user edits
    produce a copy with a new ``edited_text`` and the same ``id``.
    """
    original_text: str
    metadata: RecordingMetadata
    edited_text: Optional[str] = None  # Defaults to original_text
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if self.edited_text is None:
            object.__setattr__(self, "edited_text", self.original_text)

    @property
    def is_edited(self) -> bool:
        return self.original_text != self.edited_text

    @property
    def display_text(self) -> str:
        return self.edited_text

    def with_edited_text(self, text: str, updated_at: Optional[datetime] = None) -> "Transcript":
        """Return a copy carrying a new edited text."""
        return replace(self, edited_text=text, updated_at=updated_at or datetime.now())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "original_text": self.original_text,
            "edited_text": self.edited_text,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transcript":
        return cls(
            id=data["id"],
            original_text=data["original_text"],
            edited_text=data.get("edited_text"),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
            metadata=RecordingMetadata.from_dict(data["metadata"]),
        )

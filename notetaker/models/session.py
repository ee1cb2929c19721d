"""Session-related data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from .transcript import Transcript


class SessionState(Enum):
    """Lifecycle states of a transcription session."""
    IDLE = "idle"
    REQUESTING_PERMISSION = "requesting_permission"
    RECORDING = "recording"
    STOPPING = "stopping"
    INTERRUPTED = "interrupted"


@dataclass
class WorkingState:
    """Mutable text state of an active recording.

    Owned by a single SegmentAggregator and only mutated while it holds
    its lock.
    """
    accumulated_segments: List[str] = field(default_factory=list)
    current_segment: str = ""
    last_partial_text: str = ""

    def commit(self, text: str) -> bool:
        """Append a segment unless it is empty or repeats the last one.

        Returns:
            True if the segment was appended
        """
        if not text:
            return False
        if self.accumulated_segments and self.accumulated_segments[-1] == text:
            return False
        self.accumulated_segments.append(text)
        return True

    @property
    def live_text(self) -> str:
        parts = list(self.accumulated_segments)
        if self.current_segment:
            parts.append(self.current_segment)
        return " ".join(parts)

    def clear(self) -> None:
        self.accumulated_segments.clear()
        self.current_segment = ""
        self.last_partial_text = ""


@dataclass(frozen=True)
class Notice:
    """Non-blocking message for the user."""
    title: str
    message: str


@dataclass(frozen=True)
class SessionSnapshot:
    """Consistent view of everything a session publishes to observers."""
    state: SessionState
    is_recording: bool
    is_editing: bool
    live_text: str
    editable_text: str
    status_message: str
    history: Tuple[Transcript, ...] = ()

"""Event models for the speech event source and the audio session."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class EventKind(Enum):
    """Kinds of events a speech recognizer emits."""
    PARTIAL = "partial"
    FINAL = "final"
    RESET = "reset"
    INTERRUPTED = "interrupted"


@dataclass(frozen=True)
class SpeechEvent:
    """A single hypothesis or lifecycle event from the recognizer."""
    kind: EventKind
    text: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def partial(cls, text: str) -> "SpeechEvent":
        return cls(EventKind.PARTIAL, text)

    @classmethod
    def final(cls, text: str) -> "SpeechEvent":
        return cls(EventKind.FINAL, text)

    @classmethod
    def reset(cls) -> "SpeechEvent":
        return cls(EventKind.RESET)

    @classmethod
    def interrupted(cls) -> "SpeechEvent":
        return cls(EventKind.INTERRUPTED)


class AudioSignalKind(Enum):
    """Platform audio session notifications."""
    INTERRUPTION_BEGAN = "interruption_began"
    INTERRUPTION_ENDED = "interruption_ended"
    ROUTE_CHANGE = "route_change"


class RouteChangeReason(Enum):
    """Why the audio route changed."""
    UNKNOWN = "unknown"
    NEW_DEVICE_AVAILABLE = "new_device_available"
    OLD_DEVICE_UNAVAILABLE = "old_device_unavailable"
    CATEGORY_CHANGE = "category_change"
    OVERRIDE = "override"
    WAKE_FROM_SLEEP = "wake_from_sleep"
    NO_SUITABLE_ROUTE = "no_suitable_route"
    ROUTE_CONFIGURATION_CHANGE = "route_configuration_change"


# Route changes that leave the current input usable
BENIGN_ROUTE_CHANGES = frozenset({
    RouteChangeReason.NEW_DEVICE_AVAILABLE,
    RouteChangeReason.CATEGORY_CHANGE,
    RouteChangeReason.OVERRIDE,
    RouteChangeReason.WAKE_FROM_SLEEP,
    RouteChangeReason.NO_SUITABLE_ROUTE,
    RouteChangeReason.ROUTE_CONFIGURATION_CHANGE,
})


@dataclass(frozen=True)
class AudioSessionSignal:
    """Interruption or route-change notification."""
    kind: AudioSignalKind
    reason: Optional[RouteChangeReason] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def should_interrupt(self) -> bool:
        """Whether this signal must end an active recording."""
        if self.kind is AudioSignalKind.INTERRUPTION_BEGAN:
            return True
        if self.kind is AudioSignalKind.ROUTE_CHANGE:
            return self.reason not in BENIGN_ROUTE_CHANGES
        return False

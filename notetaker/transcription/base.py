"""Abstract base class for speech recognizers.

A recognizer owns audio capture and the platform speech service. The
session only sees the events it emits and the errors it raises.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from ..models.events import SpeechEvent

EventCallback = Callable[[SpeechEvent], None]
ErrorCallback = Callable[[int, str], None]


class AbstractSpeechRecognizer(ABC):
    """Abstract base class for speech event sources."""

    @abstractmethod
    async def request_permissions(self) -> None:
        """Ask for microphone and speech recognition access.

        Raises:
            PermissionDenied: If either permission is refused
        """
        pass

    @abstractmethod
    async def start(self, locale: str, force_on_device: bool,
                    on_event: EventCallback, on_error: ErrorCallback) -> None:
        """Start capturing audio and emitting speech events.

        Events must be delivered to ``on_event`` in emission order. Recognizer
        error codes go to ``on_error``.

        Args:
            locale: Locale identifier such as "en_US"
            force_on_device: Require on-device recognition
            on_event: Receives every SpeechEvent
            on_error: Receives (error_code, message) for recognizer errors

        Raises:
            RecognizerUnavailable: If no recognizer serves the locale
            CaptureFailure: If audio capture cannot start
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop capture. May emit a final RESET event."""
        pass

    @property
    def is_running(self) -> bool:
        return False

    @property
    def recorded_audio_path(self) -> Optional[str]:
        """Path of the audio file written during the last recording, if any."""
        return None

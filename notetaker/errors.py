"""Exceptions raised by the transcription session engine."""


class TranscriptionError(Exception):
    """Base exception for recording and transcription failures."""

    title = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PermissionDenied(TranscriptionError):
    """Microphone or speech recognition permission was refused."""

    def __init__(self, message: str = "Speech recognition and microphone permissions are required."):
        super().__init__(message)


class RecognizerUnavailable(TranscriptionError):
    """No speech recognizer can serve the requested locale right now."""

    def __init__(self, message: str = "Speech recognizer is currently unavailable."):
        super().__init__(message)


class CaptureFailure(TranscriptionError):
    """Audio capture could not be configured or started."""
    pass


class PersistenceFailure(TranscriptionError):
    """A transcript storage operation failed."""

    def __init__(self, message: str, operation: str):
        """
        Initialize persistence failure.

        Args:
            message: Error message
            operation: Storage operation that failed ("save", "update", "delete", "fetch")
        """
        super().__init__(message)
        self.operation = operation


class UnknownTranscriptionError(TranscriptionError):
    """Wraps an unexpected exception raised by a collaborator."""

    def __init__(self, cause: BaseException):
        super().__init__(str(cause) or cause.__class__.__name__)
        self.cause = cause

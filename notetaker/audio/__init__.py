"""Audio session handling for NoteTaker."""

from .session_monitor import AudioSessionMonitor

__all__ = ["AudioSessionMonitor"]

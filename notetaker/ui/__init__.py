"""Console user interface for NoteTaker."""

from .console import ConsoleView, render_history

__all__ = ["ConsoleView", "render_history"]

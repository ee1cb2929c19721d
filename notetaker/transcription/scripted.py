"""Scripted speech recognizer that replays hypotheses from a YAML script.

Used by ``notetaker replay`` to exercise a full session without a
microphone. A script looks like::

    permissions: granted        # or "denied"
    available: true             # false -> RecognizerUnavailable on start
    audio_path: recordings/demo.caf
    steps:
      - partial: remind me to
      - partial: remind me to buy milk
      - pause: 2.5
      - final: remind me to buy milk
      - error: 1110             # recognizer error code
      - interrupt: true
      - reset: true
"""

import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml

from ..errors import PermissionDenied, RecognizerUnavailable
from ..models.events import SpeechEvent
from .base import AbstractSpeechRecognizer, ErrorCallback, EventCallback

logger = logging.getLogger(__name__)

STEP_KINDS = ("partial", "final", "pause", "error", "interrupt", "reset")


@dataclass(frozen=True)
class ScriptStep:
    """One scripted action."""
    kind: str
    text: str = ""
    seconds: float = 0.0
    code: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScriptStep":
        if not isinstance(data, dict) or len(data) != 1:
            raise ValueError(f"Script step must be a single-key mapping, got: {data!r}")

        kind, value = next(iter(data.items()))
        if kind not in STEP_KINDS:
            raise ValueError(f"Unknown script step '{kind}', expected one of {STEP_KINDS}")

        if kind in ("partial", "final"):
            return cls(kind, text="" if value is None else str(value))
        if kind == "pause":
            return cls(kind, seconds=float(value))
        if kind == "error":
            return cls(kind, code=int(value))
        return cls(kind)


class ScriptedRecognizer(AbstractSpeechRecognizer):
    """Speech recognizer that emits a fixed sequence of events."""

    def __init__(
        self,
        steps: List[ScriptStep],
        permissions_granted: bool = True,
        available: bool = True,
        audio_path: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize scripted recognizer.

        Args:
            steps: Steps to replay in order
            permissions_granted: Outcome of request_permissions
            available: Whether start succeeds
            audio_path: Reported as the recorded audio file
            sleep: Function used for pause steps
        """
        self.steps = list(steps)
        self.permissions_granted = permissions_granted
        self.available = available
        self.audio_path = audio_path
        self.sleep = sleep

        self._on_event: Optional[EventCallback] = None
        self._on_error: Optional[ErrorCallback] = None
        self._running = False
        self._lock = threading.Lock()

    @classmethod
    def from_file(cls, script_path: str, sleep: Callable[[float], None] = time.sleep) -> "ScriptedRecognizer":
        """Load a recognizer script from a YAML file."""
        path = Path(script_path)
        if not path.exists():
            raise FileNotFoundError(f"Script file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in script file: {e}")

        if not isinstance(data, dict):
            raise ValueError("Script file must contain a mapping")

        steps = [ScriptStep.from_dict(item) for item in data.get('steps', [])]
        logger.info(f"Loaded script {path} with {len(steps)} steps")
        return cls(
            steps=steps,
            permissions_granted=data.get('permissions', 'granted') == 'granted',
            available=bool(data.get('available', True)),
            audio_path=data.get('audio_path'),
            sleep=sleep,
        )

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def recorded_audio_path(self) -> Optional[str]:
        return self.audio_path

    async def request_permissions(self) -> None:
        if not self.permissions_granted:
            raise PermissionDenied()

    async def start(self, locale: str, force_on_device: bool,
                    on_event: EventCallback, on_error: ErrorCallback) -> None:
        if not self.available:
            raise RecognizerUnavailable()

        with self._lock:
            if self._running:
                return
            self._on_event = on_event
            self._on_error = on_error
            self._running = True
        logger.info(f"Scripted recognizer started (locale={locale}, on_device={force_on_device})")

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            on_event = self._on_event
        logger.info("Scripted recognizer stopped")
        if on_event is not None:
            on_event(SpeechEvent.reset())

    def play(self) -> int:
        """Replay the script until it ends or the recognizer is stopped.

        Returns:
            Number of steps played
        """
        played = 0
        for step in self.steps:
            if not self._running:
                logger.info(f"Recognizer stopped, {len(self.steps) - played} steps skipped")
                break
            self._play_step(step)
            played += 1
        return played

    def _play_step(self, step: ScriptStep) -> None:
        logger.debug(f"Script step: {step.kind} {step.text or step.seconds or step.code or ''}")
        if step.kind == "partial":
            self._on_event(SpeechEvent.partial(step.text))
        elif step.kind == "final":
            self._on_event(SpeechEvent.final(step.text))
        elif step.kind == "pause":
            self.sleep(step.seconds)
        elif step.kind == "error":
            self._on_error(step.code, f"Scripted recognizer error {step.code}")
        elif step.kind == "interrupt":
            self._on_event(SpeechEvent.interrupted())
        elif step.kind == "reset":
            self.stop()

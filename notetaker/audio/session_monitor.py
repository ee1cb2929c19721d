"""Audio session monitor relaying interruption and route-change signals."""

import logging
from typing import Callable, Optional

from pubsub import pub

from ..models.events import AudioSessionSignal

logger = logging.getLogger(__name__)

SignalHandler = Callable[[AudioSessionSignal], None]


class AudioSessionMonitor:
    """Relays audio session signals from a pub/sub topic to one handler.

    Platform code (or a test) posts signals with ``publish``; the session
    attaches itself as the handler while it is alive.
    """

    def __init__(self, topic: str = "audio.session"):
        """Initialize audio session monitor.

        Args:
            topic: Pub/sub topic carrying AudioSessionSignal messages
        """
        self.topic = topic
        self._handler: Optional[SignalHandler] = None
        logger.info(f"AudioSessionMonitor initialized with topic: {topic}")

    def attach(self, handler: SignalHandler) -> None:
        if self._handler is None:
            pub.subscribe(self._on_signal, self.topic)
        self._handler = handler

    def detach(self) -> None:
        if self._handler is None:
            return
        self._handler = None
        try:
            pub.unsubscribe(self._on_signal, self.topic)
        except Exception as e:
            logger.warning(f"Error during unsubscribe: {e}")

    def publish(self, signal: AudioSessionSignal) -> None:
        """Post a signal to every monitor listening on this topic."""
        pub.sendMessage(self.topic, signal=signal)
        logger.debug(f"Published audio session signal: {signal.kind.value}")

    def _on_signal(self, signal: AudioSessionSignal) -> None:
        handler = self._handler
        if handler is not None:
            handler(signal)

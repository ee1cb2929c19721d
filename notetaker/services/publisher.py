"""Session publisher module for pub/sub event publishing."""

import logging
from pubsub import pub

from ..models.session import Notice, SessionSnapshot

logger = logging.getLogger(__name__)


class SessionPublisher:
    """Publishes session snapshots and notices using pubsub.pub."""

    def __init__(self, topic_prefix: str = "notetaker"):
        """Initialize session publisher.

        Args:
            topic_prefix: Namespace for the ``.state`` and ``.notice`` topics
        """
        self.state_topic = f"{topic_prefix}.state"
        self.notice_topic = f"{topic_prefix}.notice"
        logger.info(f"SessionPublisher initialized with topics: {self.state_topic}, {self.notice_topic}")

    def publish_snapshot(self, snapshot: SessionSnapshot) -> None:
        """Publish a session snapshot to the state topic.

        Args:
            snapshot: SessionSnapshot to publish
        """
        pub.sendMessage(self.state_topic, snapshot=snapshot)
        logger.debug(f"Published snapshot: {snapshot.state.value} - {snapshot.status_message}")

    def publish_notice(self, notice: Notice) -> None:
        """Publish a user-facing notice to the notice topic.

        Args:
            notice: Notice to publish
        """
        pub.sendMessage(self.notice_topic, notice=notice)
        logger.debug(f"Published notice: {notice.title}")

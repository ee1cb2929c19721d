"""Rich console rendering of session snapshots, notices and history."""

import logging
from typing import Iterable, Optional

from pubsub import pub
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models.session import Notice, SessionSnapshot, SessionState
from ..models.transcript import Transcript

logger = logging.getLogger(__name__)

STATE_STYLES = {
    SessionState.IDLE: "yellow",
    SessionState.REQUESTING_PERMISSION: "blue",
    SessionState.RECORDING: "bold red",
    SessionState.STOPPING: "blue",
    SessionState.INTERRUPTED: "bold magenta",
}


class ConsoleView:
    """Prints session changes as they are published."""

    def __init__(self, console: Optional[Console] = None, topic_prefix: str = "notetaker"):
        self.console = console or Console()
        self.state_topic = f"{topic_prefix}.state"
        self.notice_topic = f"{topic_prefix}.notice"
        self._last_status: Optional[str] = None
        self._last_live_text = ""
        self.last_snapshot: Optional[SessionSnapshot] = None

    def attach(self) -> None:
        pub.subscribe(self.on_snapshot, self.state_topic)
        pub.subscribe(self.on_notice, self.notice_topic)
        logger.debug(f"ConsoleView subscribed to {self.state_topic} and {self.notice_topic}")

    def detach(self) -> None:
        try:
            pub.unsubscribe(self.on_snapshot, self.state_topic)
            pub.unsubscribe(self.on_notice, self.notice_topic)
        except Exception as e:
            logger.warning(f"Error during unsubscribe: {e}")

    def on_snapshot(self, snapshot: SessionSnapshot) -> None:
        self.last_snapshot = snapshot
        if snapshot.status_message != self._last_status:
            self._last_status = snapshot.status_message
            style = STATE_STYLES.get(snapshot.state, "white")
            self.console.print(f"[{snapshot.state.value}] {snapshot.status_message}", style=style, markup=False)
        if snapshot.live_text and snapshot.live_text != self._last_live_text:
            self.console.print(f"  📝 {snapshot.live_text}", style="dim", markup=False)
        self._last_live_text = snapshot.live_text

    def on_notice(self, notice: Notice) -> None:
        self.console.print(Panel(Text(notice.message), title=notice.title, border_style="red"))

    def render_result(self, snapshot: SessionSnapshot) -> None:
        """Print the final live and editable text of a session."""
        if not snapshot.live_text:
            self.console.print("No speech captured.", style="yellow")
            return
        self.console.print(Panel(Text(snapshot.live_text), title="Transcript", border_style="green"))
        if snapshot.editable_text != snapshot.live_text:
            self.console.print(Panel(Text(snapshot.editable_text), title="Analyzed", border_style="cyan"))


def render_history(console: Console, transcripts: Iterable[Transcript]) -> None:
    """Print stored transcripts as a table, newest first."""
    table = Table(title="Transcripts")
    table.add_column("Created", style="cyan", no_wrap=True)
    table.add_column("Duration", justify="right")
    table.add_column("Text")
    table.add_column("Edited", justify="center")
    table.add_column("ID", style="dim")

    count = 0
    for transcript in transcripts:
        table.add_row(
            transcript.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            f"{transcript.metadata.duration:.1f}s",
            Text(transcript.display_text),
            "✏️" if transcript.is_edited else "",
            transcript.id[:8],
        )
        count += 1

    if count == 0:
        console.print("No transcripts stored yet.", style="yellow")
        return
    console.print(table)

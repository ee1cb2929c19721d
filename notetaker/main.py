"""Main application entry point for NoteTaker."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from notetaker.audio.session_monitor import AudioSessionMonitor
from notetaker.services.transcription_session import TranscriptionSession
from notetaker.storage.transcript_repository import FileTranscriptRepository
from notetaker.text.analyzer import TextAnalyzer
from notetaker.text.lexicons import Lexicons
from notetaker.transcription.scripted import ScriptedRecognizer
from notetaker.ui.console import ConsoleView, render_history

from .config import NoteTakerConfig

logger = logging.getLogger(__name__)


class Server:

    def __init__(self, config_path: str, log_level: Optional[str] = None):
        # Load configuration
        self.config = NoteTakerConfig(config_path)
        # Set up logging (override config with command line if specified)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        self.console = Console()
        self.repository = FileTranscriptRepository(
            self.config.get_data_directory(), self.config.get_transcripts_file()
        )

    def replay(self, script_path: str) -> int:
        """Drive a full recording session from a recognizer script."""
        recognizer = ScriptedRecognizer.from_file(script_path)
        monitor = AudioSessionMonitor(self.config.get('events.audio_topic', 'audio.session'))
        view = ConsoleView(self.console, self.config.get('events.topic_prefix', 'notetaker'))
        view.attach()

        session = TranscriptionSession(
            self.config, recognizer, self.repository, audio_monitor=monitor
        )
        try:
            asyncio.run(session.prepare())
            if not asyncio.run(session.start()):
                logger.error("Replay aborted: recording did not start")
                return 1

            played = recognizer.play()
            logger.info(f"Replayed {played} of {len(recognizer.steps)} script steps")
            session.stop()
            view.render_result(session.snapshot())
            return 0
        finally:
            session.close()
            view.detach()

    def history(self, limit: int) -> int:
        """List the most recent stored transcripts."""
        render_history(self.console, self.repository.fetch_recent(limit))
        return 0

    def analyze(self, text: str, quick: bool = False) -> int:
        """Print the normalized form of some dictated text."""
        analyzer = TextAnalyzer(Lexicons.from_config(self.config))
        result = analyzer.quick_analyze(text) if quick else analyzer.analyze(text)
        self.console.print(result, markup=False, highlight=False)
        return 0


def setup_logging(config, level: str = "INFO") -> None:

    """Set up logging configuration from YAML config."""
    # Get log file path from config
    log_file_path = config.get('logging.file_path', 'data/logs/notetaker.log')
    console_output = config.get('logging.console_output', True)

    # Create logs directory if it doesn't exist
    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    # Set up handlers
    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("NoteTaker starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="NoteTaker - Dictation transcripts with live text normalization",
    )

    parser.add_argument(
        "--config",
        type=str,
        default="notetaker.yaml",
        help="Path to configuration YAML file (default: notetaker.yaml)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: logging.level from config)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="NoteTaker v0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    replay_parser = subparsers.add_parser("replay", help="Run a recording session from a recognizer script")
    replay_parser.add_argument("script", help="YAML script of recognizer steps")

    history_parser = subparsers.add_parser("history", help="List stored transcripts")
    history_parser.add_argument("--limit", type=int, default=10, help="Number of transcripts to show")

    analyze_parser = subparsers.add_parser("analyze", help="Normalize punctuation and capitalization")
    analyze_parser.add_argument("text", help="Text to normalize")
    analyze_parser.add_argument("--quick", action="store_true", help="Only collapse whitespace and capitalize")

    return parser


def main(argv=None) -> None:
    """Main entry point for NoteTaker application."""
    args = build_parser().parse_args(argv)

    try:
        server = Server(args.config, args.log_level)
        if args.command == "replay":
            exit_code = server.replay(args.script)
        elif args.command == "history":
            exit_code = server.history(args.limit)
        else:
            exit_code = server.analyze(args.text, quick=args.quick)
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        exit_code = 130
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        exit_code = 1

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()

"""Unit tests for command line helpers."""

import logging
import pytest
from pathlib import Path

from notetaker.main import build_parser, setup_logging


@pytest.mark.unit
class TestSetupLogging:
    """Test cases for setup_logging."""

    def test_writes_to_configured_file(self, config):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging(config, "DEBUG")
            logging.getLogger("notetaker.tests").debug("aggregated one segment")
            for handler in root.handlers:
                handler.flush()

            log_file = Path(config.get("logging.file_path"))
            assert "aggregated one segment" in log_file.read_text(encoding="utf-8")
            assert [type(h) for h in root.handlers] == [logging.FileHandler]
            assert root.level == logging.DEBUG
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


@pytest.mark.unit
class TestParser:
    """Test cases for argument parsing."""

    def test_replay_arguments(self):
        args = build_parser().parse_args(["--config", "my.yaml", "--log-level", "DEBUG", "replay", "demo.yaml"])

        assert args.config == "my.yaml"
        assert args.log_level == "DEBUG"
        assert args.command == "replay"
        assert args.script == "demo.yaml"

    def test_history_defaults(self):
        args = build_parser().parse_args(["history"])

        assert args.config == "notetaker.yaml"
        assert args.limit == 10

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

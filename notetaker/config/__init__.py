"""Simple YAML configuration loader for NoteTaker."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List
import logging

logger = logging.getLogger(__name__)

DEFAULT_IGNORABLE_ERROR_CODES = [203, 216, 301, 1100, 1101, 1110]


class NoteTakerConfig:
    """NoteTaker configuration loader."""

    def __init__(self, config_path: str):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file (e.g. notetaker.yaml)
        """
        self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ValueError(f"Failed to load configuration: {e}")

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping")

        # Resolve relative paths
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        # Resolve data directory
        if 'storage' in config and 'data_directory' in config['storage']:
            data_dir = config['storage']['data_directory']
            if not os.path.isabs(data_dir):
                config['storage']['data_directory'] = str(config_dir / data_dir)

        # Resolve log file path
        if 'logging' in config and 'file_path' in config['logging']:
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'session.locale').

        Args:
            key_path: Dot-separated key path (e.g., 'session.pause_interval_seconds')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'session.locale')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        # Set the final value
        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())

    def get_transcripts_file(self) -> str:
        """Get the name of the transcripts JSON file."""
        return self.get('storage.transcripts_file', 'transcripts.json')

    def get_pause_interval(self) -> float:
        """Get the pause-detection debounce interval in seconds."""
        interval = float(self.get('session.pause_interval_seconds', 2.0))
        if interval <= 0:
            raise ValueError(f"session.pause_interval_seconds must be positive, got {interval}")
        return interval

    def get_regression_ratio(self) -> float:
        """Get the shrink ratio used to detect a restarted hypothesis."""
        ratio = float(self.get('session.regression_ratio', 0.5))
        if not 0 < ratio <= 1:
            raise ValueError(f"session.regression_ratio must be in (0, 1], got {ratio}")
        return ratio

    def get_ignorable_error_codes(self) -> List[int]:
        """Get recognizer error codes that are swallowed silently."""
        codes = self.get('recognizer.ignorable_error_codes', DEFAULT_IGNORABLE_ERROR_CODES)
        return [int(code) for code in codes]

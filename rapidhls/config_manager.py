"""Configuration management for the HLS converter."""

import json
import logging
from pathlib import Path
from typing import Any, Dict

from rapidhls.data_models import OUTPUT_MODES, QUALITY_TIERS, BatchOptions


class ConfigurationError(Exception):
    """Exception raised for configuration-related errors."""
    pass


class ConfigManager:
    """Manages loading and validation of configuration from config.json."""

    DEFAULTS: Dict[str, Any] = {
        "default_output_path": "",
        "ffmpeg_path": "",
        "output_mode": "default",
        "custom_output_path": "",
        "segment_duration": "10",
        "quality": "medium",
        "audio_only": False,
        "log_level": "INFO",
    }

    LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

    STRING_FIELDS = [
        "default_output_path",
        "ffmpeg_path",
        "output_mode",
        "custom_output_path",
        "quality",
        "log_level",
    ]

    def __init__(self, config_path: str = "config.json"):
        """
        Initialize ConfigManager with path to configuration file.

        A missing file is not an error; the defaults are used instead.

        Args:
            config_path: Path to the JSON configuration file (default: "config.json")
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = dict(self.DEFAULTS)
        self._load_and_validate()

    def _load_and_validate(self):
        """Load and validate configuration on initialization."""
        if not self.config_path.exists():
            logging.info(f"No configuration file at {self.config_path}, using defaults")
            return

        try:
            loaded = self.load_config()
            self.validate_config(loaded)
        except ConfigurationError:
            logging.error(f"Configuration error: Failed to load or validate {self.config_path}")
            raise

        self._config.update(
            {name: value for name, value in loaded.items() if name in self.DEFAULTS}
        )
        # Segment duration is handed to ffmpeg as text
        self._config["segment_duration"] = str(self._config["segment_duration"])
        logging.info("Configuration loaded and validated successfully")

    def load_config(self) -> dict:
        """
        Read and parse JSON configuration from file.

        Returns:
            Dictionary containing configuration data

        Raises:
            ConfigurationError: If the file cannot be read or contains invalid JSON
        """
        try:
            logging.debug(f"Reading configuration file: {self.config_path}")
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            error_msg = f"Invalid JSON in configuration file: {e}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg)
        except OSError as e:
            error_msg = f"Error reading configuration file: {e}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg)

        if not isinstance(config, dict):
            raise ConfigurationError("Configuration file must contain a JSON object")

        logging.info(f"Configuration loaded from {self.config_path}")
        logging.debug(f"Configuration contents: {config}")
        return config

    def validate_config(self, config: dict) -> bool:
        """
        Verify that the configured values have the right types and ranges.

        Args:
            config: Configuration dictionary to validate

        Returns:
            True if configuration is valid

        Raises:
            ConfigurationError: If validation fails
        """
        logging.debug("Starting configuration validation")

        unknown_fields = [name for name in config if name not in self.DEFAULTS]
        if unknown_fields:
            logging.warning(f"Ignoring unknown configuration fields: {', '.join(unknown_fields)}")

        for name in self.STRING_FIELDS:
            if name in config and not isinstance(config[name], str):
                error_msg = f"'{name}' must be a string, got {type(config[name]).__name__}"
                logging.error(error_msg)
                raise ConfigurationError(error_msg)

        if "audio_only" in config and not isinstance(config["audio_only"], bool):
            error_msg = f"'audio_only' must be a boolean, got {type(config['audio_only']).__name__}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg)

        if config.get("output_mode", "default") not in OUTPUT_MODES:
            error_msg = f"'output_mode' must be one of {', '.join(OUTPUT_MODES)}, got {config['output_mode']!r}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg)

        if config.get("quality", "medium") not in QUALITY_TIERS:
            error_msg = f"'quality' must be one of {', '.join(QUALITY_TIERS)}, got {config['quality']!r}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg)

        if "segment_duration" in config:
            self._validate_segment_duration(config["segment_duration"])

        if str(config.get("log_level", "INFO")).upper() not in self.LOG_LEVELS:
            error_msg = f"'log_level' must be one of {', '.join(self.LOG_LEVELS)}, got {config['log_level']!r}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg)

        logging.debug("Configuration validation successful")
        return True

    @staticmethod
    def _validate_segment_duration(value: Any):
        # bool is an int subclass but never a valid duration
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise ConfigurationError(
                f"'segment_duration' must be a positive integer, got {type(value).__name__}"
            )
        text = str(value).strip()
        if not text.isdigit() or int(text) <= 0:
            raise ConfigurationError(f"'segment_duration' must be a positive integer, got {value!r}")

    def batch_options(self) -> BatchOptions:
        """Build the shared conversion options from the configuration."""
        return BatchOptions(
            output_mode=self.output_mode,
            default_output_path=self.default_output_path,
            custom_output_path=self.custom_output_path,
            segment_duration=self.segment_duration,
            quality=self.quality,
            audio_only=self.audio_only,
            ffmpeg_path=self.ffmpeg_path
        )

    @property
    def default_output_path(self) -> str:
        """Get the default output directory."""
        return self._config["default_output_path"]

    @property
    def ffmpeg_path(self) -> str:
        """Get the custom ffmpeg location."""
        return self._config["ffmpeg_path"]

    @property
    def output_mode(self) -> str:
        return self._config["output_mode"]

    @property
    def custom_output_path(self) -> str:
        return self._config["custom_output_path"]

    @property
    def segment_duration(self) -> str:
        """Get the HLS segment duration in seconds, as text."""
        return self._config["segment_duration"]

    @property
    def quality(self) -> str:
        return self._config["quality"]

    @property
    def audio_only(self) -> bool:
        return self._config["audio_only"]

    @property
    def log_level(self) -> str:
        return self._config["log_level"]

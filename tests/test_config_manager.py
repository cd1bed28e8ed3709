"""Tests for configuration loading and validation."""

import json
from pathlib import Path

import pytest

from rapidhls.config_manager import ConfigManager, ConfigurationError
from rapidhls.data_models import BatchOptions


def write_config(tmp_path: Path, content) -> Path:
    path = tmp_path / "config.json"
    path.write_text(content if isinstance(content, str) else json.dumps(content), encoding="utf-8")
    return path


class TestLoading:
    """Tests for reading config.json."""

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = ConfigManager(str(tmp_path / "absent.json"))

        assert config.output_mode == "default"
        assert config.quality == "medium"
        assert config.segment_duration == "10"
        assert config.audio_only is False
        assert config.ffmpeg_path == ""
        assert config.log_level == "INFO"

    def test_values_override_defaults(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, {
            "output_mode": "custom",
            "custom_output_path": "/srv/hls",
            "quality": "high",
            "audio_only": True,
        })

        config = ConfigManager(str(path))

        assert config.output_mode == "custom"
        assert config.custom_output_path == "/srv/hls"
        assert config.quality == "high"
        assert config.audio_only is True
        assert config.default_output_path == ""

    def test_integer_segment_duration_becomes_text(self, tmp_path: Path) -> None:
        config = ConfigManager(str(write_config(tmp_path, {"segment_duration": 6})))
        assert config.segment_duration == "6"

    def test_invalid_json(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            ConfigManager(str(write_config(tmp_path, "{not json")))

    def test_top_level_must_be_object(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            ConfigManager(str(write_config(tmp_path, [1, 2])))

    def test_unknown_fields_are_ignored(self, tmp_path: Path) -> None:
        config = ConfigManager(str(write_config(tmp_path, {"theme": "dark", "quality": "low"})))

        assert config.quality == "low"
        assert "theme" not in config._config
        assert set(config._config) == set(ConfigManager.DEFAULTS)

    def test_batch_options(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, {
            "output_mode": "same-as-input",
            "default_output_path": "/videos/out",
            "segment_duration": "4",
            "ffmpeg_path": "/opt/ffmpeg/bin",
        })

        options = ConfigManager(str(path)).batch_options()

        assert options == BatchOptions(
            output_mode="same-as-input",
            default_output_path="/videos/out",
            custom_output_path="",
            segment_duration="4",
            quality="medium",
            audio_only=False,
            ffmpeg_path="/opt/ffmpeg/bin",
        )


class TestValidation:
    """Tests for rejected configuration values."""

    @pytest.mark.parametrize("config", [
        {"output_mode": "elsewhere"},
        {"quality": "ultra"},
        {"audio_only": "yes"},
        {"ffmpeg_path": 42},
        {"segment_duration": 0},
        {"segment_duration": -5},
        {"segment_duration": "ten"},
        {"segment_duration": True},
        {"segment_duration": 2.5},
        {"log_level": "LOUD"},
    ])
    def test_rejected(self, tmp_path: Path, config: dict) -> None:
        with pytest.raises(ConfigurationError):
            ConfigManager(str(write_config(tmp_path, config)))

    def test_log_level_case_insensitive(self, tmp_path: Path) -> None:
        config = ConfigManager(str(write_config(tmp_path, {"log_level": "debug"})))
        assert config.log_level.upper() == "DEBUG"

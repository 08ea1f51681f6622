"""
Tests for configuration loading.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from reservationdesk.adapters.memory_store import SAMPLE_DATA_FILE
from reservationdesk.config import AppConfig, load_config


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self):
        """Test built-in defaults."""
        config = AppConfig()

        assert config.defaults.party_size == 2
        assert config.log_level == "WARNING"
        assert config.get_data_file() == SAMPLE_DATA_FILE

    def test_load_from_yaml(self, tmp_path):
        """Test loading a YAML file with a relative data file."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "restaurant_name: Chez Test\n"
            "log_level: debug\n"
            "data_file: data.json\n"
            "defaults:\n"
            "  party_size: 4\n",
            encoding="utf-8",
        )

        config = AppConfig.load_from_yaml(config_path)

        assert config.restaurant_name == "Chez Test"
        assert config.log_level == "DEBUG"
        assert config.defaults.party_size == 4
        assert config.get_data_file() == tmp_path / "data.json"

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Test that broken YAML and non-mapping roots raise ValueError."""
        broken = tmp_path / "broken.yaml"
        broken.write_text("defaults: [unclosed", encoding="utf-8")
        listing = tmp_path / "list.yaml"
        listing.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(broken)
        with pytest.raises(ValueError, match="mapping at the root"):
            AppConfig.load_from_yaml(listing)

    def test_validators(self):
        """Test field validation."""
        with pytest.raises(ValidationError):
            AppConfig(defaults={"party_size": 0})
        with pytest.raises(ValidationError):
            AppConfig(log_level="LOUD")

    def test_load_config_without_file(self, tmp_path, monkeypatch):
        """Test that load_config falls back to defaults."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(
            "reservationdesk.config.get_default_config_path", lambda: tmp_path / "config.yaml"
        )

        assert load_config() == AppConfig()

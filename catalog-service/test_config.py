"""
Unit tests for environment-based configuration.
"""
import pytest
from unittest.mock import patch
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import ConfigurationError, Settings


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings.from_env()
        assert settings.port == 8080
        assert settings.host == "0.0.0.0"
        assert settings.upload_dir == "uploads"
        assert settings.max_upload_size == 5 * 1024 * 1024
        assert settings.log_file == "logs.json"
        assert settings.log_level == "INFO"
        assert settings.cors_origins == ["*"]

    def test_port_from_env(self):
        with patch.dict(os.environ, {"PORT": "9000"}, clear=True):
            assert Settings.from_env().port == 9000

    def test_empty_port_uses_default(self):
        with patch.dict(os.environ, {"PORT": ""}, clear=True):
            assert Settings.from_env().port == 8080

    @pytest.mark.parametrize("key", ["PORT", "MAX_UPLOAD_SIZE"])
    def test_malformed_integer(self, key):
        with patch.dict(os.environ, {key: "eighty"}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                Settings.from_env()
        assert key in str(exc_info.value)

    def test_cors_origins_split_on_commas(self):
        origins = "http://localhost:3000, https://shop.example.com,,"
        with patch.dict(os.environ, {"CORS_ORIGINS": origins}, clear=True):
            settings = Settings.from_env()
        assert settings.cors_origins == ["http://localhost:3000", "https://shop.example.com"]

    def test_settings_are_frozen(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings.from_env()
        with pytest.raises(AttributeError):
            settings.port = 1

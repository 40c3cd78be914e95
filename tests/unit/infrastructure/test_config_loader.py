"""Tests for TOML config loader."""

import os
import tempfile
from pathlib import Path

from src.infrastructure.config.toml_loader import _apply_env_overrides, load_config


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_default_config(self):
        """Loads default configuration."""
        config = load_config()

        assert config.server is not None
        assert config.backend is not None
        assert config.classifier.default_confidence == 0.5
        assert config.workflow.auto_parse_plans is True
        assert config.security.cors_origins

    def test_loads_from_custom_dir(self):
        """Loads config from custom directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "default.toml").write_text("""
[backend]
url = "http://backend:9000/chat"
max_retries = 5

[server]
port = 9999

[classifier]
default_confidence = 0.4
""")
            config = load_config(Path(tmpdir))

            assert config.backend.url == "http://backend:9000/chat"
            assert config.backend.max_retries == 5
            assert config.server.port == 9999
            assert config.classifier.default_confidence == 0.4

    def test_merges_development_config(self):
        """Merges development.toml over default.toml."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "default.toml").write_text("""
[backend]
url = "http://default/chat"
timeout = 60

[server]
port = 8000
""")
            (Path(tmpdir) / "development.toml").write_text("""
[backend]
url = "http://dev/chat"
""")
            config = load_config(Path(tmpdir))

            assert config.backend.url == "http://dev/chat"
            assert config.backend.timeout == 60
            assert config.server.port == 8000

    def test_handles_missing_files(self):
        """Empty directory falls back to model defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config = load_config(Path(tmpdir))

            assert config.backend.max_retries == 3
            assert config.classifier.default_confidence == 0.5
            assert config.log_level == "INFO"

    def test_logging_section(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "default.toml").write_text("""
[logging]
level = "DEBUG"
file = " logs/app.log "
log_rotation_max_mb = 2
""")
            config = load_config(Path(tmpdir))

            assert config.log_level == "DEBUG"
            assert config.log_file == "logs/app.log"
            assert config.log_rotation_max_mb == 2
            assert config.log_rotation_backups == 3


class TestApplyEnvOverrides:
    """Tests for _apply_env_overrides function."""

    def test_backend_url_override(self):
        """CHAT_BACKEND_URL env var overrides config."""
        config = {}
        os.environ["CHAT_BACKEND_URL"] = " http://remote/api/chat "

        try:
            result = _apply_env_overrides(config)
            assert result["backend"]["url"] == "http://remote/api/chat"
        finally:
            del os.environ["CHAT_BACKEND_URL"]

    def test_backend_timeout_override(self):
        config = {}
        os.environ["CHAT_BACKEND_TIMEOUT"] = "30"

        try:
            result = _apply_env_overrides(config)
            assert result["backend"]["timeout"] == 30
        finally:
            del os.environ["CHAT_BACKEND_TIMEOUT"]

    def test_port_override(self):
        """PORT env var overrides config."""
        config = {}
        os.environ["PORT"] = "9000"

        try:
            result = _apply_env_overrides(config)
            assert result["server"]["port"] == 9000
        finally:
            del os.environ["PORT"]

    def test_invalid_port_ignored(self):
        """Invalid PORT value is ignored."""
        config = {"server": {"port": 8000}}
        os.environ["PORT"] = "not_a_number"

        try:
            result = _apply_env_overrides(config)
            assert result["server"]["port"] == 8000
        finally:
            del os.environ["PORT"]

    def test_log_level_override(self):
        """LOG_LEVEL env var overrides config."""
        config = {}
        os.environ["LOG_LEVEL"] = "debug"

        try:
            result = _apply_env_overrides(config)
            assert result["logging"]["level"] == "DEBUG"
        finally:
            del os.environ["LOG_LEVEL"]

    def test_cors_origins_override(self):
        """CORS_ORIGINS env var overrides config."""
        config = {}
        os.environ["CORS_ORIGINS"] = "http://a.com, http://b.com"

        try:
            result = _apply_env_overrides(config)
            assert result["security"]["cors_origins"] == ["http://a.com", "http://b.com"]
        finally:
            del os.environ["CORS_ORIGINS"]

    def test_default_confidence_override(self):
        config = {}
        os.environ["CLASSIFIER_DEFAULT_CONFIDENCE"] = "0.35"

        try:
            result = _apply_env_overrides(config)
            assert result["classifier"]["default_confidence"] == 0.35
        finally:
            del os.environ["CLASSIFIER_DEFAULT_CONFIDENCE"]

    def test_default_confidence_out_of_range_ignored(self):
        config = {}
        os.environ["CLASSIFIER_DEFAULT_CONFIDENCE"] = "1.7"

        try:
            result = _apply_env_overrides(config)
            assert "classifier" not in result
        finally:
            del os.environ["CLASSIFIER_DEFAULT_CONFIDENCE"]

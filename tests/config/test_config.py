"""
Tests for configuration management.

Tests config loading from:
1. Environment variables
2. YAML files
3. Combined (env overrides YAML)
"""

import os
from pathlib import Path

import pytest
import yaml

from docassets.config import ENV_VARS, Config, GCConfig, StorageConfig

ENV_KEYS = list(ENV_VARS)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the developer's environment and .env file."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


class TestConfigDefaults:
    """Test default configuration values."""

    def test_default_config_creation(self):
        """Test creating config with defaults."""
        config = Config()

        # Storage layout
        assert config.storage.staging_dir == Path("uploads") / "temp"
        assert config.storage.durable_dir == Path("uploads") / "permanent"
        assert config.storage.staging_url_prefix == "/uploads/temp"
        assert config.storage.durable_url_prefix == "/uploads/permanent"

        # Upload limits
        assert config.upload.max_upload_bytes == 5 * 1024 * 1024
        assert config.upload.allowed_mime_prefix == "image/"

        # GC schedule
        assert config.gc.staging_ttl_seconds == 7200
        assert config.gc.reaper_interval_seconds == 1800
        assert config.gc.orphan_sweep_interval_seconds == 86400
        assert config.gc.resync_interval_seconds == 604800
        assert config.gc.enable_background_workers is True

        # Document backend
        assert config.document_backend == "memory"

    def test_storage_dirs_follow_root(self):
        """Test staging and durable areas live under the upload root."""
        storage = StorageConfig(upload_root="/srv/media", staging_dir_name="incoming")

        assert storage.staging_dir == Path("/srv/media/incoming")
        assert storage.durable_dir == Path("/srv/media/permanent")


class TestConfigFromEnv:
    """Test loading config from environment variables."""

    def test_from_env_basic(self, monkeypatch):
        """Test basic environment variable loading."""
        monkeypatch.setenv("DOCASSETS_UPLOAD_ROOT", "/data/uploads")
        monkeypatch.setenv("DOCASSETS_DOCUMENT_BACKEND", "sqlite")
        monkeypatch.setenv("DOCASSETS_SQLITE_PATH", "/data/docs.db")

        config = Config.from_env()

        assert config.storage.upload_root == "/data/uploads"
        assert config.document_backend == "sqlite"
        assert config.sqlite.db_path == "/data/docs.db"

    def test_from_env_with_numbers(self, monkeypatch):
        """Test numeric type conversion."""
        monkeypatch.setenv("DOCASSETS_MAX_UPLOAD_BYTES", "1024")
        monkeypatch.setenv("DOCASSETS_STAGING_TTL_SECONDS", "60")
        monkeypatch.setenv("DOCASSETS_REAPER_INTERVAL_SECONDS", "0.5")

        config = Config.from_env()

        assert config.upload.max_upload_bytes == 1024
        assert config.gc.staging_ttl_seconds == 60.0
        assert config.gc.reaper_interval_seconds == 0.5

    @pytest.mark.parametrize("value,expected", [("false", False), ("0", False), ("yes", True)])
    def test_from_env_with_booleans(self, monkeypatch, value, expected):
        """Test boolean conversion."""
        monkeypatch.setenv("DOCASSETS_ENABLE_BACKGROUND_WORKERS", value)

        assert Config.from_env().gc.enable_background_workers is expected

    def test_from_env_empty_value_uses_default(self, monkeypatch):
        """Test empty variables fall back to defaults."""
        monkeypatch.setenv("DOCASSETS_STAGING_TTL_SECONDS", "")

        assert Config.from_env().gc.staging_ttl_seconds == 7200

    def test_from_env_with_dotenv_file(self, tmp_path):
        """Test loading from a .env file."""
        env_file = tmp_path / ".env.test"
        env_file.write_text(
            "DOCASSETS_STAGING_URL_PREFIX=/media/staging\n"
            "DOCASSETS_DURABLE_URL_PREFIX=/media/live\n"
        )

        try:
            config = Config.from_env(env_file=env_file)

            assert config.storage.staging_url_prefix == "/media/staging"
            assert config.storage.durable_url_prefix == "/media/live"
        finally:
            os.environ.pop("DOCASSETS_STAGING_URL_PREFIX", None)
            os.environ.pop("DOCASSETS_DURABLE_URL_PREFIX", None)


class TestConfigFromYAML:
    """Test loading config from YAML files."""

    def test_from_yaml_basic(self, tmp_path):
        """Test loading nested sections from YAML."""
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(
            yaml.dump(
                {
                    "storage": {"upload_root": "/srv/uploads"},
                    "gc": {"staging_ttl_seconds": 600, "enable_background_workers": False},
                    "document_backend": "sqlite",
                }
            )
        )

        config = Config.from_yaml(yaml_file)

        assert config.storage.upload_root == "/srv/uploads"
        assert config.gc.staging_ttl_seconds == 600
        assert config.gc.enable_background_workers is False
        assert config.document_backend == "sqlite"
        # Untouched sections keep defaults
        assert config.upload.max_upload_bytes == 5 * 1024 * 1024

    def test_from_yaml_empty_file(self, tmp_path):
        """Test an empty YAML file yields defaults."""
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert Config.from_yaml(yaml_file) == Config()

    def test_from_yaml_missing_file(self, tmp_path):
        """Test a missing file raises."""
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(tmp_path / "nope.yaml")


class TestConfigFromEnvOrYAML:
    """Test combined loading."""

    def test_yaml_used_when_env_is_default(self, tmp_path):
        """Test YAML values apply when no env overrides are set."""
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(yaml.dump({"gc": {"staging_ttl_seconds": 120}}))

        config = Config.from_env_or_yaml(yaml_path=yaml_file)

        assert config.gc.staging_ttl_seconds == 120

    def test_env_overrides_yaml(self, monkeypatch, tmp_path):
        """Test environment variables take priority over YAML."""
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(yaml.dump({"document_backend": "memory", "gc": {"staging_ttl_seconds": 120}}))
        monkeypatch.setenv("DOCASSETS_DOCUMENT_BACKEND", "sqlite")
        monkeypatch.setenv("DOCASSETS_STAGING_TTL_SECONDS", "30")

        config = Config.from_env_or_yaml(yaml_path=yaml_file)

        assert config.document_backend == "sqlite"
        assert config.gc == GCConfig(staging_ttl_seconds=30)

    def test_missing_yaml_falls_back_to_env(self, tmp_path):
        """Test a missing YAML path is ignored."""
        config = Config.from_env_or_yaml(yaml_path=tmp_path / "missing.yaml")

        assert config == Config.from_env()

    def test_env_overrides_single_fields(self, monkeypatch, tmp_path):
        """Test an env variable leaves the rest of its YAML section intact."""
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(
            yaml.dump({"gc": {"staging_ttl_seconds": 120, "reaper_interval_seconds": 60}})
        )
        monkeypatch.setenv("DOCASSETS_STAGING_TTL_SECONDS", "30")

        config = Config.from_env_or_yaml(yaml_path=yaml_file)

        assert config.gc.staging_ttl_seconds == 30
        assert config.gc.reaper_interval_seconds == 60


class TestEnvOverrides:
    """Test collection of environment overrides."""

    def test_only_set_variables_are_returned(self, monkeypatch):
        """Test unset variables produce no keys."""
        monkeypatch.setenv("DOCASSETS_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("DOCASSETS_DOCUMENT_BACKEND", "sqlite")

        assert Config.env_overrides() == {
            "logging": {"level": "DEBUG"},
            "document_backend": "sqlite",
        }

    def test_every_variable_names_a_real_field(self):
        """Test the variable table matches the config models."""
        config = Config()
        for section, field in ENV_VARS.values():
            target = config if section is None else getattr(config, section)
            assert hasattr(target, field)

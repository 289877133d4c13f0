"""
Configuration for docassets.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class StorageConfig(BaseModel):
    """Asset storage layout."""

    upload_root: str = "uploads"
    staging_dir_name: str = "temp"
    durable_dir_name: str = "permanent"
    # Textual form of asset references inside document content
    staging_url_prefix: str = "/uploads/temp"
    durable_url_prefix: str = "/uploads/permanent"

    @property
    def staging_dir(self) -> Path:
        return Path(self.upload_root) / self.staging_dir_name

    @property
    def durable_dir(self) -> Path:
        return Path(self.upload_root) / self.durable_dir_name


class UploadConfig(BaseModel):
    """Upload boundary checks."""

    max_upload_bytes: int = 5 * 1024 * 1024
    allowed_mime_prefix: str = "image/"


class GCConfig(BaseModel):
    """Garbage collection sweeps."""

    staging_ttl_seconds: float = 2 * 60 * 60
    reaper_interval_seconds: float = 30 * 60
    orphan_sweep_interval_seconds: float = 24 * 60 * 60
    resync_interval_seconds: float = 7 * 24 * 60 * 60
    enable_background_workers: bool = True


class SQLiteConfig(BaseModel):
    """SQLite document store configuration."""

    db_path: str = "data/docassets.db"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = True
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


# Environment variable -> (config section, field); section None means a top-level field
ENV_VARS: dict[str, tuple[str | None, str]] = {
    "DOCASSETS_UPLOAD_ROOT": ("storage", "upload_root"),
    "DOCASSETS_STAGING_DIR_NAME": ("storage", "staging_dir_name"),
    "DOCASSETS_DURABLE_DIR_NAME": ("storage", "durable_dir_name"),
    "DOCASSETS_STAGING_URL_PREFIX": ("storage", "staging_url_prefix"),
    "DOCASSETS_DURABLE_URL_PREFIX": ("storage", "durable_url_prefix"),
    "DOCASSETS_MAX_UPLOAD_BYTES": ("upload", "max_upload_bytes"),
    "DOCASSETS_ALLOWED_MIME_PREFIX": ("upload", "allowed_mime_prefix"),
    "DOCASSETS_STAGING_TTL_SECONDS": ("gc", "staging_ttl_seconds"),
    "DOCASSETS_REAPER_INTERVAL_SECONDS": ("gc", "reaper_interval_seconds"),
    "DOCASSETS_ORPHAN_SWEEP_INTERVAL_SECONDS": ("gc", "orphan_sweep_interval_seconds"),
    "DOCASSETS_RESYNC_INTERVAL_SECONDS": ("gc", "resync_interval_seconds"),
    "DOCASSETS_ENABLE_BACKGROUND_WORKERS": ("gc", "enable_background_workers"),
    "DOCASSETS_SQLITE_PATH": ("sqlite", "db_path"),
    "DOCASSETS_LOG_LEVEL": ("logging", "level"),
    "DOCASSETS_LOG_TO_FILE": ("logging", "log_to_file"),
    "DOCASSETS_LOG_DIR": ("logging", "log_dir"),
    "DOCASSETS_LOG_FILE_ROTATION": ("logging", "file_rotation"),
    "DOCASSETS_LOG_FILE_RETENTION": ("logging", "file_retention"),
    "DOCASSETS_LOG_COMPRESSION": ("logging", "compression"),
    "DOCASSETS_LOG_SERIALIZE": ("logging", "serialize"),
    "DOCASSETS_DOCUMENT_BACKEND": (None, "document_backend"),
}


def _convert(value: str, annotation: Any) -> Any:
    """Convert a raw environment value to a field's declared type."""
    if annotation is bool:
        return value.lower() in ("true", "1", "yes")
    if annotation is int:
        return int(value)
    if annotation is float:
        return float(value)
    return value


class Config(BaseModel):
    """Main configuration."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    gc: GCConfig = Field(default_factory=GCConfig)
    sqlite: SQLiteConfig = Field(default_factory=SQLiteConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Document store backend: memory or sqlite
    document_backend: str = "memory"

    @classmethod
    def env_overrides(cls, env_file: str | Path | None = None) -> dict[str, Any]:
        """
        Collect the DOCASSETS_* variables that are set, as nested config data.

        Args:
            env_file: Optional path to .env file (default: .env in working directory)

        Returns:
            Dict shaped like the config (sections are sub-dicts) holding only
            the fields an environment variable sets; empty values are ignored
        """
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        overrides: dict[str, Any] = {}
        for var, (section, field) in ENV_VARS.items():
            value = os.getenv(var)
            if not value:
                continue
            if section is None:
                overrides[field] = _convert(value, cls.model_fields[field].annotation)
            else:
                section_model = cls.model_fields[section].annotation
                converted = _convert(value, section_model.model_fields[field].annotation)
                overrides.setdefault(section, {})[field] = converted
        return overrides

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file

        Returns:
            Config instance

        Environment variables (see ENV_VARS for the full list):
            DOCASSETS_UPLOAD_ROOT: Root directory holding staging and durable areas
            DOCASSETS_STAGING_URL_PREFIX: URL prefix of staged assets
            DOCASSETS_DURABLE_URL_PREFIX: URL prefix of durable assets
            DOCASSETS_MAX_UPLOAD_BYTES: Maximum accepted upload size
            DOCASSETS_STAGING_TTL_SECONDS: Age after which staged uploads are reaped
            DOCASSETS_ENABLE_BACKGROUND_WORKERS: Start sweep timers on startup
            DOCASSETS_DOCUMENT_BACKEND: Document store backend (memory, sqlite)
            DOCASSETS_SQLITE_PATH: SQLite database file
            DOCASSETS_LOG_LEVEL: Log level
        """
        return cls(**cls.env_overrides(env_file))

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            return cls(**(yaml.safe_load(f) or {}))

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Environment variables override single fields, so a YAML section keeps
        every value no variable sets.

        Args:
            yaml_path: Optional path to YAML config (ignored if missing)
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        data: dict[str, Any] = {}
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                data = yaml.safe_load(f) or {}

        for key, value in cls.env_overrides(env_file).items():
            if isinstance(value, dict):
                data[key] = {**(data.get(key) or {}), **value}
            else:
                data[key] = value

        return cls(**data)

"""
Exporter configuration.

A single immutable ExporterConfig is resolved once (config file, then
environment, then explicit overrides) and passed into the export
pipeline; nothing in the pipeline reads configuration on its own.
"""

import json
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

from .exceptions import ConfigError
from .storage import ARTIFACT_NAME
from .utils.logger import warn
from .windows import DEFAULT_WINDOW

CONFIG_DIR = os.path.expanduser("~/.config/kiro-metrics-exporter")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")

ENV_PREFIX = "KIRO_METRICS_"

# Environment variable suffix -> field name
ENV_FIELDS = {
    "RECORDS_DIR": "records_dir",
    "PATH_PREFIX": "path_prefix",
    "USER_ID": "user_id",
    "REGION": "region",
    "WINDOW": "window",
    "ARTIFACT_NAME": "artifact_name",
}

REQUIRED_FIELDS = ("records_dir", "path_prefix", "user_id")

# Never written to the config file
SECRET_FIELDS = ("secret_access_key",)


@dataclass(frozen=True)
class ExporterConfig:
    """Resolved exporter settings."""

    # Root directory holding interaction record files
    records_dir: str = ""

    # scheme://bucket/basePath where artifacts are written
    path_prefix: str = ""

    # Pre-resolved user identifier placed in rows and keys
    user_id: str = ""

    region: str = "us-east-1"
    artifact_name: str = ARTIFACT_NAME
    window: str = DEFAULT_WINDOW

    # Thread pool sizes; 1 means sequential
    scan_workers: int = 1
    upload_workers: int = 1

    # Handed to the object store untouched
    access_key_id: str = ""
    secret_access_key: str = ""

    @property
    def records_path(self) -> Path:
        return Path(self.records_dir).expanduser()

    def missing_fields(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]

    def validate(self) -> "ExporterConfig":
        """Check required values.

        Raises:
            ConfigError: Naming every missing required value.
        """
        missing = self.missing_fields()
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")
        if self.scan_workers < 1 or self.upload_workers < 1:
            raise ConfigError("scan_workers and upload_workers must be >= 1")
        # user_id becomes a single storage key segment
        if "/" in self.user_id:
            raise ConfigError(f"user_id must not contain '/': {self.user_id!r}")
        return self

    def with_overrides(self, **overrides: Any) -> "ExporterConfig":
        """Copy with the given non-None values replaced."""
        valid = {f.name for f in fields(self)}
        values = {k: v for k, v in overrides.items() if v is not None and k in valid}
        return replace(self, **values)

    def save(self, path: Optional[str] = None) -> None:
        """Write the config file (without secrets)."""
        path = path or CONFIG_FILE
        os.makedirs(os.path.dirname(path), exist_ok=True)
        data = {k: v for k, v in asdict(self).items() if k not in SECRET_FIELDS}
        with open(path, "w") as f:
            json.dump(data, f, indent=2)

    @classmethod
    def from_file(cls, path: Optional[str] = None) -> "ExporterConfig":
        """Load the config file, or return defaults if it is missing or invalid."""
        path = path or CONFIG_FILE
        if not os.path.exists(path):
            return cls()

        try:
            with open(path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            warn(f"[Config] Ignoring unreadable config file {path}: {e}")
            return cls()

        if not isinstance(data, dict):
            warn(f"[Config] Ignoring config file {path}: expected a JSON object")
            return cls()

        # Filter to known fields (ignore obsolete settings)
        valid_fields = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in valid_fields})

    @classmethod
    def load(
        cls,
        path: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None,
        environ: Optional[dict[str, str]] = None,
    ) -> "ExporterConfig":
        """Resolve configuration: file, then environment, then overrides."""
        config = cls.from_file(path)

        env = os.environ if environ is None else environ
        env_values = {
            name: env[ENV_PREFIX + suffix]
            for suffix, name in ENV_FIELDS.items()
            if env.get(ENV_PREFIX + suffix)
        }
        config = config.with_overrides(**env_values)

        if overrides:
            config = config.with_overrides(**overrides)
        return config

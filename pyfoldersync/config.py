"""Configuration management for pyfoldersync.

Settings come from ``PYFOLDERSYNC_<KEY>`` environment variables and from a
dotenv-style file, ``~/.config/pyfoldersync/config`` by default (override
with ``PYFOLDERSYNC_CONFIG``). Environment variables win over the file;
command line options win over both.
"""

import logging
import os
from pathlib import Path
from typing import Annotated, Any, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .exceptions import FolderSyncConfigError
from .utils import DEFAULT_HASH_THRESHOLD, parse_size

logger = logging.getLogger(__name__)

ENV_PREFIX = "PYFOLDERSYNC_"
CONFIG_PATH_ENV = "PYFOLDERSYNC_CONFIG"

KNOWN_KEYS = (
    "HASH_THRESHOLD",
    "CHECK_HASH",
    "INCLUDE_EXTENSIONS",
    "EXCLUDE_EXTENSIONS",
)


def get_config_path() -> Path:
    """Get the path of the config file."""
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)
    return Path.home() / ".config" / "pyfoldersync" / "config"


class Config(BaseSettings):
    """pyfoldersync settings."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    hash_threshold: str = DEFAULT_HASH_THRESHOLD
    check_hash: bool = True
    include_extensions: Annotated[list[str], NoDecode] = Field(default_factory=list)
    exclude_extensions: Annotated[list[str], NoDecode] = Field(default_factory=list)

    @field_validator("hash_threshold")
    @classmethod
    def validate_hash_threshold(cls, v: str) -> str:
        """Reject thresholds parse_size cannot read."""
        parse_size(v)
        return v

    @field_validator("include_extensions", "exclude_extensions", mode="before")
    @classmethod
    def split_extensions(cls, v: Any) -> Any:
        """Accept comma-separated strings, e.g. ``jpg, png``."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    def as_dict(self, config_path: Optional[Path] = None) -> dict:
        """Return the effective settings."""
        return {
            "config_file": str(config_path or get_config_path()),
            **self.model_dump(),
        }


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = str(item["loc"][0]).upper() if item["loc"] else "?"
        parts.append(f"Invalid {ENV_PREFIX}{field}: {item['msg']}")
    return "; ".join(parts)


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load settings from the environment and the config file.

    Args:
        config_path: Config file to read (default: get_config_path())

    Returns:
        Validated Config

    Raises:
        FolderSyncConfigError: If a setting is invalid
    """
    path = config_path or get_config_path()
    try:
        return Config(_env_file=path)
    except ValidationError as e:
        raise FolderSyncConfigError(f"{path}: {_describe(e)}") from e


def save_value(key: str, value: str, config_path: Optional[Path] = None) -> Path:
    """Store one setting in the config file, keeping the other lines.

    Args:
        key: Setting name (one of KNOWN_KEYS, case-insensitive)
        value: Raw value to store
        config_path: Config file to write (default: get_config_path())

    Returns:
        Path of the config file

    Raises:
        FolderSyncConfigError: If the key is unknown or the value invalid
    """
    key = key.upper()
    if key not in KNOWN_KEYS:
        raise FolderSyncConfigError(
            f"Unknown setting {key!r} (known: {', '.join(KNOWN_KEYS)})"
        )
    try:
        Config.model_validate({key.lower(): value})
    except ValidationError as e:
        raise FolderSyncConfigError(_describe(e)) from e

    path = config_path or get_config_path()
    env_key = f"{ENV_PREFIX}{key}"
    lines = path.read_text(encoding="utf-8").splitlines() if path.exists() else []
    lines = [line for line in lines if line.split("=", 1)[0].strip() != env_key]
    lines.append(f"{env_key}={value}")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.debug(f"Saved {env_key} to {path}")
    return path

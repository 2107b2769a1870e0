"""Configuration management for pyfstree."""

import hashlib
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from .exceptions import TreeConfigError
from .utils import DEFAULT_HASH_ALGORITHM, parse_exclusion_list

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"


class Config:
    """Reads settings from the environment and a JSON file.

    Environment variables take precedence over the file:

    - ``PYFSTREE_CONFIG_DIR``: directory holding ``config.json``
    - ``PYFSTREE_IGNORE``: comma-separated default exclusions
    - ``PYFSTREE_HASH_ALGORITHM``: digest algorithm name
    - ``PYFSTREE_BATCH_SIZE``: files hashed at a time
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Override the configuration directory
        """
        self._config_dir = config_dir

    @property
    def config_dir(self) -> Path:
        if self._config_dir is not None:
            return self._config_dir
        env_dir = os.environ.get("PYFSTREE_CONFIG_DIR")
        if env_dir:
            return Path(env_dir)
        return Path.home() / ".config" / "pyfstree"

    def get_config_path(self) -> Path:
        """Path of the JSON configuration file."""
        return self.config_dir / CONFIG_FILE_NAME

    def _load(self) -> dict[str, Any]:
        path = self.get_config_path()
        if not path.exists():
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise TreeConfigError(f"Invalid configuration file: {e}", str(path)) from e
        except OSError as e:
            raise TreeConfigError(
                f"Cannot read configuration file: {e}", str(path)
            ) from e
        if not isinstance(data, dict):
            raise TreeConfigError("Configuration file must hold an object", str(path))
        return data

    def _save(self, updates: dict[str, Any]) -> None:
        data = self._load()
        data.update(updates)
        path = self.get_config_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise TreeConfigError(
                f"Cannot write configuration file: {e}", str(path)
            ) from e
        logger.debug(f"Saved configuration to {path}")

    @property
    def default_exclusions(self) -> list[str]:
        """Exclusion fragments applied to every command."""
        env_value = os.environ.get("PYFSTREE_IGNORE")
        if env_value is not None:
            return parse_exclusion_list(env_value)
        value = self._load().get("default_exclusions", [])
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise TreeConfigError("default_exclusions must be a list of strings")
        return value

    @property
    def hash_algorithm(self) -> str:
        """Digest algorithm used for hashing."""
        value = os.environ.get("PYFSTREE_HASH_ALGORITHM") or self._load().get(
            "hash_algorithm", DEFAULT_HASH_ALGORITHM
        )
        return validate_hash_algorithm(value)

    @property
    def batch_size(self) -> Optional[int]:
        """Configured hashing batch size, or None to use the descriptor limit."""
        value = os.environ.get("PYFSTREE_BATCH_SIZE")
        if value is None:
            value = self._load().get("batch_size")
        if value is None:
            return None
        return validate_batch_size(value)

    def save_default_exclusions(self, exclusions: list[str]) -> None:
        self._save({"default_exclusions": list(exclusions)})

    def save_hash_algorithm(self, algorithm: str) -> None:
        self._save({"hash_algorithm": validate_hash_algorithm(algorithm)})

    def save_batch_size(self, batch_size: Optional[int]) -> None:
        if batch_size is not None:
            batch_size = validate_batch_size(batch_size)
        self._save({"batch_size": batch_size})

    def to_dict(self) -> dict[str, Any]:
        """Effective settings."""
        return {
            "config_path": str(self.get_config_path()),
            "default_exclusions": self.default_exclusions,
            "hash_algorithm": self.hash_algorithm,
            "batch_size": self.batch_size,
        }


def validate_hash_algorithm(value: Any) -> str:
    """Check that a digest algorithm name is usable."""
    if not isinstance(value, str):
        raise TreeConfigError(f"Invalid hash algorithm: {value!r}")
    try:
        digest = hashlib.new(value)
    except ValueError as e:
        raise TreeConfigError(f"Unknown hash algorithm: {value}") from e
    # Variable-length (shake) digests have no fixed size
    if digest.digest_size == 0:
        raise TreeConfigError(f"Hash algorithm must have a fixed size: {value}")
    return value


def validate_batch_size(value: Any) -> int:
    """Check that a batch size is a positive integer."""
    try:
        size = int(value)
    except (TypeError, ValueError) as e:
        raise TreeConfigError(f"Invalid batch size: {value!r}") from e
    if size < 1:
        raise TreeConfigError(f"Batch size must be at least 1, got {size}")
    return size


config = Config()

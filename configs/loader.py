"""Study configuration loading and validation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from animation.animation_data import DEFAULT_REPLICATIONS_DIR

_KNOWN_KEYS: tuple[str, ...] = (
    "study_root",
    "replications_dir",
    "concurrent_loads",
    "log_level",
    "activation_timeout",
    "default_replication",
)
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigValidationError(ValueError):
    """Raised when a study config fails validation."""


@dataclass(frozen=True)
class StudyConfig:
    """Validated study configuration container.

    Provides typed field access for known settings and dictionary-style access
    for anything else found in the file.
    """

    study_root: Path
    replications_dir: str = DEFAULT_REPLICATIONS_DIR
    concurrent_loads: bool = True
    log_level: str = "INFO"
    activation_timeout: float | None = None
    default_replication: int | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Return a configuration value by key.

        Args:
            key: Configuration key name.
            default: Value to return if key does not exist.

        Returns:
            Value associated with ``key`` or ``default``.
        """
        if key in _KNOWN_KEYS:
            return getattr(self, key)
        return self.extras.get(key, default)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any], base_dir: str | Path | None = None) -> StudyConfig:
        """Validate ``payload`` and build a ``StudyConfig``.

        A relative ``study_root`` is resolved against ``base_dir`` when given.
        """
        return _validate_and_build(payload, Path(base_dir) if base_dir is not None else None)


class ConfigLoader:
    """Load and validate study configuration files (YAML or JSON)."""

    @staticmethod
    def load(path: str | Path) -> StudyConfig:
        """Load a study config from ``path``.

        Args:
            path: Path to a YAML or JSON config file.

        Returns:
            A validated ``StudyConfig`` whose ``study_root`` is resolved
            relative to the config file's directory.
        """
        config_path = Path(path)
        payload = _read_config_payload(config_path)
        if not isinstance(payload, Mapping):
            raise ConfigValidationError("Study config file must contain a mapping object.")
        return _validate_and_build(payload, config_path.parent)


def _read_config_payload(config_path: Path) -> Any:
    """Read raw config payload from JSON or YAML file."""
    if not config_path.exists():
        raise ConfigValidationError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()
    content = config_path.read_text(encoding="utf-8")
    try:
        if suffix == ".json":
            return json.loads(content)
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigValidationError(f"Failed to parse config '{config_path}': {exc}") from exc

    raise ConfigValidationError(f"Unsupported config extension: {suffix}")


def _validate_and_build(payload: Mapping[str, Any], base_dir: Path | None) -> StudyConfig:
    """Validate raw mapping and build ``StudyConfig``."""
    raw_root = payload.get("study_root")
    if not isinstance(raw_root, (str, Path)) or not str(raw_root):
        raise ConfigValidationError("Missing required config key: study_root")
    study_root = Path(raw_root).expanduser()
    if not study_root.is_absolute() and base_dir is not None:
        study_root = base_dir / study_root

    replications_dir = str(payload.get("replications_dir", DEFAULT_REPLICATIONS_DIR)).strip("/")
    if not replications_dir:
        raise ConfigValidationError("replications_dir must be non-empty")

    concurrent_loads = payload.get("concurrent_loads", True)
    if not isinstance(concurrent_loads, bool):
        raise ConfigValidationError(
            f"concurrent_loads expected bool, got {type(concurrent_loads).__name__}"
        )

    log_level = str(payload.get("log_level", "INFO")).upper()
    if log_level not in _LOG_LEVELS:
        raise ConfigValidationError(f"log_level must be one of {sorted(_LOG_LEVELS)}, got {log_level!r}")

    activation_timeout = payload.get("activation_timeout")
    if activation_timeout is not None:
        try:
            activation_timeout = float(activation_timeout)
        except (TypeError, ValueError) as exc:
            raise ConfigValidationError("activation_timeout must be a number of seconds") from exc
        if activation_timeout <= 0:
            raise ConfigValidationError("activation_timeout must be > 0")

    default_replication = payload.get("default_replication")
    if default_replication is not None:
        if isinstance(default_replication, bool) or not isinstance(default_replication, int):
            raise ConfigValidationError("default_replication must be an integer")

    extras = {k: v for k, v in payload.items() if k not in _KNOWN_KEYS}

    return StudyConfig(
        study_root=study_root,
        replications_dir=replications_dir,
        concurrent_loads=concurrent_loads,
        log_level=log_level,
        activation_timeout=activation_timeout,
        default_replication=default_replication,
        extras=extras,
    )

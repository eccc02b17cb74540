"""Settings loaded from a YAML file."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_PATH = "kanbanwave.yaml"
ENV_VAR = "KANBANWAVE_CONFIG"

_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(ValueError):
    """The config file is unreadable or holds values of the wrong type."""


@dataclass
class Config:
    log_level: str = "WARNING"
    latency: float = 0.0
    default_lists: tuple[str, ...] = field(default_factory=tuple)

    @property
    def level(self) -> int:
        return getattr(logging, self.log_level)


def resolve_path(path: str | None = None) -> Path | None:
    """Pick the config file: explicit path, then $KANBANWAVE_CONFIG, then ./kanbanwave.yaml.

    Returns None when no explicit path was given and the default does not exist.
    """
    if path:
        return Path(path)
    if os.environ.get(ENV_VAR):
        return Path(os.environ[ENV_VAR])
    default = Path(DEFAULT_PATH)
    return default if default.exists() else None


def parse_config(text: str) -> Config:
    """Parse YAML config text. Unknown keys are ignored."""
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config must be a mapping")

    config = Config()

    level = data.get("log_level", config.log_level)
    if not isinstance(level, str) or level.upper() not in _LEVELS:
        raise ConfigError(f"log_level must be one of {', '.join(sorted(_LEVELS))}")
    config.log_level = level.upper()

    backend = data.get("backend") or {}
    if not isinstance(backend, dict):
        raise ConfigError("backend must be a mapping")
    latency = backend.get("latency", 0)
    if isinstance(latency, bool) or not isinstance(latency, (int, float)) or latency < 0:
        raise ConfigError("backend.latency must be a non-negative number")
    config.latency = float(latency)

    board = data.get("board") or {}
    if not isinstance(board, dict):
        raise ConfigError("board must be a mapping")
    lists = board.get("default_lists") or []
    if not isinstance(lists, list) or not all(isinstance(t, str) for t in lists):
        raise ConfigError("board.default_lists must be a list of titles")
    config.default_lists = tuple(lists)

    return config


def load_config(path: str | None = None) -> Config:
    """Load config from the resolved path, or defaults if there is none."""
    resolved = resolve_path(path)
    if resolved is None:
        return Config()
    try:
        text = resolved.read_text()
    except OSError as e:
        raise ConfigError(f"cannot read {resolved}: {e}") from e
    return parse_config(text)

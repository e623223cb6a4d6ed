"""Configuration file loading.

Handles:
- YAML file parsing (Config.yaml by default)
- The top-level list format and the mapping format with settings
- Environment variable overrides
- Conversion from dict to typed Config dataclass

Unlike a layered settings file, the watcher cannot run without its targets,
so every loading problem raises ConfigError instead of falling back to
defaults.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from trackwatch.config.schema import (
    DEFAULT_INTERVAL,
    DEFAULT_TARGET_LOG,
    Config,
    LoggingConfig,
    Target,
)
from trackwatch.errors import ConfigError

_log = logging.getLogger("trackwatch.config")

DEFAULT_CONFIG_FILE = "Config.yaml"


def get_config_path(path: str | Path | None = None) -> Path:
    """Resolve the config file path.

    Priority: explicit argument, then TRACKWATCH_CONFIG, then ./Config.yaml.
    """
    if path:
        return Path(path)
    env_path = os.environ.get("TRACKWATCH_CONFIG")
    if env_path:
        return Path(env_path)
    return Path(DEFAULT_CONFIG_FILE)


def load_yaml_file(path: Path) -> Any:
    """Load a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        The parsed document.

    Raises:
        ConfigError: If the file is missing, unreadable, or not valid YAML.
    """
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Error reading {path}: {e}") from e


def env_overrides() -> dict[str, Any]:
    """Build config dict from environment variables.

    Returns:
        Config dict with values from environment.
    """
    overrides: dict[str, Any] = {}

    interval = os.environ.get("TRACKWATCH_INTERVAL")
    if interval:
        overrides["interval"] = interval

    log_path = os.environ.get("TRACKWATCH_LOG")
    if log_path:
        overrides["logging"] = {"file": log_path}

    return overrides


def _string_list(value: Any, key: str, index: int) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"Target #{index}: '{key}' must be a list of strings")
    return tuple(value)


def _validate_patterns(patterns: tuple[str, ...], key: str, index: int) -> None:
    for pattern in patterns:
        try:
            re.compile(pattern)
        except re.error as e:
            raise ConfigError(f"Target #{index}: invalid {key} pattern {pattern!r}: {e}") from e


def dict_to_target(data: Any, index: int) -> Target:
    """Convert one target mapping to a Target.

    Args:
        data: Mapping with path, commands, exclude_regex, include_regex, log.
        index: Position in the config, used in error messages.

    Returns:
        Typed Target object.
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Target #{index}: expected a mapping, got {type(data).__name__}")

    path = data.get("path")
    if not path or not isinstance(path, str):
        raise ConfigError(f"Target #{index}: 'path' is required")

    exclude = _string_list(data.get("exclude_regex"), "exclude_regex", index)
    include = _string_list(data.get("include_regex"), "include_regex", index)
    _validate_patterns(exclude, "exclude_regex", index)
    _validate_patterns(include, "include_regex", index)

    log = data.get("log") or DEFAULT_TARGET_LOG
    if not isinstance(log, str):
        raise ConfigError(f"Target #{index}: 'log' must be a path")

    return Target(
        path=path,
        commands=_string_list(data.get("commands"), "commands", index),
        exclude=exclude,
        include=include,
        log=log,
    )


def _parse_seconds(value: Any, key: str, allow_none: bool = False) -> float | None:
    if value is None and allow_none:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{key}' must be a number of seconds, got {value!r}") from e
    if seconds < 0:
        raise ConfigError(f"'{key}' must not be negative")
    return seconds


def dict_to_config(data: Any) -> Config:
    """Convert a parsed config document to a typed Config.

    Args:
        data: Either a list of target mappings or a mapping with ``targets``.

    Returns:
        Typed Config object.
    """
    if isinstance(data, list):
        data = {"targets": data}
    if not isinstance(data, dict):
        raise ConfigError("Config must be a list of targets or a mapping with 'targets'")

    targets_data = data.get("targets") or []
    if not isinstance(targets_data, list):
        raise ConfigError("'targets' must be a list")
    targets = [dict_to_target(t, i) for i, t in enumerate(targets_data)]

    log_data = data.get("logging") or {}
    if not isinstance(log_data, dict):
        raise ConfigError("'logging' must be a mapping")
    logging_config = LoggingConfig(
        level=log_data.get("level"),
        verbose=log_data.get("verbose"),
        file=log_data.get("file"),
    )

    interval = _parse_seconds(data.get("interval", DEFAULT_INTERVAL), "interval")
    command_timeout = _parse_seconds(
        data.get("command_timeout"), "command_timeout", allow_none=True
    )

    known_keys = {"targets", "interval", "command_timeout", "logging"}
    for key in data:
        if key not in known_keys:
            _log.warning("Ignoring unknown config key %r", key)

    return Config(
        targets=targets,
        interval=interval if interval is not None else DEFAULT_INTERVAL,
        command_timeout=command_timeout,
        logging=logging_config,
    )


def load_config(path: str | Path | None = None) -> Config:
    """Load the config file and apply environment overrides.

    Args:
        path: Config file path. Defaults to TRACKWATCH_CONFIG or ./Config.yaml.

    Returns:
        Typed Config object.

    Raises:
        ConfigError: On any loading or validation problem.
    """
    config_path = get_config_path(path)
    data = load_yaml_file(config_path)
    if data is None:
        data = []

    overrides = env_overrides()
    if overrides:
        if isinstance(data, list):
            data = {"targets": data}
        if isinstance(data, dict):
            data = dict(data)
            if "logging" in overrides:
                data["logging"] = {**(data.get("logging") or {}), **overrides.pop("logging")}
            data.update(overrides)

    config = dict_to_config(data)
    _log.debug("Loaded %d target(s) from %s", len(config.targets), config_path)
    return config


def load_targets(path: str | Path | None = None) -> list[Target]:
    """Load only the ordered list of targets."""
    return load_config(path).targets

"""Session configuration.

Values resolve with priority: explicit argument > environment > YAML file >
default. The YAML file path comes from the ``config_file`` argument or the
LINELOOP_CONFIG environment variable.

Example file:

    history_file: ~/.cache/lineloop_history
    history_size: 5000
    history_max_bytes: 2000000
    show_stack_traces: true
    primary_prompt: "lineloop> "
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from lineloop.core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_FILE = "~/.lineloop_history"

# Environment variable per config field. Prompts are file/argument only.
ENV_KEYS = {
    "history_file": "LINELOOP_HISTORY_FILE",
    "history_size": "LINELOOP_HISTORY_SIZE",
    "history_max_bytes": "LINELOOP_HISTORY_BYTES",
    "show_stack_traces": "LINELOOP_STACK_TRACES",
}
CONFIG_ENV_KEY = "LINELOOP_CONFIG"

_TRUE_WORDS = {"true", "1", "yes", "on"}
_FALSE_WORDS = {"false", "0", "no", "off"}


@dataclass
class ReplConfig:
    """Resolved settings for one REPL session.

    Attributes:
        history_file: Persisted history path, or None for an in-memory log.
        history_size: Maximum number of entries kept in the history file.
        history_max_bytes: Maximum size of the history file in bytes.
        primary_prompt: Prompt shown when no statement is pending.
        continuation_prompt: Prompt shown while a statement is incomplete.
        show_stack_traces: Initial value of the ``:e`` flag.
        history_window: Entry count ``:H`` shows without an argument.
    """

    history_file: str | None = DEFAULT_HISTORY_FILE
    history_size: int = 10_000
    history_max_bytes: int = 1_000_000
    primary_prompt: str = "> "
    continuation_prompt: str = "  "
    show_stack_traces: bool = False
    history_window: int = 50

    def history_path(self) -> Path | None:
        """History file with ``~`` expanded, or None when disabled."""
        if not self.history_file:
            return None
        return Path(self.history_file).expanduser()


def parse_bool(value: Any, name: str = "value") -> bool:
    """Parse a boolean from config text.

    Raises:
        ConfigError: If the value is not a recognized boolean word.
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ConfigError(f"{name} must be a boolean, got: {value!r}")


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a positive integer, got: {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a positive integer, got: {value!r}") from None
    if number <= 0:
        raise ConfigError(f"{name} must be a positive integer, got: {value!r}")
    return number


def _optional_path(value: Any, name: str) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _text(value: Any, name: str) -> str:
    return str(value)


_CONVERTERS: dict[str, Callable[[Any, str], Any]] = {
    "history_file": _optional_path,
    "history_size": _positive_int,
    "history_max_bytes": _positive_int,
    "primary_prompt": _text,
    "continuation_prompt": _text,
    "show_stack_traces": parse_bool,
    "history_window": _positive_int,
}


def _load_config_file(config_file: str | None) -> dict[str, Any]:
    """Read the YAML config file, returning {} when none is configured."""
    config_path = config_file or os.environ.get(CONFIG_ENV_KEY)
    if not config_path:
        return {}

    path = Path(config_path).expanduser()
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        if config_file:
            raise ConfigError(f"Config file not found: {path}") from None
        logger.warning("config file from %s not found: %s", CONFIG_ENV_KEY, path)
        return {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    known = {f.name for f in fields(ReplConfig)}
    unknown = set(data) - known
    if unknown:
        logger.warning("ignoring unknown config keys in %s: %s", path, sorted(unknown))
    return {k: v for k, v in data.items() if k in known}


def load_config(config_file: str | None = None, **overrides: Any) -> ReplConfig:
    """Build a ReplConfig from arguments, environment and config file.

    Args:
        config_file: YAML file path. Falls back to LINELOOP_CONFIG.
        **overrides: Field values from the caller. None means "not given".

    Returns:
        Resolved configuration.

    Raises:
        ConfigError: On unknown override names or invalid values.
    """
    defaults = ReplConfig()
    known = {f.name for f in fields(ReplConfig)}
    unexpected = set(overrides) - known
    if unexpected:
        raise ConfigError(f"Unknown config option(s): {', '.join(sorted(unexpected))}")

    file_config = _load_config_file(config_file)

    def get_value(name: str) -> Any:
        convert = _CONVERTERS[name]
        arg = overrides.get(name)
        if arg is not None:
            return convert(arg, name)
        env_key = ENV_KEYS.get(name)
        if env_key:
            env_val = os.environ.get(env_key)
            if env_val:
                return convert(env_val, env_key)
        if name in file_config:
            return convert(file_config[name], name)
        return getattr(defaults, name)

    return ReplConfig(**{name: get_value(name) for name in _CONVERTERS})

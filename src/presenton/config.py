"""Client configuration.

``ClientConfig`` is immutable once built and is shared by every call made
through a client instance. ``ClientConfig.from_env`` layers its sources
(lowest to highest priority):

1. Default values
2. TOML config (``PRESENTON_CONFIG_FILE``, ``./presenton.toml`` or
   ``$XDG_CONFIG_HOME/presenton/config.toml``), ``[presenton]`` table
3. Environment variables (``PRESENTON_*``)
4. Explicit keyword overrides
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.presenton.ai"
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0  # seconds
DEFAULT_TIMEOUT = 300.0  # seconds per HTTP attempt; sync generation is slow
DEFAULT_POLL_INTERVAL = 2.0  # seconds

CONFIG_FILE_ENV_VAR = "PRESENTON_CONFIG_FILE"
_TOML_TABLE = "presenton"

# Setting name -> environment variable
_ENV_VARS: Dict[str, str] = {
    "api_key": "PRESENTON_API_KEY",
    "base_url": "PRESENTON_BASE_URL",
    "max_retries": "PRESENTON_MAX_RETRIES",
    "retry_delay": "PRESENTON_RETRY_DELAY",
    "timeout": "PRESENTON_TIMEOUT",
    "poll_interval": "PRESENTON_POLL_INTERVAL",
}

_INT_SETTINGS = frozenset({"max_retries"})
_FLOAT_SETTINGS = frozenset({"retry_delay", "timeout", "poll_interval"})


@dataclass(frozen=True)
class ClientConfig:
    """Immutable settings for one client instance.

    Attributes:
        api_key: Presenton API key (``sk-presenton-...``), hidden from repr
        base_url: API root, trailing slash stripped
        max_retries: Retries after the first attempt for retryable failures
        retry_delay: Base backoff delay in seconds
        timeout: httpx timeout for a single HTTP attempt, in seconds
        poll_interval: Default wait between task status checks, in seconds
    """

    api_key: str = field(default="", repr=False)
    base_url: str = DEFAULT_BASE_URL
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    timeout: float = DEFAULT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(
        cls,
        config_file: Optional[str] = None,
        **overrides: Any,
    ) -> "ClientConfig":
        """Build a config from TOML, environment and explicit overrides.

        Args:
            config_file: Explicit TOML path. Takes the place of the default
                search locations.
            **overrides: Setting values that win over every other source.
                ``None`` values are ignored.

        Returns:
            The resolved :class:`ClientConfig`.
        """
        values: Dict[str, Any] = {}

        toml_path = config_file or os.environ.get(CONFIG_FILE_ENV_VAR)
        if toml_path:
            values.update(_load_toml(Path(toml_path)))
        else:
            for candidate in _default_config_paths():
                if candidate.exists():
                    values.update(_load_toml(candidate))
                    logger.debug("Loaded config from %s", candidate)

        for name, env_var in _ENV_VARS.items():
            raw = os.environ.get(env_var)
            if raw:
                _apply(values, name, raw, source=env_var)

        for name, raw in overrides.items():
            if raw is None:
                continue
            if name not in _ENV_VARS:
                raise TypeError(f"Unknown config setting: {name}")
            _apply(values, name, raw, source="override")

        return cls(**values)


def _default_config_paths() -> list[Path]:
    """Candidate TOML locations, lowest priority first."""
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return [
        Path(xdg_config_home) / "presenton" / "config.toml",
        Path.cwd() / "presenton.toml",
    ]


def _load_toml(path: Path) -> Dict[str, Any]:
    """Read the ``[presenton]`` table from a TOML file."""
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.error("Error loading config file %s: %s", path, e)
        return {}

    table = data.get(_TOML_TABLE, {})
    if not isinstance(table, dict):
        logger.warning("Ignoring non-table [%s] in %s", _TOML_TABLE, path)
        return {}

    values: Dict[str, Any] = {}
    known = {f.name for f in fields(ClientConfig)}
    for name, raw in table.items():
        if name not in known:
            logger.warning("Ignoring unknown setting '%s' in %s", name, path)
            continue
        _apply(values, name, raw, source=str(path))
    return values


def _apply(values: Dict[str, Any], name: str, raw: Any, *, source: str) -> None:
    """Coerce *raw* to the setting's type and store it.

    Invalid numbers are logged and skipped, keeping the lower-priority value.
    """
    try:
        if name in _INT_SETTINGS:
            value: Any = int(raw)
        elif name in _FLOAT_SETTINGS:
            value = float(raw)
        else:
            value = str(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid value for %s from %s: %r", name, source, raw)
        return
    values[name] = value

"""Gateway configuration loading and validation.

Reads ``calendar-mcp.toml``, resolves ``${VAR}`` references, and returns a
validated :class:`GatewayConfig`.  Every setting has a default, so the
gateway also runs without a config file.
"""

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from calendar_mcp.core.runners import available_runners, get_runner

DEFAULT_CONFIG_FILENAME = "calendar-mcp.toml"
DEFAULT_SERVICE_NAME = "outlook-calendar"
DEFAULT_SCRIPTS_DIR = "scripts"
DEFAULT_RUNNER = "cscript"

CONFIG_PATH_ENV = "CALENDAR_MCP_CONFIG"
SCRIPTS_DIR_ENV = "CALENDAR_MCP_SCRIPTS_DIR"

# Pattern matching ${VAR_NAME}; supports alphanumeric + underscore variable names.
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


class ConfigError(Exception):
    """Raised when gateway configuration is missing, malformed, or invalid."""


@dataclass
class LoggingConfig:
    """Logging configuration from [gateway.logging] section."""

    level: str = "INFO"
    format: str = "text"  # "text" or "json"
    log_root: Path | None = None


@dataclass
class RunnerConfig:
    """Runner configuration from [gateway.runner] section.

    ``suffix`` of ``None`` means the runner type's own default (``.vbs``
    for cscript, no suffix for exec).  ``timeout_seconds`` of ``None``
    lets scripts run for as long as they take.
    """

    type: str = DEFAULT_RUNNER
    suffix: str | None = None
    timeout_seconds: float | None = None


@dataclass
class GatewayConfig:
    """Parsed configuration for one gateway process."""

    name: str = DEFAULT_SERVICE_NAME
    scripts_dir: Path = field(default_factory=lambda: Path(DEFAULT_SCRIPTS_DIR).resolve())
    runner: RunnerConfig = field(default_factory=RunnerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ``${VAR_NAME}`` references in config values.

    Walks dicts, lists, and strings.  Non-string leaf values (int, bool,
    float, None) are returned unchanged.

    Raises
    ------
    ConfigError
        If a referenced environment variable is not set.
    """
    if isinstance(value, dict):
        return {k: resolve_env_vars(v) for k, v in value.items()}

    if isinstance(value, list):
        return [resolve_env_vars(item) for item in value]

    if isinstance(value, str):
        return _resolve_string(value)

    return value


def _resolve_string(s: str) -> str:
    """Replace all ``${VAR_NAME}`` occurrences in *s* with env var values.

    Collects all missing variable names and reports them in a single error.
    """
    missing: list[str] = []

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            missing.append(var_name)
            return match.group(0)
        return env_value

    result = _ENV_VAR_PATTERN.sub(_replace, s)

    if missing:
        vars_str = ", ".join(missing)
        raise ConfigError(
            f"Unresolved environment variable(s) in config value: {vars_str} (original: {s!r})"
        )

    return result


def _resolve_path(raw: Any, base_dir: Path, key: str) -> Path:
    if not isinstance(raw, str) or not raw.strip():
        raise ConfigError(f"{key} must be a non-empty string")
    path = Path(raw.strip()).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path.resolve()


def _parse_runner(section: Any) -> RunnerConfig:
    """Parse the optional [gateway.runner] sub-section."""
    if section is None:
        return RunnerConfig()
    if not isinstance(section, dict):
        raise ConfigError("gateway.runner must be a table")

    runner_type = str(section.get("type", DEFAULT_RUNNER)).strip().lower()
    try:
        get_runner(runner_type)
    except ValueError:
        available = ", ".join(available_runners())
        raise ConfigError(
            f"Unknown gateway.runner.type {runner_type!r}. Available runners: {available}"
        ) from None

    suffix = section.get("suffix")
    if suffix is not None and not isinstance(suffix, str):
        raise ConfigError("gateway.runner.suffix must be a string")

    raw_timeout = section.get("timeout_seconds")
    timeout: float | None = None
    if raw_timeout is not None:
        if isinstance(raw_timeout, bool) or not isinstance(raw_timeout, int | float):
            raise ConfigError("gateway.runner.timeout_seconds must be a number")
        if raw_timeout < 0:
            raise ConfigError("gateway.runner.timeout_seconds must be >= 0")
        timeout = float(raw_timeout) or None

    return RunnerConfig(type=runner_type, suffix=suffix, timeout_seconds=timeout)


def _parse_logging(section: Any, base_dir: Path) -> LoggingConfig:
    """Parse the optional [gateway.logging] sub-section."""
    if section is None:
        return LoggingConfig()
    if not isinstance(section, dict):
        raise ConfigError("gateway.logging must be a table")

    level = str(section.get("level", "INFO")).upper()
    fmt = str(section.get("format", "text")).lower()
    if fmt not in ("text", "json"):
        raise ConfigError(f"Invalid gateway.logging.format: {fmt!r}. Must be 'text' or 'json'.")

    log_root_raw = section.get("log_root")
    log_root = (
        None
        if log_root_raw is None
        else _resolve_path(log_root_raw, base_dir, "gateway.logging.log_root")
    )
    return LoggingConfig(level=level, format=fmt, log_root=log_root)


def parse_config(data: dict[str, Any], base_dir: Path) -> GatewayConfig:
    """Build a :class:`GatewayConfig` from already-parsed TOML *data*.

    Relative paths are resolved against *base_dir*.  ``$CALENDAR_MCP_SCRIPTS_DIR``
    overrides ``gateway.scripts_dir``.
    """
    data = resolve_env_vars(data)

    section = data.get("gateway", {})
    if not isinstance(section, dict):
        raise ConfigError("[gateway] must be a table")

    name = str(section.get("name", DEFAULT_SERVICE_NAME)).strip()
    if not name:
        raise ConfigError("gateway.name must be a non-empty string")

    scripts_dir_raw = os.environ.get(SCRIPTS_DIR_ENV) or section.get(
        "scripts_dir", DEFAULT_SCRIPTS_DIR
    )
    scripts_dir = _resolve_path(scripts_dir_raw, base_dir, "gateway.scripts_dir")

    return GatewayConfig(
        name=name,
        scripts_dir=scripts_dir,
        runner=_parse_runner(section.get("runner")),
        logging=_parse_logging(section.get("logging"), base_dir),
    )


def load_config(path: Path | None = None) -> GatewayConfig:
    """Load and validate the gateway configuration.

    Parameters
    ----------
    path:
        Path to a TOML file, or a directory containing ``calendar-mcp.toml``.
        When ``None``, ``$CALENDAR_MCP_CONFIG`` is consulted; when that is
        unset too, defaults are used relative to the working directory.

    Raises
    ------
    ConfigError
        If an explicitly given file is missing, contains invalid TOML, or
        holds invalid values.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_PATH_ENV)
        if not env_path:
            return parse_config({}, Path.cwd())
        path = Path(env_path)

    toml_path = Path(path)
    if toml_path.is_dir():
        toml_path = toml_path / DEFAULT_CONFIG_FILENAME

    if not toml_path.exists():
        raise ConfigError(f"Config file not found: {toml_path}")

    try:
        data = tomllib.loads(toml_path.read_bytes().decode())
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {toml_path}: {exc}") from exc

    return parse_config(data, toml_path.resolve().parent)

"""Tests for gateway configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from calendar_mcp.config import (
    CONFIG_PATH_ENV,
    DEFAULT_SERVICE_NAME,
    SCRIPTS_DIR_ENV,
    ConfigError,
    GatewayConfig,
    load_config,
    parse_config,
    resolve_env_vars,
)

pytestmark = pytest.mark.unit

FULL_TOML = """\
[gateway]
name = "work-calendar"
scripts_dir = "vbs"

[gateway.runner]
type = "exec"
suffix = ".sh"
timeout_seconds = 30

[gateway.logging]
level = "debug"
format = "json"
log_root = "logs"
"""


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
    monkeypatch.delenv(SCRIPTS_DIR_ENV, raising=False)


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "calendar-mcp.toml"
    path.write_text(content)
    return path


# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_full_config(self, tmp_path: Path):
        config = load_config(_write(tmp_path, FULL_TOML))

        assert config.name == "work-calendar"
        assert config.scripts_dir == (tmp_path / "vbs").resolve()
        assert config.runner.type == "exec"
        assert config.runner.suffix == ".sh"
        assert config.runner.timeout_seconds == 30.0
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "json"
        assert config.logging.log_root == (tmp_path / "logs").resolve()

    def test_directory_path(self, tmp_path: Path):
        _write(tmp_path, FULL_TOML)
        assert load_config(tmp_path).name == "work-calendar"

    def test_defaults_without_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = load_config()

        assert isinstance(config, GatewayConfig)
        assert config.name == DEFAULT_SERVICE_NAME
        assert config.scripts_dir == (tmp_path / "scripts").resolve()
        assert config.runner.type == "cscript"
        assert config.runner.suffix is None
        assert config.runner.timeout_seconds is None
        assert config.logging.format == "text"
        assert config.logging.log_root is None

    def test_empty_file_uses_defaults(self, tmp_path: Path):
        config = load_config(_write(tmp_path, ""))
        assert config.scripts_dir == (tmp_path / "scripts").resolve()

    def test_config_path_from_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv(CONFIG_PATH_ENV, str(_write(tmp_path, FULL_TOML)))
        assert load_config().name == "work-calendar"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(tmp_path / "nope.toml")

    def test_invalid_toml(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(_write(tmp_path, "[gateway\nname = 1"))


# ---------------------------------------------------------------------------
# parse_config
# ---------------------------------------------------------------------------


class TestParseConfig:
    def test_scripts_dir_env_override(self, tmp_path: Path, monkeypatch):
        override = tmp_path / "elsewhere"
        monkeypatch.setenv(SCRIPTS_DIR_ENV, str(override))
        config = parse_config({"gateway": {"scripts_dir": "vbs"}}, tmp_path)
        assert config.scripts_dir == override.resolve()

    def test_absolute_scripts_dir(self, tmp_path: Path):
        config = parse_config({"gateway": {"scripts_dir": str(tmp_path / "abs")}}, Path("/"))
        assert config.scripts_dir == (tmp_path / "abs").resolve()

    def test_zero_timeout_means_none(self, tmp_path: Path):
        config = parse_config({"gateway": {"runner": {"timeout_seconds": 0}}}, tmp_path)
        assert config.runner.timeout_seconds is None

    @pytest.mark.parametrize(
        ("gateway", "match"),
        [
            ({"runner": {"type": "osascript"}}, "Unknown gateway.runner.type"),
            ({"runner": {"timeout_seconds": -1}}, "must be >= 0"),
            ({"runner": {"timeout_seconds": "soon"}}, "must be a number"),
            ({"runner": {"timeout_seconds": True}}, "must be a number"),
            ({"runner": {"suffix": 1}}, "suffix must be a string"),
            ({"runner": "cscript"}, "gateway.runner must be a table"),
            ({"logging": {"format": "xml"}}, "Invalid gateway.logging.format"),
            ({"name": "  "}, "gateway.name must be a non-empty string"),
            ({"scripts_dir": ""}, "gateway.scripts_dir must be a non-empty string"),
        ],
    )
    def test_invalid_values(self, tmp_path: Path, gateway, match):
        with pytest.raises(ConfigError, match=match):
            parse_config({"gateway": gateway}, tmp_path)

    def test_gateway_must_be_table(self, tmp_path: Path):
        with pytest.raises(ConfigError, match=r"\[gateway\] must be a table"):
            parse_config({"gateway": "x"}, tmp_path)


# ---------------------------------------------------------------------------
# Environment variable expansion
# ---------------------------------------------------------------------------


class TestResolveEnvVars:
    def test_resolves_nested_values(self, monkeypatch):
        monkeypatch.setenv("CAL_HOME", "/opt/cal")
        data = {"gateway": {"scripts_dir": "${CAL_HOME}/scripts", "runner": {"timeout": 5}}}
        assert resolve_env_vars(data) == {
            "gateway": {"scripts_dir": "/opt/cal/scripts", "runner": {"timeout": 5}}
        }

    def test_missing_variables_are_reported_together(self, monkeypatch):
        monkeypatch.delenv("CAL_A", raising=False)
        monkeypatch.delenv("CAL_B", raising=False)
        with pytest.raises(ConfigError, match="CAL_A, CAL_B"):
            resolve_env_vars("${CAL_A}/${CAL_B}")

    def test_expansion_in_config_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("CAL_SCRIPTS", str(tmp_path / "from-env"))
        config = load_config(_write(tmp_path, '[gateway]\nscripts_dir = "${CAL_SCRIPTS}"\n'))
        assert config.scripts_dir == (tmp_path / "from-env").resolve()

"""Tests for the configuration module."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from trackwatch.config import (
    Config,
    Target,
    dict_to_config,
    fetch_secret,
    get_config_path,
    load_config,
    load_database_config,
    load_targets,
    set_env_file,
)
from trackwatch.config.schema import DEFAULT_DB_PATH, DEFAULT_INTERVAL, DEFAULT_TARGET_LOG
from trackwatch.errors import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("TRACKWATCH_CONFIG", "TRACKWATCH_INTERVAL", "TRACKWATCH_LOG", "TRACKWATCH_DB"):
        monkeypatch.delenv(key, raising=False)


class TestConfigPath:
    def test_explicit_path(self) -> None:
        assert get_config_path("/etc/watch.yaml") == Path("/etc/watch.yaml")

    def test_env_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TRACKWATCH_CONFIG", "/tmp/tw.yaml")
        assert get_config_path() == Path("/tmp/tw.yaml")

    def test_default_path(self) -> None:
        assert get_config_path() == Path("Config.yaml")


class TestConfigLoading:
    """Test loading Config.yaml."""

    def test_list_format(self, tmp_path: Path) -> None:
        """A top-level list of targets."""
        config_file = tmp_path / "Config.yaml"
        config_file.write_text(
            r"""
- path: /srv/app/
  commands:
    - make test
    - make deploy
  exclude_regex:
    - '.*\.log$'
  include_regex:
    - 'debug\.log$'
  log: /var/log/app.log
- path: /srv/docs/
  commands: [make html]
"""
        )
        targets = load_targets(config_file)

        assert targets[0] == Target(
            path="/srv/app/",
            commands=("make test", "make deploy"),
            exclude=(r".*\.log$",),
            include=(r"debug\.log$",),
            log="/var/log/app.log",
        )
        assert targets[1].path == "/srv/docs/"
        assert targets[1].exclude == ()
        assert targets[1].log == DEFAULT_TARGET_LOG

    def test_mapping_format(self, tmp_path: Path) -> None:
        config_file = tmp_path / "Config.yaml"
        config_file.write_text(
            """
interval: 2.5
command_timeout: 300
logging:
  level: debug
  file: /tmp/trackwatch.log
targets:
  - path: /srv/app
    commands: [make]
"""
        )
        config = load_config(config_file)

        assert config.interval == 2.5
        assert config.command_timeout == 300.0
        assert config.logging.level == "debug"
        assert config.logging.file == "/tmp/trackwatch.log"
        assert [t.path for t in config.targets] == ["/srv/app"]

    def test_defaults(self) -> None:
        config = dict_to_config([])
        assert isinstance(config, Config)
        assert config.targets == []
        assert config.interval == DEFAULT_INTERVAL
        assert config.command_timeout is None

    def test_single_command_string(self) -> None:
        config = dict_to_config([{"path": "/srv", "commands": "make"}])
        assert config.targets[0].commands == ("make",)

    def test_unknown_keys_warned(self, caplog: pytest.LogCaptureFixture) -> None:
        """A misspelled setting is reported instead of silently ignored."""
        with caplog.at_level(logging.WARNING, logger="trackwatch.config"):
            config = dict_to_config({"targets": [], "intervall": 2})

        assert config.interval == DEFAULT_INTERVAL
        assert "intervall" in caplog.text

    def test_targets_are_frozen(self) -> None:
        target = dict_to_config([{"path": "/srv"}]).targets[0]
        with pytest.raises(AttributeError):
            target.path = "/elsewhere"  # type: ignore[misc]

    def test_env_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "Config.yaml"
        config_file.write_text("- path: /srv/app\n")
        monkeypatch.setenv("TRACKWATCH_INTERVAL", "0.5")
        monkeypatch.setenv("TRACKWATCH_LOG", "/tmp/process.log")

        config = load_config(config_file)

        assert config.interval == 0.5
        assert config.logging.file == "/tmp/process.log"
        assert config.targets[0].path == "/srv/app"

    def test_empty_file_has_no_targets(self, tmp_path: Path) -> None:
        config_file = tmp_path / "Config.yaml"
        config_file.write_text("")
        assert load_targets(config_file) == []


class TestConfigErrors:
    """Every loading problem is fatal."""

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "Config.yaml"
        config_file.write_text("invalid: yaml: :")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(config_file)

    def test_missing_path(self) -> None:
        with pytest.raises(ConfigError, match="'path' is required"):
            dict_to_config([{"commands": ["make"]}])

    def test_invalid_regex(self) -> None:
        with pytest.raises(ConfigError, match="invalid exclude_regex"):
            dict_to_config([{"path": "/srv", "exclude_regex": ["("]}])

    def test_non_list_patterns(self) -> None:
        with pytest.raises(ConfigError, match="include_regex"):
            dict_to_config([{"path": "/srv", "include_regex": {"a": 1}}])

    def test_wrong_shape(self) -> None:
        with pytest.raises(ConfigError):
            dict_to_config("just a string")

    def test_negative_interval(self) -> None:
        with pytest.raises(ConfigError, match="interval"):
            dict_to_config({"targets": [], "interval": -1})

    def test_non_numeric_interval(self) -> None:
        with pytest.raises(ConfigError, match="interval"):
            dict_to_config({"targets": [], "interval": "soon"})


class TestSecrets:
    """Test environment and .env lookups."""

    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("TRACKWATCH_DB=/from/file.db\n")
        set_env_file(env_file)
        monkeypatch.setenv("TRACKWATCH_DB", "/from/env.db")

        assert fetch_secret("TRACKWATCH_DB") == "/from/env.db"

    def test_env_file_fallback(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("TRACKWATCH_DB=/from/file.db\n")
        set_env_file(env_file)

        assert fetch_secret("TRACKWATCH_DB") == "/from/file.db"
        assert load_database_config().path == "/from/file.db"

    def test_default(self, tmp_path: Path) -> None:
        set_env_file(tmp_path / "missing.env")

        assert fetch_secret("TRACKWATCH_NOPE", "fallback") == "fallback"
        assert load_database_config().path == DEFAULT_DB_PATH

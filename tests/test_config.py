"""Tests for configuration loading and logging setup."""

import json
import logging
import logging.handlers

import pytest
import yaml

from logsight.core.config import (
    DEFAULT_CONFIG_YAML,
    LoggingConfig,
    LogSightConfig,
    config_to_dict,
    configure_logging,
    dict_to_config,
    generate_default_config,
    get_config,
    load_config,
    load_config_file,
    load_env_config,
    merge_configs,
    reset_config,
    save_config,
    set_config,
)


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self):
        """Out of the box the API listens on 3001 and exports match.json."""
        config = LogSightConfig()

        assert config.parser.log_path is None
        assert config.parser.encoding == "utf-8"
        assert config.export.output_path == "match.json"
        assert config.export.json_indent is None
        assert config.server.port == 3001
        assert config.server.cors_origins == ["*"]
        assert config.logging.level == "INFO"

    def test_template_matches_defaults(self):
        """The YAML template loads to the default values."""
        config = dict_to_config(yaml.safe_load(DEFAULT_CONFIG_YAML))
        assert config_to_dict(config) == config_to_dict(LogSightConfig())


class TestFileLoading:
    """Tests for reading config files."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  port: 8080\n")
        assert load_config_file(path) == {"server": {"port": 8080}}

    def test_toml(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[export]\noutput_path = "out.json"\n')
        assert load_config_file(path) == {"export": {"output_path": "out.json"}}

    def test_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"parser": {"encoding": "latin-1"}}))
        assert load_config_file(path) == {"parser": {"encoding": "latin-1"}}

    def test_empty_yaml(self, tmp_path):
        """An empty YAML file is an empty config."""
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config_file(path) == {}

    def test_missing_file(self, tmp_path):
        assert load_config_file(tmp_path / "nope.yaml") == {}

    @pytest.mark.parametrize(
        "name, content",
        [
            ("config.yaml", "keep me\n"),
            ("config.yaml", "- server\n- export\n"),
            ("config.json", "[1, 2]"),
        ],
    )
    def test_non_mapping_rejected(self, tmp_path, name, content):
        """Top-level scalars and lists are not configs."""
        path = tmp_path / name
        path.write_text(content)
        with pytest.raises(ValueError, match="must contain a mapping"):
            load_config_file(path)

    @pytest.mark.parametrize(
        "name, content",
        [
            ("config.yaml", "server: [unclosed\n"),
            ("config.toml", "[server\nport = 1\n"),
            ("config.json", "{not json"),
        ],
    )
    def test_malformed_file_rejected(self, tmp_path, name, content):
        """Syntax errors surface as ValueError."""
        path = tmp_path / name
        path.write_text(content)
        with pytest.raises(ValueError, match="Invalid config file"):
            load_config_file(path)

    def test_unknown_extension(self, tmp_path):
        path = tmp_path / "config.ini"
        path.write_text("[server]\nport = 1\n")
        assert load_config_file(path) == {}

    def test_default_search_path(self, tmp_path):
        """logsight.yaml in the working directory is picked up."""
        (tmp_path / "logsight.yaml").write_text("server:\n  host: 127.0.0.1\n")
        assert load_config().server.host == "127.0.0.1"


class TestEnvironment:
    """Tests for LOGSIGHT_* overrides."""

    def test_env_values(self, monkeypatch):
        """Variables map to sections; numbers are converted."""
        monkeypatch.setenv("LOGSIGHT_LOG_PATH", "/logs/match.log")
        monkeypatch.setenv("LOGSIGHT_PORT", "9000")

        assert load_env_config() == {
            "parser": {"log_path": "/logs/match.log"},
            "server": {"port": 9000},
        }

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        """Environment beats the config file."""
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  port: 8080\n  host: 127.0.0.1\n")
        monkeypatch.setenv("LOGSIGHT_PORT", "9000")

        config = load_config(path)
        assert config.server.port == 9000
        assert config.server.host == "127.0.0.1"

    def test_env_can_be_ignored(self, monkeypatch):
        monkeypatch.setenv("LOGSIGHT_PORT", "9000")
        assert load_config(include_env=False).server.port == 3001


class TestMerging:
    """Tests for dict merging and conversion."""

    def test_merge_nested(self):
        base = {"server": {"host": "a", "port": 1}, "x": 1}
        override = {"server": {"port": 2}}

        assert merge_configs(base, override) == {"server": {"host": "a", "port": 2}, "x": 1}
        assert base["server"]["port"] == 1

    def test_unknown_keys_ignored(self, caplog):
        """Unknown keys are dropped with a warning."""
        with caplog.at_level(logging.WARNING):
            config = dict_to_config({"server": {"port": 1, "colour": "blue"}})

        assert config.server.port == 1
        assert "server.colour" in caplog.text

    def test_null_section(self):
        """An empty section in YAML loads as None and is skipped."""
        assert dict_to_config({"server": None}).server.port == 3001

    def test_scalar_section_rejected(self):
        with pytest.raises(ValueError, match="server"):
            dict_to_config({"server": 5})


class TestSaving:
    """Tests for writing config files."""

    @pytest.mark.parametrize("name", ["out.yaml", "out.json"])
    def test_save_and_reload(self, tmp_path, name):
        config = LogSightConfig()
        config.server.port = 4000
        path = tmp_path / name

        save_config(config, path)

        assert load_config(path, include_env=False).server.port == 4000

    def test_save_unknown_format(self, tmp_path):
        with pytest.raises(ValueError):
            save_config(LogSightConfig(), tmp_path / "out.ini")

    def test_generate_yaml_template(self, tmp_path):
        path = tmp_path / "logsight.yaml"
        generate_default_config(path)
        assert path.read_text() == DEFAULT_CONFIG_YAML


class TestGlobalConfig:
    """Tests for the process-wide config."""

    def test_cached(self):
        assert get_config() is get_config()

    def test_set_and_reset(self):
        custom = LogSightConfig()
        set_config(custom)
        assert get_config() is custom

        reset_config()
        assert get_config() is not custom


class TestConfigureLogging:
    """Tests for logging setup."""

    def test_level(self):
        root = logging.getLogger()
        previous = root.level
        try:
            configure_logging(LoggingConfig(level="warning"))
            assert root.level == logging.WARNING
        finally:
            root.setLevel(previous)

    def test_file_handler(self, tmp_path):
        """A log file adds a rotating handler."""
        root = logging.getLogger()
        log_file = tmp_path / "logsight.log"
        previous = root.level

        configure_logging(LoggingConfig(file=str(log_file)))
        handlers = [h for h in root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        try:
            assert len(handlers) == 1
            logging.getLogger("logsight.test").info("hello")
            handlers[0].flush()
            assert "hello" in log_file.read_text(encoding="utf-8")
        finally:
            for handler in handlers:
                root.removeHandler(handler)
                handler.close()
            root.setLevel(previous)

    def test_file_handler_added_once(self, tmp_path):
        """Configuring the same log file twice keeps one handler."""
        root = logging.getLogger()
        log_file = tmp_path / "logsight.log"
        previous = root.level

        configure_logging(LoggingConfig(file=str(log_file)))
        configure_logging(LoggingConfig(file=str(log_file)))
        handlers = [h for h in root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        try:
            assert len(handlers) == 1
        finally:
            for handler in handlers:
                root.removeHandler(handler)
                handler.close()
            root.setLevel(previous)

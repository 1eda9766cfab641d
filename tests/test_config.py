import os

import pytest
import toml
import yaml

from fileguard import config
from fileguard.errors import ConfigValidationError
from fileguard.rules import build_rule


def test_load_rule_config(tmp_path):
    config_data = {
        "inode": "/etc/hosts",
        "event": "IN_MODIFY",
        "action": 'log "/tmp/fileguard.log"',
    }
    config_file = tmp_path / "fileguard.yaml"
    with open(config_file, "w") as f:
        yaml.dump(config_data, f)

    loaded = config.load_rule_config(str(config_file))
    assert loaded == config_data


def test_load_rule_config_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        config.load_rule_config(str(tmp_path / "missing.yaml"))


def test_load_rule_config_empty(tmp_path):
    config_file = tmp_path / "empty.yaml"
    config_file.write_text("")
    with pytest.raises(ConfigValidationError):
        config.load_rule_config(str(config_file))


@pytest.mark.parametrize("argument, expected", [
    ("custom.yaml", ("custom.yaml", True)),
    ("conf/custom.yml", ("conf/custom.yml", True)),
    ("custom.toml", (config.DEFAULT_CONFIG_PATH, False)),
    ("custom", (config.DEFAULT_CONFIG_PATH, False)),
    ("custom.yaml.bak", (config.DEFAULT_CONFIG_PATH, False)),
    (None, (config.DEFAULT_CONFIG_PATH, False)),
])
def test_select_config_path(argument, expected):
    assert config.select_config_path(argument) == expected


def test_default_config_template_is_valid(tmp_path):
    """The generated template loads and validates as a rule."""
    config_file = tmp_path / "nested" / "fileguard.yaml"

    assert config.write_default_config(str(config_file))
    rule = build_rule(config.load_rule_config(str(config_file)))
    assert rule.trigger_event.value == "IN_MODIFY"

    # An existing file is left untouched.
    config_file.write_text("inode: /tmp\n")
    assert not config.write_default_config(str(config_file))
    assert config_file.read_text() == "inode: /tmp\n"


def test_load_settings(tmp_path):
    settings_data = {
        "logging": {"level": "DEBUG"},
        "watch": {"buffer_size": 8192},
    }
    settings_file = tmp_path / "settings.toml"
    with open(settings_file, "w") as f:
        toml.dump(settings_data, f)

    settings = config.load_settings(str(settings_file))
    assert settings["logging"]["level"] == "DEBUG"
    assert settings["logging"]["log_dir"] == "logs"
    assert settings["watch"]["buffer_size"] == 8192
    assert settings["notifications"]["enabled"] is False
    assert config.get_log_dir(settings) == os.path.join(str(tmp_path), "logs")


def test_load_settings_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(config.ENV_CONFIG_DIR_VAR, raising=False)

    settings = config.load_settings()
    assert settings["watch"]["buffer_size"] == config.DEFAULT_BUFFER_SIZE
    assert settings["__settings_path__"] == config.DEFAULT_SETTINGS_PATH


def test_load_settings_from_env_dir(tmp_path, monkeypatch):
    with open(tmp_path / "settings.toml", "w") as f:
        toml.dump({"notifications": {"enabled": True}}, f)
    monkeypatch.setenv(config.ENV_CONFIG_DIR_VAR, str(tmp_path))

    settings = config.load_settings()
    assert settings["notifications"]["enabled"] is True


def test_load_settings_explicit_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        config.load_settings(str(tmp_path / "nope.toml"))


def test_load_settings_rejects_small_buffer(tmp_path):
    settings_file = tmp_path / "settings.toml"
    with open(settings_file, "w") as f:
        toml.dump({"watch": {"buffer_size": 64}}, f)

    with pytest.raises(ConfigValidationError):
        config.load_settings(str(settings_file))


@pytest.mark.parametrize("content", ["watch = 5\n", 'logging = "DEBUG"\n', "notifications = true\n"])
def test_load_settings_rejects_non_table_section(tmp_path, content):
    settings_file = tmp_path / "settings.toml"
    settings_file.write_text(content)

    with pytest.raises(ConfigValidationError):
        config.load_settings(str(settings_file))


def test_load_settings_keeps_unknown_scalars(tmp_path):
    settings_file = tmp_path / "settings.toml"
    settings_file.write_text('title = "fileguard"\n')

    settings = config.load_settings(str(settings_file))
    assert settings["title"] == "fileguard"

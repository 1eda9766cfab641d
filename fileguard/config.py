import os

import toml
import yaml

from fileguard.decoder import EVENT_HEADER, NAME_MAX
from fileguard.errors import ConfigValidationError

DEFAULT_CONFIG_PATH = "./fileguard.yaml"
DEFAULT_SETTINGS_PATH = "./settings.toml"
ENV_CONFIG_DIR_VAR = "FILEGUARD_CONFIG_DIR"
CONFIG_EXTENSIONS = (".yaml", ".yml")

# One maximal record: header, NAME_MAX and the terminating NUL.
MIN_BUFFER_SIZE = EVENT_HEADER.size + NAME_MAX + 1
DEFAULT_BUFFER_SIZE = 10 * MIN_BUFFER_SIZE

DEFAULT_SETTINGS = {
    "logging": {"level": "INFO", "log_dir": "logs"},
    "watch": {"buffer_size": DEFAULT_BUFFER_SIZE},
    "notifications": {"enabled": False},
}

CONFIG_TEMPLATE = """\
# FileGuard configuration.
#
# inode:  path of the file or directory to watch
# event:  one of IN_ACCESS, IN_ATTRIB, IN_CLOSE_WRITE, IN_CLOSE_NOWRITE,
#         IN_CREATE, IN_DELETE, IN_DELETE_SELF, IN_MODIFY, IN_MOVE_SELF,
#         IN_MOVED_FROM, IN_MOVED_TO, IN_OPEN, IN_UNMOUNT
# action: execute "<shell command>"  or  log "<path of log file>"

inode: /etc/hosts
event: IN_MODIFY
action: log "./fileguard.log"
"""


def select_config_path(argument=None):
    """
    Choose the rule file to load from the optional CLI argument.

    Arguments ending in .yaml or .yml are used as given. Anything else,
    including a missing argument or one without an extension, falls back
    to DEFAULT_CONFIG_PATH.

    Returns:
        tuple: (path, used_argument)
    """
    if argument and os.path.splitext(argument)[1] in CONFIG_EXTENSIONS:
        return argument, True
    return DEFAULT_CONFIG_PATH, False


def load_rule_config(config_path):
    """
    Load the rule configuration from a YAML file.

    Args:
        config_path (str): Path to the YAML configuration file.

    Returns:
        dict: Raw configuration with keys inode, event and action.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    with open(config_path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in {config_path}: {e}") from e
    if data is None:
        raise ConfigValidationError(f"Configuration file is empty: {config_path}")
    return data


def write_default_config(config_path=DEFAULT_CONFIG_PATH):
    """
    Write a commented configuration template, leaving existing files alone.

    Returns:
        bool: True if the template was written.
    """
    if os.path.exists(config_path):
        return False
    config_dir = os.path.dirname(config_path)
    if config_dir:
        os.makedirs(config_dir, exist_ok=True)
    with open(config_path, "w") as f:
        f.write(CONFIG_TEMPLATE)
    return True


def load_settings(cli_settings_path=None):
    """
    Load runtime settings from a TOML file, merged over DEFAULT_SETTINGS.

    Precedence:
      1. cli_settings_path if provided (must exist).
      2. Environment variable FILEGUARD_CONFIG_DIR (looking for settings.toml).
      3. Default to ./settings.toml.
    A missing file in cases 2 and 3 means built-in defaults.

    Returns:
        dict: The settings, with "__settings_path__" set to the path consulted.
    """
    if cli_settings_path:
        settings_path = cli_settings_path
        if not os.path.exists(settings_path):
            raise FileNotFoundError(f"Settings file not found: {settings_path}")
    elif os.environ.get(ENV_CONFIG_DIR_VAR):
        settings_path = os.path.join(os.environ[ENV_CONFIG_DIR_VAR], "settings.toml")
    else:
        settings_path = DEFAULT_SETTINGS_PATH

    settings = {section: dict(values) for section, values in DEFAULT_SETTINGS.items()}
    if os.path.exists(settings_path):
        with open(settings_path, "r") as f:
            try:
                loaded = toml.load(f)
            except toml.TomlDecodeError as e:
                raise ConfigValidationError(f"Invalid TOML in {settings_path}: {e}") from e
        for section, values in loaded.items():
            if isinstance(values, dict):
                settings.setdefault(section, {}).update(values)
            elif section in DEFAULT_SETTINGS:
                raise ConfigValidationError(
                    f"Settings section [{section}] in {settings_path} must be a table"
                )
            else:
                settings[section] = values

    buffer_size = settings["watch"].get("buffer_size")
    if not isinstance(buffer_size, int) or buffer_size < MIN_BUFFER_SIZE:
        raise ConfigValidationError(
            f"watch.buffer_size must be an integer of at least {MIN_BUFFER_SIZE}"
        )

    settings["__settings_path__"] = settings_path
    return settings


def get_log_dir(settings):
    """Resolve the log directory relative to the settings file location."""
    settings_dir = os.path.dirname(os.path.abspath(settings["__settings_path__"]))
    return os.path.join(settings_dir, settings["logging"].get("log_dir", "logs"))

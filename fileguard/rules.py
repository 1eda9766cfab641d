"""
Rules module for FileGuard.

A FileGuard configuration describes exactly one rule: the path to watch, the
event that triggers it, and the action to take. The action is written as a
single string whose first word is the mode and whose remainder is the target:

  - execute "notify-send changed"   runs the target through the shell
  - log "/var/log/fileguard.log"    appends a timestamped line to the target

This module splits that string and validates the rule once, before any watch
is opened.
"""

import enum
from dataclasses import dataclass

from fileguard.errors import ConfigValidationError
from fileguard.events import CanonicalEvent


class ActionMode(enum.Enum):
    EXECUTE = "execute"
    LOG = "log"


@dataclass(frozen=True)
class ActionRule:
    """The single trigger/action rule driving dispatch."""

    watched_path: str
    trigger_event: CanonicalEvent
    mode: ActionMode
    target: str


def split_action(action):
    """
    Split an action string into its mode word and target.

    The target is the rest of the string up to the next double quote, with
    any opening quote skipped, so both ``log "/tmp/out.log"`` and
    ``log /tmp/out.log`` name the same file.

    Args:
        action (str): The raw action string from the configuration.

    Returns:
        tuple: (mode_word, target), target may be empty.
    """
    mode_word, _, remainder = action.strip().partition(" ")
    remainder = remainder.strip().lstrip('"')
    target = remainder.split('"', 1)[0].strip()
    return mode_word, target


def build_rule(raw):
    """
    Build and validate an ActionRule from a loaded configuration mapping.

    Args:
        raw (dict): Mapping with the keys ``inode``, ``event`` and ``action``.

    Returns:
        ActionRule: The validated rule.

    Raises:
        ConfigValidationError: If a key is missing, the event or mode is
            unknown, or the target is empty.
    """
    if not isinstance(raw, dict):
        raise ConfigValidationError("Configuration must be a mapping")

    for key in ("inode", "event", "action"):
        value = raw.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ConfigValidationError(f"Configuration key '{key}' is missing or empty")

    try:
        trigger_event = CanonicalEvent.from_name(raw["event"].strip())
    except ValueError as e:
        raise ConfigValidationError(str(e)) from None

    mode_word, target = split_action(raw["action"])
    try:
        mode = ActionMode(mode_word)
    except ValueError:
        raise ConfigValidationError(
            f"Unknown action mode '{mode_word}', expected 'execute' or 'log'"
        ) from None

    if not target:
        raise ConfigValidationError("Command/path cannot be empty")

    return ActionRule(
        watched_path=raw["inode"].strip(),
        trigger_event=trigger_event,
        mode=mode,
        target=target,
    )

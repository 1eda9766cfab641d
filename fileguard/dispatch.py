"""
Action dispatch for FileGuard.

For each classified event the dispatcher compares it to the configured rule
and, on an exact match, either runs the rule's command or appends a line to
the rule's log file. One event is fully dispatched before the next one.
"""

import logging
import subprocess
import time
from typing import Callable, Optional

from fileguard.errors import ActionExecutionError, LogWriteError
from fileguard.events import CanonicalEvent
from fileguard.rules import ActionMode, ActionRule


def format_timestamp(occurred_at: float) -> str:
    """asctime-style local time, e.g. 'Mon Oct 19 12:00:00 2026'."""
    return time.asctime(time.localtime(occurred_at))


def format_log_line(event: CanonicalEvent, occurred_at: float) -> str:
    return f"{format_timestamp(occurred_at)}{event.value}\n"


class ActionDispatcher:
    """
    Performs the configured side effect for matching events.

    Attributes:
        notifier: Optional callable receiving (timestamp, event_name) before
            each matched dispatch.
        logger: Logger instance.
    """

    def __init__(
        self,
        notifier: Optional[Callable[[str, str], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.notifier = notifier
        self.logger = logger or logging.getLogger(__name__)

    def dispatch(self, event: CanonicalEvent, rule: ActionRule, occurred_at: float) -> bool:
        """
        Dispatch one event against the rule.

        Args:
            event: The classified event.
            rule: The configured action rule.
            occurred_at: POSIX timestamp of the event.

        Returns:
            True if the rule matched and its action ran, False otherwise.

        Raises:
            ActionExecutionError: The command could not start or exited non-zero.
            LogWriteError: The log line could not be appended.
        """
        if event is not rule.trigger_event:
            return False

        if self.notifier is not None:
            try:
                self.notifier(format_timestamp(occurred_at), event.value)
            except Exception as e:
                self.logger.warning(f"Notification failed: {e}")

        if rule.mode is ActionMode.EXECUTE:
            self._execute(rule.target)
        else:
            self._append_log(rule.target, format_log_line(event, occurred_at))
        return True

    def _execute(self, command: str) -> None:
        self.logger.debug(f"Executing: {command}")
        try:
            result = subprocess.run(command, shell=True)
        except OSError as e:
            raise ActionExecutionError(command, -1) from e
        if result.returncode != 0:
            raise ActionExecutionError(command, result.returncode)

    def _append_log(self, path: str, line: str) -> None:
        self.logger.debug(f"Appending to {path}: {line.rstrip()}")
        try:
            with open(path, "a") as f:
                f.write(line)
        except OSError as e:
            raise LogWriteError(f"Couldn't write log file {path}: {e}") from e

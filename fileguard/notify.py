"""Desktop notifications for matched events, sent through notify-send."""

import logging
import subprocess

APP_NAME = "fileguard"


class DesktopNotifier:
    """
    Fire-and-forget notifier called with (timestamp, event_name).

    The notify-send binary is checked on first use; if it is missing,
    notifications are disabled for the rest of the run.
    """

    def __init__(self, logger=None, command="notify-send"):
        self.logger = logger or logging.getLogger(__name__)
        self.command = command
        self._available = None

    def available(self):
        if self._available is None:
            try:
                subprocess.run(
                    [self.command, "--version"],
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    check=False,
                )
                self._available = True
            except OSError as e:
                self.logger.warning(f"{self.command} not usable, notifications disabled: {e}")
                self._available = False
        return self._available

    def __call__(self, timestamp, event_name):
        if not self.available():
            return
        message = f"{event_name} event occurred at {timestamp}"
        try:
            subprocess.run(
                [self.command, APP_NAME, message],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as e:
            self.logger.warning(f"Failed to send notification: {e}")

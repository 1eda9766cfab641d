"""
Exceptions raised by FileGuard.

Startup errors (configuration, watch registration, permissions) and runtime
errors on the read path or the log action are fatal. Unknown event kinds and
failed commands are reported and the watch keeps running.
"""


class FileguardError(Exception):
    """Base class for all FileGuard errors."""

    pass


class ConfigValidationError(FileguardError):
    """The rule configuration names an unknown event, mode or an empty target."""

    pass


class WatchInitError(FileguardError):
    """The notification channel could not be opened or the watch not added."""

    pass


class PathPermissionError(WatchInitError):
    """The watched path is not accessible with the required rights."""

    pass


class ReadError(FileguardError):
    """Reading from the notification channel failed."""

    pass


class DecodeError(FileguardError):
    """A read buffer is truncated or its records are inconsistent."""

    pass


class UnknownEventKind(FileguardError):
    """An event mask carries bits outside the known event vocabulary."""

    def __init__(self, mask):
        super().__init__(f"Unknown event mask: {mask:#010x}")
        self.mask = mask


class ActionExecutionError(FileguardError):
    """The configured command exited with a non-zero status."""

    def __init__(self, command, returncode):
        super().__init__(f"Command {command!r} exited with status {returncode}")
        self.command = command
        self.returncode = returncode


class LogWriteError(FileguardError):
    """An event line could not be appended to the log target."""

    pass

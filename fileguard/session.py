"""
Watch session for FileGuard.

A WatchSession owns the inotify channel and the single watch registered on
the configured path. It runs the read, decode, classify, dispatch loop and
releases both handles exactly once, whether the loop ends normally, on an
error, or because a signal arrived.
"""

import atexit
import enum
import errno
import logging
import os
import signal
import threading
import time
from typing import Optional

from fileguard.channel import InotifyChannel
from fileguard.config import DEFAULT_BUFFER_SIZE
from fileguard.decoder import RawEventRecord, decode_events
from fileguard.dispatch import ActionDispatcher
from fileguard.errors import (ActionExecutionError, DecodeError,
                              PathPermissionError, ReadError,
                              UnknownEventKind, WatchInitError)
from fileguard.events import IN_ALL_EVENTS, classify
from fileguard.rules import ActionRule


class SessionState(enum.Enum):
    INITIALIZING = "initializing"
    WATCHING = "watching"
    DRAINING = "draining"
    CLOSED = "closed"


class WatchSession:
    """
    One watch on one path, driven by one rule.

    Attributes:
        rule: The validated action rule.
        dispatcher: Dispatcher performing the rule's side effect.
        channel: Notification channel (InotifyChannel unless injected).
        buffer: Fixed-capacity read buffer.
        state: Current SessionState.
        wd: Watch descriptor while watching, None otherwise.
        logger: Logger instance.
    """

    def __init__(
        self,
        rule: ActionRule,
        dispatcher: Optional[ActionDispatcher] = None,
        channel=None,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        logger: Optional[logging.Logger] = None,
    ):
        self.rule = rule
        self.logger = logger or logging.getLogger(__name__)
        self.dispatcher = dispatcher or ActionDispatcher(logger=self.logger)
        self.channel = channel if channel is not None else InotifyChannel()
        self.buffer = bytearray(buffer_size)
        self.state = SessionState.INITIALIZING
        self.wd = None
        self._stop = threading.Event()
        self._dispatching = False

    def open(self) -> None:
        """
        Open the channel and register the watch.

        Raises:
            WatchInitError: The path is missing, or inotify could not be
                initialized or the watch added.
            PathPermissionError: The path cannot be read.
        """
        if self.state is not SessionState.INITIALIZING:
            raise WatchInitError(f"Cannot open a session in state {self.state.value}")

        path = self.rule.watched_path
        if not os.path.exists(path):
            self.close()
            raise WatchInitError(f'Unable to open inode "{path}": no such file or directory')
        if not os.access(path, os.R_OK):
            self.close()
            raise PathPermissionError(f'Permission check for inode "{path}" failed')

        try:
            self.channel.open()
            self.wd = self.channel.add_watch(path, IN_ALL_EVENTS)
        except OSError as e:
            self.close()
            if e.errno == errno.EACCES:
                raise PathPermissionError(f'Could not add watch on "{path}": {e}') from e
            raise WatchInitError(f'Could not watch "{path}": {e}') from e

        atexit.register(self.close)
        self.state = SessionState.WATCHING
        self.logger.info(f"Watching {path} (wd={self.wd}) for {self.rule.trigger_event.value}")

    def run(self) -> None:
        """
        Run the read loop until stopped. The session is closed on return.

        Raises:
            ReadError: Reading the channel failed.
            LogWriteError: The log action could not write its line.
        """
        if self.state is not SessionState.WATCHING:
            raise WatchInitError("Session is not open")
        try:
            while not self._stop.is_set():
                n = self._read()
                if n == 0:
                    self.logger.warning("read() returned 0 bytes, continuing to watch")
                    continue
                self.process_buffer(n)
        finally:
            self.close()

    def _read(self) -> int:
        try:
            return self.channel.readinto(self.buffer)
        except OSError as e:
            raise ReadError(f"Couldn't read event: {e}") from e

    def process_buffer(self, n: int) -> None:
        """Decode the first n bytes of the buffer and dispatch each record in order."""
        try:
            for record in decode_events(self.buffer, n):
                self._handle_record(record)
                if self._stop.is_set():
                    break
        except DecodeError as e:
            self.logger.error(f"Discarding rest of read buffer: {e}")

    def _handle_record(self, record: RawEventRecord) -> None:
        try:
            event = classify(record.mask)
        except UnknownEventKind as e:
            self.logger.warning(f"Skipping record for wd={record.wd}: {e}")
            return

        occurred_at = time.time()
        name = record.name
        self.logger.info(f"{event.value} event occurred" + (f" on {name}" if name else ""))

        self._dispatching = True
        try:
            self.dispatcher.dispatch(event, self.rule, occurred_at)
        except ActionExecutionError as e:
            self.logger.error(str(e))
        finally:
            self._dispatching = False

    def request_stop(self) -> None:
        """Ask the loop to leave after the current record."""
        self._stop.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def close(self) -> None:
        """Release the watch and the channel. Calls after the first are no-ops."""
        if self.state in (SessionState.DRAINING, SessionState.CLOSED):
            return
        self.state = SessionState.DRAINING
        wd, self.wd = self.wd, None
        try:
            if wd is not None:
                try:
                    self.channel.remove_watch(wd)
                except OSError as e:
                    # The kernel drops the watch itself once the path is deleted.
                    self.logger.warning(f"Could not remove watch {wd}: {e}")
        finally:
            self.channel.close()
            self.state = SessionState.CLOSED
            atexit.unregister(self.close)
            self.logger.debug("Watch session closed")

    def handle_signal(self, signum, frame):
        """
        Signal handler: stop the loop and release the watch.

        If a dispatch call is running it is allowed to complete; the loop
        drains and closes right after it. Otherwise the session is closed
        here and SystemExit is raised.
        """
        self.logger.warning(f"Signal {signum} caught! Cleaning up...")
        self._stop.set()
        if self._dispatching:
            return
        self.close()
        raise SystemExit(0)

    def signal_map(self, signals=(signal.SIGINT, signal.SIGTERM)):
        return {signum: self.handle_signal for signum in signals}

    def install_signal_handlers(self, signals=(signal.SIGINT, signal.SIGTERM)):
        for signum, handler in self.signal_map(signals).items():
            signal.signal(signum, handler)

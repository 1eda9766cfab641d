import os

import daemon
import psutil
from daemon.pidfile import PIDLockFile

DEFAULT_PID_FILENAME = "fileguard.pid"


def get_pid_file(log_dir):
    return os.path.join(log_dir, DEFAULT_PID_FILENAME)


def read_pid(pid_file):
    """Return the PID recorded in pid_file, or None if there is no usable PID file."""
    if not os.path.exists(pid_file):
        return None
    with open(pid_file, "r") as f:
        content = f.read().strip()
    try:
        return int(content)
    except ValueError:
        return None


def process_status(pid):
    """
    Collect process details for a running daemon.

    Returns:
        dict: Property name to value, or None if the process is gone.
    """
    try:
        proc = psutil.Process(pid)
        with proc.oneshot():
            return {
                "PID": proc.pid,
                "Status": proc.status(),
                "CPU %": proc.cpu_percent(interval=0.1),
                "Memory %": f"{proc.memory_percent():.2f}",
                "Memory RSS": proc.memory_info().rss,
                "Threads": proc.num_threads(),
                "Started At": proc.create_time(),
            }
    except psutil.NoSuchProcess:
        return None


def _handler_fds(logger):
    """File descriptors behind the logger's stream handlers; streams without one are skipped."""
    fds = []
    for handler in logger.handlers:
        stream = getattr(handler, "stream", None)
        if stream is None or not hasattr(stream, "fileno"):
            continue
        try:
            fds.append(stream.fileno())
        except (OSError, ValueError):
            continue
    return fds


def run_daemon(session, pid_file, logger):
    """
    Detach from the terminal and run an opened session.

    The session's watch and channel descriptors and the logger's file handles
    are preserved across daemonization; SIGTERM and SIGINT go to the session's
    signal handler.

    Args:
        session (WatchSession): An opened session.
        pid_file (str): Path of the PID lock file.
        logger (logging.Logger): Logger whose handlers must survive the fork.
    """
    files_preserve = _handler_fds(logger)
    if getattr(session.channel, "fd", None) is not None:
        files_preserve.append(session.channel.fd)

    context = daemon.DaemonContext(
        pidfile=PIDLockFile(pid_file),
        files_preserve=files_preserve,
        working_directory=os.getcwd(),
        signal_map=session.signal_map(),
    )

    with context:
        logger.info(f"Daemon started with pid {os.getpid()}, pid file {pid_file}")
        try:
            session.run()
        except Exception as e:
            logger.error(f"Fatal error in daemon: {e}", exc_info=True)
            raise

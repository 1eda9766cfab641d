import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_level(level, verbose=False):
    """Accept a level name ("info") or number; verbose always means DEBUG."""
    if verbose:
        return logging.DEBUG
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def setup_logger(name, log_dir, log_filename, level="INFO", verbose=False, console=True):
    """
    Configure the FileGuard logger: a file in log_dir plus an optional console stream.

    Calling it again for the same name replaces the previous handlers, closing
    their files, so a CLI invocation never writes through stale handles.

    Args:
        name (str): The logger name.
        log_dir (str): Directory for the log file, created if missing.
        log_filename (str): Log file name.
        level (str|int): Level name from settings, or a logging level.
        verbose (bool): The -v flag; forces DEBUG.
        console (bool): Whether to also log to stderr.

    Returns:
        logging.Logger: The configured logger.
    """
    os.makedirs(log_dir, exist_ok=True)
    numeric_level = resolve_level(level, verbose)

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = [logging.FileHandler(os.path.join(log_dir, log_filename))]
    if console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug(f"Logging to {os.path.join(log_dir, log_filename)} at {logging.getLevelName(numeric_level)}")
    return logger

import logging

import pytest

from fileguard.logger import resolve_level, setup_logger


@pytest.mark.parametrize("level, verbose, expected", [
    ("INFO", False, logging.INFO),
    ("warning", False, logging.WARNING),
    ("nonsense", False, logging.INFO),
    (logging.ERROR, False, logging.ERROR),
    ("ERROR", True, logging.DEBUG),
])
def test_resolve_level(level, verbose, expected):
    assert resolve_level(level, verbose) == expected


def test_setup_logger_writes_file(tmp_path):
    log_dir = tmp_path / "nested" / "logs"
    logger = setup_logger("FileGuardLoggerTest", str(log_dir), "fg.log", level="WARNING", console=False)

    logger.info("hidden")
    logger.warning("shown")

    content = (log_dir / "fg.log").read_text()
    assert "shown" in content
    assert "hidden" not in content
    assert logger.level == logging.WARNING


def test_setup_logger_replaces_handlers(tmp_path):
    first = setup_logger("FileGuardLoggerTest", str(tmp_path / "a"), "fg.log", console=True)
    old_handlers = list(first.handlers)

    second = setup_logger("FileGuardLoggerTest", str(tmp_path / "b"), "fg.log", verbose=True, console=False)
    second.debug("after")

    assert second is first
    assert len(second.handlers) == 1
    assert not any(h in second.handlers for h in old_handlers)
    assert "after" in (tmp_path / "b" / "fg.log").read_text()
    assert "after" not in (tmp_path / "a" / "fg.log").read_text()

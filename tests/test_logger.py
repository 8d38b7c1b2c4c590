"""
Tests for the structured console logger
"""

import io

from shutdown_manager.models.enums import LogCategory, LogLevel
from shutdown_manager.utils.logger import BoundLogger, Logger, get_category_logger


def make_logger(min_level=LogLevel.DEBUG):
    stream = io.StringIO()
    return Logger(min_level=min_level, use_colors=False, stream=stream), stream


def test_line_format():
    logger, stream = make_logger()

    logger.info(LogCategory.SHUTDOWN, "Exiting without errors")

    line = stream.getvalue().rstrip("\n")
    assert line.startswith("[")
    assert line.endswith("SHUTDOWN  ✓ Exiting without errors")
    assert "\033[" not in line


def test_details_are_rendered_as_tree():
    logger, stream = make_logger()

    logger.warn(LogCategory.CONFIG, "Falling back", source="app.yaml", reason="missing")

    lines = stream.getvalue().splitlines()
    assert len(lines) == 3
    assert lines[1].strip() == "├─ source: app.yaml"
    assert lines[2].strip() == "└─ reason: missing"


def test_min_level_filters():
    logger, stream = make_logger(LogLevel.WARN)

    logger.info(LogCategory.SYSTEM, "hidden")
    logger.debug(LogCategory.SYSTEM, "hidden")
    logger.error(LogCategory.SYSTEM, "shown")

    output = stream.getvalue()
    assert "hidden" not in output
    assert "shown" in output


def test_exc_info_appends_traceback():
    logger, stream = make_logger()

    try:
        raise ValueError("bad value")
    except ValueError:
        logger.error(LogCategory.SHUTDOWN, "failed", exc_info=True)

    assert "ValueError: bad value" in stream.getvalue()


def test_colors():
    stream = io.StringIO()
    logger = Logger(use_colors=True, stream=stream)

    logger.error(LogCategory.HOOKS, "red")

    assert "\033[31m" in stream.getvalue()


def test_bound_logger_is_a_sink():
    logger, stream = make_logger()
    bound = logger.for_category(LogCategory.SHUTDOWN)

    bound.log("[ShutdownManager]: Received SIGINT, Beginning Shutdown Process")
    bound.with_category(LogCategory.TASK).debug("cancelled")

    lines = stream.getvalue().splitlines()
    assert "SHUTDOWN" in lines[0]
    assert lines[0].endswith("[ShutdownManager]: Received SIGINT, Beginning Shutdown Process")
    assert "TASK" in lines[1]


def test_category_logger_uses_singleton():
    assert isinstance(get_category_logger(LogCategory.GENERAL), BoundLogger)

"""
Console logger for the shutdown manager.

One line per record, optional detail lines underneath:

    [14:23:45] SHUTDOWN  ✓ [ShutdownManager]: Received SIGTERM, Beginning Shutdown Process
    [14:23:45] CONFIG    ⚠ Falling back to factory defaults
               ├─ source: app.yaml
               └─ error: [Errno 2] No such file or directory
"""

import sys
import traceback
from datetime import datetime
from typing import Dict, List, NamedTuple, Optional, TextIO

from shutdown_manager.models.enums import LogLevel, LogCategory

_RESET = '\033[0m'
_DIM = '\033[2m'


class _LevelStyle(NamedTuple):
    rank: int
    symbol: str
    color: str


_LEVELS: Dict[LogLevel, _LevelStyle] = {
    LogLevel.DEBUG: _LevelStyle(0, '·', _DIM),
    LogLevel.INFO: _LevelStyle(1, '✓', '\033[32m'),
    LogLevel.WARN: _LevelStyle(2, '⚠', '\033[33m'),
    LogLevel.ERROR: _LevelStyle(3, '✗', '\033[31m'),
}

_CATEGORY_COLORS: Dict[LogCategory, str] = {
    LogCategory.CONFIG: '\033[36m',
    LogCategory.SYSTEM: '\033[97m',
    LogCategory.SHUTDOWN: '\033[95m',
    LogCategory.HOOKS: '\033[35m',
    LogCategory.TASK: '\033[94m',
}
_DEFAULT_COLOR = '\033[37m'

_CATEGORY_WIDTH = 9
_DETAIL_INDENT = " " * 11


class Logger:
    """
    Structured console logger.

    A record is dropped when its level ranks below ``min_level``. Keyword
    arguments become ``key: value`` detail lines; with ``exc_info=True`` the
    traceback of the exception being handled is appended as well.
    """

    def __init__(
        self,
        min_level: LogLevel = LogLevel.INFO,
        use_colors: bool = True,
        stream: Optional[TextIO] = None
    ):
        """
        Args:
            min_level: Lowest level that is written
            use_colors: ANSI colours (turn off when output is redirected)
            stream: Target stream, sys.stdout (looked up per write) when None
        """
        self.min_level = min_level
        self.use_colors = use_colors
        self.stream = stream

    def enabled_for(self, level: LogLevel) -> bool:
        return _LEVELS[level].rank >= _LEVELS[self.min_level].rank

    def _paint(self, text: str, color: str) -> str:
        return f"{color}{text}{_RESET}" if self.use_colors else text

    def _headline(self, category: LogCategory, message: str, level: LogLevel) -> str:
        style = _LEVELS[level]
        stamp = datetime.now().strftime('[%H:%M:%S]')
        name = self._paint(
            category.name.ljust(_CATEGORY_WIDTH),
            _CATEGORY_COLORS.get(category, _DEFAULT_COLOR)
        )
        return f"{stamp} {name} {self._paint(style.symbol, style.color)} {self._paint(message, style.color)}"

    def _detail_lines(self, details: List[str]) -> List[str]:
        last = len(details) - 1
        return [
            f"{_DETAIL_INDENT}{self._paint('└─' if i == last else '├─', _DIM)} {detail}"
            for i, detail in enumerate(details)
        ]

    def _write(self, lines: List[str]) -> None:
        out = self.stream or sys.stdout
        out.write("\n".join(lines) + "\n")
        out.flush()

    def log(
        self,
        category: LogCategory,
        message: str,
        level: LogLevel = LogLevel.INFO,
        details: Optional[List[str]] = None,
        exc_info: bool = False,
        **fields
    ) -> None:
        """
        Write one record.

        Example:
            logger.log(LogCategory.HOOKS, "Hook handler failed", LogLevel.ERROR,
                       hook="preShutdown", exception="KeyError('x')")
        """
        if not self.enabled_for(level):
            return

        extra = list(details or [])
        extra.extend(f"{key}: {value}" for key, value in fields.items())
        if exc_info and sys.exc_info()[0] is not None:
            extra.extend(traceback.format_exc().rstrip().splitlines())

        self._write([self._headline(category, message, level)] + self._detail_lines(extra))

    def debug(self, category: LogCategory, message: str, **kw) -> None:
        self.log(category, message, LogLevel.DEBUG, **kw)

    def info(self, category: LogCategory, message: str, **kw) -> None:
        self.log(category, message, LogLevel.INFO, **kw)

    def warn(self, category: LogCategory, message: str, **kw) -> None:
        self.log(category, message, LogLevel.WARN, **kw)

    def error(self, category: LogCategory, message: str, **kw) -> None:
        self.log(category, message, LogLevel.ERROR, **kw)

    def for_category(self, category: LogCategory) -> 'BoundLogger':
        return BoundLogger(self, category)


class BoundLogger:
    """
    Logger with a fixed category.

    ``log(message)`` alone is enough to act as the coordinator's logging sink.
    """

    def __init__(self, base: Logger, category: LogCategory):
        self._base = base
        self.category = category

    def log(self, message: str, level: LogLevel = LogLevel.INFO, **kw) -> None:
        self._base.log(self.category, message, level, **kw)

    def debug(self, message: str, **kw) -> None:
        self.log(message, LogLevel.DEBUG, **kw)

    def info(self, message: str, **kw) -> None:
        self.log(message, LogLevel.INFO, **kw)

    def warn(self, message: str, **kw) -> None:
        self.log(message, LogLevel.WARN, **kw)

    def error(self, message: str, **kw) -> None:
        self.log(message, LogLevel.ERROR, **kw)

    def with_category(self, category: LogCategory) -> 'BoundLogger':
        return BoundLogger(self._base, category)


_logger = Logger()


def get_logger() -> Logger:
    return _logger


def get_category_logger(category: LogCategory = LogCategory.GENERAL) -> BoundLogger:
    return _logger.for_category(category)


def configure_logger(
    min_level: LogLevel = LogLevel.INFO,
    use_colors: bool = True,
    stream: Optional[TextIO] = None
) -> None:
    """
    Reconfigure the shared logger in place.

    Module-level bound loggers keep a reference to the same instance and
    pick up the change.
    """
    _logger.min_level = min_level
    _logger.use_colors = use_colors
    _logger.stream = stream

import pytest

from shutdown_manager.lifecycle.shutdown_coordinator import ShutdownCoordinator
from shutdown_manager.models.enums import LogLevel
from shutdown_manager.utils.logger import configure_logger

PREFIX = "[test]: "


class RecordingLogger:
    """Logging sink that keeps every line."""

    def __init__(self):
        self.lines = []

    def log(self, message):
        self.lines.append(message)

    def contains(self, text):
        return any(text in line for line in self.lines)


class ExitRecorder:
    """Stands in for the process exit primitive."""

    def __init__(self):
        self.codes = []

    def __call__(self, code):
        self.codes.append(code)

    @property
    def called(self):
        return bool(self.codes)


@pytest.fixture(autouse=True)
def quiet_console():
    configure_logger(LogLevel.ERROR, use_colors=False)
    yield
    configure_logger(LogLevel.INFO, use_colors=True)


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def exit_recorder():
    return ExitRecorder()


@pytest.fixture
def make_coordinator(recording_logger, exit_recorder):
    def _make(**kwargs):
        kwargs.setdefault("logger", recording_logger)
        kwargs.setdefault("logging_prefix", PREFIX)
        kwargs.setdefault("exit_fn", exit_recorder)
        return ShutdownCoordinator(**kwargs)
    return _make


@pytest.fixture
def coordinator(make_coordinator):
    return make_coordinator()

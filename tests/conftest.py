import io
import logging

import pytest


class ListLogHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record):
        self.records.append(record)

    def messages(self, level=None) -> list[str]:
        return [r.getMessage() for r in self.records if level is None or r.levelno == level]


@pytest.fixture
def log_handler():
    return ListLogHandler()


@pytest.fixture
def call_logger(request, log_handler):
    logger = logging.getLogger(f"aoplog.test.{request.node.name}")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.addHandler(log_handler)
    yield logger
    logger.removeHandler(log_handler)


@pytest.fixture
def console():
    return io.StringIO()

"""Shared fixtures: a controllable monotonic clock and a clean package logger."""

import logging

import pytest


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Fresh fake clock for each test."""
    return FakeClock()


@pytest.fixture
def package_logger():
    """The package logger, stripped of handlers afterwards."""
    logger = logging.getLogger("stopwatchd")
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)

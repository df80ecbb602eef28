from __future__ import annotations

from concurrent.futures import Executor, Future

import pytest


class InlineExecutor(Executor):
    """Runs submitted callables immediately on the calling thread."""

    def submit(self, fn, /, *args, **kwargs):  # type: ignore[override]
        fut: Future = Future()
        try:
            fut.set_result(fn(*args, **kwargs))
        except Exception as ex:
            fut.set_exception(ex)
        return fut


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += float(seconds)


@pytest.fixture
def inline_executor() -> InlineExecutor:
    return InlineExecutor()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()

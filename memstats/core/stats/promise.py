from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Callable, Generic, Optional, TypeVar

from memstats.core.errors import PromiseAlreadyResolvedError

T = TypeVar("T")


class Promise(Generic[T]):
    """
    Single-shot result channel.

    Resolved exactly once, with a value or an error. Callers may pass
    callbacks, wait on `result()`, or hand `future` to code that expects a
    `concurrent.futures.Future`. Resolution may happen before the request
    call returns; callers must not rely on either ordering.
    """

    def __init__(self, on_value: Optional[Callable[[T], None]] = None, on_error: Optional[Callable[[BaseException], None]] = None):
        self._on_value = on_value
        self._on_error = on_error
        self._future: "Future[T]" = Future()
        self._lock = threading.Lock()
        self._resolved = False

    @property
    def future(self) -> "Future[T]":
        return self._future

    def done(self) -> bool:
        return self._resolved

    def set_value(self, value: T) -> None:
        self._claim()
        self._future.set_result(value)
        if self._on_value is not None:
            self._on_value(value)

    def set_error(self, exc: BaseException) -> None:
        self._claim()
        self._future.set_exception(exc)
        if self._on_error is not None:
            self._on_error(exc)

    def result(self, timeout: Optional[float] = None) -> T:
        return self._future.result(timeout=timeout)

    def _claim(self) -> None:
        with self._lock:
            if self._resolved:
                raise PromiseAlreadyResolvedError()
            self._resolved = True

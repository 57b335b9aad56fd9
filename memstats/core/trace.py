from __future__ import annotations

import contextlib
import contextvars
import uuid
from typing import Iterator, Optional

_TRACE_ID: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("memstats.trace_id", default=None)


def new_trace_id() -> str:
    return uuid.uuid4().hex


def current_trace_id(default: Optional[str] = None) -> Optional[str]:
    return _TRACE_ID.get() or default


@contextlib.contextmanager
def trace_context(trace_id: Optional[str] = None) -> Iterator[str]:
    """
    Bind a trace id for the duration of one statistics request.

    Reuses the caller's trace id when one is already bound, so a report
    requested from inside a traced operation shares its id.
    """
    resolved = str(trace_id) if trace_id else (current_trace_id() or new_trace_id())
    token = _TRACE_ID.set(resolved)
    try:
        yield resolved
    finally:
        _TRACE_ID.reset(token)

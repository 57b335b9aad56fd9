from __future__ import annotations

import json
import os
import threading
import time
import traceback
from dataclasses import dataclass
from typing import Any, Dict, Optional

from memstats.core.errors import MemStatsError, ProviderFaultError
from memstats.core.redaction import redact


@dataclass
class ErrorReporterConfig:
    include_tracebacks: bool = False


class ErrorReporter:
    """
    Append-only JSONL sink for faults observed while assembling reports.
    """

    def __init__(self, *, path: str = os.path.join("logs", "errors.jsonl"), cfg: Optional[ErrorReporterConfig] = None, metrics: Any = None):
        self.path = path
        self.cfg = cfg or ErrorReporterConfig()
        self.metrics = metrics
        self._lock = threading.Lock()
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)

    def report_exception(self, exc: BaseException, *, trace_id: str, subsystem: str, context: Optional[Dict[str, Any]] = None) -> MemStatsError:
        err = normalize_exception(exc, subsystem=subsystem, context=context or {})
        self.write_error(err, trace_id=trace_id, subsystem=subsystem, internal_exc=exc)
        return err

    def write_error(self, err: MemStatsError, *, trace_id: str, subsystem: str, internal_exc: Optional[BaseException] = None) -> None:
        entry: Dict[str, Any] = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "trace_id": trace_id,
            "subsystem": subsystem,
            "error_code": err.code,
            "severity": err.severity.value,
            "recoverable": bool(err.recoverable),
            "user_message": err.user_message,
            "safe_context": redact(err.context or {}),
        }
        if self.cfg.include_tracebacks and internal_exc is not None:
            entry["internal_context"] = {
                "traceback": "".join(traceback.format_exception(type(internal_exc), internal_exc, internal_exc.__traceback__, limit=30)),
            }
        line = json.dumps(entry, ensure_ascii=False)
        with self._lock:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        if self.metrics is not None:
            self.metrics.inc("errors_total", 1, tags={"subsystem": subsystem, "code": err.code})


def normalize_exception(exc: BaseException, *, subsystem: str, context: Dict[str, Any]) -> MemStatsError:
    # Passthrough
    if isinstance(exc, MemStatsError):
        return exc

    ctx = dict(context or {})
    ctx.setdefault("exception_type", type(exc).__name__)
    if subsystem == "provider":
        return ProviderFaultError(error=str(exc), **ctx)

    return MemStatsError(code="unknown_error", user_message="Something went wrong.", context=ctx)

from __future__ import annotations

import logging
import time
from typing import Any, List, Optional

from memstats.core.config import StatsSettings
from memstats.core.errors import AggregatorClosedError, MemStatsError
from memstats.core.logger import get_logger
from memstats.core.metrics import RollingMetrics
from memstats.core.stats.assembler import ReportAssembler
from memstats.core.stats.models import MemoryStats, Update
from memstats.core.stats.promise import Promise
from memstats.core.stats.provider import ProviderRegistry
from memstats.core.trace import trace_context


class StatsAggregator:
    """
    Public entry point for memory statistics.

    Holds a non-owning reference to its enclosing context and the provider
    registry that context built. Every operation runs synchronously in the
    caller's turn; results still go through a Promise so callers stay
    agnostic of when completion happens.
    """

    def __init__(
        self,
        *,
        context: Any,
        registry: ProviderRegistry,
        settings: Optional[StatsSettings] = None,
        logger: Optional[logging.Logger] = None,
        metrics: Optional[RollingMetrics] = None,
        error_reporter: Any = None,
    ):
        self.settings = settings or StatsSettings()
        self.logger = logger or get_logger()
        self.metrics = metrics if self.settings.record_metrics else None
        self._context = context
        self._registry = registry
        self._assembler = ReportAssembler(settings=self.settings, error_reporter=error_reporter, logger=self.logger)
        self._running = False
        self._closed = False

    @classmethod
    def from_context(cls, context: Any) -> "StatsAggregator":
        return cls(
            context=context,
            registry=context.build_registry(),
            settings=context.config.stats,
            logger=context.logger,
            metrics=context.metrics,
            error_reporter=context.error_reporter,
        )

    # -------- lifecycle --------
    def start_up(self) -> None:
        self._ensure_open("start_up")
        self._running = True

    def tear_down(self) -> None:
        self._ensure_open("tear_down")
        self._context = None
        self._registry = ProviderRegistry()
        self._running = False
        self._closed = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def closed(self) -> bool:
        return self._closed

    # -------- public API --------
    def get_memory_stats(self, full: bool, promise: Promise[MemoryStats]) -> None:
        self._ensure_open("get_memory_stats")
        with trace_context() as trace_id:
            t0 = time.perf_counter()
            try:
                result = self._assembler.assemble(self._registry, full=bool(full))
            except Exception as e:  # noqa: BLE001
                code = e.code if isinstance(e, MemStatsError) else type(e).__name__
                self.logger.error("memory_stats failed trace_id=%s code=%s", trace_id, code)
                self._record(ok=False, faults=1, elapsed_ms=(time.perf_counter() - t0) * 1000.0)
                promise.set_error(e)
                return
            elapsed_ms = (time.perf_counter() - t0) * 1000.0
            self.logger.info(
                "memory_stats trace_id=%s providers=%d faults=%d bytes=%d full=%s",
                trace_id,
                result.entries,
                len(result.faults),
                len(result.text),
                bool(full),
            )
            self._record(ok=True, faults=len(result.faults), elapsed_ms=elapsed_ms)
            promise.set_value(MemoryStats(debug=result.text))

    def get_current_state(self, updates: List[Update]) -> None:
        self._ensure_open("get_current_state")
        if self._session_is_automated():
            return
        # Placeholder: interactive sessions contribute no updates yet.
        return

    # -------- internals --------
    def _session_is_automated(self) -> bool:
        session = getattr(self._context, "session", None)
        if session is None:
            return False
        return bool(session.is_automated())

    def _record(self, *, ok: bool, faults: int, elapsed_ms: float) -> None:
        if self.metrics is None:
            return
        self.metrics.inc("memory_stats_requests_total", 1, tags={"outcome": "ok" if ok else "error"})
        if faults:
            self.metrics.inc("memory_stats_provider_faults_total", faults)
        self.metrics.observe("memory_stats_assembly_ms", elapsed_ms)
        self.metrics.set_gauge("memory_stats_providers", len(self._registry))

    def _ensure_open(self, op: str) -> None:
        if self._closed:
            raise AggregatorClosedError(operation=op)

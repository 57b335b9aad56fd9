from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from memstats.core.config import StatsSettings
from memstats.core.errors import ProviderFaultError
from memstats.core.logger import get_logger
from memstats.core.stats.envelope import EnvelopeBuilder
from memstats.core.stats.provider import ProviderEntry, ProviderRegistry
from memstats.core.trace import current_trace_id

FAULT_MARKER = "provider_fault"


@dataclass(frozen=True)
class AssemblyResult:
    text: str
    entries: int
    faults: Tuple[str, ...] = ()


class ReportAssembler:
    """
    Walks a provider registry once, in registry order, and builds the report
    envelope.

    With fault isolation on (default), a provider that raises or appends
    unusable text only loses its own entry: the entry becomes
    `{"<marker>":"provider_fault"}` and the fault is logged and reported.
    With isolation off, the first fault aborts assembly as ProviderFaultError.
    """

    def __init__(self, *, settings: Optional[StatsSettings] = None, error_reporter: Any = None, logger: Optional[logging.Logger] = None):
        self.settings = settings or StatsSettings()
        self.error_reporter = error_reporter
        self.logger = logger or get_logger()

    def assemble(self, registry: ProviderRegistry, *, full: bool = False) -> AssemblyResult:
        builder = EnvelopeBuilder()
        faults: List[str] = []
        for entry in registry:
            parts = self._collect(entry, full=full)
            if parts is None:
                faults.append(entry.name)
                parts = [self._fault_fragment()]
            builder.add_entry(entry.name, parts)
        return AssemblyResult(text=builder.build(), entries=len(builder), faults=tuple(faults))

    def _collect(self, entry: ProviderEntry, *, full: bool) -> Optional[List[str]]:
        # Providers write into a scratch list so a fault never leaves half a fragment behind.
        scratch: List[str] = []
        try:
            entry.collect(scratch, full=full)
            bad = [type(x).__name__ for x in scratch if not isinstance(x, str)]
            if bad:
                raise TypeError(f"fragment items must be str, got {bad[0]}")
            if self.settings.validate_fragments:
                _check_fragment(scratch)
        except Exception as e:  # noqa: BLE001
            if not self.settings.isolate_provider_faults:
                raise ProviderFaultError(provider=entry.name, error=str(e)) from e
            self._report_fault(entry.name, e)
            return None
        return scratch

    def _fault_fragment(self) -> str:
        return f'"{self.settings.fault_marker_key}":"{FAULT_MARKER}"'

    def _report_fault(self, name: str, exc: BaseException) -> None:
        trace_id = str(current_trace_id("memory_stats"))
        self.logger.warning("memory_stats provider fault trace_id=%s provider=%s error=%s", trace_id, name, type(exc).__name__)
        if self.error_reporter is None:
            return
        # Error sink failures must not cost the report.
        try:
            self.error_reporter.report_exception(exc, trace_id=trace_id, subsystem="provider", context={"provider": name})
        except Exception as e:  # noqa: BLE001
            self.logger.warning("memory_stats error sink failed trace_id=%s provider=%s error=%s", trace_id, name, type(e).__name__)


def _check_fragment(parts: List[str]) -> None:
    text = "".join(parts)
    try:
        obj = json.loads("{" + text + "}")
    except json.JSONDecodeError as e:
        raise ValueError(f"fragment is not valid JSON object content: {e.msg}") from e
    if not isinstance(obj, dict):
        raise ValueError("fragment must describe an object")

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from memstats.core.config import StatsConfigFile
from memstats.core.error_reporter import ErrorReporter
from memstats.core.errors import DuplicateProviderError
from memstats.core.logger import get_logger
from memstats.core.metrics import RollingMetrics
from memstats.core.stats.aggregator import StatsAggregator
from memstats.core.stats.defaults import order_names
from memstats.core.stats.models import MemoryStats, Update
from memstats.core.stats.promise import Promise
from memstats.core.stats.provider import ProviderRegistry, StatProvider, validate_provider_name


@dataclass
class Session:
    """Authorization state of the running client."""

    automated: bool = False

    def is_automated(self) -> bool:
        return bool(self.automated)


class ClientContext:
    """
    Enclosing context: owns the subsystems and the session, builds the
    provider registry once, and drives the aggregator's lifecycle.

    Subsystems must be registered before `start()`; the registry order is
    frozen from then on.
    """

    def __init__(
        self,
        *,
        session: Optional[Session] = None,
        config: Optional[StatsConfigFile] = None,
        logger: Optional[logging.Logger] = None,
        metrics: Optional[RollingMetrics] = None,
        error_reporter: Optional[ErrorReporter] = None,
    ):
        self.session = session or Session()
        self.config = config or StatsConfigFile()
        self.logger = logger or get_logger()
        self.metrics = metrics or RollingMetrics(max_samples_per_histogram=self.config.stats.max_samples_per_histogram)
        self.error_reporter = error_reporter or ErrorReporter(path=self.config.errors_path, metrics=self.metrics)
        self._subsystems: Dict[str, StatProvider] = {}
        self.stats_aggregator: Optional[StatsAggregator] = None

    # -------- wiring --------
    def register_subsystem(self, name: str, subsystem: StatProvider) -> None:
        if self.stats_aggregator is not None:
            raise RuntimeError("subsystems must be registered before start()")
        name = validate_provider_name(name)
        if name in self._subsystems:
            raise DuplicateProviderError(name=name)
        self._subsystems[name] = subsystem

    def build_registry(self) -> ProviderRegistry:
        return ProviderRegistry([(n, self._subsystems[n]) for n in order_names(self._subsystems.keys())])

    # -------- lifecycle --------
    def start(self) -> StatsAggregator:
        if self.stats_aggregator is None:
            self.stats_aggregator = StatsAggregator.from_context(self)
            self.stats_aggregator.start_up()
        return self.stats_aggregator

    def close(self) -> None:
        if self.stats_aggregator is not None:
            self.stats_aggregator.tear_down()
            self.stats_aggregator = None

    # -------- request surface --------
    def request_memory_stats(self, full: bool = False) -> Promise[MemoryStats]:
        aggregator = self.start()
        promise: Promise[MemoryStats] = Promise()
        aggregator.get_memory_stats(full, promise)
        return promise

    def get_memory_stats(self, full: bool = False, *, timeout: float = 5.0) -> MemoryStats:
        return self.request_memory_stats(full).result(timeout=timeout)

    def get_current_state(self) -> List[Update]:
        updates: List[Update] = []
        if self.stats_aggregator is not None:
            self.stats_aggregator.get_current_state(updates)
        return updates

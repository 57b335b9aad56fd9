"""
Memory statistics aggregation.

Every subsystem of the client implements the StatProvider capability. The
StatsAggregator walks the registry its enclosing context built, in a fixed
order, and delivers one `{"memory_stats":{...}}` report through a Promise.

Reports contain only self-reported application counters; nothing here
measures process memory.
"""

from memstats.core.stats.aggregator import StatsAggregator
from memstats.core.stats.assembler import AssemblyResult, ReportAssembler
from memstats.core.stats.envelope import EnvelopeBuilder
from memstats.core.stats.models import MemoryStatistics, MemoryStats, Update
from memstats.core.stats.promise import Promise
from memstats.core.stats.provider import CounterProvider, ProviderRegistry, StatProvider, fragment

__all__ = [
    "StatsAggregator",
    "AssemblyResult",
    "ReportAssembler",
    "EnvelopeBuilder",
    "MemoryStatistics",
    "MemoryStats",
    "Update",
    "Promise",
    "CounterProvider",
    "ProviderRegistry",
    "StatProvider",
    "fragment",
]

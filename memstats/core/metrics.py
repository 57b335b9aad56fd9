from __future__ import annotations

import math
import threading
from collections import deque
from typing import Any, Deque, Dict, Iterable, List, Optional, Tuple

_Key = Tuple[str, Tuple[Tuple[str, str], ...]]


def _tag_key(tags: Optional[Dict[str, Any]]) -> Tuple[Tuple[str, str], ...]:
    if not tags:
        return tuple()
    return tuple(sorted((str(k), str(v)) for k, v in tags.items() if v is not None))


def _fmt_key(key: _Key) -> str:
    name, tagt = key
    if not tagt:
        return name
    suffix = ",".join([f"{k}={v}" for k, v in tagt])
    return f"{name}{{{suffix}}}"


class RollingMetrics:
    """
    Bounded in-process metrics about the aggregator itself:
    - counters: int
    - gauges: last value
    - histograms: last N float samples
    """

    def __init__(self, *, max_samples_per_histogram: int = 200):
        self.max_samples_per_histogram = max(10, int(max_samples_per_histogram))
        self._lock = threading.Lock()
        self._counters: Dict[_Key, int] = {}
        self._gauges: Dict[_Key, Any] = {}
        self._hist: Dict[_Key, Deque[float]] = {}

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._hist.clear()

    def inc(self, name: str, n: int = 1, tags: Optional[Dict[str, Any]] = None) -> None:
        k = (str(name), _tag_key(tags))
        with self._lock:
            self._counters[k] = int(self._counters.get(k, 0)) + int(n)

    def set_gauge(self, name: str, value: Any, tags: Optional[Dict[str, Any]] = None) -> None:
        k = (str(name), _tag_key(tags))
        with self._lock:
            self._gauges[k] = value

    def observe(self, name: str, value: float, tags: Optional[Dict[str, Any]] = None) -> None:
        k = (str(name), _tag_key(tags))
        with self._lock:
            if k not in self._hist:
                self._hist[k] = deque(maxlen=self.max_samples_per_histogram)
            self._hist[k].append(float(value))

    def counter(self, name: str, tags: Optional[Dict[str, Any]] = None) -> int:
        with self._lock:
            return int(self._counters.get((str(name), _tag_key(tags)), 0))

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            counters = dict(self._counters)
            gauges = dict(self._gauges)
            hist = {k: list(v) for k, v in self._hist.items()}
        return {
            "counters": {_fmt_key(k): int(v) for k, v in counters.items()},
            "gauges": {_fmt_key(k): v for k, v in gauges.items()},
            "histograms": {_fmt_key(k): _stats(v) for k, v in hist.items()},
        }


def _percentile(sorted_vals: List[float], p: float) -> float:
    if not sorted_vals:
        return float("nan")
    k = (len(sorted_vals) - 1) * (min(max(p, 0.0), 100.0) / 100.0)
    f = math.floor(k)
    c = math.ceil(k)
    if f == c:
        return sorted_vals[int(k)]
    return sorted_vals[int(f)] * (c - k) + sorted_vals[int(c)] * (k - f)


def _stats(samples: Iterable[float]) -> Dict[str, float]:
    xs = sorted(float(x) for x in samples)
    if not xs:
        return {"count": 0.0}
    count = float(len(xs))
    return {
        "count": count,
        "min": xs[0],
        "max": xs[-1],
        "avg": sum(xs) / count,
        "p50": _percentile(xs, 50),
        "p95": _percentile(xs, 95),
    }

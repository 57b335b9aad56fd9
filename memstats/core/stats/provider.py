from __future__ import annotations

import inspect
import json
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from memstats.core.errors import DuplicateProviderError, InvalidProviderNameError


@runtime_checkable
class StatProvider(Protocol):
    """
    Capability implemented by every subsystem that can describe its own
    resource usage.

    `memory_stats` appends zero or more `"key":value` fragments to `output`.
    It must not block, raise, or change the subsystem's visible state.
    Providers may omit the `full` parameter; it is then never passed.
    """

    def memory_stats(self, output: List[str], full: bool = False) -> None: ...


def _accepts_full(provider: Any) -> bool:
    fn = getattr(provider, "memory_stats", None)
    if not callable(fn):
        return False
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return False
    for p in sig.parameters.values():
        if p.kind == inspect.Parameter.VAR_KEYWORD:
            return True
        if p.name == "full" and p.kind in (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY):
            return True
    return False


def validate_provider_name(name: Any) -> str:
    if not isinstance(name, str) or not name:
        raise InvalidProviderNameError(name=repr(name))
    # Names are emitted verbatim as report keys.
    if any(ch in name for ch in "\"\\") or any(ord(ch) < 0x20 for ch in name):
        raise InvalidProviderNameError(name=name)
    return name


@dataclass(frozen=True)
class ProviderEntry:
    name: str
    provider: StatProvider
    accepts_full: bool

    def collect(self, output: List[str], *, full: bool) -> None:
        if self.accepts_full:
            self.provider.memory_stats(output, full=full)
        else:
            self.provider.memory_stats(output)


class ProviderRegistry:
    """
    Ordered, name-unique sequence of (name, provider) pairs.

    The order is fixed when the registry is built and is the order entries
    appear in every report. Providers are held by reference and never owned.
    """

    def __init__(self, providers: Iterable[Tuple[str, StatProvider]] = ()):
        entries: List[ProviderEntry] = []
        seen = set()
        for name, provider in providers:
            name = validate_provider_name(name)
            if name in seen:
                raise DuplicateProviderError(name=name)
            if not callable(getattr(provider, "memory_stats", None)):
                raise TypeError(f"provider {name!r} has no callable memory_stats()")
            seen.add(name)
            entries.append(ProviderEntry(name=name, provider=provider, accepts_full=_accepts_full(provider)))
        self._entries: Tuple[ProviderEntry, ...] = tuple(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ProviderEntry]:
        return iter(self._entries)

    def __contains__(self, name: object) -> bool:
        return any(e.name == name for e in self._entries)

    def names(self) -> List[str]:
        return [e.name for e in self._entries]

    def get(self, name: str) -> Optional[StatProvider]:
        for e in self._entries:
            if e.name == name:
                return e.provider
        return None


def fragment(**counters: Any) -> str:
    """
    Encode keyword counters as one `"a":1,"b":2` fragment, preserving keyword order.

    NaN and infinite values raise ValueError; they have no JSON form.
    """
    return ",".join(f"{json.dumps(str(k))}:{json.dumps(v, ensure_ascii=False, allow_nan=False, separators=(',', ':'))}" for k, v in counters.items())


class CounterProvider:
    """
    Convenience base for subsystems whose report is a flat set of counters.

    Subclasses implement `counters(full)`; `full` may add keys, never remove
    the ones always reported.
    """

    def counters(self, full: bool) -> Sequence[Tuple[str, Any]]:
        raise NotImplementedError

    def memory_stats(self, output: List[str], full: bool = False) -> None:
        text = fragment(**dict(self.counters(full)))
        if text:
            output.append(text)

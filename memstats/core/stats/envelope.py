from __future__ import annotations

from typing import Iterable, List, Set

from memstats.core.errors import DuplicateProviderError
from memstats.core.stats.provider import validate_provider_name

ROOT_KEY = "memory_stats"


class EnvelopeBuilder:
    """
    Emits `{"memory_stats":{"<name>":{<fragment>},...}}` piece by piece.

    Separators are placed between entries only, so no caller can produce a
    leading or trailing comma. Emission order is report order.
    """

    def __init__(self, root_key: str = ROOT_KEY):
        self._parts: List[str] = ["{", f'"{validate_provider_name(root_key)}":{{']
        self._names: Set[str] = set()
        self._count = 0
        self._closed = False

    def add_entry(self, name: str, fragment_parts: Iterable[str]) -> None:
        if self._closed:
            raise RuntimeError("envelope already built")
        name = validate_provider_name(name)
        if name in self._names:
            raise DuplicateProviderError(name=name)
        self._names.add(name)
        if self._count:
            self._parts.append(",")
        self._parts.append(f'"{name}":{{')
        self._parts.extend(fragment_parts)
        self._parts.append("}")
        self._count += 1

    def __len__(self) -> int:
        return self._count

    def build(self) -> str:
        if not self._closed:
            self._parts.append("}")
            self._parts.append("}")
            self._closed = True
        return "".join(self._parts)

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class FakeProvider:
    """Appends a fixed fragment and records every call."""

    text: str = ""
    calls: List[bool] = field(default_factory=list)
    log: Optional[List[str]] = None
    name: str = ""

    def memory_stats(self, output: List[str], full: bool = False) -> None:
        self.calls.append(bool(full))
        if self.log is not None:
            self.log.append(self.name)
        if self.text:
            output.append(self.text)


@dataclass
class SingleArgProvider:
    """Provider written without the `full` parameter."""

    text: str = '"legacy":1'
    calls: int = 0

    def memory_stats(self, output: List[str]) -> None:
        self.calls += 1
        output.append(self.text)


@dataclass
class FailingProvider:
    """Writes part of a fragment, then raises."""

    partial: str = '"half":'
    message: str = "boom"

    def memory_stats(self, output: List[str], full: bool = False) -> None:
        output.append(self.partial)
        raise RuntimeError(self.message)


@dataclass
class FullAwareProvider:
    """Adds detail only when asked for the full report."""

    items: List[str] = field(default_factory=lambda: ["a", "b"])

    def memory_stats(self, output: List[str], full: bool = False) -> None:
        output.append(f'"count":{len(self.items)}')
        if full:
            output.append(",")
            output.append('"items":[' + ",".join(f'"{x}"' for x in self.items) + "]")


class NotAProvider:
    pass

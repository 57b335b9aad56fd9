from __future__ import annotations

import time
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MemoryStatistics(BaseModel):
    """
    Client API object carrying a finished report to the request layer.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    statistics: str

    def to_dict(self) -> Dict[str, Any]:
        return {"@type": "memoryStatistics", "statistics": self.statistics}


class MemoryStats(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    debug: str

    def to_statistics_object(self) -> MemoryStatistics:
        return MemoryStatistics(statistics=self.debug)


class Update(BaseModel):
    """
    One outbound "current state" notification collected by the client on
    (re)connect.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    update_type: str
    timestamp: float = Field(default_factory=lambda: time.time())
    payload: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("update_type")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v = str(v or "").strip()
        if not v:
            raise ValueError("update_type required")
        return v

from __future__ import annotations

import json
import os
import tempfile
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from memstats.core.errors import ConfigError


class StatsSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    isolate_provider_faults: bool = True
    fault_marker_key: str = "error"
    validate_fragments: bool = False
    record_metrics: bool = True
    max_samples_per_histogram: int = Field(default=200, ge=10, le=100_000)

    @field_validator("fault_marker_key")
    @classmethod
    def _plain_key(cls, v: str) -> str:
        v = str(v or "").strip()
        if not v:
            raise ValueError("fault_marker_key required")
        if any(ch in v for ch in "\"\\") or any(ord(ch) < 0x20 for ch in v):
            raise ValueError("fault_marker_key must not need JSON escaping")
        return v


class StatsConfigFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    config_version: int = Field(default=1, ge=1)
    log_dir: str = "logs"
    errors_path: str = os.path.join("logs", "errors.jsonl")
    stats: StatsSettings = Field(default_factory=StatsSettings)


def load_stats_config(path: str) -> StatsConfigFile:
    """
    Missing file -> defaults. Unreadable or invalid content is a ConfigError,
    never silently replaced.
    """
    if not os.path.exists(path):
        return StatsConfigFile()
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw: Any = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError("Statistics config is not valid JSON.", path=path, error=str(e)) from e
    except OSError as e:
        raise ConfigError("Statistics config could not be read.", path=path, error=str(e)) from e
    if not isinstance(raw, dict):
        raise ConfigError("Statistics config must be a JSON object.", path=path)
    try:
        return StatsConfigFile.model_validate(raw)
    except ValidationError as e:
        raise ConfigError("Statistics config failed validation.", path=path, error=str(e)) from e


def save_stats_config(path: str, cfg: StatsConfigFile) -> str:
    data: Dict[str, Any] = cfg.model_dump()
    d = os.path.dirname(path) or "."
    os.makedirs(d, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp_", suffix=".json", dir=d)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, sort_keys=True)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.remove(tmp)
    return path

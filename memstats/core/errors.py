from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from memstats.core.redaction import redact


class Severity(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class MemStatsError(Exception):
    code: str
    user_message: str
    severity: Severity = Severity.ERROR
    recoverable: bool = True
    context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.code)

    def __str__(self) -> str:
        return f"{self.code}: {self.user_message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "user_message": self.user_message,
            "severity": self.severity.value,
            "recoverable": bool(self.recoverable),
            "context": redact(self.context or {}),
        }


# ---- Core types ----
class ConfigError(MemStatsError):
    def __init__(self, user_message: str = "Configuration error.", **ctx: Any):
        super().__init__("config_error", user_message, severity=Severity.CRITICAL, recoverable=False, context=ctx)


class DuplicateProviderError(MemStatsError):
    def __init__(self, user_message: str = "Provider name registered twice.", **ctx: Any):
        super().__init__("duplicate_provider", user_message, severity=Severity.ERROR, recoverable=False, context=ctx)


class InvalidProviderNameError(MemStatsError):
    def __init__(self, user_message: str = "Provider name cannot be used as a report key.", **ctx: Any):
        super().__init__("invalid_provider_name", user_message, severity=Severity.ERROR, recoverable=False, context=ctx)


class ProviderFaultError(MemStatsError):
    def __init__(self, user_message: str = "A statistics provider failed to report.", **ctx: Any):
        super().__init__("provider_fault", user_message, severity=Severity.WARN, recoverable=True, context=ctx)


class PromiseAlreadyResolvedError(MemStatsError):
    def __init__(self, user_message: str = "Result channel was already resolved.", **ctx: Any):
        super().__init__("promise_already_resolved", user_message, severity=Severity.ERROR, recoverable=False, context=ctx)


class AggregatorClosedError(MemStatsError):
    def __init__(self, user_message: str = "Statistics aggregator was torn down.", **ctx: Any):
        super().__init__("aggregator_closed", user_message, severity=Severity.ERROR, recoverable=False, context=ctx)

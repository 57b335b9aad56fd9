from __future__ import annotations

from typing import Any, Dict


REDACT_KEYS = {
    "passphrase",
    "password",
    "secret",
    "token",
    "api_key",
    "key",
    "session_key",
    "auth_key",
    "authorization",
}

REDACTED = "***REDACTED***"


def _redact(obj: Any) -> Any:
    if isinstance(obj, dict):
        out: Dict[str, Any] = {}
        for k, v in obj.items():
            if str(k).lower() in REDACT_KEYS:
                out[k] = REDACTED
            else:
                out[k] = _redact(v)
        return out
    if isinstance(obj, (list, tuple)):
        return [_redact(x) for x in obj]
    return obj


# Exported helper for error reporting and logging of provider context.
def redact(obj: Any) -> Any:
    return _redact(obj)

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from companion.core.redaction import redact


class Severity(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class CompanionError(Exception):
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
class ConfigError(CompanionError):
    def __init__(self, user_message: str = "Configuration error.", **ctx: Any):
        super().__init__("config_error", user_message, severity=Severity.CRITICAL, recoverable=False, context=ctx)


class ValidationError(CompanionError):
    def __init__(self, user_message: str = "Invalid request.", **ctx: Any):
        super().__init__("validation_error", user_message, severity=Severity.WARN, recoverable=True, context=ctx)


class UnknownAgentError(CompanionError):
    def __init__(self, user_message: str = "Unknown agent.", **ctx: Any):
        super().__init__("unknown_agent", user_message, severity=Severity.WARN, recoverable=True, context=ctx)


class InvalidEventError(CompanionError):
    def __init__(self, user_message: str = "Invalid agent event.", **ctx: Any):
        super().__init__("invalid_event", user_message, severity=Severity.WARN, recoverable=True, context=ctx)


class InvalidNotificationError(CompanionError):
    def __init__(self, user_message: str = "Invalid notification.", **ctx: Any):
        super().__init__("invalid_notification", user_message, severity=Severity.WARN, recoverable=True, context=ctx)


class NotFoundError(CompanionError):
    def __init__(self, user_message: str = "Not found.", **ctx: Any):
        super().__init__("not_found", user_message, severity=Severity.WARN, recoverable=True, context=ctx)


class PersistenceError(CompanionError):
    def __init__(self, user_message: str = "Storage is unavailable.", **ctx: Any):
        super().__init__("persistence_failure", user_message, severity=Severity.ERROR, recoverable=True, context=ctx)


def format_issues(exc: Any) -> List[str]:
    """Flatten a pydantic ValidationError into short 'loc: msg' strings."""
    out: List[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc") or ()) or "value"
        out.append(f"{loc}: {err.get('msg', 'invalid')}")
    return out

"""
client/state.py — Request lifecycle state and the error taxonomy.

A controller holds exactly one RequestState at a time:

    Idle ──submit──> Pending ──> Succeeded(payload)
                        │
                        └──────> Failed(ErrorInfo)

ErrorInfo is the only thing the presentation layer ever sees about a failure.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    VALIDATION = "validation"   # caller-fixable input problem
    NETWORK = "network"         # transport failure or timeout
    SERVER = "server"           # remote service problem or bad payload
    UNKNOWN = "unknown"         # configuration or unexpected exception


@dataclass(frozen=True)
class ErrorInfo:
    kind: ErrorKind
    message: str                # User-facing, always non-empty
    retryable: bool
    status_code: int | None = None
    field_errors: dict[str, str] = field(default_factory=dict)


class RequestStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class RequestState:
    status: RequestStatus = RequestStatus.IDLE
    payload: Any = None
    error: ErrorInfo | None = None

    @classmethod
    def idle(cls) -> "RequestState":
        return cls()

    @classmethod
    def pending(cls) -> "RequestState":
        return cls(status=RequestStatus.PENDING)

    @classmethod
    def succeeded(cls, payload: Any) -> "RequestState":
        return cls(status=RequestStatus.SUCCEEDED, payload=payload)

    @classmethod
    def failed(cls, error: ErrorInfo) -> "RequestState":
        return cls(status=RequestStatus.FAILED, error=error)

    @property
    def is_idle(self) -> bool:
        return self.status is RequestStatus.IDLE

    @property
    def is_pending(self) -> bool:
        return self.status is RequestStatus.PENDING

    @property
    def is_succeeded(self) -> bool:
        return self.status is RequestStatus.SUCCEEDED

    @property
    def is_failed(self) -> bool:
        return self.status is RequestStatus.FAILED

    @property
    def can_retry(self) -> bool:
        return self.is_failed and self.error is not None and self.error.retryable

"""
Per-request-class lifecycle: idle → loading → done | error → idle.

One tracker per action class (scan, synthesis, mascot). `begin()` is the
re-entrancy guard: it refuses while a call of the same class is loading.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Phase(str, Enum):
    idle = "idle"
    loading = "loading"
    done = "done"
    error = "error"


class ErrorKind(str, Enum):
    auth = "auth"              # credentials missing / rejected, needs remediation
    generic = "generic"        # retryable by the user
    connection = "connection"  # analysis endpoint unreachable or refused


@dataclass
class RequestTracker:
    name: str
    phase: Phase = Phase.idle
    result: Any = None
    error_kind: ErrorKind | None = None
    error_message: str | None = None

    @property
    def loading(self) -> bool:
        return self.phase is Phase.loading

    def begin(self) -> bool:
        if self.loading:
            return False
        self.phase = Phase.loading
        self.result = None
        self.error_kind = None
        self.error_message = None
        return True

    def succeed(self, result: Any) -> None:
        self.phase = Phase.done
        self.result = result

    def fail(self, kind: ErrorKind, message: str = "") -> None:
        self.phase = Phase.error
        self.error_kind = kind
        self.error_message = message

    def reset(self) -> None:
        self.phase = Phase.idle
        self.result = None
        self.error_kind = None
        self.error_message = None

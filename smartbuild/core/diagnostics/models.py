from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

from smartbuild.core.errors import SmartBuildError


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


CAUSE_KIND = "Cause"


@dataclass(frozen=True)
class Diagnostic:
    kind: str
    message: str
    severity: Severity = Severity.ERROR
    causes: Tuple["Diagnostic", ...] = ()

    @staticmethod
    def from_exception(exc: BaseException, severity: Optional[Severity] = None) -> "Diagnostic":
        """Convert an exception into a Diagnostic, keeping nested causes in order."""
        if isinstance(exc, SmartBuildError):
            sev = severity or (Severity.WARNING if exc.recoverable else Severity.ERROR)
            return Diagnostic(
                kind=exc.kind,
                message=exc.message,
                severity=sev,
                causes=tuple(_cause(c, sev) for c in exc.causes),
            )
        return Diagnostic(
            kind=type(exc).__name__,
            message=str(exc) or type(exc).__name__,
            severity=severity or Severity.ERROR,
        )

    @staticmethod
    def warning(kind: str, message: str) -> "Diagnostic":
        return Diagnostic(kind=kind, message=message, severity=Severity.WARNING)

    @property
    def is_warning(self) -> bool:
        return self.severity == Severity.WARNING

    def walk(self, depth: int = 0) -> Iterator[Tuple[int, "Diagnostic"]]:
        """Pre-order traversal of this diagnostic and its causes."""
        yield depth, self
        for c in self.causes:
            yield from c.walk(depth + 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "severity": self.severity.value,
            "causes": [c.to_dict() for c in self.causes],
        }


def _cause(cause: Any, severity: Severity) -> Diagnostic:
    if isinstance(cause, BaseException):
        return Diagnostic.from_exception(cause, severity)
    if isinstance(cause, Diagnostic):
        return cause
    return Diagnostic(kind=CAUSE_KIND, message=str(cause), severity=severity)

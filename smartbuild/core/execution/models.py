from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from smartbuild.core.diagnostics.models import Diagnostic


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class BuildState(str, Enum):
    IDLE = "IDLE"
    DICTIONARY_LOADED = "DICTIONARY_LOADED"
    GRAPH_CONFIGURED = "GRAPH_CONFIGURED"
    SCANNED = "SCANNED"
    CONFIGURATION_BUILT = "CONFIGURATION_BUILT"
    BUILDING = "BUILDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


@dataclass
class BuildEvent:
    ts: str
    state: BuildState
    message: str = ""
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class BuildOutcome:
    """Result of one sandboxed backend invocation."""

    succeeded: bool
    output_directory: str
    artifacts: List[str] = field(default_factory=list)
    diagnostic: Optional[Diagnostic] = None
    warnings: List[Diagnostic] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "output_directory": self.output_directory,
            "artifacts": list(self.artifacts),
            "diagnostic": self.diagnostic.to_dict() if self.diagnostic else None,
            "warnings": [w.to_dict() for w in self.warnings],
        }


@dataclass
class BuildRun:
    run_id: str
    model: str
    dictionary: str
    state: BuildState = BuildState.IDLE
    created_ts: str = field(default_factory=_utc_now_iso)
    updated_ts: str = field(default_factory=_utc_now_iso)
    finished_ts: Optional[str] = None

    output_directory: Optional[str] = None
    artifacts: List[str] = field(default_factory=list)
    autofixed: int = 0
    diagnostic: Optional[Diagnostic] = None
    warnings: List[Diagnostic] = field(default_factory=list)
    events: List[BuildEvent] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == BuildState.SUCCEEDED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "model": self.model,
            "dictionary": self.dictionary,
            "state": self.state.value,
            "created_ts": self.created_ts,
            "updated_ts": self.updated_ts,
            "finished_ts": self.finished_ts,
            "output_directory": self.output_directory,
            "artifacts": list(self.artifacts),
            "autofixed": self.autofixed,
            "diagnostic": self.diagnostic.to_dict() if self.diagnostic else None,
            "warnings": [w.to_dict() for w in self.warnings],
            "events": [
                {
                    "ts": e.ts,
                    "state": e.state.value,
                    "message": e.message,
                    "data": e.data,
                }
                for e in self.events
            ],
        }

from __future__ import annotations

from typing import Any, Dict, Optional, Set, Tuple

from .models import BuildEvent, BuildRun, BuildState, _utc_now_iso


_ALLOWED: Set[Tuple[BuildState, BuildState]] = {
    (BuildState.IDLE, BuildState.DICTIONARY_LOADED),
    (BuildState.DICTIONARY_LOADED, BuildState.GRAPH_CONFIGURED),
    (BuildState.GRAPH_CONFIGURED, BuildState.SCANNED),
    (BuildState.SCANNED, BuildState.CONFIGURATION_BUILT),
    (BuildState.CONFIGURATION_BUILT, BuildState.BUILDING),
    (BuildState.BUILDING, BuildState.SUCCEEDED),

    # failure is reachable from every non-terminal state
    (BuildState.IDLE, BuildState.FAILED),
    (BuildState.DICTIONARY_LOADED, BuildState.FAILED),
    (BuildState.GRAPH_CONFIGURED, BuildState.FAILED),
    (BuildState.SCANNED, BuildState.FAILED),
    (BuildState.CONFIGURATION_BUILT, BuildState.FAILED),
    (BuildState.BUILDING, BuildState.FAILED),
}

_TERMINAL: Set[BuildState] = {
    BuildState.SUCCEEDED,
    BuildState.FAILED,
}


def is_terminal(state: BuildState) -> bool:
    return state in _TERMINAL


def can_transition(src: BuildState, dst: BuildState) -> bool:
    if src in _TERMINAL:
        return False
    return (src, dst) in _ALLOWED


def ensure_transition(src: BuildState, dst: BuildState) -> None:
    if not can_transition(src, dst):
        raise ValueError(f"Illegal transition: {src.value} -> {dst.value}")


def allowed_next(src: BuildState) -> Dict[str, bool]:
    out: Dict[str, bool] = {}
    for a, b in _ALLOWED:
        if a == src:
            out[b.value] = True
    return out


def transition(run: BuildRun, dst: BuildState, message: str = "", data: Optional[Dict[str, Any]] = None) -> BuildRun:
    ensure_transition(run.state, dst)
    now = _utc_now_iso()
    run.state = dst
    run.updated_ts = now
    if is_terminal(dst):
        run.finished_ts = now
    run.events.append(BuildEvent(ts=now, state=dst, message=message, data=dict(data or {})))
    return run

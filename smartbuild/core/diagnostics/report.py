from __future__ import annotations

import logging
from typing import Any, List, Optional, TextIO

from .models import CAUSE_KIND, Diagnostic

_log = logging.getLogger("smartbuild.report")

FALLBACK_REPORT = "Build finished; report unavailable"


def _line(d: Diagnostic) -> str:
    if d.kind == CAUSE_KIND:
        return d.message
    return f"[{d.kind}] {d.message}"


def _render(result: Any) -> str:
    lines: List[str] = []
    if result.succeeded:
        lines.append(f"Build succeeded. Generated code is in {result.output_directory}")
    else:
        diag: Optional[Diagnostic] = result.diagnostic
        if diag is None:
            lines.append("Build failed: no diagnostic recorded")
        else:
            lines.append(f"Build failed: {_line(diag)}")
            for depth, cause in diag.walk():
                if depth == 0:
                    continue
                lines.append(f"{'  ' * depth}- {_line(cause)}")

    for w in result.warnings or []:
        lines.append(f"Warning: {_line(w)}")
    return "\n".join(lines)


def render_report(result: Any) -> str:
    """Render one terminal report for a build run or outcome.

    `result` needs `succeeded`, `output_directory`, `diagnostic` and
    `warnings`. Never raises.
    """
    try:
        return _render(result)
    except Exception:
        _log.exception("Failed to render build report")
        return FALLBACK_REPORT


def emit_report(result: Any, stream: Optional[TextIO] = None) -> str:
    text = render_report(result)
    level = logging.INFO if getattr(result, "succeeded", False) else logging.ERROR
    _log.log(level, "%s", text)
    if stream is not None:
        try:
            stream.write(text + "\n")
            stream.flush()
        except (OSError, ValueError):
            _log.warning("Could not write build report to stream")
    return text

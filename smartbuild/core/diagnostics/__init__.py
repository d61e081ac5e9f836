from .models import Diagnostic, Severity
from .report import emit_report, render_report

__all__ = ["Diagnostic", "Severity", "emit_report", "render_report"]

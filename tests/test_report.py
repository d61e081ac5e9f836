import io
from types import SimpleNamespace

from smartbuild.core.diagnostics import Diagnostic
from smartbuild.core.diagnostics.report import FALLBACK_REPORT, emit_report, render_report
from smartbuild.core.errors import AtomicSubsystemMisconfigured, BackendBuildFailure, UnsupportedHardwareOption


def _result(**kw):
    base = dict(succeeded=True, output_directory="/work/build", diagnostic=None, warnings=[])
    base.update(kw)
    return SimpleNamespace(**base)


def test_success_names_output_directory():
    text = render_report(_result())
    assert text == "Build succeeded. Generated code is in /work/build"


def test_failure_lists_causes_in_order():
    inner = AtomicSubsystemMisconfigured("1 atomic subsystem problem(s)", causes=["M/A: no function name assigned"])
    err = BackendBuildFailure("code generation failed", causes=["first", inner, "last"])
    text = render_report(_result(succeeded=False, diagnostic=Diagnostic.from_exception(err)))

    assert text.splitlines() == [
        "Build failed: [BackendBuildFailure] code generation failed",
        "  - first",
        "  - [AtomicSubsystemMisconfigured] 1 atomic subsystem problem(s)",
        "    - M/A: no function name assigned",
        "  - last",
    ]


def test_warnings_follow_the_outcome():
    w = Diagnostic.from_exception(UnsupportedHardwareOption("Atmel->AVR", "numeric_widening"))
    text = render_report(_result(warnings=[w]))
    lines = text.splitlines()
    assert lines[0].startswith("Build succeeded")
    assert lines[1] == "Warning: [UnsupportedHardwareOption] Target device 'Atmel->AVR' does not support option 'numeric_widening'"


def test_render_never_raises():
    assert render_report(object()) == FALLBACK_REPORT
    assert render_report(_result(succeeded=False)) == "Build failed: no diagnostic recorded"


def test_emit_writes_once_to_stream():
    buf = io.StringIO()
    text = emit_report(_result(), buf)
    assert buf.getvalue() == text + "\n"

from __future__ import annotations

from collections import Counter
from typing import Dict, Optional

from prometheus_client import Counter as PromCounter

# HTTP-level counters
_REQUESTS = Counter()

# Build counters
_NAMED = Counter()

_PROM_REQUESTS = PromCounter(
    "smartbuild_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

_PROM_BUILDS = PromCounter(
    "smartbuild_builds_total",
    "Finished build runs",
    ["outcome"],
)

_PROM_AUTOFIXES = PromCounter(
    "smartbuild_autofixes_total",
    "Constant nodes whose output type was rewritten by the smart scan",
)


def reset_metrics() -> None:
    """
    Test helper: clears the in-process counters to avoid cross-test leakage.
    Prometheus counters are process-lifetime and are not reset.
    """
    _REQUESTS.clear()
    _NAMED.clear()


def inc_http(method: str, path: str, status: Optional[int] = None) -> None:
    m = (method or "UNKNOWN").upper()
    p = path or "/"
    s = status if status is not None else "unknown"

    _REQUESTS["requests_total"] += 1
    _REQUESTS[f"requests_{m}"] += 1
    _REQUESTS[f"path_{p}|{s}"] += 1
    _PROM_REQUESTS.labels(method=m, path=p, status=str(s)).inc()


def inc_named(name: str, value: int = 1) -> None:
    if not name:
        return
    _NAMED[name] += int(value)


def record_build(*, succeeded: bool, autofixed: int, warnings: int = 0) -> None:
    outcome = "succeeded" if succeeded else "failed"
    inc_named("builds_total")
    inc_named(f"builds_{outcome}")
    if autofixed:
        inc_named("autofixes_total", autofixed)
        _PROM_AUTOFIXES.inc(autofixed)
    if warnings:
        inc_named("build_warnings_total", warnings)
    _PROM_BUILDS.labels(outcome=outcome).inc()


def snapshot_requests() -> Dict[str, int]:
    return dict(_REQUESTS)


def snapshot_named() -> Dict[str, int]:
    return dict(_NAMED)

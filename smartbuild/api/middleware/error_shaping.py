from __future__ import annotations

import logging
import traceback
from typing import Callable, Dict, List

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from smartbuild.core.diagnostics.models import Diagnostic
from smartbuild.core.errors import (
    BuildAlreadyRunning,
    ConfigurationError,
    SmartBuildError,
    UnknownTargetDevice,
)

log = logging.getLogger("smartbuild.errors")

# Most specific first.
_STATUS: List[tuple] = [
    (UnknownTargetDevice, 404),
    (ConfigurationError, 400),
    (BuildAlreadyRunning, 409),
]


def status_for(exc: SmartBuildError) -> int:
    for cls, status in _STATUS:
        if isinstance(exc, cls):
            return status
    return 422


def _cause_lines(exc: SmartBuildError) -> List[str]:
    diag = Diagnostic.from_exception(exc)
    return [
        f"{'  ' * (depth - 1)}{d.message}"
        for depth, d in diag.walk()
        if depth > 0
    ]


class SafeErrorMiddleware(BaseHTTPMiddleware):
    """
    - Engine errors escaping a route become a structured 4xx:
      {"detail": {"code", "message", "causes"}}
    - Anything else is a 500 without a stack trace
    - Preserve request_id if present
    - Log traceback server-side
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except SmartBuildError as e:
            rid = getattr(request.state, "request_id", None) or request.headers.get("x-request-id")
            status = status_for(e)
            log.warning("%s rid=%s path=%s status=%d: %s", e.kind, rid, request.url.path, status, e.message)
            payload: Dict[str, object] = {
                "detail": {"code": e.kind, "message": e.message, "causes": _cause_lines(e)},
            }
            if rid:
                payload["request_id"] = rid
            return JSONResponse(status_code=status, content=payload)
        except Exception as e:
            rid = getattr(request.state, "request_id", None) or request.headers.get("x-request-id")
            log.error(
                "Unhandled error: %s rid=%s path=%s\n%s",
                str(e),
                rid,
                request.url.path,
                traceback.format_exc(),
            )
            payload = {"detail": "Internal Server Error"}
            if rid:
                payload["request_id"] = rid
            return JSONResponse(status_code=500, content=payload)

from __future__ import annotations

import os

from fastapi import APIRouter
from starlette.responses import JSONResponse

from smartbuild.api.project import project_root
from smartbuild.core.observability.metrics import inc_named

router = APIRouter()


@router.get("/health/live")
def live():
    inc_named("health_live")
    return {"status": "ok"}


@router.get("/health/ready")
def ready():
    """
    Ready when the project root exists and is writable (builds create
    the output directory and the audit log under it).
    """
    inc_named("health_ready")

    root = project_root()
    problems: list[str] = []
    if not root.is_dir():
        problems.append(f"missing_project_root:{root}")
    elif not os.access(root, os.W_OK):
        problems.append(f"project_root_not_writable:{root}")

    if problems:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "problems": problems},
        )

    return {"status": "ready"}

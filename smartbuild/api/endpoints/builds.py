from __future__ import annotations

import logging
import threading
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from smartbuild.api.project import project_root
from smartbuild.core.config.policy import load_policy
from smartbuild.core.errors import BuildAlreadyRunning
from smartbuild.core.pipeline import run_pipeline

router = APIRouter(prefix="/api/v1/builds", tags=["builds"])

logger = logging.getLogger(__name__)

# The sandbox switches the process working directory: one build at a time.
_BUILD_LOCK = threading.Lock()


class BuildRunRequest(BaseModel):
    model: Optional[str] = None
    dictionary: Optional[str] = None
    backend: Optional[str] = None


@router.post("/run")
def run_build(req: BuildRunRequest):
    root = project_root()

    policy = None
    if req.backend:
        # an unusable policy is a client error here, not a failed build
        policy = load_policy(root).model_copy(update={"backend": req.backend})

    if not _BUILD_LOCK.acquire(blocking=False):
        raise BuildAlreadyRunning("Another build is running.")
    try:
        result = run_pipeline(req.model, req.dictionary, project_root=root, policy=policy)
    finally:
        _BUILD_LOCK.release()

    logger.info("Build run %s finished in state %s", result.run.run_id, result.run.state.value)
    return {
        "run": result.run.to_dict(),
        "succeeded": result.succeeded,
        "report": result.report,
        "scan": result.scan.to_dict() if result.scan else None,
    }

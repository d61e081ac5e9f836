from __future__ import annotations

from fastapi import APIRouter

from smartbuild.api.project import project_root
from smartbuild.core.targets.registry import TargetRegistry


router = APIRouter(prefix="/api/v1/targets", tags=["targets"])


def _registry() -> TargetRegistry:
    return TargetRegistry(project_root())


@router.get("/")
def list_targets():
    return {
        "targets": _registry().list_names(),
    }


@router.get("/{name:path}")
def get_target(name: str):
    # UnknownTargetDevice is shaped into a 404 by SafeErrorMiddleware
    return _registry().require(name).model_dump()

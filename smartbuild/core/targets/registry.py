from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import ValidationError

from smartbuild.core.errors import UnknownTargetDevice

from .builtins import builtin_targets
from .models import TargetDevice

_log = logging.getLogger("smartbuild.targets")

_TEMPLATE_SUFFIXES = (".json", ".yaml", ".yml")


class TargetRegistry:
    """Loads deterministic target device profiles.

    Resolution order:
      1) Built-in devices (always present)
      2) Optional <project>/templates/targets/*.json|yaml (override by name)
    """

    def __init__(self, project_root: Optional[Path] = None):
        self.project_root = project_root
        self._targets: Dict[str, TargetDevice] = {}
        self._load_all()

    def _load_all(self) -> None:
        self._targets = {t.name: t for t in builtin_targets()}

        if self.project_root is None:
            return
        templates_dir = self.project_root / "templates" / "targets"
        if not templates_dir.exists():
            return

        for p in sorted(templates_dir.iterdir()):
            if p.suffix not in _TEMPLATE_SUFFIXES:
                continue
            try:
                data = yaml.safe_load(p.read_text(encoding="utf-8"))
                td = TargetDevice(**(data or {}))
            except (OSError, yaml.YAMLError, ValidationError, TypeError) as exc:
                # Optional files: skip, built-ins stay authoritative.
                _log.warning("Skipping invalid target template %s: %s", p, exc)
                continue
            self._targets[td.name] = td

    def list_names(self) -> list[str]:
        return sorted(self._targets.keys())

    def get(self, name: str) -> Optional[TargetDevice]:
        return self._targets.get(name)

    def require(self, name: str) -> TargetDevice:
        td = self.get(name)
        if td is None:
            raise UnknownTargetDevice(name, self.list_names())
        return td

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Sequence

from smartbuild.core.config.models import BuildConfiguration
from smartbuild.core.errors import BackendBuildFailure
from smartbuild.core.model.graph import ModelGraph

from .base import CodegenBackend

CONFIG_FILENAME = "build_config.json"
ERROR_PREFIX = "error:"


def _error_lines(text: str) -> List[str]:
    out: List[str] = []
    for line in (text or "").splitlines():
        s = line.strip()
        if s.lower().startswith(ERROR_PREFIX):
            out.append(s[len(ERROR_PREFIX):].strip())
    return out


class CommandBackend(CodegenBackend):
    """Runs an external generator command inside the sandbox.

    `{config}` and `{model}` in the argv are replaced with the written
    configuration path and the model name. The call blocks until the tool
    exits; there is no timeout.
    """

    name = "command"

    def __init__(self, command: Sequence[str]):
        self.command = list(command)

    def generate(self, config: BuildConfiguration, graph: ModelGraph) -> Dict[str, Any]:
        if not self.command:
            raise BackendBuildFailure("command backend requires backend_command in the build policy")

        cfg_path = Path(CONFIG_FILENAME).resolve()
        cfg_path.write_text(json.dumps(config.backend_payload(), indent=2, sort_keys=True) + "\n", encoding="utf-8")

        argv = [a.replace("{config}", str(cfg_path)).replace("{model}", config.model_name) for a in self.command]
        try:
            r = subprocess.run(argv, capture_output=True, text=True)
        except OSError as e:
            raise BackendBuildFailure(f"cannot start generator '{argv[0]}'", causes=[str(e)]) from e

        if r.returncode != 0:
            causes = _error_lines(r.stderr) + _error_lines(r.stdout)
            if not causes:
                tail = (r.stderr or r.stdout or "").strip().splitlines()
                causes = tail[-1:] if tail else []
            raise BackendBuildFailure(
                f"generator '{argv[0]}' exited with status {r.returncode}", causes=causes
            )

        artifacts = sorted(p.name for p in Path(".").iterdir() if p.is_file())
        return {"artifacts": artifacts, "meta": {"backend": self.name, "argv": argv}}

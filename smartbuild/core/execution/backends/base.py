from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from smartbuild.core.config.models import BuildConfiguration
from smartbuild.core.model.graph import ModelGraph


class CodegenBackend(ABC):
    name: str

    @abstractmethod
    def generate(self, config: BuildConfiguration, graph: ModelGraph) -> Dict[str, Any]:
        """Generate code into the current working directory (the sandbox).

        Returns backend metadata, typically {"artifacts": [...], "meta": {...}}.
        Raises BackendBuildFailure (with nested causes) when generation fails.
        Synchronous and not cancellable.
        """

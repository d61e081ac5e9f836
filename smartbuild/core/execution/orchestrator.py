from __future__ import annotations

import logging

from smartbuild.core.config.models import BuildConfiguration
from smartbuild.core.config.validation import validate_configuration
from smartbuild.core.diagnostics.models import Diagnostic
from smartbuild.core.errors import BuildAlreadyRunning
from smartbuild.core.model.graph import ModelGraph

from .backends.base import CodegenBackend
from .models import BuildOutcome
from .sandbox import prepare_output_directory, working_directory

_log = logging.getLogger("smartbuild.build")


class SandboxedBuildOrchestrator:
    """Runs the code-generation backend inside the output directory.

    - validate the configuration (nothing is touched on failure)
    - create the output directory
    - switch into it, invoke the backend, always switch back
    - turn any failure into a Diagnostic carrying the backend's nested causes

    One build per process at a time; a nested call fails with BuildAlreadyRunning.
    """

    _active = False

    def __init__(self, backend: CodegenBackend):
        self.backend = backend

    def build(self, config: BuildConfiguration, graph: ModelGraph) -> BuildOutcome:
        warnings = list(config.warnings)
        out_dir = config.output_directory

        if SandboxedBuildOrchestrator._active:
            err = BuildAlreadyRunning("another build is already running in this process")
            return BuildOutcome(
                succeeded=False,
                output_directory=out_dir,
                diagnostic=Diagnostic.from_exception(err),
                warnings=warnings,
            )

        SandboxedBuildOrchestrator._active = True
        try:
            validate_configuration(config)
            sandbox = prepare_output_directory(out_dir)
            _log.info("Building %s with backend=%s in %s", config.model_name, self.backend.name, sandbox)
            with working_directory(sandbox):
                result = self.backend.generate(config, graph) or {}
        except Exception as e:
            _log.error("Build of %s failed: %s", config.model_name, e)
            return BuildOutcome(
                succeeded=False,
                output_directory=out_dir,
                diagnostic=Diagnostic.from_exception(e),
                warnings=warnings,
            )
        finally:
            SandboxedBuildOrchestrator._active = False

        artifacts = [str(a) for a in result.get("artifacts") or []]
        _log.info("Build of %s succeeded: %d artifacts", config.model_name, len(artifacts))
        return BuildOutcome(
            succeeded=True,
            output_directory=str(sandbox),
            artifacts=artifacts,
            warnings=warnings,
        )

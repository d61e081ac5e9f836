from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO, Union
from uuid import uuid4

from smartbuild.core.config.builder import build_configuration
from smartbuild.core.config.models import BuildConfiguration
from smartbuild.core.config.policy import BuildPolicy, load_policy
from smartbuild.core.config.validation import validate_configuration
from smartbuild.core.diagnostics.models import Diagnostic
from smartbuild.core.diagnostics.report import emit_report
from smartbuild.core.execution.backends import CodegenBackend, create_backend
from smartbuild.core.execution.models import BuildRun, BuildState
from smartbuild.core.execution.orchestrator import SandboxedBuildOrchestrator
from smartbuild.core.execution.state_machine import is_terminal, transition
from smartbuild.core.model.yaml_graph import load_model
from smartbuild.core.observability import metrics
from smartbuild.core.observability.audit import audit_build
from smartbuild.core.scan.smart_scan import ScanReport, smart_scan
from smartbuild.core.symbols.loader import load_dictionary
from smartbuild.core.symbols.storage import resolve_storage_classes
from smartbuild.core.targets.registry import TargetRegistry

_log = logging.getLogger("smartbuild.pipeline")


@dataclass
class PipelineResult:
    run: BuildRun
    report: str
    scan: Optional[ScanReport] = None
    config: Optional[BuildConfiguration] = None

    @property
    def succeeded(self) -> bool:
        return self.run.succeeded

    @property
    def output_directory(self) -> Optional[str]:
        return self.run.output_directory

    @property
    def diagnostic(self) -> Optional[Diagnostic]:
        return self.run.diagnostic

    @property
    def warnings(self) -> List[Diagnostic]:
        return self.run.warnings


def _project_root(project_root: Optional[Union[str, Path]]) -> Path:
    if project_root is not None:
        return Path(project_root).resolve()
    env_root = os.getenv("SMARTBUILD_PROJECT_ROOT", "").strip()
    if env_root:
        return Path(env_root).resolve()
    return Path.cwd().resolve()


def _audit_enabled() -> bool:
    return (os.getenv("SMARTBUILD_AUDIT_ENABLED") or "1").strip().lower() in ("1", "true", "yes")


def run_pipeline(
    model_identifier: Optional[str] = None,
    dictionary_identifier: Optional[str] = None,
    *,
    project_root: Optional[Union[str, Path]] = None,
    policy: Optional[BuildPolicy] = None,
    policy_path: Optional[Union[str, Path]] = None,
    backend_name: Optional[str] = None,
    backend: Optional[CodegenBackend] = None,
    stream: Optional[TextIO] = None,
) -> PipelineResult:
    """Load, scan, configure and build one model, then emit exactly one report.

    Failures at any stage end the run in FAILED with a Diagnostic; nothing is
    raised to the caller. `policy_path` and `backend_name` are applied to the
    loaded policy, so an unreadable policy file is reported like any other
    failure.
    """
    root = _project_root(project_root)
    run = BuildRun(
        run_id=uuid4().hex,
        model=model_identifier or "",
        dictionary=dictionary_identifier or "",
    )
    scan: Optional[ScanReport] = None
    cfg: Optional[BuildConfiguration] = None

    try:
        policy = policy or load_policy(root, Path(policy_path) if policy_path else None)
        if backend_name:
            policy = policy.model_copy(update={"backend": backend_name})
        run.model = model_identifier or policy.default_model
        run.dictionary = dictionary_identifier or policy.default_dictionary

        table = load_dictionary(run.dictionary, policy.search_dirs(root, policy.dictionary_path))
        storage = resolve_storage_classes(table)
        derived = table.derive_inferred_types() if policy.derive_inferred_types else []
        transition(
            run,
            BuildState.DICTIONARY_LOADED,
            message=f"{len(table)} symbols loaded",
            data={"storage": storage.to_dict(), "derived_types": derived},
        )

        graph = load_model(run.model, policy.search_dirs(root, policy.model_path))
        transition(run, BuildState.GRAPH_CONFIGURED, message=f"model {graph.name} loaded")

        scan = smart_scan(graph, table)
        run.autofixed = scan.fixed_count
        transition(
            run,
            BuildState.SCANNED,
            message=f"{scan.fixed_count} node(s) auto-fixed",
            data=scan.to_dict(),
        )

        cfg = build_configuration(
            table=table,
            graph=graph,
            policy=policy,
            targets=TargetRegistry(root),
            project_root=root,
        )
        run.output_directory = cfg.output_directory
        run.warnings = list(cfg.warnings)
        validate_configuration(cfg)
        builder = backend or create_backend(policy.backend, command=policy.backend_command)
        transition(run, BuildState.CONFIGURATION_BUILT, message=f"target {cfg.target_device}")

        if policy.save_model and scan.fixed_count and getattr(graph, "source", None) is not None:
            graph.save()

        transition(run, BuildState.BUILDING, message=f"backend={builder.name}")
        outcome = SandboxedBuildOrchestrator(builder).build(cfg, graph)
        run.output_directory = outcome.output_directory
        run.artifacts = list(outcome.artifacts)
        if outcome.succeeded:
            transition(run, BuildState.SUCCEEDED, message="build succeeded")
        else:
            run.diagnostic = outcome.diagnostic
            transition(run, BuildState.FAILED, message="build failed")

    except Exception as e:
        _log.debug("Pipeline failed in state %s", run.state.value, exc_info=True)
        run.diagnostic = Diagnostic.from_exception(e)
        if not is_terminal(run.state):
            transition(run, BuildState.FAILED, message=str(e))

    metrics.record_build(succeeded=run.succeeded, autofixed=run.autofixed, warnings=len(run.warnings))
    if _audit_enabled():
        try:
            audit_build(run.to_dict(), root)
        except OSError as e:
            _log.warning("Could not write audit record: %s", e)

    report = emit_report(run, stream)
    return PipelineResult(run=run, report=report, scan=scan, config=cfg)

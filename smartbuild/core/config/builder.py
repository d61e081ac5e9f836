from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Optional

from smartbuild.core.diagnostics.models import Diagnostic
from smartbuild.core.errors import (
    ConfigurationError,
    SolverConfigurationError,
    UnsupportedHardwareOption,
)
from smartbuild.core.model.graph import ModelGraph, Packaging, SubsystemRef
from smartbuild.core.symbols.table import SymbolTable
from smartbuild.core.targets.models import NUMERIC_WIDENING
from smartbuild.core.targets.registry import TargetRegistry

from .layout import compute_storage_layout
from .models import FIXED_STEP, BuildConfiguration, SubsystemBinding
from .policy import BuildPolicy

_log = logging.getLogger("smartbuild.config")

_NON_IDENT = re.compile(r"[^0-9A-Za-z_]+")


def derive_function_name(subsystem_name: str) -> str:
    """C function name from a subsystem name; empty when nothing usable remains."""
    name = _NON_IDENT.sub("_", subsystem_name or "").strip("_")
    name = re.sub(r"_+", "_", name)
    if name and name[0].isdigit():
        name = f"fcn_{name}"
    return name


def _override_for(policy: BuildPolicy, ref: SubsystemRef) -> Optional[str]:
    for key in (ref.subsystem_id, ref.name):
        ov = policy.subsystems.get(key)
        if ov is not None and ov.function_name:
            return ov.function_name
    return None


def _bind_subsystems(graph: ModelGraph, policy: BuildPolicy) -> Dict[str, SubsystemBinding]:
    bindings: Dict[str, SubsystemBinding] = {}
    for ref in graph.atomic_subsystems():
        fn = _override_for(policy, ref) or ref.function_name or derive_function_name(ref.name)
        fn = (fn or "").strip()
        bindings[ref.subsystem_id] = SubsystemBinding(
            subsystem_id=ref.subsystem_id,
            is_atomic=True,
            packaging=Packaging.NONREUSABLE,
            function_name=fn,
        )
        if fn:
            graph.set_function_packaging(
                ref.subsystem_id, packaging=Packaging.NONREUSABLE, function_name=fn
            )
        else:
            _log.warning("Atomic subsystem %s has no usable function name", ref.subsystem_id)
    return bindings


def _check_step_size(raw: str) -> str:
    text = str(raw).strip()
    if text == "auto":
        return text
    try:
        step = float(text)
    except ValueError:
        step = 0.0
    if not step > 0.0:
        raise SolverConfigurationError(
            f"fixed_step_size must be 'auto' or a positive number, got '{raw}'"
        )
    return text


def _is_within(path: Path, parent: Path) -> bool:
    return path == parent or parent in path.parents


def _resolve_output_directory(policy: BuildPolicy, project_root: Path) -> Path:
    """The output directory is a fresh sandbox: never the project itself or a source directory."""
    out = Path(policy.output_directory)
    if not out.is_absolute():
        out = project_root / out
    resolved = out.resolve()
    root = project_root.resolve()
    if _is_within(root, resolved):
        raise ConfigurationError(
            f"output_directory must not be the project root or one of its parents ({project_root})"
        )

    clashes = []
    for label, entries in (("dictionary_path", policy.dictionary_path), ("model_path", policy.model_path)):
        for src in policy.search_dirs(project_root, entries):
            src = src.resolve()
            if src == root:
                continue
            if _is_within(resolved, src) or _is_within(src, resolved):
                clashes.append(f"{label}: {src}")
    if clashes:
        raise ConfigurationError(
            f"output_directory {resolved} overlaps a source directory", causes=clashes
        )
    return out


def build_configuration(
    *,
    table: SymbolTable,
    graph: ModelGraph,
    policy: BuildPolicy,
    targets: TargetRegistry,
    project_root: Path,
) -> BuildConfiguration:
    """Assemble the Build Configuration from the fixed policy plus model overrides.

    Solver mode is always fixed-step. Numeric widening follows the policy but
    degrades to disabled, with a warning Diagnostic, when the target device
    rejects it.
    """
    if policy.solver_mode != FIXED_STEP:
        raise SolverConfigurationError(
            f"solver mode '{policy.solver_mode}' is not supported; generated code requires {FIXED_STEP}"
        )

    device = targets.require(policy.target_device)
    warnings = []

    widening = bool(policy.numeric_widening)
    try:
        device.check_option(NUMERIC_WIDENING, widening)
    except UnsupportedHardwareOption as e:
        _log.warning("%s; disabling %s", e.message, NUMERIC_WIDENING)
        warnings.append(Diagnostic.from_exception(e))
        widening = False

    cfg = BuildConfiguration(
        model_name=graph.name,
        target_device=device.name,
        numeric_widening=widening,
        solver_mode=FIXED_STEP,
        fixed_step_size=_check_step_size(policy.fixed_step_size),
        output_directory=str(_resolve_output_directory(policy, project_root)),
        system_target=policy.system_target,
        language=policy.language,
        subsystem_bindings=_bind_subsystems(graph, policy),
        storage_layout=compute_storage_layout(table),
        warnings=warnings,
    )
    _log.info(
        "Configured %s for %s (widening=%s, %d atomic subsystems, %d interface symbols)",
        cfg.model_name,
        cfg.target_device,
        cfg.numeric_widening,
        len(cfg.subsystem_bindings),
        len(cfg.storage_layout),
    )
    return cfg

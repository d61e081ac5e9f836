from __future__ import annotations

from typing import List

from smartbuild.core.errors import (
    AtomicSubsystemMisconfigured,
    ConfigurationError,
    SolverConfigurationError,
)
from smartbuild.core.model.graph import Packaging
from smartbuild.core.symbols.models import StorageClass

from .models import FIXED_STEP, BuildConfiguration


def validate_configuration(cfg: BuildConfiguration) -> None:
    """Last gate before the backend runs. Raises ConfigurationError subclasses."""
    if cfg.solver_mode != FIXED_STEP:
        raise SolverConfigurationError(f"solver mode must be {FIXED_STEP}, got {cfg.solver_mode}")

    problems: List[str] = []
    for sid, binding in sorted(cfg.subsystem_bindings.items()):
        if not binding.is_atomic:
            continue
        if binding.packaging != Packaging.NONREUSABLE:
            got = binding.packaging.value if binding.packaging else "unset"
            problems.append(f"{sid}: packaging must be {Packaging.NONREUSABLE.value}, got {got}")
        if not (binding.function_name or "").strip():
            problems.append(f"{sid}: no function name assigned")
    if problems:
        raise AtomicSubsystemMisconfigured(
            f"{len(problems)} atomic subsystem problem(s)", causes=problems
        )

    leaked = [e.symbol for e in cfg.storage_layout if e.storage_class == StorageClass.AUTO]
    if leaked:
        raise ConfigurationError(
            "Local symbols must not appear in the generated interface", causes=leaked
        )

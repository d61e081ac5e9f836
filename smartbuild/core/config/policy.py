"""
Project build policy.

Read from `smartbuild.yaml` at the project root (or the file named by
SMARTBUILD_POLICY_FILE). Every key is optional:

    target_device: "ARM Compatible->ARM Cortex-M4"
    numeric_widening: true
    output_directory: build
    backend: local
    subsystems:
      Controller:
        function_name: controller_step

Environment overrides (applied last):
    SMARTBUILD_BACKEND     backend name
    SMARTBUILD_OUTPUT_DIR  output directory
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from smartbuild.core.errors import ConfigurationError
from smartbuild.core.targets.builtins import DEFAULT_TARGET

_log = logging.getLogger("smartbuild.config")

POLICY_FILENAME = "smartbuild.yaml"
DEFAULT_MODEL = "controller_model"
DEFAULT_DICTIONARY = "data_dictionary"


class SubsystemOverride(BaseModel):
    function_name: Optional[str] = None


class BuildPolicy(BaseModel):
    target_device: str = DEFAULT_TARGET
    numeric_widening: bool = True
    solver_mode: str = "FixedStep"
    fixed_step_size: str = "auto"
    output_directory: str = "build"
    system_target: str = "ert"
    language: str = "C"

    backend: str = "local"
    backend_command: List[str] = Field(default_factory=list)

    default_model: str = DEFAULT_MODEL
    default_dictionary: str = DEFAULT_DICTIONARY
    dictionary_path: List[str] = Field(default_factory=lambda: ["dictionaries", "."])
    model_path: List[str] = Field(default_factory=lambda: ["models", "."])

    save_model: bool = False
    derive_inferred_types: bool = True

    # keyed by subsystem path or bare subsystem name
    subsystems: Dict[str, SubsystemOverride] = Field(default_factory=dict)

    @field_validator("fixed_step_size", mode="before")
    @classmethod
    def _step_size_text(cls, v):
        # YAML reads `fixed_step_size: 0.01` as a float
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    def search_dirs(self, project_root: Path, entries: List[str]) -> List[Path]:
        return [(project_root / e) for e in entries]


def _resolve_path(project_root: Path, path: Optional[Path]) -> Path:
    if path is not None:
        return Path(path)
    env_path = os.getenv("SMARTBUILD_POLICY_FILE", "").strip()
    if env_path:
        return Path(env_path)
    return project_root / POLICY_FILENAME


def _apply_env(policy: BuildPolicy) -> BuildPolicy:
    updates = {}
    backend = os.getenv("SMARTBUILD_BACKEND", "").strip()
    if backend:
        updates["backend"] = backend
    out_dir = os.getenv("SMARTBUILD_OUTPUT_DIR", "").strip()
    if out_dir:
        updates["output_directory"] = out_dir
    return policy.model_copy(update=updates) if updates else policy


def load_policy(project_root: Path, path: Optional[Path] = None) -> BuildPolicy:
    """Load the project policy; defaults apply when no policy file exists.

    A policy file that exists but cannot be parsed or validated is a
    configuration error.
    """
    resolved = _resolve_path(project_root, path)
    if not resolved.exists():
        _log.debug("No policy file at %s; using defaults", resolved)
        return _apply_env(BuildPolicy())

    try:
        data = yaml.safe_load(resolved.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read policy file {resolved}", causes=[str(e)]) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Policy file {resolved} must be a mapping, got {type(data).__name__}"
        )

    try:
        policy = BuildPolicy(**data)
    except ValidationError as e:
        causes = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise ConfigurationError(f"Invalid policy file {resolved}", causes=causes) from e

    _log.info("Loaded build policy from %s", resolved)
    return _apply_env(policy)

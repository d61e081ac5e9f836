from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from smartbuild.core.model.graph import Packaging
from smartbuild.core.symbols.models import StorageClass, SymbolKind


SolverMode = Literal["FixedStep"]
Linkage = Literal["define", "extern"]

FIXED_STEP = "FixedStep"


class SubsystemBinding(BaseModel):
    subsystem_id: str
    is_atomic: bool = True
    packaging: Optional[Packaging] = None
    function_name: str = ""


class StorageLayoutEntry(BaseModel):
    symbol: str
    identifier: str
    kind: SymbolKind
    data_type: str
    storage_class: StorageClass
    linkage: Linkage
    # ImportedExternPointer symbols are accessed through a pointer the caller owns.
    pointer: bool = False
    value: Any = None
    unit: str = ""
    description: str = ""


class BuildConfiguration(BaseModel):
    model_name: str
    target_device: str
    numeric_widening: bool = True
    solver_mode: SolverMode = FIXED_STEP
    fixed_step_size: str = "auto"
    output_directory: str
    system_target: str = "ert"
    language: str = "C"

    subsystem_bindings: Dict[str, SubsystemBinding] = Field(default_factory=dict)
    storage_layout: List[StorageLayoutEntry] = Field(default_factory=list)

    # Warning Diagnostics collected while building; not part of the backend payload.
    warnings: List[Any] = Field(default_factory=list, exclude=True)

    def backend_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

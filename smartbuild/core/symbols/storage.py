from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from smartbuild.core.errors import UnknownStorageClass

from .models import StorageClass, SymbolKind, normalize_storage_class
from .table import SymbolTable

_log = logging.getLogger("smartbuild.storage")

# Parameters are tunable by default; signals stay function-local unless declared.
_DEFAULTS = {
    SymbolKind.PARAMETER: StorageClass.EXPORTED_GLOBAL,
    SymbolKind.SIGNAL: StorageClass.AUTO,
}


@dataclass
class StorageResolution:
    defaulted: List[str] = field(default_factory=list)
    validated: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"defaulted": list(self.defaulted), "validated": list(self.validated)}


def resolve_storage_classes(table: SymbolTable) -> StorageResolution:
    """Validate and normalize every symbol's storage class in place.

    Unset classes take the per-kind default; anything outside the recognized
    set raises UnknownStorageClass and is never coerced.
    """
    out = StorageResolution()
    for sym in table:
        raw = sym.storage_class
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            sym.storage_class = _DEFAULTS[sym.kind]
            out.defaulted.append(sym.name)
            continue

        sc = normalize_storage_class(raw)
        if sc is None:
            raise UnknownStorageClass(sym.name, str(raw))
        sym.storage_class = sc
        out.validated.append(sym.name)

    if out.defaulted:
        _log.debug("Defaulted storage class for: %s", ", ".join(out.defaulted))
    return out

from __future__ import annotations

from typing import List

from smartbuild.core.symbols.models import StorageClass
from smartbuild.core.symbols.table import SymbolTable

from .models import StorageLayoutEntry


def compute_storage_layout(table: SymbolTable) -> List[StorageLayoutEntry]:
    """Map resolved storage classes to the generated interface, sorted by symbol name.

    ExportedGlobal -> defined by the generated code.
    ImportedExternPointer -> referenced through an extern pointer, never defined.
    Auto -> function-local, left out of the interface.
    """
    entries: List[StorageLayoutEntry] = []
    for sym in sorted(table, key=lambda s: s.name):
        sc = sym.storage_class
        if not isinstance(sc, StorageClass):
            raise ValueError(f"storage class of '{sym.name}' is unresolved")
        if sc == StorageClass.AUTO:
            continue

        extern = sc == StorageClass.IMPORTED_EXTERN_POINTER
        entries.append(
            StorageLayoutEntry(
                symbol=sym.name,
                identifier=sym.identifier,
                kind=sym.kind,
                data_type=sym.data_type.value,
                storage_class=sc,
                linkage="extern" if extern else "define",
                pointer=extern,
                value=None if extern else sym.value,
                unit=sym.unit,
                description=sym.description,
            )
        )
    return entries

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class SymbolKind(str, Enum):
    PARAMETER = "Parameter"
    SIGNAL = "Signal"


class DataType(str, Enum):
    DOUBLE = "double"
    SINGLE = "single"
    INT8 = "int8"
    UINT8 = "uint8"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    BOOLEAN = "boolean"
    INFERRED = "Inferred"

    @property
    def is_concrete(self) -> bool:
        return self is not DataType.INFERRED


class StorageClass(str, Enum):
    EXPORTED_GLOBAL = "ExportedGlobal"
    IMPORTED_EXTERN_POINTER = "ImportedExternPointer"
    AUTO = "Auto"


_DATA_TYPE_ALIASES: Dict[str, DataType] = {
    "auto": DataType.INFERRED,
    "inferred": DataType.INFERRED,
    "float": DataType.SINGLE,
    "bool": DataType.BOOLEAN,
    "logical": DataType.BOOLEAN,
}

_STORAGE_CLASS_ALIASES: Dict[str, StorageClass] = {
    "local": StorageClass.AUTO,
    "auto": StorageClass.AUTO,
}

_INT32_MIN = -(2 ** 31)
_INT32_MAX = 2 ** 31 - 1


def parse_data_type(raw: Any) -> DataType:
    """Accept a DataType, its value, or a known alias. Raises ValueError otherwise."""
    if isinstance(raw, DataType):
        return raw
    if raw is None:
        return DataType.INFERRED
    text = str(raw).strip()
    try:
        return DataType(text)
    except ValueError:
        pass
    alias = _DATA_TYPE_ALIASES.get(text.lower())
    if alias is not None:
        return alias
    allowed = ", ".join(t.value for t in DataType)
    raise ValueError(f"unknown data type '{text}' (allowed: {allowed})")


def normalize_storage_class(raw: Any) -> Optional[StorageClass]:
    """Returns None when `raw` is not one of the recognized classifications."""
    if isinstance(raw, StorageClass):
        return raw
    text = str(raw).strip()
    try:
        return StorageClass(text)
    except ValueError:
        return _STORAGE_CLASS_ALIASES.get(text.lower())


def infer_data_type(value: Any) -> DataType:
    # bool first: bool is an int subclass
    if isinstance(value, bool):
        return DataType.BOOLEAN
    if isinstance(value, int):
        if _INT32_MIN <= value <= _INT32_MAX:
            return DataType.INT32
        return DataType.INT64
    if isinstance(value, float):
        return DataType.DOUBLE
    return DataType.INFERRED


@dataclass
class Symbol:
    name: str
    kind: SymbolKind
    data_type: DataType = DataType.INFERRED
    # Raw declared value until the storage resolver normalizes it.
    storage_class: Optional[Any] = None
    identifier_override: Optional[str] = None
    value: Any = None
    description: str = ""
    unit: str = ""

    @property
    def is_parameter(self) -> bool:
        return self.kind == SymbolKind.PARAMETER

    @property
    def is_signal(self) -> bool:
        return self.kind == SymbolKind.SIGNAL

    @property
    def identifier(self) -> str:
        """Name used in generated output."""
        return self.identifier_override or self.name

    def to_dict(self) -> Dict[str, Any]:
        sc = self.storage_class
        return {
            "name": self.name,
            "kind": self.kind.value,
            "data_type": self.data_type.value,
            "storage_class": sc.value if isinstance(sc, StorageClass) else sc,
            "identifier": self.identifier,
            "value": self.value,
            "description": self.description,
            "unit": self.unit,
        }

"""
Data dictionary loader.

A data dictionary is a Python script living on the project-local search path.
It is executed once, in a fresh namespace seeded with the declaration
vocabulary, and every top-level binding holding a Parameter or Signal
declaration becomes a Symbol named after the binding:

    Threshold = Parameter(192, data_type="int32")
    SensorIn = Signal(data_type="uint16", storage_class="ImportedExternPointer")
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from smartbuild.core.errors import DictionaryExecutionError, DictionaryNotFound

from .models import DataType, StorageClass, Symbol, SymbolKind, parse_data_type
from .table import SymbolTable

_log = logging.getLogger("smartbuild.dictionary")

DICTIONARY_SUFFIX = ".py"


@dataclass
class _Declaration:
    kind = SymbolKind.PARAMETER

    value: Any = None
    data_type: Any = DataType.INFERRED
    storage_class: Any = None
    identifier: Optional[str] = None
    description: str = ""
    unit: str = ""

    def __post_init__(self) -> None:
        # Unknown data types fail the script; storage classes are validated later.
        self.data_type = parse_data_type(self.data_type)

    def to_symbol(self, name: str) -> Symbol:
        return Symbol(
            name=name,
            kind=self.kind,
            data_type=self.data_type,
            storage_class=self.storage_class,
            identifier_override=self.identifier or None,
            value=self.value,
            description=self.description,
            unit=self.unit,
        )


class Parameter(_Declaration):
    kind = SymbolKind.PARAMETER


class Signal(_Declaration):
    kind = SymbolKind.SIGNAL

    def __init__(
        self,
        data_type: Any = DataType.INFERRED,
        storage_class: Any = None,
        identifier: Optional[str] = None,
        description: str = "",
        unit: str = "",
    ):
        # Signals are runtime values: no value slot in the declaration.
        super().__init__(
            value=None,
            data_type=data_type,
            storage_class=storage_class,
            identifier=identifier,
            description=description,
            unit=unit,
        )


def _vocabulary() -> Dict[str, Any]:
    ns: Dict[str, Any] = {
        "Parameter": Parameter,
        "Signal": Signal,
        "DataType": DataType,
        "StorageClass": StorageClass,
    }
    return ns


def resolve_dictionary(identifier: Union[str, Path], search_path: Sequence[Path]) -> Path:
    """Map a dictionary identifier to an existing script file."""
    raw = str(identifier).strip()
    if not raw:
        raise DictionaryNotFound(raw)

    direct = Path(raw)
    if direct.suffix == DICTIONARY_SUFFIX and direct.is_file():
        return direct

    stem = raw[: -len(DICTIONARY_SUFFIX)] if raw.endswith(DICTIONARY_SUFFIX) else raw
    searched: List[str] = []
    for d in search_path:
        candidate = Path(d) / f"{stem}{DICTIONARY_SUFFIX}"
        searched.append(str(candidate))
        if candidate.is_file():
            return candidate

    raise DictionaryNotFound(raw, searched)


def execute_dictionary(source: str, *, origin: str = "<dictionary>") -> SymbolTable:
    namespace = _vocabulary()
    namespace["__name__"] = "__smartbuild_dictionary__"
    namespace["__file__"] = origin
    reserved = set(namespace.keys())

    try:
        code = compile(source, origin, "exec")
        exec(code, namespace)
    except Exception as e:
        raise DictionaryExecutionError(origin, e) from e

    table = SymbolTable()
    for name, value in namespace.items():
        if name in reserved or name.startswith("_"):
            continue
        if isinstance(value, _Declaration):
            table.insert(value.to_symbol(name))
    return table


def load_dictionary(identifier: Union[str, Path], search_path: Iterable[Path]) -> SymbolTable:
    """Locate and execute a data dictionary, returning a populated SymbolTable.

    Raises:
        DictionaryNotFound: identifier does not resolve to a script.
        DictionaryExecutionError: the script raised while executing.
    """
    path = resolve_dictionary(identifier, list(search_path))
    _log.info("Loading data dictionary %s", path)
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DictionaryExecutionError(str(path), e) from e

    table = execute_dictionary(source, origin=str(path))
    _log.info(
        "Loaded %d symbols (%d parameters, %d signals) from %s",
        len(table),
        len(table.parameters()),
        len(table.signals()),
        path.name,
    )
    return table

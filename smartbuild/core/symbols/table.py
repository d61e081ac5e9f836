from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from smartbuild.core.errors import DuplicateSymbol

from .models import DataType, Symbol, SymbolKind, infer_data_type


class SymbolTable:
    """Every declared Parameter and Signal for one build run.

    Built once by the dictionary loader and passed explicitly through the
    pipeline. Iteration order is insertion order.
    """

    def __init__(self) -> None:
        self._symbols: Dict[str, Symbol] = {}

    def insert(self, symbol: Symbol) -> Symbol:
        if symbol.name in self._symbols:
            raise DuplicateSymbol(symbol.name)
        self._symbols[symbol.name] = symbol
        return symbol

    def lookup(self, name: str) -> Optional[Symbol]:
        return self._symbols.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(list(self._symbols.values()))

    def names(self) -> List[str]:
        return list(self._symbols.keys())

    def parameters(self) -> List[Symbol]:
        return [s for s in self._symbols.values() if s.kind == SymbolKind.PARAMETER]

    def signals(self) -> List[Symbol]:
        return [s for s in self._symbols.values() if s.kind == SymbolKind.SIGNAL]

    def derive_inferred_types(self) -> List[str]:
        """Give Inferred Parameters with a value a concrete type.

        Returns the names that changed. Signals and value-less Parameters keep
        the Inferred sentinel.
        """
        changed: List[str] = []
        for sym in self._symbols.values():
            if sym.kind != SymbolKind.PARAMETER or sym.data_type != DataType.INFERRED:
                continue
            if sym.value is None:
                continue
            derived = infer_data_type(sym.value)
            if derived.is_concrete:
                sym.data_type = derived
                changed.append(sym.name)
        return changed

    def to_dict(self) -> Dict[str, Dict]:
        return {name: sym.to_dict() for name, sym in self._symbols.items()}

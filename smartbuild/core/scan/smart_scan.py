from __future__ import annotations

import ast
import keyword
import logging
from dataclasses import dataclass, field
from typing import Any, Container, Dict, List

from smartbuild.core.model.graph import CONSTANT_KIND, ModelGraph
from smartbuild.core.symbols.models import SymbolKind
from smartbuild.core.symbols.table import SymbolTable

_log = logging.getLogger("smartbuild.scan")

# Literal spellings ast.literal_eval does not cover.
_LITERAL_WORDS = {"true", "false", "inf", "-inf", "nan", "pi", "eps"}


@dataclass(frozen=True)
class AutoFix:
    node_id: str
    symbol: str
    old_type: str
    new_type: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "node_id": self.node_id,
            "symbol": self.symbol,
            "old_type": self.old_type,
            "new_type": self.new_type,
        }


@dataclass
class ScanReport:
    scanned: int = 0
    literals: int = 0
    unresolved: int = 0
    signal_references: int = 0
    consistent: int = 0
    fixes: List[AutoFix] = field(default_factory=list)

    @property
    def fixed_count(self) -> int:
        return len(self.fixes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scanned": self.scanned,
            "literals": self.literals,
            "unresolved": self.unresolved,
            "signal_references": self.signal_references,
            "consistent": self.consistent,
            "fixed_count": self.fixed_count,
            "fixes": [f.to_dict() for f in self.fixes],
        }


def candidate_symbol_name(value: Any, declared: Container[str] = ()) -> str | None:
    """Return the value text when it can name a variable, else None.

    Numbers, booleans, quoted strings, vectors and arithmetic expressions are
    literals as far as a variable lookup goes. A name in `declared` is a
    variable even when it spells a literal word such as `pi`.
    """
    if value is None:
        return None
    text = str(value).strip()
    if text in declared:
        return text
    if not text or text.lower() in _LITERAL_WORDS:
        return None
    try:
        ast.literal_eval(text)
        return None
    except (ValueError, SyntaxError, TypeError, MemoryError, RecursionError):
        pass
    if not text.isidentifier() or keyword.iskeyword(text):
        return None
    return text


def smart_scan(graph: ModelGraph, table: SymbolTable) -> ScanReport:
    """Align constant node output types with their referenced Parameter types.

    Walks every constant node (nested subsystems included). A node whose value
    names a Parameter with a concrete data type gets that type written to its
    declared output type when they differ. Signals are never repaired, symbols
    are never modified, and a consistent model produces no writes.
    """
    report = ScanReport()

    for node in graph.iter_nodes(CONSTANT_KIND):
        report.scanned += 1

        name = candidate_symbol_name(node.value, table)
        if name is None:
            report.literals += 1
            continue

        sym = table.lookup(name)
        if sym is None:
            report.unresolved += 1
            continue

        if sym.kind != SymbolKind.PARAMETER:
            report.signal_references += 1
            _log.debug("Skipping %s: references signal %s", node.node_id, name)
            continue

        if not sym.data_type.is_concrete:
            report.unresolved += 1
            continue

        wanted = sym.data_type.value
        current = node.declared_output_type or ""
        if current == wanted:
            report.consistent += 1
            continue

        graph.set_output_type(node.node_id, wanted)
        report.fixes.append(AutoFix(node_id=node.node_id, symbol=name, old_type=current, new_type=wanted))
        _log.info("Auto-fixed %s: %s -> %s (symbol %s)", node.node_id, current, wanted, name)

    _log.info(
        "Smart scan complete: %d constant nodes, %d auto-fixed",
        report.scanned,
        report.fixed_count,
    )
    return report

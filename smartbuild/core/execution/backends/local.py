from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from smartbuild.core.config.models import BuildConfiguration, StorageLayoutEntry
from smartbuild.core.errors import BackendBuildFailure
from smartbuild.core.model.graph import ModelGraph

from .base import CodegenBackend


C_TYPES: Dict[str, str] = {
    "double": "double",
    "single": "float",
    "int8": "int8_t",
    "uint8": "uint8_t",
    "int16": "int16_t",
    "uint16": "uint16_t",
    "int32": "int32_t",
    "uint32": "uint32_t",
    "int64": "int64_t",
    "uint64": "uint64_t",
    "boolean": "bool",
    # unresolved types fall back to the model's default numeric type
    "Inferred": "double",
}

_WIDE_TYPES = {"int64", "uint64"}

# A name token not glued to a preceding digit or dot (skips 1e5, 0x1F, 2.5f).
_NAME_TOKEN = re.compile(r"(?<![\w.])[A-Za-z_]\w*")


def _c_literal(value: Any, data_type: str) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if data_type == "single" and isinstance(value, (int, float)):
        return f"{float(value)!r}F"
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, int):
        suffix = "U" if data_type.startswith("uint") else ""
        return f"{value}{suffix}"
    raise ValueError(f"unsupported initializer {value!r}")


def _array_shape(value: Any) -> Tuple[int, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    if not value:
        raise ValueError("empty array initializer")
    inner = [_array_shape(v) for v in value]
    if any(s != inner[0] for s in inner):
        raise ValueError("ragged array initializer")
    return (len(value),) + inner[0]


def _array_literal(value: Any, data_type: str) -> str:
    if isinstance(value, (list, tuple)):
        return "{" + ", ".join(_array_literal(v, data_type) for v in value) + "}"
    return _c_literal(value, data_type)


def _c_expression(text: str, identifiers: Dict[str, str]) -> Tuple[str, List[str]]:
    """Rewrite symbol names in a defining expression to their generated identifiers.

    Returns the parenthesized C expression and the referenced symbols in order
    of first use. Names that are not interface symbols are left untouched.
    """
    refs: List[str] = []

    def _sub(m: "re.Match[str]") -> str:
        name = m.group(0)
        ident = identifiers.get(name)
        if ident is None:
            return name
        if name not in refs:
            refs.append(name)
        return ident

    body = text.strip()
    if not body:
        raise ValueError("empty defining expression")
    return f"({_NAME_TOKEN.sub(_sub, body)})", refs


def _c_ident(name: str) -> str:
    return "".join(ch if ch.isalnum() else "_" for ch in name)


def _guard(name: str) -> str:
    return _c_ident(name).upper() + "_H"


@dataclass
class _Definition:
    entry: StorageLayoutEntry
    dims: str = ""
    initializer: Optional[str] = None
    # expression evaluated at startup because it reads other symbols
    runtime_expr: Optional[str] = None
    depends_on: Tuple[str, ...] = ()

    @property
    def declarator(self) -> str:
        return f"{C_TYPES[self.entry.data_type]} {self.entry.identifier}{self.dims}"


def _initialization_order(defs: Dict[str, _Definition]) -> List[str]:
    order: List[str] = []
    state: Dict[str, str] = {}

    def _visit(name: str, chain: List[str]) -> None:
        if state.get(name) == "done":
            return
        if state.get(name) == "active":
            cycle = chain[chain.index(name):] + [name]
            raise BackendBuildFailure(
                "circular parameter expressions", causes=[" -> ".join(cycle)]
            )
        state[name] = "active"
        for dep in defs[name].depends_on:
            if dep in defs:
                _visit(dep, chain + [name])
        state[name] = "done"
        order.append(name)

    for name in sorted(defs):
        _visit(name, [])
    return order


class LocalBackend(CodegenBackend):
    """In-process generator for the symbol interface and build manifest.

    Deterministic: identical configurations produce identical files.

    Parameter values become static initializers. Vectors and matrices become
    C arrays. A defining expression that only uses literals is a static
    initializer too; one that reads other symbols is assigned in
    `<model>_initialize_parameters()`, in dependency order.
    """

    name = "local"

    def _check_widening(self, config: BuildConfiguration) -> None:
        if config.numeric_widening:
            return
        wide = [
            f"{e.symbol}: {e.data_type} requires native 64-bit arithmetic on {config.target_device}"
            for e in config.storage_layout
            if e.data_type in _WIDE_TYPES
        ]
        if wide:
            raise BackendBuildFailure("64-bit symbols cannot be generated for this target", causes=wide)

    def _plan(self, config: BuildConfiguration) -> List[_Definition]:
        identifiers = {
            e.symbol: f"(*{e.identifier})" if e.pointer else e.identifier
            for e in config.storage_layout
        }
        planned: List[_Definition] = []
        problems: List[str] = []
        for e in config.storage_layout:
            if e.linkage != "define":
                continue
            d = _Definition(entry=e)
            try:
                if isinstance(e.value, str):
                    expr, refs = _c_expression(e.value, identifiers)
                    if refs:
                        d.runtime_expr = expr
                        d.depends_on = tuple(refs)
                    else:
                        d.initializer = expr
                elif isinstance(e.value, (list, tuple)):
                    shape = _array_shape(e.value)
                    d.dims = "".join(f"[{n}]" for n in shape)
                    d.initializer = _array_literal(e.value, e.data_type)
                elif e.value is not None:
                    d.initializer = _c_literal(e.value, e.data_type)
            except ValueError as exc:
                problems.append(f"{e.symbol}: {exc}")
                continue
            planned.append(d)
        if problems:
            raise BackendBuildFailure("cannot initialize parameters", causes=problems)
        return planned

    def _init_function(self, config: BuildConfiguration) -> str:
        return f"{_c_ident(config.model_name)}_initialize_parameters"

    def _header(self, config: BuildConfiguration, planned: List[_Definition], has_init: bool) -> str:
        guard = _guard(f"{config.model_name}_data")
        lines: List[str] = [
            f"/* {config.model_name}: generated data interface ({config.target_device}) */",
            f"#ifndef {guard}",
            f"#define {guard}",
            "",
            "#include <stdbool.h>",
            "#include <stdint.h>",
            "",
        ]
        imported = [e for e in config.storage_layout if e.linkage == "extern"]
        if planned:
            lines.append("/* Exported data */")
            lines.extend(f"extern {d.declarator};" for d in planned)
            lines.append("")
        if imported:
            lines.append("/* Imported data (owned by the caller) */")
            lines.extend(f"extern {C_TYPES[e.data_type]} *{e.identifier};" for e in imported)
            lines.append("")
        if has_init:
            lines.append("/* Call once before the first step */")
            lines.append(f"void {self._init_function(config)}(void);")
            lines.append("")
        fns = sorted(b.function_name for b in config.subsystem_bindings.values() if b.is_atomic)
        if fns:
            lines.append("/* Atomic subsystem entry points */")
            lines.extend(f"void {fn}(void);" for fn in fns)
            lines.append("")
        lines.append(f"#endif /* {guard} */")
        return "\n".join(lines) + "\n"

    def _source(self, config: BuildConfiguration, header_name: str, planned: List[_Definition]) -> str:
        lines = [
            f"/* {config.model_name}: generated data definitions */",
            f'#include "{header_name}"',
            "",
        ]
        for d in planned:
            if d.initializer is None:
                lines.append(f"{d.declarator};")
            else:
                lines.append(f"{d.declarator} = {d.initializer};")

        runtime = {d.entry.symbol: d for d in planned if d.runtime_expr is not None}
        if runtime:
            lines.extend(["", f"void {self._init_function(config)}(void)", "{"])
            for name in _initialization_order(runtime):
                d = runtime[name]
                lines.append(f"    {d.entry.identifier} = {d.runtime_expr};")
            lines.append("}")
        return "\n".join(lines) + "\n"

    def generate(self, config: BuildConfiguration, graph: ModelGraph) -> Dict[str, Any]:
        self._check_widening(config)
        planned = self._plan(config)
        has_init = any(d.runtime_expr is not None for d in planned)

        out = Path(".")
        header_name = f"{config.model_name}_data.h"
        source_name = f"{config.model_name}_data.c"

        files = {
            "build_config.json": json.dumps(config.backend_payload(), indent=2, sort_keys=True) + "\n",
            header_name: self._header(config, planned, has_init),
            source_name: self._source(config, header_name, planned),
        }
        for name, text in files.items():
            (out / name).write_text(text, encoding="utf-8")

        artifacts = sorted(files.keys()) + ["manifest.json"]
        manifest = {
            "model": config.model_name,
            "target_device": config.target_device,
            "backend": self.name,
            "artifacts": artifacts,
        }
        (out / "manifest.json").write_text(json.dumps(manifest, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        return {"artifacts": artifacts, "meta": {"backend": self.name}}

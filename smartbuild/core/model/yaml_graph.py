"""
File-backed model graph.

Models are YAML (or JSON) documents with nested `blocks`:

    name: FlowController
    blocks:
      - name: Limit
        type: Constant
        value: Threshold
        output_type: double
      - name: Controller
        type: SubSystem
        atomic: true
        function_name: controller_step   # optional override
        blocks: [...]

A node id is the block path from the model root, e.g.
`FlowController/Controller/Limit`.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

import yaml

from smartbuild.core.errors import ModelFormatError, ModelNotFound

from .graph import (
    CONSTANT_KIND,
    SUBSYSTEM_KIND,
    GraphNode,
    ModelGraph,
    Packaging,
    SubsystemRef,
)

_log = logging.getLogger("smartbuild.model")

MODEL_SUFFIXES = (".yaml", ".yml", ".json")
DEFAULT_OUTPUT_TYPE = "double"


def _packaging(raw: Any) -> Optional[Packaging]:
    if raw is None or raw == "":
        return None
    try:
        return Packaging(str(raw))
    except ValueError as e:
        raise ModelFormatError(f"unknown function packaging '{raw}'") from e


class YamlModelGraph(ModelGraph):
    def __init__(self, data: Dict[str, Any], *, source: Optional[Path] = None):
        if not isinstance(data, dict):
            raise ModelFormatError("model document must be a mapping")
        self._data = data
        self.source = source
        self.name = str(data.get("name") or (source.stem if source else "model"))
        self.dirty = False

        # node_id -> (kind, block dict); insertion order is document order
        self._blocks: Dict[str, Dict[str, Any]] = {}
        self._index(data.get("blocks") or [], self.name)

    def _index(self, blocks: Any, parent: str) -> None:
        if not isinstance(blocks, list):
            raise ModelFormatError(f"'blocks' under {parent} must be a list")
        for blk in blocks:
            if not isinstance(blk, dict) or not blk.get("name"):
                raise ModelFormatError(f"every block under {parent} needs a name")
            node_id = f"{parent}/{blk['name']}"
            if node_id in self._blocks:
                raise ModelFormatError(f"duplicate block path {node_id}")
            self._blocks[node_id] = blk
            if blk.get("type") == SUBSYSTEM_KIND:
                self._index(blk.get("blocks") or [], node_id)

    def _block(self, node_id: str) -> Dict[str, Any]:
        blk = self._blocks.get(node_id)
        if blk is None:
            raise KeyError(f"no block at path {node_id}")
        return blk

    def _subsystem(self, subsystem_id: str) -> Dict[str, Any]:
        blk = self._block(subsystem_id)
        if blk.get("type") != SUBSYSTEM_KIND:
            raise KeyError(f"block {subsystem_id} is not a subsystem")
        return blk

    # ------------------------------------------------------------------
    # ModelGraph
    # ------------------------------------------------------------------
    def iter_nodes(self, kind: Optional[str] = None) -> Iterator[GraphNode]:
        for node_id, blk in self._blocks.items():
            blk_kind = str(blk.get("type") or "")
            if kind is not None and blk_kind != kind:
                continue
            value = blk.get("value")
            out_type = blk.get("output_type")
            if blk_kind == CONSTANT_KIND and out_type is None:
                out_type = DEFAULT_OUTPUT_TYPE
            yield GraphNode(
                node_id=node_id,
                node_kind=blk_kind,
                value=None if value is None else str(value),
                declared_output_type=None if out_type is None else str(out_type),
            )

    def get_output_type(self, node_id: str) -> Optional[str]:
        blk = self._block(node_id)
        out_type = blk.get("output_type")
        if out_type is None and blk.get("type") == CONSTANT_KIND:
            return DEFAULT_OUTPUT_TYPE
        return out_type

    def set_output_type(self, node_id: str, data_type: str) -> None:
        blk = self._block(node_id)
        if blk.get("output_type") != data_type:
            blk["output_type"] = data_type
            self.dirty = True

    def _ref(self, node_id: str, blk: Dict[str, Any]) -> SubsystemRef:
        fn = blk.get("function_name")
        return SubsystemRef(
            subsystem_id=node_id,
            name=str(blk["name"]),
            is_atomic=bool(blk.get("atomic", False)),
            function_name=None if fn is None else str(fn),
            packaging=_packaging(blk.get("packaging")),
        )

    def atomic_subsystems(self) -> List[SubsystemRef]:
        return [
            self._ref(node_id, blk)
            for node_id, blk in self._blocks.items()
            if blk.get("type") == SUBSYSTEM_KIND and blk.get("atomic")
        ]

    def get_function_packaging(self, subsystem_id: str) -> SubsystemRef:
        return self._ref(subsystem_id, self._subsystem(subsystem_id))

    def set_function_packaging(
        self, subsystem_id: str, *, packaging: Packaging, function_name: str
    ) -> None:
        blk = self._subsystem(subsystem_id)
        if blk.get("packaging") != packaging.value or blk.get("function_name") != function_name:
            blk["packaging"] = packaging.value
            blk["function_name"] = function_name
            self.dirty = True

    # ------------------------------------------------------------------
    # persistence
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return self._data

    def save(self, path: Optional[Path] = None) -> Path:
        target = path or self.source
        if target is None:
            raise ValueError("model has no source path; pass one explicitly")
        text = yaml.safe_dump(self._data, sort_keys=False)
        target.write_text(text, encoding="utf-8")
        self.dirty = False
        _log.info("Saved model %s to %s", self.name, target)
        return target


def resolve_model(identifier: Union[str, Path], search_path: Sequence[Path]) -> Path:
    raw = str(identifier).strip()
    if not raw:
        raise ModelNotFound(raw)

    direct = Path(raw)
    if direct.suffix in MODEL_SUFFIXES and direct.is_file():
        return direct

    searched: List[str] = []
    for d in search_path:
        for suffix in MODEL_SUFFIXES:
            candidate = Path(d) / f"{raw}{suffix}"
            searched.append(str(candidate))
            if candidate.is_file():
                return candidate
    raise ModelNotFound(raw, searched)


def load_model(identifier: Union[str, Path], search_path: Sequence[Path]) -> YamlModelGraph:
    path = resolve_model(identifier, search_path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ModelFormatError(f"cannot parse model {path}: {e}") from e
    graph = YamlModelGraph(data or {}, source=path)
    _log.info("Loaded model %s (%d blocks) from %s", graph.name, len(graph._blocks), path)
    return graph

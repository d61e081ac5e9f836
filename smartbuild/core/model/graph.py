from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional


CONSTANT_KIND = "Constant"
SUBSYSTEM_KIND = "SubSystem"


class Packaging(str, Enum):
    NONREUSABLE = "Nonreusable"
    REUSABLE = "Reusable"
    INLINE = "Inline"


@dataclass(frozen=True)
class GraphNode:
    node_id: str
    node_kind: str
    value: Optional[str] = None
    declared_output_type: Optional[str] = None


@dataclass(frozen=True)
class SubsystemRef:
    subsystem_id: str
    name: str
    is_atomic: bool
    function_name: Optional[str] = None
    packaging: Optional[Packaging] = None


class ModelGraph(ABC):
    """Queryable view of the external dataflow model.

    The engine reads and patches the model only through this interface: node
    enumeration (nested subsystems included), output type read/write, atomic
    subsystem enumeration and function packaging read/write.
    """

    name: str

    @abstractmethod
    def iter_nodes(self, kind: Optional[str] = None) -> Iterator[GraphNode]:
        """Depth-first, document order. `kind=None` yields every node."""

    @abstractmethod
    def get_output_type(self, node_id: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_output_type(self, node_id: str, data_type: str) -> None:
        ...

    @abstractmethod
    def atomic_subsystems(self) -> List[SubsystemRef]:
        ...

    @abstractmethod
    def get_function_packaging(self, subsystem_id: str) -> SubsystemRef:
        ...

    @abstractmethod
    def set_function_packaging(
        self, subsystem_id: str, *, packaging: Packaging, function_name: str
    ) -> None:
        ...

    def constant_nodes(self) -> List[GraphNode]:
        return list(self.iter_nodes(CONSTANT_KIND))

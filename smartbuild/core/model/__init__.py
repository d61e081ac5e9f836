from .graph import CONSTANT_KIND, SUBSYSTEM_KIND, GraphNode, ModelGraph, Packaging, SubsystemRef
from .yaml_graph import YamlModelGraph, load_model, resolve_model

__all__ = [
    "CONSTANT_KIND",
    "SUBSYSTEM_KIND",
    "GraphNode",
    "ModelGraph",
    "Packaging",
    "SubsystemRef",
    "YamlModelGraph",
    "load_model",
    "resolve_model",
]

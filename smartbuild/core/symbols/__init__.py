from .models import DataType, StorageClass, Symbol, SymbolKind
from .table import SymbolTable
from .loader import Parameter, Signal, load_dictionary, resolve_dictionary
from .storage import StorageResolution, resolve_storage_classes

__all__ = [
    "DataType",
    "StorageClass",
    "Symbol",
    "SymbolKind",
    "SymbolTable",
    "Parameter",
    "Signal",
    "load_dictionary",
    "resolve_dictionary",
    "StorageResolution",
    "resolve_storage_classes",
]

from .models import BuildConfiguration, StorageLayoutEntry, SubsystemBinding
from .policy import BuildPolicy, SubsystemOverride, load_policy
from .builder import build_configuration, derive_function_name
from .layout import compute_storage_layout
from .validation import validate_configuration

__all__ = [
    "BuildConfiguration",
    "StorageLayoutEntry",
    "SubsystemBinding",
    "BuildPolicy",
    "SubsystemOverride",
    "load_policy",
    "build_configuration",
    "derive_function_name",
    "compute_storage_layout",
    "validate_configuration",
]

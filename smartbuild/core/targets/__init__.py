from .models import NUMERIC_WIDENING, TargetDevice, WordSizes
from .builtins import DEFAULT_TARGET, builtin_targets
from .registry import TargetRegistry

__all__ = [
    "NUMERIC_WIDENING",
    "TargetDevice",
    "WordSizes",
    "DEFAULT_TARGET",
    "builtin_targets",
    "TargetRegistry",
]

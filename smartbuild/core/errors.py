from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Union


Cause = Union[str, "SmartBuildError"]


class SmartBuildError(Exception):
    """Base class for every engine failure.

    `causes` is an ordered list of nested failure reasons. Each entry is either
    a plain message or another SmartBuildError (which may carry its own causes).
    """

    kind: str = "SmartBuildError"
    recoverable: bool = False

    def __init__(self, message: str, *, causes: Optional[Iterable[Cause]] = None):
        super().__init__(message)
        self.message = message
        self.causes: List[Cause] = list(causes or [])


class ConfigurationError(SmartBuildError):
    """Raised before any backend invocation; no partial builds."""

    kind = "ConfigurationError"


# ---------------------------------------------------------------------------
# Dictionary / symbols
# ---------------------------------------------------------------------------
class DictionaryNotFound(SmartBuildError):
    kind = "DictionaryNotFound"

    def __init__(self, identifier: str, searched: Sequence[str] = ()):
        msg = f"Data dictionary '{identifier}' not found"
        if searched:
            msg += f" (searched: {', '.join(searched)})"
        super().__init__(msg)
        self.identifier = identifier
        self.searched = list(searched)


class DictionaryExecutionError(SmartBuildError):
    kind = "DictionaryExecutionError"

    def __init__(self, identifier: str, original: BaseException):
        super().__init__(
            f"Data dictionary '{identifier}' failed to execute",
            causes=[f"{type(original).__name__}: {original}"],
        )
        self.identifier = identifier
        self.original = original


class DuplicateSymbol(SmartBuildError):
    kind = "DuplicateSymbol"

    def __init__(self, name: str):
        super().__init__(f"Symbol '{name}' is already declared")
        self.name = name


class UnknownStorageClass(ConfigurationError):
    kind = "UnknownStorageClass"

    def __init__(self, symbol_name: str, storage_class: str):
        super().__init__(
            f"Symbol '{symbol_name}' declares unknown storage class '{storage_class}'"
        )
        self.symbol_name = symbol_name
        self.storage_class = storage_class


# ---------------------------------------------------------------------------
# Model graph
# ---------------------------------------------------------------------------
class ModelNotFound(SmartBuildError):
    kind = "ModelNotFound"

    def __init__(self, identifier: str, searched: Sequence[str] = ()):
        msg = f"Model '{identifier}' not found"
        if searched:
            msg += f" (searched: {', '.join(searched)})"
        super().__init__(msg)
        self.identifier = identifier
        self.searched = list(searched)


class ModelFormatError(SmartBuildError):
    kind = "ModelFormatError"


# ---------------------------------------------------------------------------
# Build configuration
# ---------------------------------------------------------------------------
class UnsupportedHardwareOption(SmartBuildError):
    """The target device rejected a configuration option.

    The only recoverable condition: the builder downgrades the option and
    records a warning instead of aborting.
    """

    kind = "UnsupportedHardwareOption"
    recoverable = True

    def __init__(self, device: str, option: str, reason: str = ""):
        msg = f"Target device '{device}' does not support option '{option}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
        self.device = device
        self.option = option


class UnknownTargetDevice(ConfigurationError):
    kind = "UnknownTargetDevice"

    def __init__(self, name: str, known: Sequence[str] = ()):
        msg = f"Unknown target device '{name}'"
        if known:
            msg += f" (known: {', '.join(known)})"
        super().__init__(msg)
        self.name = name


class SolverConfigurationError(ConfigurationError):
    kind = "SolverConfigurationError"


class AtomicSubsystemMisconfigured(ConfigurationError):
    kind = "AtomicSubsystemMisconfigured"


# ---------------------------------------------------------------------------
# Build execution
# ---------------------------------------------------------------------------
class BackendBuildFailure(SmartBuildError):
    kind = "BackendBuildFailure"


class BuildAlreadyRunning(SmartBuildError):
    kind = "BuildAlreadyRunning"

from typing import Optional, Sequence

from .base import CodegenBackend
from .command import CommandBackend
from .local import LocalBackend

BACKENDS = {
    "local": LocalBackend(),
}


def create_backend(name: str, *, command: Optional[Sequence[str]] = None) -> CodegenBackend:
    if name == "command":
        return CommandBackend(command or [])
    backend = BACKENDS.get(name)
    if backend is None:
        raise ValueError(f"Unsupported backend: {name}")
    return backend


__all__ = ["BACKENDS", "CodegenBackend", "CommandBackend", "LocalBackend", "create_backend"]

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

_log = logging.getLogger("smartbuild.build")


def prepare_output_directory(path: Union[str, Path]) -> Path:
    out = Path(path).resolve()
    out.mkdir(parents=True, exist_ok=True)
    return out


@contextmanager
def working_directory(path: Union[str, Path]) -> Iterator[Path]:
    """Switch the process working directory for the duration of the block.

    The previous directory is restored on every exit path, including
    exceptions raised inside the block.
    """
    previous = os.getcwd()
    target = Path(path)
    os.chdir(target)
    _log.debug("Entered sandbox %s", target)
    try:
        yield target
    finally:
        os.chdir(previous)
        _log.debug("Restored working directory %s", previous)

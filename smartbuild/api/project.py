from __future__ import annotations

import os
from pathlib import Path

# Captured at import: a running build moves the process cwd into its sandbox.
STARTUP_ROOT = Path.cwd().resolve()


def project_root() -> Path:
    """Project directory served by the API.

    SMARTBUILD_PROJECT_ROOT wins; relative values are taken from the
    directory the server started in, never from the current cwd.
    """
    env = os.getenv("SMARTBUILD_PROJECT_ROOT", "").strip()
    if not env:
        return STARTUP_ROOT
    return (STARTUP_ROOT / env).resolve()

from .models import BuildEvent, BuildOutcome, BuildRun, BuildState
from .orchestrator import SandboxedBuildOrchestrator
from .sandbox import prepare_output_directory, working_directory

__all__ = [
    "BuildEvent",
    "BuildOutcome",
    "BuildRun",
    "BuildState",
    "SandboxedBuildOrchestrator",
    "prepare_output_directory",
    "working_directory",
]

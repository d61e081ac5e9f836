#!/usr/bin/env python3
"""
CLI entry point: python -m smartbuild [model] [dictionary]

Loads the data dictionary, reconciles the model against it, configures the
build for the policy's target device and runs the code generator in the
sandboxed output directory. Prints one report; exit code 0 on success.
"""

import argparse
import logging
import sys
from pathlib import Path

from smartbuild.core.pipeline import run_pipeline


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # The report is the CLI's output; keep it on stdout and out of the log stream.
    report = logging.getLogger("smartbuild.report")
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    report.addHandler(handler)
    report.setLevel(logging.INFO)
    report.propagate = False


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="smartbuild",
        description="Configure and run a sandboxed code-generation build",
    )
    parser.add_argument("model", nargs="?", default=None, help="Model identifier (default from policy)")
    parser.add_argument("dictionary", nargs="?", default=None, help="Data dictionary identifier (default from policy)")
    parser.add_argument("--project-root", type=Path, default=None, help="Project directory (default: cwd)")
    parser.add_argument("--policy", type=Path, default=None, help="Policy file (default: <project>/smartbuild.yaml)")
    parser.add_argument("--backend", default=None, help="Override the policy backend (local, command)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline progress")
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    root = (args.project_root or Path.cwd()).resolve()
    result = run_pipeline(
        args.model,
        args.dictionary,
        project_root=root,
        policy_path=args.policy,
        backend_name=args.backend,
    )
    return 0 if result.succeeded else 1


if __name__ == "__main__":
    sys.exit(main())

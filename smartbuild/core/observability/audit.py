import json
import logging
import logging.handlers
import time
from pathlib import Path
from typing import Any, Dict


AUDIT_RELATIVE_PATH = Path(".smartbuild") / "audit.log"

# 10MB max per file, 5 backups
_MAX_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5

_handler_cache: Dict[str, logging.Handler] = {}


def _now_ms() -> int:
    return int(time.time() * 1000)


def _get_rotating_handler(audit_path: Path) -> logging.Handler:
    key = str(audit_path.resolve())
    if key not in _handler_cache:
        audit_path.parent.mkdir(parents=True, exist_ok=True)
        h = logging.handlers.RotatingFileHandler(
            str(audit_path),
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        h.setFormatter(logging.Formatter("%(message)s"))
        _handler_cache[key] = h
    return _handler_cache[key]


def close_audit_handlers() -> None:
    for h in _handler_cache.values():
        h.close()
    _handler_cache.clear()


def audit_build(run: Dict[str, Any], project_root: Path) -> Path:
    """Append one JSON line describing a finished build run."""
    audit_path = project_root / AUDIT_RELATIVE_PATH
    record: Dict[str, Any] = {
        "ts_ms": _now_ms(),
        "type": "build_finished",
        "run_id": run.get("run_id"),
        "model": run.get("model"),
        "dictionary": run.get("dictionary"),
        "state": run.get("state"),
        "autofixed": run.get("autofixed"),
        "output_directory": run.get("output_directory"),
        "diagnostic": run.get("diagnostic"),
        "warnings": run.get("warnings"),
    }
    line = json.dumps(record, separators=(",", ":"), ensure_ascii=False)

    handler = _get_rotating_handler(audit_path)
    log_record = logging.LogRecord(
        name="smartbuild.audit",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=line,
        args=(),
        exc_info=None,
    )
    handler.emit(log_record)
    handler.flush()
    return audit_path

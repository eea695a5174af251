"""Persist sweep reports as JSON."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import os
from pathlib import Path
import tempfile
from typing import Any

from seekcheck.harness.executor import SweepReport


def atomic_write_json(path: Path, payload: Any, indent: int = 2) -> None:
    """Write JSON atomically using a temp file + rename."""

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(json.dumps(payload, indent=indent, sort_keys=True) + "\n")
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)


def write_sweep_report(path: Path, report: SweepReport, checks: dict[str, bool] | None = None) -> None:
    """Write a sweep report, plus smoke check outcomes, to `path`."""

    payload = report.to_dict()
    payload["schema"] = "seekcheck-report/v1"
    payload["written_at"] = datetime.now(timezone.utc).isoformat()
    payload["checks"] = dict(checks or {})
    atomic_write_json(path, payload)


def read_sweep_report(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)

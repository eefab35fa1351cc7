from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Sequence

import yaml

from .pipeline import PipelineResult, ProvisionResult, Status

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def build_report(result: PipelineResult, **extra: Any) -> Dict[str, Any]:
    counts = {s.value: 0 for s in Status}
    for r in result.results:
        counts[r.status.value] += 1
    report: Dict[str, Any] = {
        "ok": result.ok,
        "declared_steps": result.declared,
        "attempted_steps": len(result.results),
        "counts": counts,
        "results": [r.as_dict() for r in result.results],
    }
    report.update(extra)
    return report


def save_report(path: str, report: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    fmt = _detect_format(p)
    if fmt in {"yaml", "yml"}:
        p.write_text(yaml.safe_dump(report, sort_keys=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(report, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    logger.info("Run report written to %s", p)


def log_summary(results: Sequence[ProvisionResult]) -> None:
    logger.info("Run summary:")
    for r in results:
        if r.status is Status.FAILED:
            logger.error("  %-26s %-8s %s", r.step_name, r.status.value, r.detail.splitlines()[0] if r.detail else "")
        else:
            logger.info("  %-26s %-8s %s", r.step_name, r.status.value, r.detail)

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import Any

from perfdiff.model import LighthouseReport, Metrics

ROOT = Path(__file__).resolve().parents[1]


def report_payload(
    url: str,
    fetch_time: str,
    requested_url: str | None = None,
    performance: float | None = 0.9,
    audits: dict[str, Any] | None = None,
    **categories: float | None,
) -> dict[str, Any]:
    cats: dict[str, Any] = {}
    if performance is not None:
        cats["performance"] = {"id": "performance", "title": "Performance", "score": performance}
    for key, score in categories.items():
        cat_id = key.replace("_", "-")
        cats[cat_id] = {"id": cat_id, "title": cat_id, "score": score}
    payload: dict[str, Any] = {
        "categories": cats,
        "audits": audits or {},
        "finalUrl": url,
        "fetchTime": fetch_time,
    }
    if requested_url is not None:
        payload["requestedUrl"] = requested_url
    return payload


def make_report(url: str, fetch_time: str, requested_url: str | None = None, name: str | None = None, **kwargs: Any) -> LighthouseReport:
    source = Path(name) if name else None
    return LighthouseReport.from_json(report_payload(url, fetch_time, requested_url, **kwargs), source=source)


def vital_audit(audit_id: str, value: float) -> dict[str, Any]:
    return {"id": audit_id, "title": audit_id, "description": audit_id, "score": 0.9, "numericValue": value}


def write_report(reports_dir: Path, name: str, payload: dict[str, Any] | str) -> Path:
    reports_dir.mkdir(parents=True, exist_ok=True)
    path = reports_dir / name
    text = payload if isinstance(payload, str) else json.dumps(payload)
    path.write_text(text, encoding="utf-8")
    return path


def metrics(scores: dict[str, float] | None = None, vitals: dict[str, float] | None = None) -> Metrics:
    return Metrics(scores=dict(scores or {}), core_web_vitals=dict(vitals or {}))


def run_perfdiff(*args: str, cwd: Path) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    env["PYTHONPATH"] = str(ROOT / "src")
    env["RUN_ID"] = "pytest-run"
    env.pop("LHCI_BASELINE_STRATEGY", None)
    return subprocess.run(
        [sys.executable, "-m", "perfdiff.cli", *args],
        cwd=cwd,
        env=env,
        text=True,
        capture_output=True,
        check=False,
    )

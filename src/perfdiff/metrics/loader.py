"""Read Lighthouse CI report snapshots from disk.

Reports are ordered newest first by ``fetchTime``; reports sharing a
timestamp (or lacking a parseable one, which counts as epoch 0) fall back to
descending filename order so repeated runs see the same sequence.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..contracts import REPORT_SCHEMA, validate
from ..core.context import RunContext
from ..core.logging import log_event
from ..errors import (
    AllReportsUnparsableError,
    DirectoryNotFoundError,
    NoReportsFoundError,
    ReportNotFoundError,
    ScriptError,
    UnparsableReportFileError,
)
from ..model import LighthouseReport

LHCI_DIR = ".lighthouseci"
REPORT_PREFIX = "lhr-"
REPORT_SUFFIX = ".json"
MANIFEST_NAME = "manifest.json"


@dataclass(frozen=True)
class ManifestEntry:
    url: str
    is_representative_run: bool
    json_path: str
    html_path: str
    summary: dict[str, float]

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "ManifestEntry":
        return cls(
            url=str(payload.get("url", "")),
            is_representative_run=bool(payload.get("isRepresentativeRun", False)),
            json_path=str(payload.get("jsonPath", "")),
            html_path=str(payload.get("htmlPath", "")),
            summary={str(k): float(v) for k, v in dict(payload.get("summary", {})).items() if isinstance(v, (int, float))},
        )


def default_reports_dir(base_path: Path | None = None) -> Path:
    return (base_path or Path.cwd()) / LHCI_DIR


def list_reports(reports_dir: Path) -> list[str]:
    if not reports_dir.is_dir():
        return []
    return sorted(
        path.name
        for path in reports_dir.iterdir()
        if path.is_file() and path.name.startswith(REPORT_PREFIX) and path.name.endswith(REPORT_SUFFIX)
    )


def parse_fetch_time(value: str | None) -> float:
    """Seconds since the epoch for an ISO-8601 timestamp; 0.0 when unparseable."""
    if not value:
        return 0.0
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        stamp = datetime.fromisoformat(text)
    except ValueError:
        return 0.0
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp.timestamp()


def sort_reports(reports: list[LighthouseReport]) -> list[LighthouseReport]:
    return sorted(reports, key=lambda report: (parse_fetch_time(report.fetch_time), report.filename), reverse=True)


def read_report(path: Path) -> LighthouseReport:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise UnparsableReportFileError(path, str(exc)) from exc
    try:
        validate(REPORT_SCHEMA, payload)
    except ScriptError as exc:
        raise UnparsableReportFileError(path, exc.message) from exc
    return LighthouseReport.from_json(payload, source=path)


def load_reports(reports_dir: Path, ctx: RunContext | None = None) -> list[LighthouseReport]:
    if not reports_dir.is_dir():
        raise DirectoryNotFoundError(reports_dir)

    names = list_reports(reports_dir)
    if not names:
        raise NoReportsFoundError(reports_dir)

    reports: list[LighthouseReport] = []
    failures: list[UnparsableReportFileError] = []
    for name in names:
        try:
            reports.append(read_report(reports_dir / name))
        except UnparsableReportFileError as exc:
            failures.append(exc)
            log_event(ctx, "warn", "loader", "skip_unparsable", file=name, reason=exc.reason)

    if not reports:
        raise AllReportsUnparsableError(reports_dir, failures)

    ordered = sort_reports(reports)
    log_event(ctx, "info", "loader", "loaded", dir=str(reports_dir), reports=len(ordered), skipped=len(failures))
    return ordered


def load_report_by_name(filename: str, reports_dir: Path) -> LighthouseReport:
    path = reports_dir / filename
    if not path.is_file():
        raise ReportNotFoundError(path)
    return read_report(path)


def load_manifest(reports_dir: Path) -> list[ManifestEntry]:
    path = reports_dir / MANIFEST_NAME
    if not path.is_file():
        return []
    payload = json.loads(path.read_text(encoding="utf-8"))
    return [ManifestEntry.from_json(row) for row in payload if isinstance(row, dict)]


def representative_runs(reports_dir: Path, ctx: RunContext | None = None) -> dict[str, LighthouseReport]:
    runs: dict[str, LighthouseReport] = {}
    for entry in load_manifest(reports_dir):
        if not entry.is_representative_run:
            continue
        name = Path(entry.json_path).name
        try:
            runs[entry.url] = load_report_by_name(name, reports_dir)
        except (ReportNotFoundError, UnparsableReportFileError) as exc:
            log_event(ctx, "warn", "manifest", "skip_representative", url=entry.url, reason=exc.message)
    return runs

"""Report and metrics data model.

Absent values are represented by missing keys (or ``None`` on report
fields), never by zero. ``to_json`` emits the camelCase field names consumed
by downstream renderers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

Severity = Literal["low", "medium", "high", "critical"]

SCORE_KEYS: tuple[str, ...] = ("performance", "accessibility", "bestPractices", "seo")
VITAL_KEYS: tuple[str, ...] = ("fcp", "lcp", "tbt", "cls", "speedIndex", "tti")

SEVERITY_RANK: dict[str, int] = {"critical": 0, "high": 1, "medium": 2, "low": 3}


def _optional_float(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


@dataclass(frozen=True)
class AuditDetails:
    type: str | None = None
    overall_savings_ms: float | None = None
    overall_savings_bytes: float | None = None

    @classmethod
    def from_json(cls, payload: dict[str, Any] | None) -> "AuditDetails | None":
        if not isinstance(payload, dict):
            return None
        kind = payload.get("type")
        return cls(
            type=kind if isinstance(kind, str) else None,
            overall_savings_ms=_optional_float(payload.get("overallSavingsMs")),
            overall_savings_bytes=_optional_float(payload.get("overallSavingsBytes")),
        )


@dataclass(frozen=True)
class Audit:
    id: str
    title: str
    description: str | None = None
    score: float | None = None
    numeric_value: float | None = None
    details: AuditDetails | None = None

    @classmethod
    def from_json(cls, audit_id: str, payload: dict[str, Any]) -> "Audit":
        description = payload.get("description")
        return cls(
            id=str(payload.get("id", audit_id)),
            title=str(payload.get("title", audit_id)),
            description=description if isinstance(description, str) else None,
            score=_optional_float(payload.get("score")),
            numeric_value=_optional_float(payload.get("numericValue")),
            details=AuditDetails.from_json(payload.get("details")),
        )


@dataclass(frozen=True)
class LighthouseReport:
    """One raw audit run, read once from disk and never mutated."""

    categories: dict[str, float | None]
    audits: dict[str, Audit]
    final_url: str
    fetch_time: str | None = None
    requested_url: str | None = None
    source: Path | None = None

    @property
    def filename(self) -> str:
        return self.source.name if self.source is not None else ""

    @classmethod
    def from_json(cls, payload: dict[str, Any], source: Path | None = None) -> "LighthouseReport":
        categories: dict[str, float | None] = {}
        for category_id, row in dict(payload.get("categories", {})).items():
            categories[str(category_id)] = _optional_float(row.get("score")) if isinstance(row, dict) else None
        audits = {
            str(audit_id): Audit.from_json(str(audit_id), row)
            for audit_id, row in dict(payload.get("audits", {})).items()
            if isinstance(row, dict)
        }
        fetch_time = payload.get("fetchTime")
        requested = payload.get("requestedUrl")
        return cls(
            categories=categories,
            audits=audits,
            final_url=str(payload.get("finalUrl", "")),
            fetch_time=fetch_time if isinstance(fetch_time, str) else None,
            requested_url=requested if isinstance(requested, str) else None,
            source=source,
        )


@dataclass(frozen=True)
class Opportunity:
    id: str
    title: str
    description: str | None = None
    savings_ms: float | None = None
    savings_bytes: float | None = None
    score: float | None = None

    def to_json(self) -> dict[str, Any]:
        row: dict[str, Any] = {"id": self.id, "title": self.title}
        if self.description is not None:
            row["description"] = self.description
        if self.savings_ms is not None:
            row["savingsMs"] = self.savings_ms
        if self.savings_bytes is not None:
            row["savingsBytes"] = self.savings_bytes
        if self.score is not None:
            row["score"] = self.score
        return row


@dataclass(frozen=True)
class Metrics:
    scores: dict[str, float] = field(default_factory=dict)
    core_web_vitals: dict[str, float] = field(default_factory=dict)
    opportunities: tuple[Opportunity, ...] = ()

    def to_json(self) -> dict[str, Any]:
        return {
            "scores": {key: self.scores[key] for key in SCORE_KEYS if key in self.scores},
            "coreWebVitals": {key: self.core_web_vitals[key] for key in VITAL_KEYS if key in self.core_web_vitals},
            "opportunities": [row.to_json() for row in self.opportunities],
        }


@dataclass(frozen=True)
class MetricComparison:
    metric: str
    base: float
    current: float
    diff: float
    diff_percent: float
    is_regression: bool
    is_improvement: bool
    severity: Severity

    def __post_init__(self) -> None:
        if self.is_regression and self.is_improvement:
            raise ValueError(f"{self.metric}: a change cannot be both a regression and an improvement")

    def to_json(self) -> dict[str, Any]:
        return {
            "metric": self.metric,
            "base": self.base,
            "current": self.current,
            "diff": self.diff,
            "diffPercent": self.diff_percent,
            "isRegression": self.is_regression,
            "isImprovement": self.is_improvement,
            "severity": self.severity,
        }


@dataclass(frozen=True)
class OverallScore:
    base: float
    current: float
    diff: float

    def to_json(self) -> dict[str, float]:
        return {"base": self.base, "current": self.current, "diff": self.diff}


@dataclass(frozen=True)
class ComparisonResult:
    regressions: tuple[MetricComparison, ...]
    improvements: tuple[MetricComparison, ...]
    unchanged: tuple[MetricComparison, ...]
    overall_score: OverallScore

    def to_json(self) -> dict[str, Any]:
        return {
            "regressions": [row.to_json() for row in self.regressions],
            "improvements": [row.to_json() for row in self.improvements],
            "unchanged": [row.to_json() for row in self.unchanged],
            "overallScore": self.overall_score.to_json(),
        }

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from urllib.parse import urlsplit

from ..errors import InsufficientReportsError, InvalidStrategyError
from ..model import LighthouseReport
from .baseline import percentile_from_strategy

StrategyKind = Literal["latest", "same-url", "median", "percentile"]


@dataclass(frozen=True)
class BaselineStrategy:
    kind: StrategyKind
    percentile: int | None = None

    @classmethod
    def parse(cls, value: "str | BaselineStrategy") -> "BaselineStrategy":
        if isinstance(value, BaselineStrategy):
            return value
        text = value.strip()
        if text in ("latest", "same-url", "median"):
            return cls(kind=text)
        pct = percentile_from_strategy(text)
        if pct is not None:
            return cls(kind="percentile", percentile=pct)
        raise InvalidStrategyError(value)

    @property
    def aggregates(self) -> bool:
        """True when the baseline is synthesized from a series of runs."""
        return self.kind in ("median", "percentile")

    @property
    def effective_percentile(self) -> int | None:
        if self.kind == "median":
            return 50
        return self.percentile

    def __str__(self) -> str:
        if self.kind == "percentile":
            return f"p{self.percentile}"
        return self.kind


DEFAULT_STRATEGY = BaselineStrategy(kind="same-url")


@dataclass(frozen=True)
class ReportPair:
    current: LighthouseReport
    baseline: LighthouseReport | None
    baseline_candidates: tuple[LighthouseReport, ...]


def normalize_url(value: str) -> str:
    """Identity key for a page: scheme, host and path without query, fragment or trailing slash."""
    try:
        parts = urlsplit(value.strip())
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"not an absolute url: {value!r}")
        host = parts.netloc.lower()
    except ValueError:
        return value.rstrip("/")
    path = parts.path.rstrip("/") or "/"
    return f"{parts.scheme.lower()}://{host}{path}"


def report_url(report: LighthouseReport) -> str:
    return normalize_url(report.requested_url or report.final_url)


def select_pair(
    reports: list[LighthouseReport],
    strategy: "str | BaselineStrategy" = DEFAULT_STRATEGY,
) -> ReportPair:
    """Pick the current report and its baseline candidates from newest-first ``reports``."""
    if not reports:
        raise InsufficientReportsError("at least one report is required to select a current run")
    resolved = BaselineStrategy.parse(strategy)
    current, history = reports[0], list(reports[1:])

    if resolved.kind == "latest":
        candidates = history[:1]
    else:
        key = report_url(current)
        same_url = [report for report in history if report_url(report) == key]
        if same_url:
            candidates = same_url
        elif resolved.aggregates:
            candidates = history
        else:
            candidates = history[:1]

    return ReportPair(
        current=current,
        baseline=candidates[0] if candidates else None,
        baseline_candidates=tuple(candidates),
    )

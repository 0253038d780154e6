"""Classify per-metric changes between a current run and a baseline.

Scores are higher-is-better, Core Web Vitals lower-is-better. A change is a
regression or improvement only once it clears the noise band of its
threshold profile; severity is bucketed on the raw magnitude independently.
A metric missing on either side is left out of the result.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..errors import ConfigError
from ..model import (
    SCORE_KEYS,
    SEVERITY_RANK,
    VITAL_KEYS,
    ComparisonResult,
    MetricComparison,
    Metrics,
    OverallScore,
    Severity,
)

SCORE_LABELS: dict[str, str] = {
    "performance": "Performance Score",
    "accessibility": "Accessibility Score",
    "bestPractices": "Best Practices Score",
    "seo": "SEO Score",
}

VITAL_LABELS: dict[str, str] = {
    "fcp": "FCP",
    "lcp": "LCP",
    "tbt": "TBT",
    "cls": "CLS",
    "speedIndex": "Speed Index",
    "tti": "TTI",
}


@dataclass(frozen=True)
class VitalBand:
    floor: float
    relative: float = 0.0

    def threshold(self, base: float) -> float:
        return max(self.floor, self.relative * abs(base))


@dataclass(frozen=True)
class ThresholdProfile:
    name: str
    score_threshold: float
    vital_bands: dict[str, VitalBand] = field(default_factory=dict)

    def vital_threshold(self, key: str, base: float) -> float:
        return self.vital_bands[key].threshold(base)


BANDED = ThresholdProfile(
    name="banded",
    score_threshold=0.02,
    vital_bands={
        "fcp": VitalBand(100, 0.10),
        "lcp": VitalBand(150, 0.10),
        "tbt": VitalBand(50, 0.15),
        "cls": VitalBand(0.02, 0.15),
        "speedIndex": VitalBand(200, 0.10),
        "tti": VitalBand(200, 0.10),
    },
)

LEGACY = ThresholdProfile(
    name="legacy",
    score_threshold=0.01,
    vital_bands={
        "fcp": VitalBand(100),
        "lcp": VitalBand(100),
        "tbt": VitalBand(50),
        "cls": VitalBand(0.01),
        "speedIndex": VitalBand(200),
        "tti": VitalBand(200),
    },
)

PROFILES: dict[str, ThresholdProfile] = {profile.name: profile for profile in (BANDED, LEGACY)}


def get_profile(name: str) -> ThresholdProfile:
    try:
        return PROFILES[name]
    except KeyError:
        raise ConfigError(f"unknown threshold profile `{name}` (expected one of: {', '.join(sorted(PROFILES))})") from None


def diff_percent(base: float, diff: float) -> float:
    if base != 0:
        return diff / base * 100
    if diff == 0:
        return 0.0
    return 100.0 if diff > 0 else -100.0


def score_severity(diff: float) -> Severity:
    magnitude = abs(diff)
    if magnitude >= 0.2:
        return "critical"
    if magnitude >= 0.1:
        return "high"
    if magnitude >= 0.05:
        return "medium"
    return "low"


def vital_severity(key: str, diff: float) -> Severity:
    magnitude = abs(diff)
    if key == "cls":
        if magnitude >= 0.1:
            return "critical"
        if magnitude >= 0.05:
            return "high"
        if magnitude >= 0.02:
            return "medium"
        return "low"
    if magnitude >= 1000:
        return "critical"
    if magnitude >= 500:
        return "high"
    if magnitude >= 200:
        return "medium"
    return "low"


def compare_score(key: str, current: float, base: float, profile: ThresholdProfile = BANDED) -> MetricComparison:
    diff = current - base
    return MetricComparison(
        metric=SCORE_LABELS[key],
        base=base,
        current=current,
        diff=diff,
        diff_percent=diff_percent(base, diff),
        is_regression=diff <= -profile.score_threshold,
        is_improvement=diff >= profile.score_threshold,
        severity=score_severity(diff),
    )


def compare_vital(key: str, current: float, base: float, profile: ThresholdProfile = BANDED) -> MetricComparison:
    diff = current - base
    threshold = profile.vital_threshold(key, base)
    return MetricComparison(
        metric=VITAL_LABELS[key],
        base=base,
        current=current,
        diff=diff,
        diff_percent=diff_percent(base, diff),
        is_regression=diff >= threshold,
        is_improvement=diff <= -threshold,
        severity=vital_severity(key, diff),
    )


def sort_by_severity(rows: list[MetricComparison]) -> tuple[MetricComparison, ...]:
    return tuple(sorted(rows, key=lambda row: (SEVERITY_RANK[row.severity], -abs(row.diff))))


def compare_metrics(current: Metrics, baseline: Metrics, profile: ThresholdProfile = BANDED) -> ComparisonResult:
    rows: list[MetricComparison] = []
    for key in SCORE_KEYS:
        if key in current.scores and key in baseline.scores:
            rows.append(compare_score(key, current.scores[key], baseline.scores[key], profile))
    for key in VITAL_KEYS:
        if key in current.core_web_vitals and key in baseline.core_web_vitals:
            rows.append(compare_vital(key, current.core_web_vitals[key], baseline.core_web_vitals[key], profile))

    base_perf = baseline.scores.get("performance", 0.0)
    current_perf = current.scores.get("performance", 0.0)
    return ComparisonResult(
        regressions=sort_by_severity([row for row in rows if row.is_regression]),
        improvements=sort_by_severity([row for row in rows if row.is_improvement]),
        unchanged=tuple(row for row in rows if not row.is_regression and not row.is_improvement),
        overall_score=OverallScore(base=base_perf, current=current_perf, diff=current_perf - base_perf),
    )


def _format_change(row: MetricComparison) -> str:
    sign = "+" if row.diff >= 0 else ""
    if row.metric.endswith("Score"):
        return f"{row.base * 100:.0f}% -> {row.current * 100:.0f}% ({sign}{row.diff * 100:.1f}%)"
    if row.metric == "CLS":
        return f"{row.base:.3f} -> {row.current:.3f} ({sign}{row.diff:.3f})"
    return f"{row.base:.0f}ms -> {row.current:.0f}ms ({sign}{row.diff:.0f}ms)"


def comparison_summary(result: ComparisonResult, limit: int = 3) -> str:
    lines: list[str] = []
    if result.regressions:
        lines.append(f"Regressions: {len(result.regressions)}")
        lines.extend(f"  - {row.metric}: {_format_change(row)}" for row in result.regressions[:limit])
    if result.improvements:
        lines.append(f"Improvements: {len(result.improvements)}")
        lines.extend(f"  - {row.metric}: {_format_change(row)}" for row in result.improvements[:limit])
    score_diff = result.overall_score.diff * 100
    sign = "+" if score_diff >= 0 else ""
    lines.append("")
    lines.append(f"Overall Performance: {sign}{score_diff:.1f}%")
    return "\n".join(lines)

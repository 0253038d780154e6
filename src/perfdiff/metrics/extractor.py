from __future__ import annotations

from typing import Literal

from ..model import LighthouseReport, Metrics, Opportunity

Rating = Literal["good", "needs-improvement", "poor"]

SCORE_CATEGORIES: dict[str, str] = {
    "performance": "performance",
    "accessibility": "accessibility",
    "bestPractices": "best-practices",
    "seo": "seo",
}

VITAL_AUDITS: dict[str, str] = {
    "fcp": "first-contentful-paint",
    "lcp": "largest-contentful-paint",
    "tbt": "total-blocking-time",
    "cls": "cumulative-layout-shift",
    "speedIndex": "speed-index",
    "tti": "interactive",
}

# (good at or below, poor at or above)
RATING_THRESHOLDS: dict[str, tuple[float, float]] = {
    "fcp": (1800, 3000),
    "lcp": (2500, 4000),
    "tbt": (200, 600),
    "cls": (0.1, 0.25),
    "speedindex": (3400, 5800),
    "tti": (3800, 7300),
}


def extract_metrics(report: LighthouseReport) -> Metrics:
    return Metrics(
        scores=extract_scores(report),
        core_web_vitals=extract_core_web_vitals(report),
        opportunities=extract_opportunities(report),
    )


def extract_scores(report: LighthouseReport) -> dict[str, float]:
    scores: dict[str, float] = {}
    for key, category_id in SCORE_CATEGORIES.items():
        value = report.categories.get(category_id)
        if value is not None:
            scores[key] = value
    return scores


def extract_core_web_vitals(report: LighthouseReport) -> dict[str, float]:
    vitals: dict[str, float] = {}
    for key, audit_id in VITAL_AUDITS.items():
        audit = report.audits.get(audit_id)
        if audit is not None and audit.numeric_value is not None:
            vitals[key] = audit.numeric_value
    return vitals


def extract_opportunities(report: LighthouseReport) -> tuple[Opportunity, ...]:
    rows: list[Opportunity] = []
    for audit_id, audit in report.audits.items():
        if audit.details is None or audit.details.type != "opportunity":
            continue
        # null means not applicable, 1 means nothing left to gain
        if audit.score is None or audit.score == 1:
            continue
        rows.append(
            Opportunity(
                id=audit_id,
                title=audit.title,
                description=audit.description,
                savings_ms=audit.details.overall_savings_ms,
                savings_bytes=audit.details.overall_savings_bytes,
                score=audit.score,
            )
        )
    rows.sort(key=lambda row: row.savings_ms or 0, reverse=True)
    return tuple(rows)


def format_score(score: float) -> str:
    return f"{round(score * 100)}%"


def format_ms(ms: float) -> str:
    if ms >= 1000:
        return f"{ms / 1000:.2f}s"
    return f"{round(ms)}ms"


def format_bytes(size: float) -> str:
    if size >= 1024 * 1024:
        return f"{size / (1024 * 1024):.2f} MB"
    if size >= 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size:g} B"


def metric_rating(metric: str, value: float) -> Rating:
    thresholds = RATING_THRESHOLDS.get(metric.lower())
    if thresholds is None:
        return "needs-improvement"
    good, poor = thresholds
    if value <= good:
        return "good"
    if value >= poor:
        return "poor"
    return "needs-improvement"


def metrics_summary(metrics: Metrics, max_opportunities: int = 5) -> str:
    lines = ["Category Scores:"]
    labels = {"performance": "Performance", "accessibility": "Accessibility", "bestPractices": "Best Practices", "seo": "SEO"}
    for key, label in labels.items():
        if key in metrics.scores:
            lines.append(f"  {label}: {format_score(metrics.scores[key])}")

    lines.append("")
    lines.append("Core Web Vitals:")
    for key, label in (("fcp", "FCP"), ("lcp", "LCP"), ("tbt", "TBT"), ("speedIndex", "Speed Index"), ("tti", "TTI")):
        if key in metrics.core_web_vitals:
            value = metrics.core_web_vitals[key]
            lines.append(f"  {label}: {format_ms(value)} ({metric_rating(key, value)})")
    if "cls" in metrics.core_web_vitals:
        cls_value = metrics.core_web_vitals["cls"]
        lines.append(f"  CLS: {cls_value:.3f} ({metric_rating('cls', cls_value)})")

    if metrics.opportunities:
        lines.append("")
        lines.append("Top Opportunities:")
        for row in metrics.opportunities[:max_opportunities]:
            parts: list[str] = []
            if row.savings_ms:
                parts.append(format_ms(row.savings_ms))
            if row.savings_bytes:
                parts.append(format_bytes(row.savings_bytes))
            savings = f" ({', '.join(parts)} savings)" if parts else ""
            lines.append(f"  - {row.title}{savings}")
    return "\n".join(lines)

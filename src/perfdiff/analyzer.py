from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .core.context import RunContext
from .core.logging import log_event
from .errors import InsufficientReportsError
from .metrics.baseline import build_percentile_baseline
from .metrics.comparator import BANDED, ThresholdProfile, compare_metrics
from .metrics.extractor import extract_metrics
from .metrics.selector import DEFAULT_STRATEGY, BaselineStrategy, ReportPair, select_pair
from .model import SCORE_KEYS, ComparisonResult, LighthouseReport, Metrics

BaselineSource = Literal["report", "synthetic", "none"]

DEFAULT_SCORE_GATES: dict[str, float] = {key: 0.9 for key in SCORE_KEYS}

_GATE_LABELS = {"performance": "Performance", "accessibility": "Accessibility", "bestPractices": "Best Practices", "seo": "SEO"}


@dataclass(frozen=True)
class Analysis:
    strategy: BaselineStrategy
    profile: str
    pair: ReportPair
    current: Metrics
    baseline: Metrics | None
    baseline_source: BaselineSource
    comparison: ComparisonResult

    @property
    def has_baseline(self) -> bool:
        return self.baseline is not None


@dataclass(frozen=True)
class GateResult:
    passed: bool
    scores: dict[str, float]
    failures: tuple[str, ...]


def resolve_baseline(
    pair: ReportPair,
    strategy: BaselineStrategy,
    ctx: RunContext | None = None,
) -> tuple[Metrics | None, BaselineSource]:
    if not pair.baseline_candidates:
        return None, "none"
    pct = strategy.effective_percentile
    if strategy.aggregates and pct is not None:
        series = [extract_metrics(report) for report in pair.baseline_candidates]
        log_event(ctx, "info", "analyze", "synthesized_baseline", strategy=str(strategy), runs=len(series))
        return build_percentile_baseline(series, pct), "synthetic"
    return extract_metrics(pair.baseline_candidates[0]), "report"


def analyze(
    reports: list[LighthouseReport],
    strategy: "str | BaselineStrategy" = DEFAULT_STRATEGY,
    profile: ThresholdProfile = BANDED,
    require_baseline: bool = False,
    ctx: RunContext | None = None,
) -> Analysis:
    resolved = BaselineStrategy.parse(strategy)
    pair = select_pair(reports, resolved)
    current = extract_metrics(pair.current)
    baseline, source = resolve_baseline(pair, resolved, ctx)
    if baseline is None:
        if require_baseline:
            raise InsufficientReportsError(
                f"no baseline available for strategy {resolved}: {len(reports)} report(s) loaded"
            )
        log_event(ctx, "warn", "analyze", "no_baseline", strategy=str(resolved), reports=len(reports))
    comparison = compare_metrics(current, baseline if baseline is not None else current, profile)
    return Analysis(
        strategy=resolved,
        profile=profile.name,
        pair=pair,
        current=current,
        baseline=baseline,
        baseline_source=source,
        comparison=comparison,
    )


def quick_check(metrics: Metrics, thresholds: dict[str, float] | None = None) -> GateResult:
    gates = {**DEFAULT_SCORE_GATES, **{k: v for k, v in (thresholds or {}).items() if v is not None}}
    failures: list[str] = []
    for key in SCORE_KEYS:
        value = metrics.scores.get(key)
        if value is not None and value < gates[key]:
            failures.append(f"{_GATE_LABELS[key]}: {value * 100:.0f}% < {gates[key] * 100:.0f}%")
    return GateResult(
        passed=not failures,
        scores={key: metrics.scores.get(key, 0.0) for key in SCORE_KEYS},
        failures=tuple(failures),
    )

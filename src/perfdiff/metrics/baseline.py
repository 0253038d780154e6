"""Synthetic baselines aggregated from a series of metrics snapshots.

Percentiles are direction-aware so a ``p75`` baseline is a strict guard in
both directions: scores (higher is better) take the 75th percentile while
timings (lower is better) take the complementary 25th percentile.
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence

from ..errors import EmptySeriesError, InvalidPercentileError
from ..model import SCORE_KEYS, VITAL_KEYS, Metrics

_STRATEGY_RE = re.compile(r"^p([1-9][0-9]?|100)$")


def percentile_from_strategy(strategy: str) -> int | None:
    match = _STRATEGY_RE.match(strategy)
    if not match:
        return None
    return int(match.group(1))


def percentile(values: Sequence[float], pct: float) -> float | None:
    """Linear interpolation between order statistics (R-7)."""
    if not values:
        return None
    ordered = sorted(values)
    if len(ordered) == 1:
        return ordered[0]
    bounded = max(0.0, min(100.0, pct))
    rank = (bounded / 100) * (len(ordered) - 1)
    lower = math.floor(rank)
    upper = math.ceil(rank)
    if lower == upper:
        return ordered[lower]
    weight = rank - lower
    return ordered[lower] + (ordered[upper] - ordered[lower]) * weight


def _aggregate(series: Sequence[dict[str, float]], keys: tuple[str, ...], pct: float) -> dict[str, float]:
    out: dict[str, float] = {}
    for key in keys:
        value = percentile([row[key] for row in series if key in row], pct)
        if value is not None:
            out[key] = value
    return out


def build_percentile_baseline(series: Sequence[Metrics], pct: float) -> Metrics:
    if not series:
        raise EmptySeriesError()
    if not 0 < pct <= 100:
        raise InvalidPercentileError(pct)
    return Metrics(
        scores=_aggregate([row.scores for row in series], SCORE_KEYS, pct),
        core_web_vitals=_aggregate([row.core_web_vitals for row in series], VITAL_KEYS, 100 - pct),
        opportunities=(),
    )


def build_median_baseline(series: Sequence[Metrics]) -> Metrics:
    return build_percentile_baseline(series, 50)

from __future__ import annotations

import pytest

from perfdiff.errors import EmptySeriesError, InvalidPercentileError
from perfdiff.exit_codes import ERR_VALIDATION
from perfdiff.metrics.baseline import (
    build_median_baseline,
    build_percentile_baseline,
    percentile,
    percentile_from_strategy,
)
from perfdiff.model import Metrics, Opportunity
from tests.helpers import metrics


def _series() -> list[Metrics]:
    return [
        metrics({"performance": 0.8, "seo": 1.0}, {"lcp": 1000, "tbt": 100}),
        metrics({"performance": 0.9}, {"lcp": 1400, "tbt": 200}),
        metrics({"performance": 0.7, "seo": 0.9}, {"lcp": 1200, "tbt": 300}),
        metrics({"performance": 1.0}, {"lcp": 1600, "tbt": 400}),
    ]


def test_median_of_odd_series_is_middle_element() -> None:
    series = [metrics({"performance": v}) for v in (0.8, 0.9, 0.85)]
    assert build_median_baseline(series).scores["performance"] == 0.85


def test_median_of_even_series_interpolates() -> None:
    baseline = build_median_baseline(_series())
    assert baseline.scores["performance"] == pytest.approx(0.85)
    assert baseline.core_web_vitals["lcp"] == pytest.approx(1300)
    assert baseline.core_web_vitals["tbt"] == pytest.approx(250)


def test_p75_is_direction_aware() -> None:
    baseline = build_percentile_baseline(_series(), 75)
    assert baseline.scores["performance"] == pytest.approx(0.925)
    assert baseline.scores["seo"] == pytest.approx(0.975)
    assert baseline.core_web_vitals["lcp"] == pytest.approx(1150)
    assert baseline.core_web_vitals["tbt"] == pytest.approx(175)


def test_keys_absent_everywhere_stay_absent() -> None:
    baseline = build_median_baseline(_series())
    assert "accessibility" not in baseline.scores
    assert "cls" not in baseline.core_web_vitals
    assert set(baseline.core_web_vitals) == {"lcp", "tbt"}


def test_synthetic_baseline_has_no_opportunities() -> None:
    with_opps = Metrics(scores={"performance": 0.5}, opportunities=(Opportunity(id="x", title="x", savings_ms=10),))
    assert build_median_baseline([with_opps]).opportunities == ()


def test_single_value_series_returns_that_value() -> None:
    baseline = build_percentile_baseline([metrics({"performance": 0.42}, {"cls": 0.1})], 90)
    assert baseline.scores == {"performance": 0.42}
    assert baseline.core_web_vitals == {"cls": 0.1}


def test_p100_takes_best_of_each_direction() -> None:
    baseline = build_percentile_baseline(_series(), 100)
    assert baseline.scores["performance"] == 1.0
    assert baseline.core_web_vitals["lcp"] == 1000


def test_empty_series_raises() -> None:
    with pytest.raises(EmptySeriesError) as exc:
        build_median_baseline([])
    assert exc.value.code == ERR_VALIDATION


@pytest.mark.parametrize("pct", [0, -5, 100.5, 150])
def test_out_of_range_percentile_raises(pct: float) -> None:
    with pytest.raises(InvalidPercentileError):
        build_percentile_baseline(_series(), pct)


def test_empty_series_is_checked_before_percentile() -> None:
    with pytest.raises(EmptySeriesError):
        build_percentile_baseline([], 0)


@pytest.mark.parametrize(
    ("strategy", "expected"),
    [("p75", 75), ("p100", 100), ("p1", 1), ("median", None), ("p0", None), ("p101", None), ("same-url", None)],
)
def test_percentile_from_strategy(strategy: str, expected: int | None) -> None:
    assert percentile_from_strategy(strategy) == expected


def test_percentile_helper() -> None:
    assert percentile([], 50) is None
    assert percentile([3.0], 10) == 3.0
    assert percentile([1.0, 2.0, 3.0, 4.0, 5.0], 50) == 3.0
    assert percentile([4.0, 1.0], 25) == pytest.approx(1.75)

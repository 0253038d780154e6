from __future__ import annotations

import pytest

from perfdiff.metrics.extractor import (
    extract_metrics,
    format_bytes,
    format_ms,
    format_score,
    metric_rating,
    metrics_summary,
)
from perfdiff.model import LighthouseReport
from tests.helpers import report_payload, vital_audit


def _opportunity(audit_id: str, score: float | None, savings_ms: float | None = None, savings_bytes: float | None = None) -> dict:
    details: dict = {"type": "opportunity"}
    if savings_ms is not None:
        details["overallSavingsMs"] = savings_ms
    if savings_bytes is not None:
        details["overallSavingsBytes"] = savings_bytes
    return {"id": audit_id, "title": audit_id.replace("-", " "), "description": f"{audit_id} help", "score": score, "details": details}


def _full_report() -> LighthouseReport:
    audits = {
        "first-contentful-paint": vital_audit("first-contentful-paint", 1500),
        "largest-contentful-paint": vital_audit("largest-contentful-paint", 2500),
        "total-blocking-time": vital_audit("total-blocking-time", 150),
        "cumulative-layout-shift": vital_audit("cumulative-layout-shift", 0.05),
        "speed-index": vital_audit("speed-index", 3000),
        "interactive": vital_audit("interactive", 4200),
        "render-blocking-resources": _opportunity("render-blocking-resources", 0.5, 500, 12000),
        "unused-javascript": _opportunity("unused-javascript", 0.3, 900),
        "uses-text-compression": _opportunity("uses-text-compression", 1, 300),
        "offscreen-images": _opportunity("offscreen-images", None, 800),
        "modern-image-formats": _opportunity("modern-image-formats", 0.8),
    }
    payload = report_payload(
        "https://example.com/",
        "2024-01-01T00:00:00.000Z",
        performance=0.85,
        accessibility=0.92,
        best_practices=0.88,
        seo=0.95,
        audits=audits,
    )
    return LighthouseReport.from_json(payload)


def test_extracts_category_scores() -> None:
    metrics = extract_metrics(_full_report())
    assert metrics.scores == {"performance": 0.85, "accessibility": 0.92, "bestPractices": 0.88, "seo": 0.95}


def test_null_category_score_is_absent_not_zero() -> None:
    report = LighthouseReport.from_json(report_payload("https://example.com/", "2024-01-01T00:00:00Z", performance=None, seo=None))
    metrics = extract_metrics(report)
    assert "performance" not in metrics.scores
    assert "seo" not in metrics.scores


def test_extracts_core_web_vitals() -> None:
    metrics = extract_metrics(_full_report())
    assert metrics.core_web_vitals == {
        "fcp": 1500,
        "lcp": 2500,
        "tbt": 150,
        "cls": 0.05,
        "speedIndex": 3000,
        "tti": 4200,
    }


def test_vital_without_numeric_value_is_absent() -> None:
    audits = {
        "first-contentful-paint": {"id": "first-contentful-paint", "title": "FCP", "score": None},
        "largest-contentful-paint": vital_audit("largest-contentful-paint", 0),
    }
    report = LighthouseReport.from_json(report_payload("https://example.com/", "2024-01-01T00:00:00Z", audits=audits))
    metrics = extract_metrics(report)
    assert "fcp" not in metrics.core_web_vitals
    assert metrics.core_web_vitals["lcp"] == 0
    assert "tbt" not in metrics.core_web_vitals


def test_opportunities_filtered_and_sorted_by_savings() -> None:
    metrics = extract_metrics(_full_report())
    assert [row.id for row in metrics.opportunities] == [
        "unused-javascript",
        "render-blocking-resources",
        "modern-image-formats",
    ]
    blocking = metrics.opportunities[1]
    assert blocking.savings_ms == 500
    assert blocking.savings_bytes == 12000
    assert blocking.score == 0.5
    assert blocking.description == "render-blocking-resources help"
    assert metrics.opportunities[2].savings_ms is None


def test_opportunity_ties_keep_audit_order() -> None:
    audits = {
        "b-audit": _opportunity("b-audit", 0.5, 100),
        "a-audit": _opportunity("a-audit", 0.5, 100),
        "c-audit": _opportunity("c-audit", 0.5),
        "d-audit": _opportunity("d-audit", 0.5, 0),
    }
    report = LighthouseReport.from_json(report_payload("https://example.com/", "2024-01-01T00:00:00Z", audits=audits))
    assert [row.id for row in extract_metrics(report).opportunities] == ["b-audit", "a-audit", "c-audit", "d-audit"]


def test_metrics_to_json_uses_camel_case_and_omits_absent_keys() -> None:
    payload = extract_metrics(_full_report()).to_json()
    assert set(payload) == {"scores", "coreWebVitals", "opportunities"}
    assert payload["scores"]["bestPractices"] == 0.88
    assert payload["coreWebVitals"]["speedIndex"] == 3000
    first = payload["opportunities"][0]
    assert first == {
        "id": "unused-javascript",
        "title": "unused javascript",
        "description": "unused-javascript help",
        "savingsMs": 900.0,
        "score": 0.3,
    }


def test_formatters() -> None:
    assert format_score(0.856) == "86%"
    assert format_ms(850.4) == "850ms"
    assert format_ms(2500) == "2.50s"
    assert format_bytes(512) == "512 B"
    assert format_bytes(2048) == "2.00 KB"
    assert format_bytes(3 * 1024 * 1024) == "3.00 MB"


@pytest.mark.parametrize(
    ("metric", "value", "expected"),
    [
        ("lcp", 2500, "good"),
        ("lcp", 3000, "needs-improvement"),
        ("lcp", 4000, "poor"),
        ("CLS", 0.05, "good"),
        ("speedIndex", 6000, "poor"),
        ("unknown", 1, "needs-improvement"),
    ],
)
def test_metric_rating(metric: str, value: float, expected: str) -> None:
    assert metric_rating(metric, value) == expected


def test_metrics_summary_lists_present_values_only() -> None:
    text = metrics_summary(extract_metrics(_full_report()))
    assert "Performance: 85%" in text
    assert "CLS: 0.050 (good)" in text
    assert "LCP: 2.50s (good)" in text
    assert "TTI: 4.20s (needs-improvement)" in text
    assert "Top Opportunities:" in text
    assert "- unused javascript (900ms savings)" in text
    assert "- render blocking resources (500ms, 11.72 KB savings)" in text

    bare = LighthouseReport.from_json(report_payload("https://example.com/", "2024-01-01T00:00:00Z", performance=None))
    bare_text = metrics_summary(extract_metrics(bare))
    assert "Performance" not in bare_text
    assert "Top Opportunities" not in bare_text

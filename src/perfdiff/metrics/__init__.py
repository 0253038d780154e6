"""Metric extraction, report selection, baseline synthesis and comparison."""

from .baseline import build_median_baseline, build_percentile_baseline, percentile_from_strategy
from .comparator import BANDED, LEGACY, compare_metrics, comparison_summary, get_profile
from .extractor import extract_metrics, metrics_summary
from .loader import default_reports_dir, load_reports
from .selector import BaselineStrategy, ReportPair, normalize_url, select_pair

__all__ = [
    "BANDED",
    "LEGACY",
    "BaselineStrategy",
    "ReportPair",
    "build_median_baseline",
    "build_percentile_baseline",
    "compare_metrics",
    "comparison_summary",
    "default_reports_dir",
    "extract_metrics",
    "get_profile",
    "load_reports",
    "metrics_summary",
    "normalize_url",
    "percentile_from_strategy",
    "select_pair",
]

"""JSON contracts for report inputs, config files and command output."""

from .validate import schema_path_for, validate, validate_file

REPORT_SCHEMA = "perfdiff.report.v1"
CONFIG_SCHEMA = "perfdiff.config.v1"
COMPARISON_SCHEMA = "perfdiff.comparison.v1"

__all__ = [
    "COMPARISON_SCHEMA",
    "CONFIG_SCHEMA",
    "REPORT_SCHEMA",
    "schema_path_for",
    "validate",
    "validate_file",
]

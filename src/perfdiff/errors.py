from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .exit_codes import ERR_CONFIG, ERR_INPUT, ERR_USAGE, ERR_VALIDATION


@dataclass
class ScriptError(Exception):
    message: str
    code: int
    kind: str = "generic_error"

    def __str__(self) -> str:
        return self.message


class DirectoryNotFoundError(ScriptError):
    def __init__(self, path: Path) -> None:
        super().__init__(
            f"No {path.name} directory found at {path}. Run `lhci collect` first to generate Lighthouse reports.",
            ERR_INPUT,
            kind="directory_not_found",
        )
        self.path = path


class NoReportsFoundError(ScriptError):
    def __init__(self, path: Path) -> None:
        super().__init__(
            f"No Lighthouse reports found in {path}. Run `lhci collect` first.",
            ERR_INPUT,
            kind="no_reports_found",
        )
        self.path = path


class UnparsableReportFileError(ScriptError):
    """A single report file that could not be read; the loader skips it."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"failed to parse {path.name}: {reason}", ERR_INPUT, kind="unparsable_report_file")
        self.path = path
        self.reason = reason


class AllReportsUnparsableError(ScriptError):
    def __init__(self, path: Path, failures: list[UnparsableReportFileError]) -> None:
        super().__init__(
            f"Failed to load any valid Lighthouse reports from {path} ({len(failures)} unparsable)",
            ERR_INPUT,
            kind="all_reports_unparsable",
        )
        self.path = path
        self.failures = tuple(failures)


class ReportNotFoundError(ScriptError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Report not found: {path.name}", ERR_INPUT, kind="report_not_found")
        self.path = path


class EmptySeriesError(ScriptError):
    def __init__(self) -> None:
        super().__init__(
            "at least one metrics snapshot is required for a percentile baseline",
            ERR_VALIDATION,
            kind="empty_series",
        )


class InvalidPercentileError(ScriptError):
    def __init__(self, percentile: float) -> None:
        super().__init__(
            f"percentile must be in (0, 100], received: {percentile}",
            ERR_VALIDATION,
            kind="invalid_percentile",
        )
        self.percentile = percentile


class InsufficientReportsError(ScriptError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ERR_INPUT, kind="insufficient_reports")


class InvalidStrategyError(ScriptError):
    def __init__(self, value: str) -> None:
        super().__init__(
            f"invalid baseline strategy `{value}`: expected latest, same-url, median or p1..p100",
            ERR_USAGE,
            kind="invalid_strategy",
        )
        self.value = value


class ConfigError(ScriptError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ERR_CONFIG, kind="config_error")

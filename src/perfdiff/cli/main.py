from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .. import __version__
from ..analyzer import Analysis, analyze, quick_check
from ..config import Config, load_config, resolve_options
from ..contracts import COMPARISON_SCHEMA, validate, validate_file
from ..core.context import RunContext
from ..core.logging import log_event
from ..errors import ScriptError
from ..exit_codes import ERR_CONFIG, ERR_INTERNAL, ERR_REGRESSION, ERR_USAGE, OK
from ..metrics.comparator import comparison_summary, get_profile
from ..metrics.extractor import extract_metrics, metrics_summary
from ..metrics.loader import LHCI_DIR, list_reports, load_reports
from ..model import SEVERITY_RANK, LighthouseReport
from .output import build_base_payload, comparison_payload, emit, gate_payload, render_error, resolve_output_format, version_payload


def _add_reports_dir(p: argparse.ArgumentParser) -> None:
    p.add_argument("--reports-dir", help=f"report directory (default: ./{LHCI_DIR})")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="perfdiff", description="Compare Lighthouse CI runs against a baseline.")
    p.add_argument("--version", action="version", version=f"perfdiff {__version__}")
    p.add_argument("--json", action="store_true", help="emit JSON output")
    p.add_argument("--format", choices=["text", "json"], default=None, help="output format")
    p.add_argument("--run-id", help="run identifier used in logs and payloads")
    p.add_argument("--log-json", action="store_true", help="emit structured log lines as JSON")
    p.add_argument("--config", help="explicit config file path")
    p.add_argument("--cwd", help="run from an explicit project root")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable verbose diagnostics")
    vg.add_argument("--quiet", action="store_true", help="only emit errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    compare_p = sub.add_parser("compare", help="compare the latest run against its baseline")
    _add_reports_dir(compare_p)
    compare_p.add_argument("--strategy", help="baseline strategy: latest, same-url, median or p1..p100")
    compare_p.add_argument("--profile", choices=["banded", "legacy"], help="regression threshold profile")
    compare_p.add_argument("--require-baseline", action="store_true", help="fail when no baseline run is available")
    compare_p.add_argument("--fail-on", choices=["low", "medium", "high", "critical"], help="exit non-zero on regressions at or above this severity")

    baseline_p = sub.add_parser("baseline", help="print the baseline metrics selected or synthesized for the latest run")
    _add_reports_dir(baseline_p)
    baseline_p.add_argument("--strategy", help="baseline strategy: latest, same-url, median or p1..p100")

    check_p = sub.add_parser("check", help="gate the latest run's category scores against minimums")
    _add_reports_dir(check_p)

    list_p = sub.add_parser("list", help="list report files in the report directory")
    _add_reports_dir(list_p)

    val_p = sub.add_parser("validate-output", help="validate a JSON file against a packaged schema")
    val_p.add_argument("--schema", required=True, help="schema name, e.g. perfdiff.comparison.v1")
    val_p.add_argument("--file", required=True)

    sub.add_parser("version", help="print version")
    return p


def _reports_dir(ctx: RunContext, ns: argparse.Namespace) -> Path:
    return ctx.resolve(ns.reports_dir or LHCI_DIR)


def _fails_gate(analysis: Analysis, fail_on: str | None) -> bool:
    if not fail_on:
        return False
    limit = SEVERITY_RANK[fail_on]
    return any(SEVERITY_RANK[row.severity] <= limit for row in analysis.comparison.regressions)


def _describe(report: LighthouseReport) -> str:
    return f"{report.filename or '<memory>'} ({report.requested_url or report.final_url})"


def _run_compare(ctx: RunContext, ns: argparse.Namespace, config: Config, as_json: bool) -> int:
    options = resolve_options(config, {"strategy": ns.strategy, "profile": ns.profile})
    reports = load_reports(_reports_dir(ctx, ns), ctx)
    analysis = analyze(
        reports,
        options["strategy"],
        profile=get_profile(options["profile"]),
        require_baseline=ns.require_baseline,
        ctx=ctx,
    )
    if as_json:
        payload = comparison_payload(ctx, analysis)
        validate(COMPARISON_SCHEMA, payload)
        emit(payload, as_json)
    else:
        lines = [
            f"strategy: {analysis.strategy} (profile: {analysis.profile})",
            f"current:  {_describe(analysis.pair.current)}",
        ]
        if analysis.baseline_source == "synthetic":
            lines.append(f"baseline: synthetic from {len(analysis.pair.baseline_candidates)} run(s)")
        elif analysis.pair.baseline is not None:
            lines.append(f"baseline: {_describe(analysis.pair.baseline)}")
        else:
            lines.append("baseline: none available, reporting current metrics only")
            lines.append("")
            lines.append(metrics_summary(analysis.current))
        lines.append("")
        lines.append(comparison_summary(analysis.comparison))
        print("\n".join(lines))
    return ERR_REGRESSION if _fails_gate(analysis, ns.fail_on) else OK


def _run_baseline(ctx: RunContext, ns: argparse.Namespace, config: Config, as_json: bool) -> int:
    options = resolve_options(config, {"strategy": ns.strategy})
    reports = load_reports(_reports_dir(ctx, ns), ctx)
    analysis = analyze(reports, options["strategy"], require_baseline=True, ctx=ctx)
    payload = build_base_payload(ctx, "perfdiff.baseline.v1")
    payload.update(
        {
            "strategy": str(analysis.strategy),
            "baseline_source": analysis.baseline_source,
            "candidates": [report.filename for report in analysis.pair.baseline_candidates],
            "baseline": analysis.baseline.to_json() if analysis.baseline is not None else {},
        }
    )
    if as_json:
        emit(payload, as_json)
    else:
        print(f"strategy: {analysis.strategy} ({analysis.baseline_source}, {len(analysis.pair.baseline_candidates)} candidate run(s))")
        if analysis.baseline is not None:
            print(metrics_summary(analysis.baseline))
    return OK


def _run_check(ctx: RunContext, ns: argparse.Namespace, config: Config, as_json: bool) -> int:
    reports = load_reports(_reports_dir(ctx, ns), ctx)
    gate = quick_check(extract_metrics(reports[0]), config.thresholds)
    if as_json:
        emit(gate_payload(ctx, gate), as_json)
    else:
        print("score gate passed" if gate.passed else "score gate failed:")
        for failure in gate.failures:
            print(f"- {failure}")
    return OK if gate.passed else ERR_REGRESSION


def _run_list(ctx: RunContext, ns: argparse.Namespace, as_json: bool) -> int:
    reports_dir = _reports_dir(ctx, ns)
    names = list_reports(reports_dir)
    if as_json:
        payload = build_base_payload(ctx, "perfdiff.list.v1")
        payload.update({"reports_dir": reports_dir, "reports": names})
        emit(payload, as_json)
    else:
        for name in names:
            print(name)
    return OK


def main(argv: list[str] | None = None) -> int:
    raw_argv = argv if argv is not None else sys.argv[1:]
    p = build_parser()
    ns = p.parse_args(raw_argv)
    if ns.format and ns.json and ns.format != "json":
        print("conflicting output flags: use either --format json or --json", file=sys.stderr)
        return ERR_CONFIG
    ctx = RunContext.from_args(
        ns.run_id,
        ns.cwd,
        output_format="json" if ns.json or ns.format == "json" else "text",
        verbose=ns.verbose,
        quiet=ns.quiet,
        log_json=ns.log_json,
    )
    try:
        config = load_config(ns.config, ctx.cwd, ctx)
        fmt = resolve_output_format(cli_json=ns.json, cli_format=ns.format, config_output=config.output_format)
        as_json = fmt == "json"
        log_event(ctx, "info", "cli", "start", cmd=ns.cmd, fmt=fmt)
        if ns.cmd == "version":
            payload = version_payload(ctx)
            if as_json:
                emit(payload, as_json)
            else:
                print(f"perfdiff {__version__}")
            return OK
        if ns.cmd == "compare":
            return _run_compare(ctx, ns, config, as_json)
        if ns.cmd == "baseline":
            return _run_baseline(ctx, ns, config, as_json)
        if ns.cmd == "check":
            return _run_check(ctx, ns, config, as_json)
        if ns.cmd == "list":
            return _run_list(ctx, ns, as_json)
        if ns.cmd == "validate-output":
            validate_file(ns.schema, ctx.resolve(ns.file))
            if as_json:
                emit({**build_base_payload(ctx, "perfdiff.validate.v1"), "schema": ns.schema, "file": ns.file}, as_json)
            else:
                print(f"{ns.file}: valid against {ns.schema}")
            return OK
        return ERR_USAGE
    except ScriptError as exc:
        print(render_error(as_json=(ctx.output_format == "json"), message=str(exc), code=exc.code, kind=exc.kind), file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        print(render_error(as_json=(ctx.output_format == "json"), message=f"internal error: {exc}", code=ERR_INTERNAL), file=sys.stderr)
        return ERR_INTERNAL


if __name__ == "__main__":
    raise SystemExit(main())

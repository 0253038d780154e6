"""CLI payload output helpers."""

from __future__ import annotations

from .. import __version__
from ..analyzer import Analysis, GateResult
from ..core.context import RunContext
from ..core.serialize import dumps_json


def emit(payload: dict[str, object], as_json: bool) -> None:
    print(dumps_json(payload, pretty=not as_json))


def build_base_payload(ctx: RunContext, schema_name: str, status: str = "ok") -> dict[str, object]:
    return {
        "schema_name": schema_name,
        "schema_version": 1,
        "tool": "perfdiff",
        "status": status,
        "run_id": ctx.run_id,
    }


def resolve_output_format(*, cli_json: bool, cli_format: str | None, config_output: str | None = None) -> str:
    if cli_json:
        return "json"
    if cli_format:
        return cli_format
    return "json" if config_output == "json" else "text"


def render_error(*, as_json: bool, message: str, code: int, kind: str = "generic_error") -> str:
    if as_json:
        return dumps_json(
            {
                "schema_name": "perfdiff.error.v1",
                "schema_version": 1,
                "tool": "perfdiff",
                "status": "error",
                "errors": [{"code": code, "kind": kind, "message": message}],
            },
            pretty=False,
        )
    return message


def comparison_payload(ctx: RunContext, analysis: Analysis) -> dict[str, object]:
    status = "regressed" if analysis.comparison.regressions else "ok"
    payload = build_base_payload(ctx, "perfdiff.comparison.v1", status)
    payload.update(
        {
            "strategy": str(analysis.strategy),
            "profile": analysis.profile,
            "baseline_source": analysis.baseline_source,
            "candidate_count": len(analysis.pair.baseline_candidates),
            "current": analysis.current.to_json(),
            "comparison": analysis.comparison.to_json(),
        }
    )
    if analysis.baseline is not None:
        payload["baseline"] = analysis.baseline.to_json()
    return payload


def gate_payload(ctx: RunContext, gate: GateResult) -> dict[str, object]:
    payload = build_base_payload(ctx, "perfdiff.check.v1", "ok" if gate.passed else "failed")
    payload.update({"passed": gate.passed, "scores": dict(gate.scores), "failures": list(gate.failures)})
    return payload


def version_payload(ctx: RunContext) -> dict[str, object]:
    payload = build_base_payload(ctx, "perfdiff.version.v1")
    payload["version"] = __version__
    return payload

"""Configuration discovery and normalization.

Config files are JSON (``.lhcirc.json``, ``.lhci-ai.json``) or YAML
(``.lhci-ai.yml``) and are validated against ``perfdiff.config.v1``.
Precedence, lowest first: file, ``LHCI_BASELINE_STRATEGY``, CLI flags.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .contracts import CONFIG_SCHEMA, validate
from .core.context import RunContext
from .core.logging import log_event
from .errors import ConfigError, ScriptError

CONFIG_FILES: tuple[str, ...] = (
    ".lhcirc.json",
    "lhcirc.json",
    ".lhci-ai.json",
    ".lhci-ai.yml",
    ".lhci-ai.yaml",
)

STRATEGY_ENV = "LHCI_BASELINE_STRATEGY"

_THRESHOLD_KEYS = ("performance", "accessibility", "bestPractices", "seo")


@dataclass(frozen=True)
class Config:
    baseline_strategy: str | None = None
    output_format: str | None = None
    threshold_profile: str | None = None
    provider: str | None = None
    thresholds: dict[str, float] = field(default_factory=dict)
    ignore: tuple[str, ...] = ()
    source: Path | None = None

    @classmethod
    def from_json(cls, payload: Mapping[str, Any], source: Path | None = None) -> "Config":
        ai = dict(payload.get("ai", {}) or {})
        raw_thresholds = dict(payload.get("thresholds", {}) or {})
        return cls(
            baseline_strategy=ai.get("baselineStrategy"),
            output_format=ai.get("outputFormat"),
            threshold_profile=ai.get("thresholdProfile"),
            provider=ai.get("provider"),
            thresholds={key: float(raw_thresholds[key]) for key in _THRESHOLD_KEYS if key in raw_thresholds},
            ignore=tuple(str(item) for item in payload.get("ignore", []) or []),
            source=source,
        )


def _read_config_file(path: Path) -> Config:
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix in (".yml", ".yaml"):
            payload = yaml.safe_load(text) or {}
        else:
            payload = json.loads(text)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"failed to read config {path}: {exc}") from exc
    try:
        validate(CONFIG_SCHEMA, payload)
    except ScriptError as exc:
        raise ConfigError(f"invalid config {path}: {exc.message}") from exc
    return Config.from_json(payload, source=path)


def load_config(config_path: str | Path | None = None, cwd: Path | None = None, ctx: RunContext | None = None) -> Config:
    root = cwd or Path.cwd()
    if config_path is not None:
        explicit = Path(config_path)
        explicit = explicit if explicit.is_absolute() else root / explicit
        if not explicit.is_file():
            raise ConfigError(f"config file not found: {explicit}")
        config = _read_config_file(explicit)
        log_event(ctx, "info", "config", "loaded", path=str(explicit))
        return config

    for name in CONFIG_FILES:
        path = root / name
        if not path.is_file():
            continue
        try:
            config = _read_config_file(path)
        except ConfigError as exc:
            log_event(ctx, "warn", "config", "skip_invalid", path=str(path), reason=exc.message)
            continue
        log_event(ctx, "info", "config", "loaded", path=str(path))
        return config
    return Config()


def merge_options(*layers: Mapping[str, Any]) -> dict[str, Any]:
    """Merge option layers; later layers win, ``None`` values never override."""
    merged: dict[str, Any] = {}
    for layer in layers:
        for key, value in layer.items():
            if value is not None:
                merged[key] = value
    return merged


def resolve_options(config: Config, cli: Mapping[str, Any], env: Mapping[str, str] | None = None) -> dict[str, Any]:
    environ = os.environ if env is None else env
    file_layer = {
        "strategy": config.baseline_strategy,
        "profile": config.threshold_profile,
        "output": config.output_format,
    }
    env_layer = {"strategy": environ.get(STRATEGY_ENV) or None}
    defaults = {"strategy": "same-url", "profile": "banded", "output": "terminal"}
    return merge_options(defaults, file_layer, env_layer, cli)

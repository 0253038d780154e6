"""JSON serialization for command payloads."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def _encode(value: Any) -> Any:
    to_json = getattr(value, "to_json", None)
    if callable(to_json):
        return to_json()
    if isinstance(value, Path):
        return value.as_posix()
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"cannot serialize {type(value).__name__}")


def dumps_json(payload: Any, pretty: bool = False) -> str:
    """Stable key order; model objects are emitted through their ``to_json``."""
    if pretty:
        return json.dumps(payload, indent=2, sort_keys=True, default=_encode)
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=_encode)

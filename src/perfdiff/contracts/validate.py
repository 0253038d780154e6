from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema

from ..errors import ScriptError
from ..exit_codes import ERR_VALIDATION


def schemas_root() -> Path:
    return Path(str(resources.files("perfdiff.contracts"))) / "schemas"


def schema_path_for(schema_name: str) -> Path:
    path = schemas_root() / f"{schema_name}.schema.json"
    if not path.is_file():
        raise ScriptError(f"unknown schema: {schema_name}", ERR_VALIDATION, kind="unknown_schema")
    return path


@lru_cache(maxsize=None)
def _load_schema(schema_name: str) -> dict[str, Any]:
    return json.loads(schema_path_for(schema_name).read_text(encoding="utf-8"))


def validate(schema_name: str, payload: Any) -> None:
    schema = _load_schema(schema_name)
    try:
        jsonschema.validate(payload, schema)
    except jsonschema.ValidationError as exc:
        pointer = "/".join(str(p) for p in exc.absolute_path)
        loc = pointer or "<root>"
        raise ScriptError(
            f"schema validation failed for {schema_name} at {loc}: {exc.message}",
            ERR_VALIDATION,
            kind="schema_validation",
        ) from exc


def validate_file(schema_name: str, file_path: str | Path) -> None:
    path = Path(file_path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ScriptError(f"failed to read {path}: {exc}", ERR_VALIDATION, kind="unreadable_json") from exc
    validate(schema_name, payload)

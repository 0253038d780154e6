from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .clock import utc_now

OutputFormat = Literal["text", "json"]


@dataclass(frozen=True)
class RunContext:
    run_id: str
    cwd: Path
    output_format: OutputFormat = "text"
    verbose: bool = False
    quiet: bool = False
    log_json: bool = False

    @classmethod
    def from_args(
        cls,
        run_id: str | None,
        cwd: str | None = None,
        output_format: OutputFormat = "text",
        verbose: bool = False,
        quiet: bool = False,
        log_json: bool = False,
    ) -> "RunContext":
        default_run = f"perfdiff-{utc_now().strftime('%Y%m%d-%H%M%S')}"
        resolved_run_id = run_id or os.environ.get("RUN_ID", default_run)
        root = Path(cwd).resolve() if cwd else Path.cwd().resolve()
        return cls(
            run_id=resolved_run_id,
            cwd=root,
            output_format=output_format,
            verbose=verbose,
            quiet=quiet,
            log_json=log_json or os.environ.get("PERFDIFF_LOG_JSON", "") == "1",
        )

    def resolve(self, path: str | Path) -> Path:
        candidate = Path(path)
        return candidate if candidate.is_absolute() else (self.cwd / candidate)

"""Run context shared by every command.

Repository root detection lives here so that `Path.cwd()` is read in one place.
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

OutputFormat = Literal["text", "json"]


def find_repo_root(start: Path | None = None) -> Path:
    cur = (start or Path.cwd()).resolve()
    if cur.is_file():
        cur = cur.parent
    for candidate in (cur, *cur.parents):
        if (candidate / ".git").exists():
            return candidate
    return cur


def read_git_sha(repo_root: Path) -> str:
    try:
        out = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=repo_root,
            text=True,
            capture_output=True,
            check=False,
        )
    except OSError:
        return "unknown"
    sha = out.stdout.strip() if out.returncode == 0 else ""
    return sha or "unknown"


def make_run_id(repo_root: Path, prefix: str = "subcategory") -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return f"{prefix}-{ts}-{read_git_sha(repo_root)}"


@dataclass(frozen=True)
class RunContext:
    run_id: str
    repo_root: Path
    output_format: OutputFormat
    log_json: bool
    verbose: bool
    quiet: bool

    @classmethod
    def from_args(
        cls,
        run_id: str | None,
        repo_root: str | None,
        output_format: OutputFormat = "text",
        log_json: bool = False,
        verbose: bool = False,
        quiet: bool = False,
    ) -> "RunContext":
        root = Path(repo_root).resolve() if repo_root else find_repo_root()
        resolved_run_id = run_id or os.environ.get("RUN_ID") or make_run_id(root)
        return cls(
            run_id=resolved_run_id,
            repo_root=root,
            output_format=output_format,
            log_json=log_json,
            verbose=verbose,
            quiet=quiet,
        )

    def resolve(self, path: str | Path) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self.repo_root / p

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def page(title: str, subcategory: str = "") -> str:
    return (
        "---\n"
        f'page_title: "{title}"\n'
        f'subcategory: "{subcategory}"\n'
        "description: |-\n"
        f"  Manages {title}.\n"
        "---\n"
        "\n"
        f"# {title}\n"
    )


def write_config(repo: Path, text: str, rel: str = "configs/docs/subcategories.yaml") -> Path:
    path = repo / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def snapshot(root: Path) -> dict[str, bytes]:
    return {p.relative_to(root).as_posix(): p.read_bytes() for p in sorted(root.rglob("*")) if p.is_file()}


def run_cli(*args: str, cwd: Path) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    env["PYTHONPATH"] = str(ROOT / "src")
    env.pop("RUN_ID", None)
    return subprocess.run(
        [sys.executable, "-m", "subcategory_annotator", *args],
        cwd=cwd,
        env=env,
        text=True,
        capture_output=True,
        check=False,
    )

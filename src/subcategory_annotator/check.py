from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from .annotate import MARKER, DocsLayout, candidate_paths, read_doc
from .errors import ScriptError
from .exit_codes import ERR_IO

if TYPE_CHECKING:
    from .config import CategoryMapping
    from .context import RunContext

CheckFunc = Callable[["CategoryMapping", DocsLayout, Path], list[str]]


@dataclass(frozen=True)
class DocsCheck:
    check_id: str
    description: str
    fn: CheckFunc
    actionable: str
    strict_only: bool = False


def _display(path: Path, repo_root: Path) -> str:
    try:
        return path.resolve().relative_to(repo_root.resolve()).as_posix()
    except ValueError:
        return str(path)


def _unassigned_pages(mapping: CategoryMapping, layout: DocsLayout, repo_root: Path) -> list[str]:
    findings: list[str] = []
    for root in layout.roots:
        if not root.is_dir():
            continue
        for md in sorted(root.glob("*.md")):
            if not md.is_file():
                continue
            try:
                text = read_doc(md)
            except (OSError, UnicodeDecodeError) as exc:
                raise ScriptError(f"cannot read {md}: {exc}", ERR_IO, kind="doc_io") from exc
            for i, line in enumerate(text.splitlines(), start=1):
                if MARKER in line:
                    findings.append(f"{_display(md, repo_root)}:{i}: empty subcategory")
    return findings


def _missing_docs(mapping: CategoryMapping, layout: DocsLayout, repo_root: Path) -> list[str]:
    findings: list[str] = []
    for category, identifiers in mapping.items():
        for identifier in identifiers:
            if not any(path.is_file() for path in candidate_paths(layout, identifier)):
                findings.append(f"{category}: {identifier} has no page under any docs root")
    return findings


def _duplicate_ids(mapping: CategoryMapping, layout: DocsLayout, repo_root: Path) -> list[str]:
    seen: dict[str, list[str]] = {}
    for category, identifiers in mapping.items():
        for identifier in identifiers:
            seen.setdefault(identifier, []).append(category)
    return [
        f"{identifier}: listed under {', '.join(categories)}"
        for identifier, categories in seen.items()
        if len(categories) > 1
    ]


DOCS_CHECKS: list[DocsCheck] = [
    DocsCheck(
        "docs-unassigned",
        "Docs pages with an empty subcategory",
        _unassigned_pages,
        "Add the page identifier under a category in the subcategory config and rerun annotate.",
    ),
    DocsCheck(
        "config-missing-docs",
        "Config identifiers without a docs page",
        _missing_docs,
        "Remove stale identifiers from the config or regenerate the docs.",
        strict_only=True,
    ),
    DocsCheck(
        "config-duplicate-ids",
        "Identifiers listed under more than one category",
        _duplicate_ids,
        "Keep each identifier under a single category; only the first one is applied.",
        strict_only=True,
    ),
]


def _row_status(check: DocsCheck, findings: list[str], strict: bool) -> str:
    if not findings:
        return "pass"
    if check.strict_only and not strict:
        return "warn"
    return "fail"


def run_checks(
    ctx: RunContext,
    mapping: CategoryMapping,
    layout: DocsLayout,
    strict: bool = False,
    checks: list[DocsCheck] | None = None,
) -> dict[str, object]:
    started_at = datetime.now(timezone.utc).isoformat()
    rows: list[dict[str, object]] = []
    for check in checks if checks is not None else DOCS_CHECKS:
        findings = check.fn(mapping, layout, ctx.repo_root)
        row: dict[str, object] = {
            "id": check.check_id,
            "description": check.description,
            "status": _row_status(check, findings, strict),
            "actionable": check.actionable,
        }
        if findings:
            row["findings"] = findings
        rows.append(row)
    ended_at = datetime.now(timezone.utc).isoformat()
    failed_count = len([r for r in rows if r["status"] == "fail"])
    return {
        "schema_version": 1,
        "tool": "subcategory-annotator",
        "run_id": ctx.run_id,
        "status": "fail" if failed_count else "pass",
        "strict": strict,
        "started_at": started_at,
        "ended_at": ended_at,
        "failed_count": failed_count,
        "total_count": len(rows),
        "checks": rows,
    }

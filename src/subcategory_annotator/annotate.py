"""Fill the empty `subcategory` frontmatter field of generated docs pages.

Each document identifier maps to at most two pages, one under the resources
docs root and one under the data-sources docs root. Pages that do not exist
are skipped without a log line; pages that exist get every
`subcategory: ""` rewritten to `subcategory: "<category>"`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from .errors import ScriptError
from .exit_codes import ERR_IO
from .logging import log_event

if TYPE_CHECKING:
    from .config import CategoryMapping
    from .context import RunContext

MARKER = 'subcategory: ""'

DEFAULT_RESOURCES_DIR = Path("docs/resources")
DEFAULT_DATA_SOURCES_DIR = Path("docs/data-sources")

OutcomeStatus = Literal["updated", "unchanged", "failed"]


@dataclass(frozen=True)
class DocsLayout:
    resources: Path
    data_sources: Path

    @property
    def roots(self) -> tuple[Path, Path]:
        return (self.resources, self.data_sources)


def tagged_marker(category: str) -> str:
    return f'subcategory: "{category}"'


def candidate_paths(layout: DocsLayout, identifier: str) -> list[Path]:
    return [root / f"{identifier}.md" for root in layout.roots]


def annotate_text(text: str, category: str) -> tuple[str, int]:
    count = text.count(MARKER)
    if count == 0:
        return text, 0
    return text.replace(MARKER, tagged_marker(category)), count


def read_doc(path: Path) -> str:
    # newline="" keeps CRLF pages byte-identical outside the marker.
    with path.open("r", encoding="utf-8", newline="") as f:
        return f.read()


def write_doc(path: Path, content: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(content)


@dataclass(frozen=True)
class FileOutcome:
    path: Path
    identifier: str
    category: str
    status: OutcomeStatus
    replacements: int = 0
    error: str = ""

    def to_dict(self, repo_root: Path) -> dict[str, object]:
        try:
            shown = self.path.resolve().relative_to(repo_root.resolve()).as_posix()
        except ValueError:
            shown = str(self.path)
        row: dict[str, object] = {
            "path": shown,
            "identifier": self.identifier,
            "category": self.category,
            "status": self.status,
            "replacements": self.replacements,
        }
        if self.error:
            row["error"] = self.error
        return row


def annotate_file(path: Path, category: str, identifier: str | None = None, dry_run: bool = False) -> FileOutcome:
    text = read_doc(path)
    updated, count = annotate_text(text, category)
    if count and not dry_run:
        write_doc(path, updated)
    return FileOutcome(
        path=path,
        identifier=identifier or path.stem,
        category=category,
        status="updated" if count else "unchanged",
        replacements=count,
    )


@dataclass
class AnnotationReport:
    dry_run: bool
    outcomes: list[FileOutcome] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    def count(self, status: OutcomeStatus) -> int:
        return len([o for o in self.outcomes if o.status == status])

    @property
    def failed(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.status == "failed"]

    def to_payload(self, ctx: RunContext) -> dict[str, object]:
        return {
            "schema_version": 1,
            "tool": "subcategory-annotator",
            "run_id": ctx.run_id,
            "status": "fail" if self.failed else "ok",
            "dry_run": self.dry_run,
            "updated_count": self.count("updated"),
            "unchanged_count": self.count("unchanged"),
            "failed_count": self.count("failed"),
            "missing": list(self.missing),
            "files": [o.to_dict(ctx.repo_root) for o in self.outcomes],
        }


def annotate_docs(
    mapping: CategoryMapping,
    layout: DocsLayout,
    *,
    dry_run: bool = False,
    continue_on_error: bool = False,
    ctx: RunContext | None = None,
) -> AnnotationReport:
    report = AnnotationReport(dry_run=dry_run)
    for category, identifiers in mapping.items():
        for identifier in identifiers:
            found = False
            for path in candidate_paths(layout, identifier):
                if not path.is_file():
                    continue
                found = True
                try:
                    outcome = annotate_file(path, category, identifier, dry_run)
                except (OSError, UnicodeDecodeError) as exc:
                    if not continue_on_error:
                        raise ScriptError(f"cannot rewrite {path}: {exc}", ERR_IO, kind="doc_io") from exc
                    outcome = FileOutcome(path, identifier, category, "failed", error=str(exc))
                report.outcomes.append(outcome)
                if ctx is not None:
                    _log_outcome(ctx, outcome, dry_run)
            if not found:
                report.missing.append(identifier)
    return report


def _log_outcome(ctx: RunContext, outcome: FileOutcome, dry_run: bool) -> None:
    shown = outcome.to_dict(ctx.repo_root)["path"]
    if outcome.status == "failed":
        log_event(ctx, "error", "annotate", "write_failed", path=shown, error=outcome.error)
    elif outcome.status == "updated" and ctx.verbose and not ctx.quiet:
        action = "would_update" if dry_run else "updated"
        log_event(ctx, "info", "annotate", action, path=shown, category=outcome.category)

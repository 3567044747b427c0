from __future__ import annotations

from pathlib import Path

import pytest

from subcategory_annotator.annotate import DocsLayout
from subcategory_annotator.check import run_checks
from subcategory_annotator.cli import main
from subcategory_annotator.context import RunContext
from subcategory_annotator.errors import ScriptError
from subcategory_annotator.exit_codes import ERR_IO
from tests.helpers import page, write_config


def _layout(repo: Path) -> DocsLayout:
    return DocsLayout(resources=repo / "docs/resources", data_sources=repo / "docs/data-sources")


def _rows(payload: dict[str, object]) -> dict[str, dict[str, object]]:
    return {row["id"]: row for row in payload["checks"]}  # type: ignore[union-attr,index]


def test_clean_tree_passes(docs_repo: Path, run_ctx: RunContext) -> None:
    (docs_repo / "docs/resources/disk.md").write_text(page("sakura_disk", "Storage"), encoding="utf-8")
    payload = run_checks(run_ctx, {"Storage": ["disk"]}, _layout(docs_repo))
    assert payload["status"] == "pass"
    assert {row["status"] for row in _rows(payload).values()} == {"pass"}


def test_unassigned_page_fails_with_line_number(docs_repo: Path, run_ctx: RunContext) -> None:
    (docs_repo / "docs/data-sources/icon.md").write_text(page("sakura_icon"), encoding="utf-8")
    payload = run_checks(run_ctx, {"Lab": ["note"]}, _layout(docs_repo))
    row = _rows(payload)["docs-unassigned"]
    assert payload["status"] == "fail"
    assert row["status"] == "fail"
    assert row["findings"] == ["docs/data-sources/icon.md:3: empty subcategory"]


def test_stale_and_duplicate_entries_warn_unless_strict(docs_repo: Path, run_ctx: RunContext) -> None:
    (docs_repo / "docs/resources/switch.md").write_text(page("sakura_switch", "Networking"), encoding="utf-8")
    mapping = {"Networking": ["switch", "gone"], "Lab": ["switch"]}

    relaxed = run_checks(run_ctx, mapping, _layout(docs_repo))
    strict = run_checks(run_ctx, mapping, _layout(docs_repo), strict=True)

    assert relaxed["status"] == "pass"
    assert _rows(relaxed)["config-missing-docs"]["status"] == "warn"
    assert _rows(relaxed)["config-missing-docs"]["findings"] == ["Networking: gone has no page under any docs root"]
    assert _rows(relaxed)["config-duplicate-ids"]["findings"] == ["switch: listed under Networking, Lab"]
    assert strict["status"] == "fail"
    assert strict["failed_count"] == 2


def test_missing_docs_roots_are_tolerated(tmp_path: Path, run_ctx: RunContext) -> None:
    layout = DocsLayout(resources=tmp_path / "absent/resources", data_sources=tmp_path / "absent/data-sources")
    payload = run_checks(run_ctx, {}, layout)
    assert payload["status"] == "pass"
    assert payload["total_count"] == 3


def test_directory_named_like_page_is_skipped(docs_repo: Path, run_ctx: RunContext) -> None:
    (docs_repo / "docs/resources/icon.md").mkdir()
    (docs_repo / "docs/data-sources/icon.md").write_text(page("sakura_icon", "Lab"), encoding="utf-8")

    payload = run_checks(run_ctx, {"Lab": ["icon"]}, _layout(docs_repo))

    assert payload["status"] == "pass"
    assert "findings" not in _rows(payload)["docs-unassigned"]


def test_non_utf8_page_is_an_io_failure(docs_repo: Path, run_ctx: RunContext) -> None:
    (docs_repo / "docs/resources/note.md").write_bytes(b"\xff\xfe subcategory: \"\"")
    with pytest.raises(ScriptError) as err:
        run_checks(run_ctx, {"Lab": ["note"]}, _layout(docs_repo))
    assert err.value.code == ERR_IO
    assert err.value.kind == "doc_io"
    assert "note.md" in str(err.value)


def test_check_after_annotate_with_page_shaped_directory(docs_repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    write_config(docs_repo, "Lab:\n  - icon\n")
    (docs_repo / "docs/resources/icon.md").mkdir()
    args = ["--repo-root", str(docs_repo), "--run-id", "t", "--quiet"]

    assert main([*args, "annotate"]) == 0
    assert main([*args, "check"]) == 0
    assert "internal error" not in capsys.readouterr().err

from __future__ import annotations

from pathlib import Path

import pytest

from subcategory_annotator.context import RunContext

_ALLOWED_MARKERS = {"unit", "integration", "slow"}


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        names = {mark.name for mark in item.iter_markers()}
        if not names.intersection(_ALLOWED_MARKERS):
            item.add_marker("unit")


@pytest.fixture
def docs_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)
    (repo / "configs/docs").mkdir(parents=True)
    (repo / "docs/resources").mkdir(parents=True)
    (repo / "docs/data-sources").mkdir(parents=True)
    return repo


@pytest.fixture
def run_ctx(docs_repo: Path) -> RunContext:
    return RunContext(
        run_id="t-unit",
        repo_root=docs_repo,
        output_format="text",
        log_json=True,
        verbose=True,
        quiet=False,
    )

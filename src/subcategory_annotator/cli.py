from __future__ import annotations

import argparse
import json
import sys

from . import __version__
from .annotate import DEFAULT_DATA_SOURCES_DIR, DEFAULT_RESOURCES_DIR, AnnotationReport, DocsLayout, annotate_docs
from .check import run_checks
from .config import DEFAULT_CONFIG, load_category_mapping
from .context import RunContext
from .errors import ScriptError
from .exit_codes import ERR_CHECK, ERR_INTERNAL, ERR_IO, ERR_USAGE, OK
from .logging import log_event

TOOL = "subcategory-annotator"


def _add_layout_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", default=str(DEFAULT_CONFIG), help="category mapping YAML, relative to the repo root")
    p.add_argument("--resources-dir", default=str(DEFAULT_RESOURCES_DIR), help="resources docs root")
    p.add_argument("--data-sources-dir", default=str(DEFAULT_DATA_SOURCES_DIR), help="data-sources docs root")
    p.add_argument("--report", choices=["text", "json"], default=None, help="print a report on stdout")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=TOOL,
        description="Fill the empty subcategory field of generated docs pages from a category mapping.",
    )
    p.add_argument("--version", action="version", version=f"{TOOL} {__version__}")
    p.add_argument("--repo-root", help="repository root; defaults to the nearest ancestor holding .git")
    p.add_argument("--run-id", help="run identifier for log events and reports")
    p.add_argument("--format", choices=["text", "json"], default="text", help="output format")
    p.add_argument("--log-json", action="store_true", help="emit log events as JSON lines")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="log every rewritten page")
    vg.add_argument("--quiet", action="store_true", help="only emit errors")
    sub = p.add_subparsers(dest="cmd")

    annotate_p = sub.add_parser("annotate", help="rewrite empty subcategory markers (default command)")
    _add_layout_args(annotate_p)
    annotate_p.add_argument("--dry-run", action="store_true", help="report pages that would change without writing")
    annotate_p.add_argument(
        "--continue-on-error",
        action="store_true",
        help="record write failures and keep going instead of aborting the run",
    )

    check_p = sub.add_parser("check", help="report pages without a subcategory and stale config entries")
    _add_layout_args(check_p)
    check_p.add_argument("--strict", action="store_true", help="treat stale and duplicate config entries as failures")

    sub.add_parser("version", help="print tool version")
    return p


def _layout(ctx: RunContext, ns: argparse.Namespace) -> DocsLayout:
    return DocsLayout(resources=ctx.resolve(ns.resources_dir), data_sources=ctx.resolve(ns.data_sources_dir))


def _report_format(ctx: RunContext, ns: argparse.Namespace, default: str | None) -> str | None:
    if ns.report:
        return ns.report
    if ctx.output_format == "json":
        return "json"
    return default


def _print_annotate_report(report: AnnotationReport, payload: dict[str, object], report_format: str) -> None:
    if report_format == "json":
        print(json.dumps(payload, sort_keys=True))
        return
    verb = "would update" if report.dry_run else "updated"
    for row in payload["files"]:  # type: ignore[union-attr]
        if row["status"] == "updated":
            print(f"{verb} {row['path']} ({row['category']})")
        elif row["status"] == "failed":
            print(f"failed {row['path']}: {row['error']}")
    print(
        "annotate: "
        f"status={payload['status']} "
        f"updated={payload['updated_count']} "
        f"unchanged={payload['unchanged_count']} "
        f"missing={len(report.missing)} "
        f"failed={payload['failed_count']}"
    )


def run_annotate_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    layout = _layout(ctx, ns)
    mapping = load_category_mapping(ctx.resolve(ns.config))
    if ctx.verbose and not ctx.quiet:
        log_event(ctx, "info", "annotate", "start", config=ns.config, categories=len(mapping), dry_run=ns.dry_run)
    report = annotate_docs(
        mapping,
        layout,
        dry_run=ns.dry_run,
        continue_on_error=ns.continue_on_error,
        ctx=ctx,
    )
    payload = report.to_payload(ctx)
    if ctx.verbose and not ctx.quiet:
        log_event(
            ctx,
            "info",
            "annotate",
            "finish",
            updated=payload["updated_count"],
            unchanged=payload["unchanged_count"],
            missing=len(report.missing),
            failed=payload["failed_count"],
            dry_run=ns.dry_run,
        )
    report_format = _report_format(ctx, ns, None)
    if report_format:
        _print_annotate_report(report, payload, report_format)
    return ERR_IO if report.failed else OK


def run_check_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    layout = _layout(ctx, ns)
    mapping = load_category_mapping(ctx.resolve(ns.config))
    payload = run_checks(ctx, mapping, layout, strict=ns.strict)
    if _report_format(ctx, ns, "text") == "json":
        print(json.dumps(payload, sort_keys=True))
    else:
        for row in payload["checks"]:  # type: ignore[union-attr]
            print(f"{row['status']:<4} {row['id']}: {row['description']}")
            for finding in row.get("findings", []):
                print(f"  - {finding}")
            if row["status"] == "fail":
                print(f"  fix: {row['actionable']}")
        print(
            "subcategory checks: "
            f"status={payload['status']} "
            f"checks={payload['total_count']} "
            f"failed={payload['failed_count']}"
        )
    return ERR_CHECK if payload["status"] == "fail" else OK


def _render_error(ctx: RunContext | None, exc: ScriptError) -> str:
    if ctx is not None and ctx.output_format == "json":
        return json.dumps(
            {
                "schema_version": 1,
                "tool": TOOL,
                "status": "fail",
                "run_id": ctx.run_id,
                "error": exc.to_dict(),
            },
            sort_keys=True,
        )
    return str(exc)


def main(argv: list[str] | None = None) -> int:
    raw_argv = list(argv) if argv is not None else sys.argv[1:]
    parser = build_parser()
    ns = parser.parse_args(raw_argv)
    if ns.cmd is None:
        ns = parser.parse_args([*raw_argv, "annotate"])
    if ns.cmd == "version":
        print(f"{TOOL} {__version__}")
        return OK
    ctx: RunContext | None = None
    try:
        ctx = RunContext.from_args(ns.run_id, ns.repo_root, ns.format, ns.log_json, ns.verbose, ns.quiet)
        if ns.cmd == "annotate":
            return run_annotate_command(ctx, ns)
        if ns.cmd == "check":
            return run_check_command(ctx, ns)
        return ERR_USAGE
    except ScriptError as exc:
        print(_render_error(ctx, exc), file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        internal = ScriptError(f"internal error: {exc}", ERR_INTERNAL, kind="internal_error")
        print(_render_error(ctx, internal), file=sys.stderr)
        return ERR_INTERNAL


if __name__ == "__main__":
    raise SystemExit(main())

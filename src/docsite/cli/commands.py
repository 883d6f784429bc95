"""CLI command implementations"""

from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session

from docsite.config import Settings, load_config
from docsite.core.lint.findings import LintReport
from docsite.core.pipeline import (
    extract_path, load_staged, run_commit, run_extract, run_lint, run_render, run_revert,
)
from docsite.crud.database import init_db, make_engine, reset_db
from docsite.crud.documents import (
    find_document,
    get_all_documents,
    get_by_collection,
    get_last_committed,
    list_collections,
)
from docsite.crud.versioning import diff_stats, diff_versions, get_version, list_versions
from docsite.logging import bind_context, configure_logging


DATE_FORMATS = ["%Y-%m-%d", "%m/%d/%Y"]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _as_date(value: Optional[datetime]) -> Optional[date]:
    return value.date() if value else None


def _echo_report(report: LintReport, fmt: str) -> None:
    """Print findings as text lines plus a summary, or as one JSON document."""
    if fmt == "json":
        typer.echo(report.model_dump_json(indent=2))
        return
    for f in report.findings:
        typer.echo(f.format())
    typer.echo(report.summary())


def _echo_commit(counts: dict, changes: list) -> None:
    """Print per-doc commit status and a summary line."""
    for status, path in changes:
        typer.echo(f"  {status}: {path}")
    typer.echo(
        f"Commit complete - "
        f"{counts['created']} created, "
        f"{counts['updated']} updated, "
        f"{counts['unchanged']} unchanged"
    )


def setup_logging(
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR")] = None,
    log_format: Annotated[Optional[str], typer.Option("--log-format", help="console or json")] = None,
    ):
    """Markdown documentation linting and site pipeline."""
    settings = _settings(overrides={"log_level": log_level, "log_format": log_format})
    configure_logging(settings.log_level, settings.log_format)
    bind_context(app=settings.app_name)


def build_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to process")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    versions: Annotated[Optional[int], typer.Option("--max-versions", help="Max stored versions per doc")] = None,
    as_of: Annotated[Optional[datetime], typer.Option("--as-of", formats=DATE_FORMATS, help="Reference date for the future-date check")] = None,
    no_lint: Annotated[bool, typer.Option("--no-lint", help="Skip lint checks")] = False,
    ):
    """Run the full pipeline: extract -> lint -> commit -> render."""
    settings = _settings(overrides={
        "output_dir": out, "staging_dir": staging,
        "parser_config": parser, "max_versions": versions,
    })
    engine = make_engine(settings.db_url)
    init_db(engine)
    staging_dir = Path(settings.staging_dir)

    # --- extract ---
    try:
        extracted = run_extract(path, settings.parser_config, staging_dir)
    except RuntimeError as e:
        _fail(str(e))
    typer.echo(f"Extracted {len(extracted)} document(s) to {staging_dir}/")

    # --- lint ---
    if not no_lint:
        report = run_lint(load_staged(staging_dir), _as_date(as_of), settings.required_fields)
        _echo_report(report, "text")
        if not report.ok:
            _fail(f"Lint failed with {report.errors} error(s); nothing committed")

    # --- commit ---
    try:
        counts, changes = run_commit(engine, settings.max_versions, staging_dir)
    except Exception as e:
        _fail("Commit failed", e)
    if counts:
        _echo_commit(counts, changes)

    # --- render ---
    output_dir = Path(settings.output_dir)
    try:
        with Session(engine) as session:
            results = run_render(
                session, get_all_documents(session), output_dir,
                settings.parser_config, settings.site_title, settings.toc_depth,
            )
    except Exception as e:
        _fail("Render failed", e)
    typer.echo(f"Rendered {len(results)} page(s) to {output_dir}/")


def extract_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to extract from")],
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Recursively extract front matter, blocks, links, and code samples."""
    settings = _settings(overrides={"staging_dir": staging, "parser_config": parser})
    staging_dir = Path(settings.staging_dir)
    try:
        results = run_extract(path, settings.parser_config, staging_dir)
    except RuntimeError as e:
        _fail(str(e))
    for src, out_file in results:
        typer.echo(f"  {src} -> {out_file}")
    typer.echo(f"Extracted {len(results)} document(s) to {staging_dir}/")


def lint_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to check")],
    as_of: Annotated[Optional[datetime], typer.Option("--as-of", formats=DATE_FORMATS, help="Reference date for the future-date check")] = None,
    fmt: Annotated[str, typer.Option("--format", help="text or json")] = "text",
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Check front matter, relative links, code samples, and dates. Exits 1 on errors."""
    if fmt not in ("text", "json"):
        _fail(f"Unknown format '{fmt}' (expected text or json)")
    settings = _settings(overrides={"parser_config": parser})
    try:
        docs = extract_path(path, settings.parser_config)
    except RuntimeError as e:
        _fail(str(e))
    if not docs:
        typer.echo("No markdown files found.")
        raise typer.Exit(1)

    report = run_lint(docs, _as_date(as_of), settings.required_fields)
    _echo_report(report, fmt)
    if not report.ok:
        raise typer.Exit(1)


def commit_cmd(
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    versions: Annotated[Optional[int], typer.Option("--max-versions", help="Max stored versions per doc")] = None,
    ):
    """Upsert staged documents to the database."""
    settings = _settings(overrides={"staging_dir": staging, "max_versions": versions})
    engine = make_engine(settings.db_url)
    init_db(engine)
    staging_dir = Path(settings.staging_dir)

    try:
        counts, changes = run_commit(engine, settings.max_versions, staging_dir)
    except Exception as e:
        _fail("Commit failed", e)
    if not counts:
        typer.echo("Nothing staged. Run 'docsite extract <path>' first.")
        raise typer.Exit(1)

    _echo_commit(counts, changes)


def render_cmd(
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    collection: Annotated[Optional[str], typer.Option("--collection", help="Render docs under this top-level directory")] = None,
    all_docs: Annotated[bool, typer.Option("--all", help="Render all documents in the database")] = False,
    ):
    """Write HTML pages + sidecar JSON and the navigation index to the output dir."""
    settings = _settings(overrides={"output_dir": out})
    engine = make_engine(settings.db_url)
    init_db(engine)
    output_dir = Path(settings.output_dir)

    try:
        with Session(engine) as session:
            if all_docs:
                docs = get_all_documents(session)
                scope = "all"
            elif collection:
                docs = get_by_collection(session, collection)
                scope = f"collection '{collection}'"
            else:
                docs = get_last_committed(session)
                scope = "last commit"

            if not docs:
                typer.echo(f"No documents found for scope: {scope}.")
                raise typer.Exit(1)

            results = run_render(
                session, docs, output_dir,
                settings.parser_config, settings.site_title, settings.toc_depth,
            )
    except typer.Exit:
        raise
    except Exception as e:
        _fail("Render failed", e)

    for path, html_file in results:
        typer.echo(f"  {path} -> {html_file}")
    typer.echo(f"Rendered {len(results)} page(s) to {output_dir}/")


def list_cmd():
    """List top-level directories (collections) that contain documents in the database."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        cols = list_collections(session)
    if not cols:
        typer.echo("No documents found in database.")
        raise typer.Exit(1)
    for c in cols:
        typer.echo(c)


def history_cmd(
    doc_key: Annotated[str, typer.Argument(metavar="PATH", help="Document path (root-relative) or slug")],
    ):
    """List the stored versions of a document."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        doc = find_document(session, doc_key)
        if doc is None:
            _fail(f"No document '{doc_key}' in database")
        versions = list_versions(session, doc.id)
        if not versions:
            typer.echo(f"No stored versions for {doc.path}.")
            return
        for v in versions:
            typer.echo(f"  v{v.version_num}  {v.created_at:%Y-%m-%d %H:%M:%S}  {v.hash[:12]}")


def diff_cmd(
    doc_key: Annotated[str, typer.Argument(metavar="PATH", help="Document path (root-relative) or slug")],
    from_num: Annotated[int, typer.Argument(help="Older version number")],
    to_num: Annotated[int, typer.Argument(help="Newer version number")],
    ):
    """Show a unified diff between two stored versions of a document."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        doc = find_document(session, doc_key)
        if doc is None:
            _fail(f"No document '{doc_key}' in database")
        try:
            lines = diff_versions(session, doc.id, from_num, to_num)
            stats = diff_stats(
                get_version(session, doc.id, from_num).markdown,
                get_version(session, doc.id, to_num).markdown,
            )
        except ValueError as e:
            _fail(str(e))
    if not lines:
        typer.echo("No differences.")
        return
    typer.echo("".join(lines), nl=False)
    typer.echo(f"{stats['added']} added, {stats['deleted']} deleted, {stats['unchanged']} unchanged")


def revert_cmd(
    doc_key: Annotated[str, typer.Argument(metavar="PATH", help="Document path (root-relative) or slug")],
    version_num: Annotated[int, typer.Argument(help="Version number to restore")],
    versions: Annotated[Optional[int], typer.Option("--max-versions", help="Max stored versions per doc")] = None,
    ):
    """Restore a stored version as the current content (the current state is kept as a version)."""
    settings = _settings(overrides={"max_versions": versions})
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        doc = find_document(session, doc_key)
        if doc is None:
            _fail(f"No document '{doc_key}' in database")
        try:
            run_revert(session, doc, version_num, settings.max_versions, settings.parser_config)
        except ValueError as e:
            _fail(str(e))
        session.commit()
        typer.echo(f"Reverted {doc.path} to v{version_num}")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing data cleared.")
    else:
        init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")

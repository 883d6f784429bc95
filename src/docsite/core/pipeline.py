"""Pipeline step functions: extract, lint, commit, render, and revert orchestration"""

from datetime import date, datetime
from pathlib import Path

from sqlmodel import Session

from docsite.core.export import build_navigation, make_environment, write_doc, write_index
from docsite.core.extract.extract import extract_doc
from docsite.core.lint.findings import LintReport
from docsite.core.lint.links import resolve_target, split_target
from docsite.core.lint.runner import lint_documents
from docsite.core.models import ParsedDoc, StagedDoc, parse_doc_date
from docsite.core.parse import content_root, discover_files, make_parser, parse_file
from docsite.core.utils.hashing import content_hash, sha256
from docsite.core.utils.slug import slugify
from docsite.crud.documents import commit_doc, get_all_documents, replace_links
from docsite.crud.models import Document
from docsite.crud.versioning import revert_to_version
from docsite.logging import get_logger


logger = get_logger(__name__)


def _stored_links(staged: StagedDoc) -> list[dict]:
    """Relative links resolved to root-relative paths, the form backlinks are queried by."""
    links = []
    for link in staged.links:
        if link.is_external or link.is_anchor:
            continue
        target_path, _ = split_target(link.target)
        if target_path:
            links.append({
                "target": resolve_target(staged.path, target_path),
                "kind": link.kind.value,
                "line": link.line,
            })
    return links


def _process(staged: StagedDoc) -> dict:
    """Flatten a StagedDoc into the dict commit_doc stores."""
    meta = staged.meta
    try:
        doc_date = parse_doc_date(meta.ms_date) if meta.ms_date is not None else None
    except ValueError:
        doc_date = None
    return {
        "slug": staged.slug,
        "path": staged.path,
        "root": staged.root,
        "title": meta.title,
        "description": meta.description,
        "doc_date": doc_date,
        "markdown": staged.markdown,
        "hash": content_hash(staged.markdown, staged.frontmatter),
        "frontmatter": staged.frontmatter,
        "links": _stored_links(staged),
    }


def extract_path(path: str, parser_config: str = "gfm-like") -> list[StagedDoc]:
    """Parse and extract every markdown file under path, in memory."""
    target = Path(path)
    if not target.exists():
        raise RuntimeError(f"Path not found: {path}")
    root = content_root(target)
    staged = []
    for p in discover_files(target):
        try:
            staged.append(extract_doc(parse_file(p, root, parser_config)))
        except Exception as e:
            raise RuntimeError(f"Failed to extract {p}: {e}") from e
    return staged


def run_extract(
    path: str,
    parser_config: str,
    staging_dir: Path,
    ) -> list[tuple[str, Path]]:
    """Parse path and write StagedDoc JSON to staging_dir. Returns (source_path, staging_file) pairs.

    Earlier staging files are cleared so a commit only sees this extraction.
    """
    docs = extract_path(path, parser_config)
    try:
        staging_dir.mkdir(parents=True, exist_ok=True)
        for old in staging_dir.glob('*.json'):
            old.unlink()
    except OSError as e:
        raise RuntimeError(f"Cannot prepare staging directory {staging_dir}: {e}") from e

    results = []
    for staged in docs:
        out_file = staging_dir / staging_name(staged)
        try:
            out_file.write_text(staged.model_dump_json(indent=2), encoding='utf-8')
        except OSError as e:
            raise RuntimeError(f"Failed to stage {staged.path}: {e}") from e
        logger.info("doc.extracted", path=staged.path, staging=str(out_file))
        results.append((staged.path, out_file))
    return results


def staging_name(staged: StagedDoc) -> str:
    """Flat file name for a staged doc; front matter slugs may hold '/' or other path characters."""
    label = slugify(staged.slug.replace("/", " ")) or "doc"
    return f"{sha256(staged.path)[:16]}-{label}.json"


def load_staged(staging_dir: Path) -> list[StagedDoc]:
    """Read every staged document, ordered by path."""
    files = sorted(staging_dir.glob('*.json')) if staging_dir.exists() else []
    docs = [StagedDoc.model_validate_json(f.read_text(encoding='utf-8')) for f in files]
    return sorted(docs, key=lambda d: d.path)


def run_lint(
    docs: list[StagedDoc],
    as_of: date | None = None,
    required_fields: list[str] | None = None,
    ) -> LintReport:
    report = lint_documents(docs, as_of=as_of, required_fields=required_fields)
    logger.info("lint.done", documents=report.documents, errors=report.errors, warnings=report.warnings)
    return report


def run_commit(
    engine,
    max_versions: int,
    staging_dir: Path,
    ) -> tuple[dict[str, int], list[tuple[str, str]]]:
    """Read staged StagedDoc JSON, process, and commit to database.

    Returns (counts, changes) where changes is a list of (status, path) for
    created/updated docs. Returns ({}, []) when staging_dir is empty.
    """
    docs = load_staged(staging_dir)
    if not docs:
        return {}, []

    committed_at = datetime.now()
    counts = {"created": 0, "updated": 0, "unchanged": 0}
    changes = []
    with Session(engine) as session:
        for staged in docs:
            doc, status = commit_doc(session, _process(staged), max_versions, committed_at)
            counts[status] += 1
            if status != 'unchanged':
                changes.append((status, doc.path))
        session.commit()
    return counts, changes


def run_render(
    session: Session,
    docs: list[Document],
    output_dir: Path,
    parser_config: str = "gfm-like",
    site_title: str = "Documentation",
    toc_depth: int = 3,
    ) -> list[tuple[str, Path]]:
    """Write pages for docs plus the index (built from every stored doc). Returns (path, html_path) pairs."""
    env = make_environment()
    md = make_parser(parser_config)
    nav = build_navigation(get_all_documents(session))

    results = []
    for doc in docs:
        html_file, _ = write_doc(doc, session, output_dir, env, md, nav, site_title, toc_depth)
        results.append((doc.path, html_file))
    write_index(nav, output_dir, env, site_title)
    return results


def run_revert(session: Session, doc: Document, version_num: int, max_versions: int, parser_config: str = "gfm-like") -> Document:
    """Revert doc to a stored version and re-derive its link rows from the restored content.

    Flushes but does not commit; caller controls the transaction.
    """
    revert_to_version(session, doc, version_num, max_versions)
    staged = extract_doc(_parse_stored(doc, parser_config))
    replace_links(session, doc.id, _stored_links(staged))
    return doc


def _parse_stored(doc: Document, parser_config: str) -> ParsedDoc:
    """ParsedDoc for stored content, as if it were the file at doc.path."""
    root = Path(doc.root)
    return ParsedDoc(
        path=root / doc.path,
        root=root,
        slug=doc.slug,
        raw_markdown=doc.markdown,
        markdown=doc.markdown,
        frontmatter=doc.frontmatter or {},
        tokens=make_parser(parser_config).parse(doc.markdown),
    )

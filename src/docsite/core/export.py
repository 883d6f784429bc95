"""Site export: navigation, sidecar JSON, and HTML pages written through Jinja2 templates"""

import json
import posixpath
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markdown_it import MarkdownIt
from sqlmodel import Session

from docsite.core.models import Heading
from docsite.core.render import render_document
from docsite.crud.documents import collection_key, get_backlinks, get_links
from docsite.crud.models import Document
from docsite.logging import get_logger


TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
INDEX_FILE = "toc.html"

logger = get_logger(__name__)


@dataclass
class Navigation:
    """Documents grouped into collections, each ordered by title, with prev/next neighbours."""
    collections: dict[str, list[Document]] = field(default_factory=dict)
    prev: dict[str, Document | None] = field(default_factory=dict)
    next: dict[str, Document | None] = field(default_factory=dict)


def display_title(doc: Document) -> str:
    return doc.title or doc.slug


def html_path(doc_path: str) -> str:
    """Root-relative output path of a document's page."""
    return str(PurePosixPath(doc_path).with_suffix('.html'))


def page_href(from_page: str, to_page: str) -> str:
    """Relative href from one output page to another."""
    return posixpath.relpath(to_page, posixpath.dirname(from_page) or '.')


def build_navigation(docs: list[Document]) -> Navigation:
    nav = Navigation()
    for doc in docs:
        nav.collections.setdefault(collection_key(doc.path), []).append(doc)
    nav.collections = dict(sorted(nav.collections.items(), key=lambda kv: (kv[0] != '.', kv[0])))

    for members in nav.collections.values():
        members.sort(key=lambda d: (display_title(d).lower(), d.path))
        for i, doc in enumerate(members):
            nav.prev[doc.path] = members[i - 1] if i > 0 else None
            nav.next[doc.path] = members[i + 1] if i + 1 < len(members) else None
    return nav


def build_sidecar(doc: Document, headings: list[Heading], links: list) -> dict:
    """Page metadata: identity, front matter, headings, and outgoing relative links."""
    return {
        "slug": doc.slug,
        "path": doc.path,
        "title": doc.title,
        "description": doc.description,
        "date": doc.doc_date.isoformat() if doc.doc_date else None,
        "committed_at": doc.committed_at.isoformat() if doc.committed_at else None,
        "frontmatter": doc.frontmatter or {},
        "headings": [h.model_dump() for h in headings],
        "links": [{"target": l.target, "kind": l.kind, "line": l.line} for l in links],
    }


def make_environment(template_dir: Path = TEMPLATE_DIR) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["href"] = page_href
    return env


def write_doc(
    doc: Document,
    session: Session,
    output_dir: Path,
    env: Environment,
    md: MarkdownIt,
    nav: Navigation,
    site_title: str = "Documentation",
    toc_depth: int = 3,
    ) -> tuple[Path, Path]:
    """Write the HTML page + sidecar JSON for a single document.

    Output mirrors the source tree: output_dir / <path>.html and .json.
    Returns (html_path, json_path).
    """
    page = html_path(doc.path)
    dest = output_dir / page
    dest.parent.mkdir(parents=True, exist_ok=True)

    body, headings = render_document(md, doc.markdown, Path(doc.root) / doc.path)
    links = get_links(session, doc.id)
    html = env.get_template("page.html").render(
        doc=doc,
        page=page,
        body=body,
        site_title=site_title,
        title=display_title(doc),
        show_title=not any(h.level == 1 for h in headings),
        toc=[h for h in headings if 2 <= h.level <= toc_depth],
        prev=nav.prev.get(doc.path),
        next=nav.next.get(doc.path),
        backlinks=get_backlinks(session, doc.path),
        index=page_href(page, INDEX_FILE),
        html_path=html_path,
        display_title=display_title,
    )

    json_path = dest.with_suffix('.json')
    dest.write_text(html, encoding='utf-8')
    json_path.write_text(json.dumps(build_sidecar(doc, headings, links), indent=2), encoding='utf-8')
    logger.info("page.rendered", path=doc.path, output=str(dest))
    return dest, json_path


def write_index(nav: Navigation, output_dir: Path, env: Environment, site_title: str = "Documentation") -> Path:
    """Write the index page listing every collection and its documents."""
    output_dir.mkdir(parents=True, exist_ok=True)
    dest = output_dir / INDEX_FILE
    dest.write_text(
        env.get_template("index.html").render(
            site_title=site_title,
            collections=nav.collections,
            html_path=html_path,
            display_title=display_title,
        ),
        encoding='utf-8',
    )
    return dest

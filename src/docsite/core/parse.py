"""File discovery, frontmatter extraction, and markdown-it tokenization"""

import re
from pathlib import Path
from typing import Any

import yaml
from markdown_it import MarkdownIt

from docsite.core.models import ParsedDoc
from docsite.core.utils.slug import path_slug
from docsite.logging import get_logger


FRONTMATTER_RE = re.compile(r'^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)', re.DOTALL)
MD_EXTENSIONS = {'.md', '.mdx'}

logger = get_logger(__name__)


class FrontmatterError(ValueError):
    """The YAML header exists but is not a valid mapping."""


def make_parser(preset: str = 'gfm-like') -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with YAML header removed. Raises FrontmatterError."""
    m = FRONTMATTER_RE.match(text)
    if m:
        try:
            fm = yaml.safe_load(m.group(1)) or {}
        except (yaml.YAMLError, ValueError) as e:
            # impossible dates (2024-02-30) surface as ValueError from the YAML constructor
            raise FrontmatterError(f"Invalid YAML frontmatter: {e}") from e
        if not isinstance(fm, dict):
            raise FrontmatterError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
        return fm, text[m.end():]
    return {}, text


def _header_lines(text: str) -> int:
    """Number of source lines taken by the frontmatter block (0 if none)."""
    m = FRONTMATTER_RE.match(text)
    return text[:m.end()].count('\n') if m else 0


def discover_files(path: Path) -> list[Path]:
    """Return sorted .md/.mdx files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix.lower() in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix.lower() in MD_EXTENSIONS)


def content_root(path: Path) -> Path:
    """The directory document paths are made relative to."""
    path = path.resolve()
    return path.parent if path.is_file() else path


def parse_file(path: Path, root: Path | None = None, parser_config: str = 'gfm-like') -> ParsedDoc:
    """Parse a single markdown file into a ParsedDoc with token stream.

    An unparseable YAML header is not fatal: the error is recorded on the
    result and the header block is still left out of the body.
    """
    path = path.resolve()
    root = (root or path.parent).resolve()
    raw = path.read_text(encoding='utf-8')
    error = None
    offset = _header_lines(raw)
    try:
        frontmatter, body = strip_frontmatter(raw)
    except FrontmatterError as e:
        logger.warning("frontmatter.invalid", path=str(path), error=str(e))
        frontmatter, body, error = {}, raw[FRONTMATTER_RE.match(raw).end():], str(e)

    tokens = make_parser(parser_config).parse(body)
    rel = path.relative_to(root).as_posix()
    slug = str(frontmatter.get('slug') or path_slug(rel))
    return ParsedDoc(
        path=path,
        root=root,
        slug=slug,
        raw_markdown=raw,
        markdown=body,
        frontmatter=frontmatter,
        tokens=tokens,
        body_offset=offset,
        frontmatter_error=error,
    )


def parse_dir(path: Path, parser_config: str = 'gfm-like') -> list[ParsedDoc]:
    """Parse all .md/.mdx files under path (file or directory)."""
    root = content_root(path)
    return [parse_file(p, root, parser_config) for p in discover_files(path)]

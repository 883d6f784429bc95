"""Markdown to HTML rendering: directive preprocessing and markdown-it token transforms"""

import os
import re
from pathlib import Path, PurePosixPath
from typing import Callable
from urllib.parse import unquote, urlsplit, urlunsplit

from markdown_it import MarkdownIt
from markdown_it.token import Token

from docsite.core.extract.directives import IMAGE_END_RE, IMAGE_RE, INCLUDE_RE, parse_attrs
from docsite.core.models import Heading
from docsite.core.parse import FrontmatterError, strip_frontmatter
from docsite.core.utils.slug import anchor_id
from docsite.core.utils.tokens import heading_level, inline_text
from docsite.logging import get_logger


MAX_INCLUDE_DEPTH = 5
FENCE_RE = re.compile(r'^ {0,3}(?P<marker>`{3,}|~{3,})')
ALERT_MARKER_RE = re.compile(r'^\[!(?P<kind>NOTE|TIP|IMPORTANT|CAUTION|WARNING)\][ \t]*\n?', re.IGNORECASE)
MD_SUFFIXES = {'.md', '.mdx'}
INLINE_TARGET_RE = re.compile(r'(\]\(\s*<?)([^)\s>]+)')
REF_DEF_RE = re.compile(r'^( {0,3}\[[^\]]+\]:[ \t]*<?)(\S+?)(>?(?:[ \t]|$))', re.MULTILINE)
SOURCE_ATTR_RE = re.compile(r'(\bsource=")([^"]*)(")')

logger = get_logger(__name__)


def map_outside_fences(text: str, fn: Callable[[str], str]) -> str:
    """Apply fn to each run of lines that is not inside a fenced code block."""
    out: list[str] = []
    chunk: list[str] = []
    fence: str | None = None

    for line in text.splitlines(keepends=True):
        m = FENCE_RE.match(line)
        if fence is None:
            if m:
                out.append(fn(''.join(chunk)))
                chunk = []
                fence = m.group('marker')
                out.append(line)
            else:
                chunk.append(line)
        else:
            out.append(line)
            if m and m.group('marker')[0] == fence[0] and len(m.group('marker')) >= len(fence) \
                    and not line.strip()[len(m.group('marker')):].strip():
                fence = None
    out.append(fn(''.join(chunk)))
    return ''.join(out)


def expand_includes(body: str, source: Path, depth: int = 0) -> str:
    """Inline [!INCLUDE [label](path)] targets relative to source, frontmatter stripped."""
    def _replace(m: re.Match) -> str:
        rel = m.group('path')
        if depth >= MAX_INCLUDE_DEPTH:
            logger.warning("include.too_deep", source=str(source), target=rel)
            return f"<!-- include too deep: {rel} -->"
        target = source.parent / unquote(rel)
        if not target.is_file():
            logger.warning("include.missing", source=str(source), target=rel)
            return f"<!-- missing include: {rel} -->"
        text = target.read_text(encoding='utf-8')
        try:
            _, text = strip_frontmatter(text)
        except FrontmatterError:
            pass
        text = expand_includes(text.strip('\n'), target, depth + 1)
        return rebase_links(text, target.parent, source.parent)

    return map_outside_fences(body, lambda chunk: INCLUDE_RE.sub(_replace, chunk))


def rebase_href(href: str, base: Path, here: Path) -> str:
    """Re-express a relative href written in directory base so it resolves from directory here."""
    parts = urlsplit(href)
    if parts.scheme or parts.netloc or not parts.path or parts.path.startswith('/'):
        return href
    target = os.path.normpath(os.path.join(base, unquote(parts.path)))
    path = Path(os.path.relpath(target, here)).as_posix()
    if parts.path.endswith('/'):
        path += '/'
    return urlunsplit(('', '', path.replace(' ', '%20'), parts.query, parts.fragment))


def rebase_links(text: str, base: Path, here: Path) -> str:
    """Rebase inline link, reference definition, and :::image::: source targets outside fences."""
    if os.path.normpath(base) == os.path.normpath(here):
        return text

    def _target(m: re.Match) -> str:
        return m.group(1) + rebase_href(m.group(2), base, here) + (m.group(3) if m.re.groups > 2 else '')

    def _image(m: re.Match) -> str:
        return SOURCE_ATTR_RE.sub(_target, m.group(0))

    def _chunk(chunk: str) -> str:
        chunk = INLINE_TARGET_RE.sub(_target, chunk)
        chunk = REF_DEF_RE.sub(_target, chunk)
        return IMAGE_RE.sub(_image, chunk)

    return map_outside_fences(text, _chunk)


def convert_image_directives(body: str) -> str:
    """Turn :::image ...::: into markdown images and drop :::image-end::: markers."""
    def _image(m: re.Match) -> str:
        attrs = parse_attrs(m.group('attrs'))
        alt = attrs.get('alt-text', '').replace(']', r'\]')
        return f"![{alt}]({attrs.get('source', '')})"

    def _chunk(chunk: str) -> str:
        lines = [l for l in chunk.splitlines(keepends=True) if not IMAGE_END_RE.match(l)]
        return IMAGE_RE.sub(_image, ''.join(lines))

    return map_outside_fences(body, _chunk)


def preprocess(body: str, source: Path) -> str:
    return convert_image_directives(expand_includes(body, source))


def rewrite_href(href: str) -> str:
    """Point relative .md/.mdx links at the rendered .html page."""
    parts = urlsplit(href)
    if parts.scheme or parts.netloc or not parts.path:
        return href
    path = PurePosixPath(parts.path)
    if path.suffix.lower() not in MD_SUFFIXES:
        return href
    return urlunsplit(('', '', str(path.with_suffix('.html')), parts.query, parts.fragment))


def _anchor_headings(tokens: list[Token]) -> list[Heading]:
    seen: dict[str, int] = {}
    headings = []
    for i, tok in enumerate(tokens):
        level = heading_level(tok)
        if level is None or i + 1 >= len(tokens):
            continue
        text = inline_text(tokens[i + 1]).strip()
        anchor = anchor_id(text, seen)
        tok.attrSet('id', anchor)
        headings.append(Heading(level=level, text=text, anchor=anchor))
    return headings


def _mark_alerts(md: MarkdownIt, tokens: list[Token], env: dict) -> list[Token]:
    """Style [!NOTE]-style blockquotes as alerts, replacing the marker with a title."""
    result: list[Token] = []
    for i, tok in enumerate(tokens):
        result.append(tok)
        if tok.type != 'blockquote_open' or i + 2 >= len(tokens):
            continue
        para, inline = tokens[i + 1], tokens[i + 2]
        if para.type != 'paragraph_open' or inline.type != 'inline':
            continue
        m = ALERT_MARKER_RE.match(inline.content)
        if not m:
            continue

        kind = m.group('kind').lower()
        tok.attrJoin('class', f"alert alert-{kind}")
        result.append(Token('html_block', '', 0, content=f'<p class="alert-title">{kind.capitalize()}</p>\n'))
        rest = inline.content[m.end():]
        if rest.strip():
            inline.content = rest
            inline.children = md.parseInline(rest, env)[0].children
        else:
            inline.content = ''
            inline.children = []
            para.hidden = True
            tokens[i + 3].hidden = True
    return result


def _rewrite_links(tokens: list[Token]) -> None:
    for tok in tokens:
        if tok.type != 'inline' or not tok.children:
            continue
        for child in tok.children:
            if child.type == 'link_open' and child.attrGet('href'):
                child.attrSet('href', rewrite_href(str(child.attrGet('href'))))


def render_markdown(md: MarkdownIt, body: str) -> tuple[str, list[Heading]]:
    """Render a preprocessed body to HTML; returns (html, headings with their anchor ids)."""
    env: dict = {}
    tokens = md.parse(body, env)
    tokens = _mark_alerts(md, tokens, env)
    headings = _anchor_headings(tokens)
    _rewrite_links(tokens)
    return md.renderer.render(tokens, md.options, env), headings


def render_document(md: MarkdownIt, body: str, source: Path) -> tuple[str, list[Heading]]:
    """Preprocess directives relative to the source file, then render."""
    return render_markdown(md, preprocess(body, source))

"""Link, image, and heading collection from markdown-it inline tokens"""

from docsite.core.models import Heading, Link, LinkKind
from docsite.core.utils.slug import anchor_id
from docsite.core.utils.tokens import heading_level, inline_text, source_line


def _walk_inline(tokens: list):
    """Yield (inline_token, child) pairs for every inline child in the stream."""
    for tok in tokens:
        if tok.type == 'inline' and tok.children:
            for child in tok.children:
                yield tok, child


def collect_links(tokens: list, offset: int = 0) -> list[Link]:
    """Return link and image targets in document order."""
    links: list[Link] = []
    for parent, child in _walk_inline(tokens):
        if child.type == 'link_open':
            href = child.attrGet('href')
            kind = LinkKind.link
        elif child.type == 'image':
            href = child.attrGet('src')
            kind = LinkKind.image
        else:
            continue
        if href:
            links.append(Link(target=str(href), kind=kind, line=source_line(parent, offset)))
    return links


def collect_headings(tokens: list, offset: int = 0) -> list[Heading]:
    """Return headings with de-duplicated anchor ids."""
    seen: dict[str, int] = {}
    headings: list[Heading] = []
    for i, tok in enumerate(tokens):
        level = heading_level(tok)
        if level is None or i + 1 >= len(tokens):
            continue
        text = inline_text(tokens[i + 1]).strip()
        headings.append(Heading(
            level=level, text=text, anchor=anchor_id(text, seen), line=source_line(tok, offset),
        ))
    return headings

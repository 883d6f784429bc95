"""Documentation-platform directive syntax: INCLUDE, :::image:::, and [!NOTE] alerts"""

import re

from docsite.core.models import Directive, Link, LinkKind


INCLUDE_RE = re.compile(r'\[!INCLUDE\s*\[(?P<label>[^\]]*)\]\((?P<path>[^)\s]+)\)\s*\]', re.IGNORECASE)
IMAGE_RE = re.compile(r':::image\s+(?P<attrs>.*?):::', re.IGNORECASE)
IMAGE_END_RE = re.compile(r'^\s*:::image-end:::\s*$', re.IGNORECASE)
ALERT_RE = re.compile(r'^\s*>\s*\[!(?P<kind>NOTE|TIP|IMPORTANT|CAUTION|WARNING)\]', re.IGNORECASE)
ATTR_RE = re.compile(r'(?P<key>[\w-]+)="(?P<value>[^"]*)"')

ALERT_KINDS = ('note', 'tip', 'important', 'caution', 'warning')


def parse_attrs(text: str) -> dict[str, str]:
    """Parse key="value" pairs from a directive body."""
    return {m.group('key'): m.group('value') for m in ATTR_RE.finditer(text)}


def fenced_lines(tokens: list) -> set[int]:
    """0-based body line numbers covered by fenced or indented code blocks."""
    lines: set[int] = set()
    for tok in tokens:
        if tok.type in ('fence', 'code_block') and tok.map:
            lines.update(range(tok.map[0], tok.map[1]))
    return lines


def scan_directives(body: str, tokens: list, offset: int = 0) -> tuple[list[Directive], list[Link]]:
    """Find directives in the body outside code blocks.

    Returns the directives plus the links they imply (include targets and
    image sources), so link checking covers them too.
    """
    skip = fenced_lines(tokens)
    directives: list[Directive] = []
    links: list[Link] = []

    for i, line in enumerate(body.splitlines()):
        if i in skip:
            continue
        lineno = i + 1 + offset

        for m in INCLUDE_RE.finditer(line):
            directives.append(Directive(
                name='INCLUDE', args={'label': m.group('label'), 'path': m.group('path')}, line=lineno,
            ))
            links.append(Link(target=m.group('path'), kind=LinkKind.include, line=lineno))

        for m in IMAGE_RE.finditer(line):
            attrs = parse_attrs(m.group('attrs'))
            directives.append(Directive(name='image', args=attrs, line=lineno))
            if attrs.get('source'):
                links.append(Link(target=attrs['source'], kind=LinkKind.image, line=lineno))

        m = ALERT_RE.match(line)
        if m:
            directives.append(Directive(name=m.group('kind').upper(), line=lineno))

    return directives, links

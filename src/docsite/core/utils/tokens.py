"""Shared markdown-it token utilities"""


def heading_level(token) -> int | None:
    """Return the heading level (1-6) for a heading_open token, else None."""
    if token.type == 'heading_open' and token.tag and token.tag[0] == 'h' and token.tag[1:].isdigit():
        return int(token.tag[1:])
    return None


def source_line(token, offset: int = 0) -> int | None:
    """1-based source line of a block token (token.map is 0-based), shifted by offset."""
    if token.map:
        return token.map[0] + 1 + offset
    return None


def inline_text(token) -> str:
    """Plain text of an inline token: text and code spans joined, markup dropped."""
    if not token.children:
        return token.content
    parts = []
    for child in token.children:
        if child.type in ('text', 'code_inline', 'html_inline'):
            parts.append(child.content)
        elif child.type in ('softbreak', 'hardbreak'):
            parts.append(' ')
    return ''.join(parts)

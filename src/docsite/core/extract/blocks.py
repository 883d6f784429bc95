"""Token-to-block conversion using source line positions"""

from docsite.core.extract.directives import ALERT_RE, IMAGE_RE, INCLUDE_RE
from docsite.core.models import BlockType, StagedBlock
from docsite.core.utils.tokens import heading_level, source_line


BLOCK_TYPE_MAP: dict[str, BlockType] = {
    'heading_open':      BlockType.heading,
    'bullet_list_open':  BlockType.list,
    'ordered_list_open': BlockType.list,
    'fence':             BlockType.code,
    'code_block':        BlockType.code,
    'table_open':        BlockType.table,
    'html_block':        BlockType.html,
    'blockquote_open':   BlockType.quote,
}


def _first_inline(tokens: list, i: int):
    """Return the first inline token after index i, or None."""
    for tok in tokens[i + 1:]:
        if tok.type == 'inline':
            return tok
    return None


def _para_type(tokens: list, i: int) -> BlockType:
    """Classify the paragraph at i: directive, figure (image only), or plain paragraph."""
    inline = _first_inline(tokens, i)
    if inline is None:
        return BlockType.paragraph
    text = inline.content.strip()
    if INCLUDE_RE.fullmatch(text) or IMAGE_RE.match(text):
        return BlockType.directive
    if inline.children:
        non_ws = [c for c in inline.children if c.type not in ('softbreak', 'hardbreak')]
        if len(non_ws) == 1 and non_ws[0].type == 'image':
            return BlockType.figure
    return BlockType.paragraph


def _quote_type(tokens: list, i: int) -> BlockType:
    """A blockquote whose first line is a [!NOTE]-style marker is an alert."""
    inline = _first_inline(tokens, i)
    if inline is not None and ALERT_RE.match('> ' + inline.content):
        return BlockType.alert
    return BlockType.quote


def _source_slice(token, source_lines: list[str]) -> str:
    """Extract raw source for a block via token.map; fallback to token.content."""
    if token.map:
        start, end = token.map
        return ''.join(source_lines[start:end]).rstrip()
    return token.content.rstrip()


def tokens_to_blocks(tokens: list, source_lines: list[str], offset: int = 0) -> list[StagedBlock]:
    """Convert top-level tokens to typed StagedBlocks; nested content stays in its container."""
    blocks: list[StagedBlock] = []

    for i, tok in enumerate(tokens):
        if tok.level != 0:
            continue
        if tok.type == 'paragraph_open':
            block_type = _para_type(tokens, i)
        elif tok.type == 'blockquote_open':
            block_type = _quote_type(tokens, i)
        else:
            block_type = BLOCK_TYPE_MAP.get(tok.type)
            if block_type is None:
                continue

        blocks.append(StagedBlock(
            type=block_type,
            content=_source_slice(tok, source_lines),
            level=heading_level(tok),
            line=source_line(tok, offset),
        ))

    return blocks

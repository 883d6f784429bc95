"""Convert a ParsedDoc into a StagedDoc"""

from docsite.core.extract.blocks import tokens_to_blocks
from docsite.core.extract.directives import scan_directives
from docsite.core.extract.links import collect_headings, collect_links
from docsite.core.models import CodeSample, LinkKind, ParsedDoc, StagedDoc
from docsite.core.utils.tokens import source_line


def collect_code_samples(tokens: list, offset: int = 0) -> list[CodeSample]:
    """Fenced code blocks at any nesting depth, with their language hint."""
    samples = []
    for tok in tokens:
        if tok.type != 'fence':
            continue
        info = tok.info.strip().split()
        samples.append(CodeSample(
            language=info[0].lower() if info else '',
            content=tok.content,
            line=source_line(tok, offset),
        ))
    return samples


def extract_doc(parsed: ParsedDoc) -> StagedDoc:
    """Convert a ParsedDoc into typed blocks, headings, links, code samples, and directives."""
    offset = parsed.body_offset
    source_lines = parsed.markdown.splitlines(keepends=True)
    directives, directive_links = scan_directives(parsed.markdown, parsed.tokens, offset)

    # [!INCLUDE [x](path)] also parses as a plain link; keep only the include
    included = {l.target for l in directive_links if l.kind == LinkKind.include}
    links = [l for l in collect_links(parsed.tokens, offset) if l.target not in included]

    return StagedDoc(
        slug=parsed.slug,
        path=parsed.rel_path,
        root=str(parsed.root),
        markdown=parsed.markdown,
        frontmatter=parsed.frontmatter,
        frontmatter_error=parsed.frontmatter_error,
        body_offset=offset,
        blocks=tokens_to_blocks(parsed.tokens, source_lines, offset),
        headings=collect_headings(parsed.tokens, offset),
        links=sorted(links + directive_links, key=lambda l: l.line or 0),
        code_samples=collect_code_samples(parsed.tokens, offset),
        directives=directives,
    )

"""Intermediate data models for the parse, extract, and lint pipeline"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator


DATE_FORMATS = ("%m/%d/%Y", "%Y-%m-%d")


class BlockType(str, Enum):
    """Restrict the types of content blocks to a predefined set of elements"""
    heading = "heading"
    paragraph = "paragraph"
    list = "list"
    code = "code"
    table = "table"
    html = "html"
    quote = "quote"
    alert = "alert"
    figure = "figure"
    directive = "directive"


class LinkKind(str, Enum):
    link = "link"
    image = "image"
    include = "include"


class StagedBlock(BaseModel):
    """A single typed content block from a markdown document."""
    type: BlockType
    content: str
    level: Optional[int] = None     # heading level (1-6); None for non-headings
    line: Optional[int] = None      # 1-based line in the file, front matter included


class Heading(BaseModel):
    level: int
    text: str
    anchor: str
    line: Optional[int] = None


class Link(BaseModel):
    """An outgoing reference: markdown link, image, or include directive."""
    target: str
    kind: LinkKind = LinkKind.link
    line: Optional[int] = None

    @property
    def is_external(self) -> bool:
        """Any target with a scheme (https:, xref:, ms-settings:) or a network location."""
        try:
            parts = urlsplit(self.target.strip())
        except ValueError:
            return False
        return bool(parts.scheme or parts.netloc)

    @property
    def is_anchor(self) -> bool:
        return self.target.startswith("#")


class CodeSample(BaseModel):
    """A fenced code block with its language hint."""
    language: str = ""
    content: str
    line: Optional[int] = None


class Directive(BaseModel):
    """A documentation-platform directive: INCLUDE, image, or an alert kind."""
    name: str
    args: dict[str, str] = {}
    line: Optional[int] = None


class DocMeta(BaseModel):
    """Typed view over the front matter keys the site understands; others pass through."""
    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    title:       Optional[str] = None
    description: Optional[str] = None
    ms_date:     Optional[Any] = Field(default=None, alias="ms.date")
    author:      Optional[str] = None
    ms_author:   Optional[str] = Field(default=None, alias="ms.author")
    no_loc:      list[str] = Field(default=[], alias="no-loc")
    slug:        Optional[str] = None

    @field_validator("title", "description", "author", "ms_author", "slug", mode="before")
    @classmethod
    def _as_text(cls, v):
        """Lists become a comma-separated string; other scalars their str()."""
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (list, tuple)):
            return ", ".join(str(item) for item in v)
        return str(v)

    @field_validator("no_loc", mode="before")
    @classmethod
    def _as_list(cls, v):
        if v is None:
            return []
        if isinstance(v, (list, tuple)):
            return [str(item) for item in v]
        return [str(v)]


class StagedDoc(BaseModel):
    """Public staging contract: source-faithful content written by extract, read by lint and commit."""
    slug: str
    path: str                       # posix path relative to root
    root: str
    markdown: str                   # body without frontmatter
    frontmatter: dict[str, Any] = {}
    frontmatter_error: Optional[str] = None
    body_offset: int = 0            # lines consumed by the frontmatter block
    blocks: list[StagedBlock] = []
    headings: list[Heading] = []
    links: list[Link] = []
    code_samples: list[CodeSample] = []
    directives: list[Directive] = []

    @property
    def meta(self) -> DocMeta:
        return DocMeta.model_validate(self.frontmatter)


@dataclass
class ParsedDoc:
    """Internal parse result carrying markdown-it tokens; not persisted."""
    path:         Path         # absolute file path
    root:         Path
    slug:         str
    raw_markdown: str          # full file content (includes frontmatter)
    markdown:     str          # body only (frontmatter stripped)
    frontmatter:  dict[str, Any]
    tokens:       list         # markdown-it Token objects
    body_offset:  int = 0
    frontmatter_error: Optional[str] = None

    @property
    def rel_path(self) -> str:
        return self.path.relative_to(self.root).as_posix()


def parse_doc_date(value: Any) -> date:
    """Coerce a front matter date (YAML date, 'MM/DD/YYYY', or ISO) to a date. Raises ValueError."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        raise ValueError(f"'{value}' is not a valid date (expected MM/DD/YYYY or YYYY-MM-DD)")
    raise ValueError(f"Expected a date, got {type(value).__name__}")

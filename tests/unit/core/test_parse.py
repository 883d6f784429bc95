"""Unit tests for core/parse.py"""

import pytest

from docsite.core.models import ParsedDoc
from docsite.core.parse import FrontmatterError, content_root, discover_files, parse_file, strip_frontmatter


def test_strip_frontmatter_with_yaml():
    """strip_frontmatter extracts YAML header and returns body."""
    text = "---\ntitle: Hello\n---\n# Body\n"
    fm, body = strip_frontmatter(text)
    assert fm == {"title": "Hello"}
    assert body == "# Body\n"


def test_strip_frontmatter_dotted_keys():
    """Platform keys such as ms.date and no-loc are kept verbatim."""
    fm, _ = strip_frontmatter("---\nms.date: 04/05/2022\nno-loc: [Xamarin.Forms]\n---\nBody\n")
    assert fm == {"ms.date": "04/05/2022", "no-loc": ["Xamarin.Forms"]}


def test_strip_frontmatter_no_frontmatter():
    """strip_frontmatter returns empty dict and full text when no header."""
    text = "# No frontmatter\n"
    fm, body = strip_frontmatter(text)
    assert fm == {}
    assert body == text


@pytest.mark.parametrize("text", [
    "---\nis this even a key?: [\n---\nBody\n",
    "---\n- just\n- a list\n---\nBody\n",
    "---\nms.date: 2022-02-30\n---\nBody\n",
])
def test_strip_frontmatter_invalid(text):
    """Unparseable YAML, non-mapping YAML, and impossible dates raise FrontmatterError."""
    with pytest.raises(FrontmatterError):
        strip_frontmatter(text)


def test_discover_files_single(tmp_path):
    """discover_files returns a list with one file when given a file path."""
    f = tmp_path / "doc.md"
    f.write_text("# Hello")
    assert discover_files(f) == [f]


def test_discover_files_non_md_skipped(tmp_path):
    """discover_files ignores non-.md/.mdx files."""
    (tmp_path / "notes.txt").write_text("text")
    (tmp_path / "toc.yml").write_text("- name: x")
    assert discover_files(tmp_path) == []


def test_discover_files_dir(tmp_path):
    """discover_files finds all .md and .mdx files recursively, sorted."""
    (tmp_path / "b.md").write_text("b")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "a.mdx").write_text("a")
    files = discover_files(tmp_path)
    assert files == sorted(files)
    assert len(files) == 2


def test_content_root(tmp_path):
    """A directory is its own root; a file's root is its parent."""
    f = tmp_path / "doc.md"
    f.write_text("x")
    assert content_root(tmp_path) == tmp_path.resolve()
    assert content_root(f) == tmp_path.resolve()


def test_parse_file_no_frontmatter(tmp_path):
    """parse_file produces a ParsedDoc with empty frontmatter."""
    f = tmp_path / "plain.md"
    f.write_text("# Hello\n\nWorld.\n")
    doc = parse_file(f)
    assert isinstance(doc, ParsedDoc)
    assert doc.frontmatter == {}
    assert doc.frontmatter_error is None
    assert doc.slug == "plain"
    assert doc.body_offset == 0


def test_parse_file_with_frontmatter(tmp_path):
    """parse_file extracts frontmatter and counts the lines it occupies."""
    f = tmp_path / "doc.md"
    f.write_text("---\ntitle: My Doc\n---\n# Body\n")
    doc = parse_file(f)
    assert doc.frontmatter == {"title": "My Doc"}
    assert "---" not in doc.markdown
    assert doc.body_offset == 3


def test_parse_file_invalid_frontmatter_is_recorded(tmp_path):
    """A broken YAML header does not raise; the error is kept for linting."""
    f = tmp_path / "bad.md"
    f.write_text("---\ntitle: [unclosed\n---\n# Body\n")
    doc = parse_file(f)
    assert doc.frontmatter == {}
    assert doc.frontmatter_error.startswith("Invalid YAML frontmatter")
    assert doc.markdown == "# Body\n"
    assert doc.body_offset == 3


def test_parse_file_invalid_frontmatter_adds_no_headings(tmp_path):
    """The closing '---' of a broken header is not read as a setext underline or rule."""
    f = tmp_path / "bad.md"
    f.write_text("---\ntitle: Fonts\nauthor: [unclosed\n---\n# Body\n")
    doc = parse_file(f)
    assert [t.type for t in doc.tokens if t.type.endswith("_open")] == ["heading_open"]
    assert doc.tokens[0].map == [0, 1]


def test_slug_from_frontmatter(tmp_path):
    """parse_file uses frontmatter slug field when present."""
    f = tmp_path / "anything.md"
    f.write_text("---\nslug: custom-slug\n---\n# Body\n")
    doc = parse_file(f)
    assert doc.slug == "custom-slug"


def test_slug_from_relative_path(tmp_path):
    """Without a frontmatter slug the root-relative path is slugified."""
    sub = tmp_path / "iOS"
    sub.mkdir()
    f = sub / "Legacy Color Mode.md"
    f.write_text("# Body\n")
    doc = parse_file(f, root=tmp_path)
    assert doc.slug == "ios-legacy-color-mode"
    assert doc.rel_path == "iOS/Legacy Color Mode.md"

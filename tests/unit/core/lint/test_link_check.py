"""Unit tests for core/lint/links.py"""

import pytest

from docsite.core.lint.findings import Severity
from docsite.core.lint.links import check_links, resolve_target, split_target
from docsite.core.models import Heading, Link, LinkKind, StagedDoc


@pytest.fixture(name="root")
def root_fixture(tmp_path):
    (tmp_path / "ios" / "media").mkdir(parents=True)
    (tmp_path / "ios" / "fonts.md").write_text("# Fonts\n")
    (tmp_path / "ios" / "media" / "shot.png").write_bytes(b"")
    (tmp_path / "index.md").write_text("# Home\n")
    return tmp_path


def _doc(root, *links: Link, headings=()) -> StagedDoc:
    return StagedDoc(slug="page", path="ios/page.md", root=str(root), markdown="",
                     links=list(links), headings=list(headings))


@pytest.mark.parametrize("target,expected", [
    ("fonts.md", ("fonts.md", "")),
    ("fonts.md#register", ("fonts.md", "register")),
    ("fonts.md?view=net-8#a", ("fonts.md", "a")),
    ("#only", ("", "only")),
    ("my%20doc.md", ("my doc.md", "")),
])
def test_split_target(target, expected):
    assert split_target(target) == expected


@pytest.mark.parametrize("target,expected", [
    ("fonts.md", "ios/fonts.md"),
    ("../index.md", "index.md"),
    ("./media/shot.png", "ios/media/shot.png"),
    ("/index.md", "index.md"),
])
def test_resolve_target(target, expected):
    assert resolve_target("ios/page.md", target) == expected


def test_existing_targets_pass(root):
    doc = _doc(
        root,
        Link(target="fonts.md", line=3),
        Link(target="../index.md", line=4),
        Link(target="media/shot.png", kind=LinkKind.image, line=5),
        Link(target="/ios/fonts.md", line=6),
    )
    assert check_links(doc) == []


def test_broken_targets_reported(root):
    """Missing files are errors, labelled by link kind, with the link's line."""
    doc = _doc(
        root,
        Link(target="missing.md", line=3),
        Link(target="media/nope.png", kind=LinkKind.image, line=7),
        Link(target="includes/gone.md", kind=LinkKind.include, line=9),
    )
    findings = check_links(doc)
    assert [(f.rule, f.line, f.severity) for f in findings] == [
        ("link-broken", 3, Severity.error),
        ("link-broken", 7, Severity.error),
        ("link-broken", 9, Severity.error),
    ]
    assert findings[1].message.startswith("Image target")
    assert findings[2].message.startswith("Include target")


def test_external_links_skipped(root):
    doc = _doc(root, Link(target="https://example.com/missing.md"), Link(target="xref:Foo.Bar"))
    assert check_links(doc) == []


def test_own_anchor(root):
    """Fragments must name a heading of the same document."""
    heading = Heading(level=2, text="Usage", anchor="usage")
    doc = _doc(root, Link(target="#usage", line=2), Link(target="#nope", line=3), headings=[heading])
    findings = check_links(doc)
    assert [(f.rule, f.line, f.severity) for f in findings] == [("anchor-missing", 3, Severity.warning)]


def test_cross_document_anchor(root):
    """Fragments into a known document are checked against its anchors."""
    doc = _doc(root, Link(target="fonts.md#fonts", line=2), Link(target="fonts.md#nope", line=3))
    findings = check_links(doc, {"ios/fonts.md": {"fonts"}})
    assert [(f.rule, f.line) for f in findings] == [("anchor-missing", 3)]


def test_cross_document_anchor_unknown_target(root):
    """Fragments into files outside the checked set are not judged."""
    doc = _doc(root, Link(target="fonts.md#anything"))
    assert check_links(doc, {}) == []


@pytest.mark.parametrize("target", [
    "ms-settings:privacy",
    "mailto:docs@example.com",
    "//cdn.example.com/missing.png",
])
def test_any_scheme_is_external(root, target):
    assert check_links(_doc(root, Link(target=target, line=8))) == []


@pytest.mark.parametrize("target", ["../../outside.md", "/../outside.md"])
def test_targets_outside_root_are_broken(tmp_path, target):
    """A file that exists beside the content root is still not in the repository."""
    content = tmp_path / "content"
    (content / "ios").mkdir(parents=True)
    (tmp_path / "outside.md").write_text("# Outside\n")
    findings = check_links(_doc(content, Link(target=target, line=4)))
    assert [(f.rule, f.line) for f in findings] == [("link-broken", 4)]
    assert "outside the content root" in findings[0].message

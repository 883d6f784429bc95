"""Relative link, image, include, and anchor resolution checks"""

import posixpath
from pathlib import Path
from urllib.parse import unquote, urlsplit

from docsite.core.lint.findings import Finding, Severity
from docsite.core.models import Link, LinkKind, StagedDoc


def split_target(target: str) -> tuple[str, str]:
    """Split a link target into (path, fragment), dropping any query string."""
    parts = urlsplit(target)
    return unquote(parts.path), parts.fragment


def resolve_target(doc_path: str, target_path: str) -> str:
    """Root-relative posix path of a link target; '/' targets resolve from the root."""
    if target_path.startswith('/'):
        joined = target_path.lstrip('/')
    else:
        joined = posixpath.join(posixpath.dirname(doc_path), target_path)
    return posixpath.normpath(joined)


def escapes_root(resolved: str) -> bool:
    return resolved == '..' or resolved.startswith('../')


def _describe(link: Link) -> str:
    return {LinkKind.include: "Include", LinkKind.image: "Image"}.get(link.kind, "Link")


def check_links(doc: StagedDoc, anchors_by_path: dict[str, set[str]] | None = None) -> list[Finding]:
    """Every relative target must exist; fragments must name a heading when the target is a known doc.

    anchors_by_path maps root-relative document paths to their heading anchors,
    included content counted; doc.headings is used when its own path is missing.
    """
    anchors_by_path = anchors_by_path or {}
    own_anchors = anchors_by_path.get(doc.path, {h.anchor for h in doc.headings})
    root = Path(doc.root)
    findings = []

    for link in doc.links:
        if link.is_external:
            continue
        target_path, fragment = split_target(link.target)

        if not target_path:
            if fragment and fragment not in own_anchors:
                findings.append(Finding(
                    path=doc.path, line=link.line, rule="anchor-missing", severity=Severity.warning,
                    message=f"No heading with anchor '#{fragment}'",
                ))
            continue

        resolved = resolve_target(doc.path, target_path)
        if escapes_root(resolved):
            findings.append(Finding(
                path=doc.path, line=link.line, rule="link-broken",
                message=f"{_describe(link)} target '{link.target}' is outside the content root",
            ))
            continue
        if not (root / resolved).exists():
            findings.append(Finding(
                path=doc.path, line=link.line, rule="link-broken",
                message=f"{_describe(link)} target '{link.target}' does not exist",
            ))
            continue

        if fragment and resolved in anchors_by_path and fragment not in anchors_by_path[resolved]:
            findings.append(Finding(
                path=doc.path, line=link.line, rule="anchor-missing", severity=Severity.warning,
                message=f"'{resolved}' has no heading with anchor '#{fragment}'",
            ))

    return findings

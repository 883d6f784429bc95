"""Document version persistence: save, prune, list, diff, and revert operations"""

import difflib
import json
from datetime import datetime
from uuid import UUID

from sqlalchemy import func
from sqlmodel import Session, select

from docsite.core.models import parse_doc_date
from docsite.crud.models import Document, DocumentVersion


def get_version(session: Session, document_id: UUID, version_num: int) -> DocumentVersion:
    """Return one stored version. Raises ValueError if it does not exist."""
    v = session.exec(
        select(DocumentVersion)
        .where(DocumentVersion.document_id == document_id)
        .where(DocumentVersion.version_num == version_num)
    ).one_or_none()
    if v is None:
        raise ValueError(f"Version {version_num} not found for document {document_id}")
    return v


def diff_versions(session: Session, document_id: UUID, from_num: int, to_num: int, context: int = 3) -> list[str]:
    """Unified diff lines (newlines kept) between two stored versions; empty when identical.

    Raises ValueError if either version is missing.
    """
    old = get_version(session, document_id, from_num).markdown
    new = get_version(session, document_id, to_num).markdown
    return list(difflib.unified_diff(
        old.splitlines(keepends=True), new.splitlines(keepends=True),
        fromfile=f"v{from_num}", tofile=f"v{to_num}", n=context,
    ))


def diff_stats(old: str, new: str) -> dict[str, int]:
    """Added, deleted, and unchanged line counts between two texts."""
    stats = {"added": 0, "deleted": 0, "unchanged": 0}
    matcher = difflib.SequenceMatcher(None, old.splitlines(), new.splitlines())
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            stats["unchanged"] += i2 - i1
            continue
        stats["deleted"] += i2 - i1
        stats["added"] += j2 - j1
    return stats


def list_versions(session: Session, document_id: UUID) -> list[DocumentVersion]:
    """Return all versions for a document ordered by version_num ascending."""
    return list(
        session.exec(
            select(DocumentVersion)
            .where(DocumentVersion.document_id == document_id)
            .order_by(DocumentVersion.version_num.asc())
        ).all()
    )


def prune_versions(session: Session, document_id: UUID, max_versions: int) -> int:
    """Delete oldest versions beyond max_versions. Returns count deleted. No-op if max_versions=0."""
    if max_versions == 0:
        return 0

    versions = list_versions(session, document_id)
    excess = len(versions) - max_versions
    if excess <= 0:
        return 0

    for v in versions[:excess]:
        session.delete(v)
    session.flush()

    return excess


def _meta_from_frontmatter(doc: Document) -> None:
    """Refresh the denormalized title/description/date columns from doc.frontmatter."""
    fm = doc.frontmatter or {}
    doc.title = str(fm['title']) if fm.get('title') is not None else None
    doc.description = str(fm['description']) if fm.get('description') is not None else None
    try:
        doc.doc_date = parse_doc_date(fm['ms.date']) if 'ms.date' in fm else None
    except ValueError:
        doc.doc_date = None


def revert_to_version(session: Session, doc: Document, version_num: int, max_versions: int = 10) -> Document:
    """Promote a prior version's content as a new commit on the current Document.

    Snapshots the current Document state first (so it becomes part of history),
    then overwrites doc fields with the target version's content.
    Flushes but does not commit; caller controls the transaction.
    Raises ValueError if version_num is not found for this document.
    """
    target = get_version(session, doc.id, version_num)

    save_version(session, doc, max_versions=max_versions)

    doc.markdown = target.markdown
    doc.hash = target.hash
    doc.frontmatter = json.loads(target.frontmatter) if target.frontmatter else None
    _meta_from_frontmatter(doc)
    doc.updated_at = datetime.now()
    doc.committed_at = doc.updated_at
    session.add(doc)
    session.flush()

    return doc


def save_version(session: Session, doc: Document, max_versions: int = 10) -> DocumentVersion:
    """Snapshot current Document state as a new immutable version.

    Computes next version_num as MAX(version_num)+1 for this document.
    Calls prune_versions after saving if max_versions > 0.
    """
    result = session.exec(
        select(func.max(DocumentVersion.version_num))
        .where(DocumentVersion.document_id == doc.id)
    ).one()

    version = DocumentVersion(
        document_id=doc.id,
        version_num=(result or 0) + 1,
        markdown=doc.markdown,
        hash=doc.hash,
        frontmatter=json.dumps(doc.frontmatter) if doc.frontmatter is not None else None,
    )
    session.add(version)
    session.flush()

    if max_versions > 0:
        prune_versions(session, doc.id, max_versions)

    return version

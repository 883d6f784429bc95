"""Document persistence: upsert, link replacement, path/slug/collection lookup"""

from datetime import datetime
from pathlib import Path

from sqlalchemy import func
from sqlmodel import Session, select

from docsite.crud.models import Document, DocumentLink
from docsite.crud.versioning import save_version
from docsite.logging import get_logger


logger = get_logger(__name__)


def get_by_path(session: Session, path: str) -> Document | None:
    """Return the Document with the given root-relative path, or None if not found."""
    return session.exec(select(Document).where(Document.path == path)).one_or_none()


def get_by_slug(session: Session, slug: str) -> Document | None:
    """Return the first Document with the given slug, or None if not found."""
    return session.exec(select(Document).where(Document.slug == slug)).first()


def find_document(session: Session, key: str) -> Document | None:
    """Look a document up by path first, then by slug."""
    return get_by_path(session, key) or get_by_slug(session, key)


def get_last_committed(session: Session) -> list[Document]:
    """Return documents from the most recent commit batch (MAX committed_at)."""
    max_ts = session.exec(select(func.max(Document.committed_at))).one()
    if max_ts is None:
        return []
    return list(session.exec(select(Document).where(Document.committed_at == max_ts)).all())


def collection_key(path: str) -> str:
    """Return the top-level directory of a path, or '.' for root-level files."""
    parts = Path(path).parts
    return parts[0] if len(parts) > 1 else '.'


def get_by_collection(session: Session, collection: str) -> list[Document]:
    """Return documents whose path falls under the given top-level directory ('.' = root files)."""
    all_docs = session.exec(select(Document).order_by(Document.path)).all()
    return [doc for doc in all_docs if collection_key(doc.path) == collection]


def get_all_documents(session: Session) -> list[Document]:
    """Return all documents ordered by path."""
    return list(session.exec(select(Document).order_by(Document.path)).all())


def list_collections(session: Session) -> list[str]:
    """Return sorted distinct top-level path components across all stored documents."""
    paths = session.exec(select(Document.path)).all()
    return sorted({collection_key(p) for p in paths})


def get_links(session: Session, document_id) -> list[DocumentLink]:
    return list(session.exec(
        select(DocumentLink).where(DocumentLink.document_id == document_id).order_by(DocumentLink.line)
    ).all())


def get_backlinks(session: Session, path: str) -> list[Document]:
    """Documents holding a link whose resolved target is path, ordered by path."""
    rows = session.exec(
        select(Document).join(DocumentLink, DocumentLink.document_id == Document.id)
        .where(DocumentLink.target == path)
        .where(Document.path != path)
        .order_by(Document.path)
    ).all()
    seen = set()
    unique = []
    for doc in rows:
        if doc.id not in seen:
            seen.add(doc.id)
            unique.append(doc)
    return unique


def replace_links(session: Session, doc_id, links: list[dict]) -> None:
    """Delete all stored links for a document and insert the given ones."""
    for row in session.exec(select(DocumentLink).where(DocumentLink.document_id == doc_id)).all():
        session.delete(row)
    session.flush()
    for link in links:
        session.add(DocumentLink(document_id=doc_id, target=link['target'],
                                 kind=link.get('kind', 'link'), line=link.get('line')))
    session.flush()


def _apply(doc: Document, data: dict) -> None:
    doc.slug = data['slug']
    doc.path = data['path']
    doc.root = data['root']
    doc.title = data.get('title')
    doc.description = data.get('description')
    doc.doc_date = data.get('doc_date')
    doc.markdown = data['markdown']
    doc.hash = data['hash']
    doc.frontmatter = data['frontmatter'] or None


def commit_doc(
    session: Session,
    data: dict,
    max_versions: int = 10,
    committed_at: datetime | None = None,
    ) -> tuple[Document, str]:
    """Upsert a processed StagedDoc dict.

    Returns (doc, status) where status is 'created', 'updated', or 'unchanged'.
    Flushes but does not commit; caller controls the transaction.
    committed_at is set on created/updated docs only; unchanged docs are skipped.
    """
    doc = get_by_path(session, data['path'])

    if doc:
        if doc.hash == data['hash']:
            return doc, 'unchanged'
        save_version(session, doc, max_versions)
        _apply(doc, data)
        doc.updated_at = datetime.now()
        doc.committed_at = committed_at
        session.add(doc)
        session.flush()
        replace_links(session, doc.id, data['links'])
        logger.info("doc.committed", path=doc.path, status="updated")
        return doc, 'updated'

    doc = Document(
        slug=data['slug'], path=data['path'], root=data['root'],
        markdown=data['markdown'], hash=data['hash'],
        committed_at=committed_at,
    )
    _apply(doc, data)
    session.add(doc)
    session.flush()
    replace_links(session, doc.id, data['links'])
    logger.info("doc.committed", path=doc.path, status="created")
    return doc, 'created'

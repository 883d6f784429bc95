"""Shared fixtures for crud unit tests"""

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from docsite.core.utils.hashing import sha256
from docsite.crud.models import Document


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="doc")
def doc_fixture(session):
    """A minimal Document persisted to the session."""
    d = Document(
        slug="ios-fonts", path="ios/fonts.md", root="/docs",
        title="Fonts", description="Register fonts.",
        markdown="# Fonts\n\nBody", hash=sha256("# Fonts\n\nBody"),
        frontmatter={"title": "Fonts", "description": "Register fonts.", "ms.date": "04/05/2022"},
    )
    session.add(d)
    session.flush()
    return d

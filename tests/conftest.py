"""Test fixtures for API and database."""

from __future__ import annotations

import os
from pathlib import Path

TESTS_ROOT = Path(__file__).parent

# Configure the app *before* importing folio modules so the engine, the
# signing secret and the upload directory all point at throwaway locations.
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_folio.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-bytes!!")
os.environ.setdefault("UPLOAD_DIR", str(TESTS_ROOT / ".uploads"))
os.environ.setdefault("LOG_JSON", "false")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from folio.config import settings  # noqa: E402
from folio.database import Base  # noqa: E402
from folio.db_events import attach_sqlite_listeners  # noqa: E402
from folio.main import app  # noqa: E402
from folio.models.admin import Admin  # noqa: E402
from folio.models.blog import Article, Category, Tag, article_tags  # noqa: E402
from folio.security.passwords import hash_password  # noqa: E402
from folio.security.rate_limit import limiter  # noqa: E402
from folio.security.tokens import issue_token  # noqa: E402
from folio.services.storage import StorageBackend, get_storage  # noqa: E402

# Disable rate limiting in tests to prevent cross-test 429 flakes
limiter.enabled = False

TEST_DB_PATH = Path("test_folio.db")
TESTING_SESSION_FACTORY: sessionmaker | None = None

ADMIN_USERNAME = "editor"
ADMIN_PASSWORD = "correct horse battery staple"


class MemoryStorage(StorageBackend):
    """Keeps uploads in a dict instead of touching disk or S3."""

    def __init__(self):
        super().__init__("/uploads")
        self.files: dict[str, tuple[bytes, str]] = {}

    async def save(self, data: bytes, filename: str, content_type: str) -> str:
        self.files[filename] = (data, content_type)
        return self.get_url(filename)


@pytest.fixture(scope="session")
def client():
    global TESTING_SESSION_FACTORY
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()

    engine = create_engine(
        f"sqlite:///{TEST_DB_PATH}",
        connect_args={"check_same_thread": False},
    )
    attach_sqlite_listeners(engine)
    TESTING_SESSION_FACTORY = sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )

    # The lifespan creates the schema through the app's own async engine
    with TestClient(app) as test_client:
        yield test_client

    engine.dispose()
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()


@pytest.fixture
def db_session(client):
    if TESTING_SESSION_FACTORY is None:
        raise RuntimeError("Session factory not initialized")
    session = TESTING_SESSION_FACTORY()
    try:
        yield session
    finally:
        # Ensure database state is isolated between tests
        session.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
        session.close()


@pytest.fixture
def admin_user(db_session: Session) -> Admin:
    admin = Admin(username=ADMIN_USERNAME, password_hash=hash_password(ADMIN_PASSWORD))
    db_session.add(admin)
    db_session.commit()
    return admin


@pytest.fixture
def auth_headers() -> dict[str, str]:
    token = issue_token(1, ADMIN_USERNAME, settings.secret_key)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def memory_storage():
    storage = MemoryStorage()
    app.dependency_overrides[get_storage] = lambda: storage
    yield storage
    app.dependency_overrides.pop(get_storage, None)


@pytest.fixture
def make_category(db_session: Session):
    def _make(name: str = "Python", slug: str = "python", **extra) -> Category:
        category = Category(name=name, slug=slug, **extra)
        db_session.add(category)
        db_session.commit()
        return category

    return _make


@pytest.fixture
def make_tag(db_session: Session):
    def _make(name: str = "FastAPI", slug: str = "fastapi") -> Tag:
        tag = Tag(name=name, slug=slug)
        db_session.add(tag)
        db_session.commit()
        return tag

    return _make


@pytest.fixture
def make_article(db_session: Session):
    def _make(
        title: str = "Hello",
        *,
        status: str = "published",
        tags: list[Tag] | None = None,
        **extra,
    ) -> Article:
        extra.setdefault("content", f"{title} body")
        article = Article(title=title, status=status, **extra)
        db_session.add(article)
        db_session.flush()
        for tag in tags or []:
            db_session.execute(
                article_tags.insert().values(article_id=article.id, tag_id=tag.id)
            )
        db_session.commit()
        return article

    return _make


@pytest.fixture
def credentials() -> dict[str, str]:
    return {"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}

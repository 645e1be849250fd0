import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from recipebox.core.ai_client import AIClient
from recipebox.db import Database
from recipebox.deps import build_container
from recipebox.main import create_app
from recipebox.services.fetcher import Fetcher
from recipebox.services.instagram import InstagramPost
from recipebox.settings import Settings


# --- Test Database Setup ---

@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        ai_mode="mock",
        ai_cleanup_enabled=False,
        fetch_timeout_seconds=2.0,
        max_body_bytes=64 * 1024,
    )


@pytest.fixture
def database():
    # StaticPool keeps one in-memory database shared across sessions/threads
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db = Database(engine=engine)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


# --- Network fakes ---

@pytest.fixture
def pages():
    """URL -> (status, content type, body) served by the mock transport."""
    return {}


@pytest.fixture
def transport(pages):
    def handler(request: httpx.Request) -> httpx.Response:
        status, content_type, body = pages.get(str(request.url), (404, "text/html", ""))
        return httpx.Response(status, headers={"content-type": content_type}, text=body)

    return httpx.MockTransport(handler)


@pytest.fixture
def fetcher(settings, transport):
    return Fetcher.from_settings(settings, transport=transport)


class FakeAcquirer:
    def __init__(self):
        self.posts: dict[str, InstagramPost] = {}
        self.calls: list[str] = []

    async def acquire(self, embed_url: str) -> InstagramPost:
        self.calls.append(embed_url)
        return self.posts[embed_url]


@pytest.fixture
def acquirer():
    return FakeAcquirer()


@pytest.fixture
def client(settings, database, fetcher, acquirer):
    container = build_container(
        settings,
        database=database,
        fetcher=fetcher,
        acquirer=acquirer,
        ai=AIClient(mode="mock"),
    )
    app = create_app(container=container)
    with TestClient(app) as c:
        yield c

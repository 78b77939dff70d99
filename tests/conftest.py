import asyncio
import os
import tempfile

# Configure before any apps.* import reads the environment.
_TMP_DIR = tempfile.mkdtemp(prefix="blog-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'blog.db')}"
os.environ["INTERNAL_API_KEY"] = "test-api-key"
os.environ["ENVIRONMENT"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from apps.blog.main import app  # noqa: E402
from apps.shared.database import Base, SessionLocal, engine  # noqa: E402

API_KEY = "test-api-key"


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def run_db():
    """Run fn(session) against the test database and commit."""
    return _run_db


def _run_db(fn):
    async def _run():
        async with SessionLocal() as session:
            result = await fn(session)
            await session.commit()
            return result
    return asyncio.run(_run())


@pytest.fixture
def client():
    asyncio.run(_reset_schema())
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth():
    return {"X-API-Key": API_KEY}


@pytest.fixture
def make_post(client, auth):
    """Create a post through the API and return its JSON."""
    def _make(**overrides):
        body = {
            "appId": "test-app",
            "runId": "test-run",
            "title": "My First Post",
            "bodyMarkdown": "# Hello World",
            "bodyHtml": "<h1>Hello World</h1>",
            "authorName": "Kevin",
            "targetSite": "x.com",
        }
        body.update(overrides)
        res = client.post("/posts", json=body, headers=auth)
        assert res.status_code == 201, res.text
        return res.json()["post"]
    return _make


@pytest.fixture
def server_error_client(client):
    """Client that returns 500 responses instead of re-raising the server error."""
    return TestClient(app, raise_server_exceptions=False)

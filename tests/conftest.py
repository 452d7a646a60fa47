"""
Pytest configuration and fixtures.

Service tests get ``run``: it executes ``async def scenario(session)`` inside a
single ``asyncio.run`` against a temporary SQLite database. HTTP tests get
``client``: a ``TestClient`` bound to the same kind of database, with the LLM
and scraper replaced by fakes.
"""
import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend import database
from backend.auth import SessionContext
from backend.database import build_engine, init_db
from fakes import FakeLLM, FakeScraper

ADMIN_EMAIL = "admin@metod.ru"


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'hub.db'}"


@pytest.fixture
def run(db_url):
    """Run an async scenario against a fresh database file."""
    def _run(scenario):
        async def main():
            engine = build_engine(db_url)
            await init_db(engine)
            factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
            try:
                async with factory() as session:
                    return await scenario(session)
            finally:
                await engine.dispose()

        return asyncio.run(main())
    return _run


@pytest.fixture
def admin_ctx():
    return SessionContext(user_id="admin-1", email=ADMIN_EMAIL, display_name="Админ", role="admin")


@pytest.fixture
def user_ctx():
    return SessionContext(user_id="user-1", email="ivan@mail.ru", display_name="Иван")


@pytest.fixture
def other_ctx():
    return SessionContext(user_id="user-2", email="petr@mail.ru", display_name="Пётр")


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def fake_scraper():
    return FakeScraper()


@pytest.fixture
def client(db_url, monkeypatch, fake_llm, fake_scraper):
    """API client over a temporary database; ADMIN_EMAIL gets the admin role."""
    database.configure_engine(db_url)

    from backend import app as app_module
    from backend.routes import assist

    monkeypatch.setattr(app_module, "ADMIN_EMAILS", [ADMIN_EMAIL])
    app = app_module.app
    app.dependency_overrides[assist.get_llm] = lambda: fake_llm
    app.dependency_overrides[assist.get_scraper] = lambda: fake_scraper

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


def _auth_headers(client, email, password="secret123", display_name=""):
    r = client.post("/register", json={"email": email, "password": password, "display_name": display_name})
    assert r.status_code == 201, f"Register failed: {r.text}"
    return {"Authorization": f"Bearer {r.json()['token']}"}


@pytest.fixture
def admin_headers(client):
    return _auth_headers(client, ADMIN_EMAIL, display_name="Админ")


@pytest.fixture
def user_headers(client):
    return _auth_headers(client, "ivan@mail.ru", display_name="Иван")

"""
Shared fixtures: a temp-file SQLite database per test, the FastAPI app
wired to it, and an httpx client talking to the app in-process.
"""

import os

os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

import httpx
import pytest
import pytest_asyncio

from auth.dependencies import get_token_issuer
from auth.jwt import TokenIssuer
from database.session import build_engine, build_session_factory, get_db_session, init_models
from main import create_app

TEST_SECRET = "test-secret"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def issuer():
    return TokenIssuer(TEST_SECRET, expiry_seconds=7 * 24 * 3600)


@pytest_asyncio.fixture
async def engine(tmp_path):
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'sensitivv-test.db'}")
    await init_models(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def app(session_factory, issuer):
    application = create_app()

    async def override_db():
        async with session_factory() as session:
            yield session
            await session.commit()

    application.dependency_overrides[get_db_session] = override_db
    application.dependency_overrides[get_token_issuer] = lambda: issuer
    return application


@pytest_asyncio.fixture
async def http(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

"""
Pytest configuration and fixtures for backend testing
"""

import os

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["AUTO_MIGRATE"] = "false"

from interactive_video.db.config import get_session
from interactive_video.engine.clock import SimulatedClock
from interactive_video.main import app
from interactive_video.models.interaction import InteractiveElement
from interactive_video.models.persisted_video import Base
from interactive_video.utils.feature_flags import feature_flags


@pytest.fixture(scope="session")
def test_client():
    """Create a test client for FastAPI application"""
    with TestClient(app) as client:
        yield client


@pytest.fixture
async def api_client(tmp_path):
    """Async client over the app with a fresh SQLite database per test"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool
    )
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async def override_session():
        async with async_session() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture
def flags(monkeypatch):
    """Toggle feature flags through FEATURE_* variables for one test"""
    def set_flag(name: str, enabled: bool) -> None:
        monkeypatch.setenv(f"FEATURE_{name.upper()}", "true" if enabled else "false")
        feature_flags.reload()

    yield set_flag
    monkeypatch.undo()
    feature_flags.reload()


@pytest.fixture
def clock():
    return SimulatedClock(duration=120)


@pytest.fixture
def quiz_element():
    """Quiz active over [30, 40)"""
    return InteractiveElement(
        id="q1",
        type="quiz",
        title="Pick the right answer",
        timestamp=30,
        duration=10,
        options=[
            {"text": "Right", "isCorrect": True},
            {"text": "Wrong", "isCorrect": False},
        ],
        feedback={"correct": "Well done", "incorrect": "Try again"},
    )


@pytest.fixture
def sample_elements(quiz_element):
    return [
        InteractiveElement(
            id="poll-1",
            type="poll",
            title="Opinion",
            timestamp=10,
            duration=5,
            options=[{"text": "Yes"}, {"text": "No"}],
        ),
        quiz_element,
        InteractiveElement(
            id="branch",
            type="decision",
            title="Where next?",
            timestamp=50,
            duration=10,
            options=[
                {"text": "Back", "action": "jump:30"},
                {"text": "On", "action": "jump:90"},
            ],
        ),
        InteractiveElement(id="spot", type="hotspot", timestamp=70, duration=5),
    ]


@pytest.fixture
def sample_video_payload(sample_elements):
    """Video create payload for the API"""
    return {
        "videoId": "v1",
        "title": "Intro Video",
        "url": "https://example.com/intro.mp4",
        "duration": 120,
        "description": "Test video",
        "elements": [e.model_dump(mode="json") for e in sample_elements],
    }


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


"""
Pytest configuration and fixtures for backend tests.

Settings are read once per process, so the environment is pointed at a
throwaway SQLite file before anything from ``thesisflow`` is imported.
"""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="thesisflow-tests-")
os.environ["DEBUG"] = "true"
os.environ["DESKTOP_MODE"] = "false"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["AI_PROVIDER"] = "gemini"
os.environ["GEMINI_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ.pop("STATIC_DIR", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from thesisflow.main import app  # noqa: E402
from thesisflow.core.database import drop_tables  # noqa: E402
from thesisflow.api.v1.deps import get_ai_provider  # noqa: E402
from thesisflow.services.ai_provider import AIProviderError  # noqa: E402
from factories import FakeProvider, register, onboard  # noqa: E402

ORIGIN = "http://localhost:5173"


@pytest.fixture
def client():
    """Test client with a fresh schema; sends an allowed Origin so writes pass CSRF checks."""
    with TestClient(app, headers={"Origin": ORIGIN}) as test_client:
        yield test_client
        test_client.portal.call(drop_tables)


@pytest.fixture
def auth_client(client: TestClient) -> TestClient:
    """Client holding a session cookie for a freshly registered user."""
    response = register(client)
    assert response.status_code == 201
    return client


@pytest.fixture
def thesis_client(auth_client: TestClient) -> TestClient:
    """Authenticated client whose user has completed onboarding."""
    response = onboard(auth_client)
    assert response.status_code == 201
    return auth_client


@pytest.fixture
def fake_provider():
    provider = FakeProvider()
    app.dependency_overrides[get_ai_provider] = lambda: provider
    yield provider
    app.dependency_overrides.pop(get_ai_provider, None)


@pytest.fixture
def failing_provider():
    provider = FakeProvider(error=AIProviderError("upstream returned 500"))
    app.dependency_overrides[get_ai_provider] = lambda: provider
    yield provider
    app.dependency_overrides.pop(get_ai_provider, None)

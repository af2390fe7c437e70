"""
Pytest configuration for testing
"""

import os

import httpx
import pytest

# Set up environment variables for testing before any imports
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_URL"] = "https://test-project.supabase.co"
os.environ["SUPABASE_ANON_KEY"] = "test-anon-key"
os.environ["N8N_DEFAULT_BASE_URL"] = "https://n8n.example.test"
# Valid Fernet key (32 zero bytes, urlsafe base64)
os.environ["ENCRYPTION_KEY"] = "AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA="


TEST_USER = {
    "uid": "user_123",
    "email": "test@example.com",
    "token": "test-token",
}


class UpstreamRecorder:
    """httpx.MockTransport handler that records requests and replies from a queue"""

    def __init__(self, responses=None):
        self.requests: list[httpx.Request] = []
        self.responses = list(responses or [])

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(200, json={"data": []})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def db_session():
    """Fresh tables on the shared in-memory database for each test"""
    from dashboard_api.core.database import Base, SessionLocal, engine
    import dashboard_api.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def upstream():
    return UpstreamRecorder()


@pytest.fixture
def app(db_session, upstream):
    """FastAPI app with an authenticated test user and a fake n8n upstream"""
    from dashboard_api.api.dependencies import get_current_user, get_proxy_service
    from dashboard_api.main import app as fastapi_app
    from dashboard_api.services.proxy_service import N8nProxyService

    fastapi_app.dependency_overrides[get_current_user] = lambda: TEST_USER
    fastapi_app.dependency_overrides[get_proxy_service] = lambda: N8nProxyService(client=upstream.client())

    yield fastapi_app

    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    return TestClient(app)


@pytest.fixture
def stored_credentials(db_session):
    """Save n8n settings for the test user"""
    from dashboard_api.services.secret_store import SecretStore

    SecretStore().save(db_session, TEST_USER["uid"], "n8n-test-api-key-123456", "https://n8n.user.test/api/v1")
    return db_session

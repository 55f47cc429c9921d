import httpx
import pytest
from fastapi.testclient import TestClient

from newsflow.core.config import Settings
from newsflow.main import create_app
from newsflow.services.gemini import GeminiClient
from newsflow.services.news_api import NewsApiClient
from newsflow.storage import MemoryStorage

EMAIL_DOMAIN = "mailbox.org"


class FakeNewsApi:
    """Answers NewsAPI listing calls with generated articles, per category or query."""

    def __init__(self):
        self.failing = set()
        self.empty = set()
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        params = request.url.params
        source = params.get("category") or params.get("q")
        if source in self.failing:
            return httpx.Response(500, json={"status": "error", "code": "unexpectedError", "message": "upstream down"})
        size = 0 if source in self.empty else int(params.get("pageSize", 20))
        articles = [
            {
                "title": f"{source} story {i}",
                "url": f"https://news.example.com/{source}/{i}",
                "source": {"id": None, "name": "Example Wire"},
            }
            for i in range(size)
        ]
        return httpx.Response(200, json={"status": "ok", "totalResults": len(articles), "articles": articles})

    def sources_requested(self, path):
        return [
            r.url.params.get("category") or r.url.params.get("q")
            for r in self.requests
            if r.url.path.endswith(path)
        ]


class FakeGemini:
    """Answers generateContent with canned text, or with an error when one is set."""

    def __init__(self):
        self.text = "A full generated article."
        self.error = None
        self.raw = None
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raw:
            status, body = self.raw
            return httpx.Response(status, json=body)
        if self.error:
            status, message = self.error
            return httpx.Response(status, json={"error": {"code": status, "message": message}})
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": self.text}]}}]})


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        STORAGE_BACKEND="memory",
        RATE_LIMIT_ENABLED=False,
        NEWS_API_KEY="test-news-key",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def news_api():
    return FakeNewsApi()


@pytest.fixture
def gemini_api():
    return FakeGemini()


@pytest.fixture
def app(settings, storage, news_api, gemini_api):
    news_client = NewsApiClient(
        api_key=settings.NEWS_API_KEY,
        base_url=settings.NEWS_API_URL,
        transport=httpx.MockTransport(news_api.handler),
    )
    gemini_client = GeminiClient(
        base_url=settings.GEMINI_API_URL,
        model=settings.GEMINI_MODEL,
        transport=httpx.MockTransport(gemini_api.handler),
    )
    return create_app(settings, storage=storage, news_client=news_client, gemini_client=gemini_client)


@pytest.fixture
def make_client(app):
    """Each client keeps its own session cookie."""
    def _factory():
        return TestClient(app)
    return _factory


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def signup():
    def _signup(client, username="alice", password="correct-horse", **extra):
        payload = {"username": username, "email": f"{username}@{EMAIL_DOMAIN}", "password": password, **extra}
        resp = client.post("/api/auth/signup", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _signup


@pytest.fixture
def user_client(client, signup):
    """A client logged in as a fresh regular user."""
    client.user = signup(client, "alice")
    return client


@pytest.fixture
def admin_client(make_client, signup, storage):
    """A client logged in as a user holding the admin flag."""
    client = make_client()
    client.user = signup(client, "root_admin")
    storage.set_user_admin_status(client.user["id"], True)
    return client

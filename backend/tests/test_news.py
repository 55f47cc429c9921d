import pytest

from newsflow.services.aggregator import PERSONALIZED_FEED_SIZE


@pytest.fixture
def with_interests(user_client):
    def _set(*categories):
        resp = user_client.put("/api/interests", json={"categories": list(categories)})
        assert resp.status_code in (200, 201)
        return user_client
    return _set


def test_generic_feed_requires_interests(user_client):
    resp = user_client.get("/api/news")
    assert resp.status_code == 400
    assert resp.json() == {"message": "Please set your interests first"}


def test_generic_feed_uses_first_interest(with_interests, news_api):
    client = with_interests("science", "sports")
    resp = client.get("/api/news")
    assert resp.status_code == 200
    assert len(resp.json()) == 20
    assert news_api.sources_requested("/top-headlines") == ["science"]


def test_generic_feed_explicit_category(with_interests, news_api):
    client = with_interests("science")
    resp = client.get("/api/news", params={"category": "business"})
    assert resp.status_code == 200
    assert resp.json()[0]["title"] == "business story 0"
    assert news_api.requests[0].url.params["apiKey"] == "test-news-key"


def test_generic_feed_empty_interest_list_falls_back_to_general(with_interests, news_api):
    client = with_interests()
    assert client.get("/api/news").status_code == 200
    assert news_api.sources_requested("/top-headlines") == ["general"]


def test_generic_feed_custom_topic_uses_search(with_interests, news_api):
    client = with_interests("space exploration")
    assert client.get("/api/news").status_code == 200
    assert news_api.sources_requested("/everything") == ["space exploration"]


def test_generic_feed_upstream_failure(with_interests, news_api):
    news_api.failing.add("science")
    client = with_interests("science")
    resp = client.get("/api/news")
    assert resp.status_code == 500
    assert resp.json() == {"message": "Failed to fetch news"}


def test_personalized_requires_interests(user_client):
    resp = user_client.get("/api/news/personalized")
    assert resp.status_code == 400


def test_personalized_requires_gemini_key(with_interests):
    client = with_interests("technology")
    resp = client.get("/api/news/personalized")
    assert resp.status_code == 400
    assert resp.json() == {"message": "Gemini API key not found. Please set it in your profile."}


def test_personalized_empty_interest_list(with_interests):
    client = with_interests()
    client.post("/api/gemini-key", json={"gemini_key": "AIza-test"})
    resp = client.get("/api/news/personalized")
    assert resp.status_code == 400
    assert resp.json() == {"message": "No interests found"}


def test_personalized_feed(with_interests, news_api):
    client = with_interests("technology", "ai safety", "sports")
    client.post("/api/gemini-key", json={"gemini_key": "AIza-test"})

    resp = client.get("/api/news/personalized")
    assert resp.status_code == 200
    articles = resp.json()
    assert len(articles) == PERSONALIZED_FEED_SIZE
    for article in articles:
        assert article["category"] in {"technology", "ai safety", "sports"}
        assert article["ai_reason"] == f"Selected based on your interest in {article['category']}"

    assert sorted(news_api.sources_requested("/top-headlines")) == ["sports", "technology"]
    assert news_api.sources_requested("/everything") == ["ai safety"]


def test_personalized_survives_failing_source(with_interests, news_api):
    news_api.failing.add("technology")
    client = with_interests("technology", "science")
    client.post("/api/gemini-key", json={"gemini_key": "AIza-test"})

    resp = client.get("/api/news/personalized")
    assert resp.status_code == 200
    assert len(resp.json()) == 10
    assert {a["category"] for a in resp.json()} == {"science"}


def test_personalized_all_sources_fail(with_interests, news_api):
    news_api.failing.update({"technology", "science"})
    client = with_interests("technology", "science")
    client.post("/api/gemini-key", json={"gemini_key": "AIza-test"})

    resp = client.get("/api/news/personalized")
    assert resp.status_code == 200
    assert resp.json() == []


def test_summarize_article(user_client, gemini_api):
    user_client.post("/api/gemini-key", json={"gemini_key": "AIza-user-key"})
    gemini_api.text = "Paragraph one.\n\nParagraph two."

    resp = user_client.post(
        "/api/articles/summarize",
        json={"title": "Chips get faster", "description": "A new node", "url": "https://news.example.com/c"},
    )
    assert resp.status_code == 200
    assert resp.json() == {"content": "Paragraph one.\n\nParagraph two."}

    request = gemini_api.requests[0]
    assert request.url.params["key"] == "AIza-user-key"
    assert request.url.path.endswith(":generateContent")
    assert b"Chips get faster" in request.content


def test_summarize_without_key(user_client, gemini_api):
    resp = user_client.post("/api/articles/summarize", json={"title": "Chips get faster"})
    assert resp.status_code == 400
    assert gemini_api.requests == []


def test_summarize_upstream_error(user_client, gemini_api):
    user_client.post("/api/gemini-key", json={"gemini_key": "AIza-user-key"})
    gemini_api.error = (500, "internal")
    resp = user_client.post("/api/articles/summarize", json={"title": "Chips get faster"})
    assert resp.status_code == 500
    assert resp.json() == {"message": "Failed to generate article content"}


def test_news_requires_login(client):
    assert client.get("/api/news").status_code == 401
    assert client.get("/api/news/personalized").status_code == 401
    assert client.post("/api/articles/summarize", json={"title": "x"}).status_code == 401


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").json()["status"] == "active"


def test_unknown_route_message_shape(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert "message" in resp.json()


def test_summarize_upstream_error_with_list_body(user_client, gemini_api):
    user_client.post("/api/gemini-key", json={"gemini_key": "AIza-user-key"})
    gemini_api.raw = (502, ["bad gateway"])
    resp = user_client.post("/api/articles/summarize", json={"title": "Chips get faster"})
    assert resp.status_code == 500
    assert resp.json() == {"message": "Failed to generate article content"}

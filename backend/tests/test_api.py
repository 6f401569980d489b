"""API tests through FastAPI's TestClient."""

import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from pulse.config import Settings
from pulse.main import create_app
from pulse.sources.reddit import RedditCorpus


@pytest.fixture
def make_client(corpus, classifier):
    def _make(**overrides):
        settings = Settings(_env_file=None, **overrides)
        return TestClient(create_app(settings=settings, corpus=corpus, classifier=classifier))
    return _make


@pytest.fixture
def client(make_client):
    return make_client()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["classifier"] == "ScriptedClassifier"


def test_posts_lists_corpus(client):
    resp = client.get("/posts")
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [1, 2, 3, 4, 5]


def test_analyze_success(client):
    resp = client.post("/analyze", json={"keyword": "Next.js"})
    assert resp.status_code == 200
    data = resp.json()

    assert data["status"] == "succeeded"
    assert [p["id"] for p in data["analyzed_posts"]] == [1, 2, 5]
    assert [r["post_id"] for r in data["results"]] == [1, 2, 5]
    assert data["counts"] == {"positive": 1, "negative": 1, "neutral": 1}
    assert data["filter"] == "all"
    assert data["displayed_posts"] == data["analyzed_posts"]


def test_analyze_rejects_short_keyword(client):
    assert client.post("/analyze", json={"keyword": "n"}).status_code == 422
    assert client.post("/analyze", json={"keyword": ""}).status_code == 422


def test_min_keyword_length_is_configurable(make_client):
    client = make_client(MIN_KEYWORD_LENGTH=5)
    assert client.post("/analyze", json={"keyword": "next"}).status_code == 422
    assert client.post("/analyze", json={"keyword": "next.js"}).status_code == 200


def test_analyze_no_matches(client):
    resp = client.post("/analyze", json={"keyword": "zzz"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "no_matches"
    assert "zzz" in data["message"]
    assert data["analyzed_posts"] == []


def test_analyze_failure_clears_state(corpus, outputs, scripted):
    outputs["Firebase docs are fine"] = RuntimeError("quota exceeded")
    client = TestClient(create_app(settings=Settings(_env_file=None), corpus=corpus, classifier=scripted(outputs)))

    assert client.post("/analyze", json={"keyword": "next.js"}).status_code == 200

    resp = client.post("/analyze", json={"keyword": "firebase"})
    assert resp.status_code == 502
    assert "4" in resp.json()["detail"]

    state = client.get("/analysis").json()
    assert state["status"] == "failed"
    assert state["results"] == []
    assert state["failed_post_id"] == 4


def test_filter_endpoints(client):
    client.post("/analyze", json={"keyword": "next.js"})

    resp = client.put("/analysis/filter", json={"filter": "negative"})
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()["displayed_posts"]] == [2]

    resp = client.get("/analysis", params={"filter": "positive"})
    assert [p["id"] for p in resp.json()["displayed_posts"]] == [1]
    assert len(resp.json()["analyzed_posts"]) == 3


def test_filter_with_no_hits_has_message(client):
    client.post("/analyze", json={"keyword": "firebase"})
    data = client.get("/analysis", params={"filter": "neutral"}).json()
    assert data["displayed_posts"] == []
    assert "neutral" in data["message"]


def test_invalid_filter_rejected(client):
    assert client.put("/analysis/filter", json={"filter": "angry"}).status_code == 422
    assert client.get("/analysis", params={"filter": "angry"}).status_code == 422


def test_idle_state(client):
    data = client.get("/analysis").json()
    assert data["status"] == "idle"
    assert data["keyword"] is None
    assert data["counts"] == {"positive": 0, "negative": 0, "neutral": 0}


def test_analyze_without_waiting_returns_pending(client):
    with client:
        resp = client.post("/analyze", params={"wait": "false"}, json={"keyword": "next.js"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "pending"


@pytest.mark.asyncio
async def test_superseded_blocking_request_gets_409(corpus, outputs, scripted):
    gate = asyncio.Event()
    classifier = scripted(outputs, gates={"I love Next.js": gate})
    app = create_app(settings=Settings(_env_file=None), corpus=corpus, classifier=classifier)

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        stale = asyncio.ensure_future(client.post("/analyze", json={"keyword": "next.js"}))
        for _ in range(200):
            if "I love Next.js" in classifier.calls:
                break
            await asyncio.sleep(0.01)

        resp = await client.post("/analyze", json={"keyword": "firebase"})
        assert resp.status_code == 200
        assert resp.json()["keyword"] == "firebase"

        gate.set()
        stale_resp = await stale
        assert stale_resp.status_code == 409

        state = (await client.get("/analysis")).json()
        assert state["keyword"] == "firebase"
        assert [p["id"] for p in state["analyzed_posts"]] == [3, 4]


def reddit_payload(*items):
    return {"data": {"children": [{"data": item} for item in items]}}


@pytest.mark.asyncio
async def test_analyze_refreshes_reddit_corpus_with_keyword(scripted):
    queries = []

    def handler(request: httpx.Request) -> httpx.Response:
        queries.append(request.url.params["q"])
        return httpx.Response(200, json=reddit_payload(
            {"id": "a1", "title": "Firebase is great", "author": "dev1", "created_utc": 1716200000},
            {"id": "a2", "title": "Unrelated", "author": "dev2", "created_utc": 1716200100},
        ))

    reddit_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    classifier = scripted({"Firebase is great": {"label": "positive", "score": 0.7}})
    app = create_app(settings=Settings(_env_file=None), corpus=RedditCorpus(client=reddit_client), classifier=classifier)

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post("/analyze", json={"keyword": "firebase"})
    await reddit_client.aclose()

    assert queries == ["firebase"]
    assert resp.status_code == 200
    data = resp.json()
    assert [p["id"] for p in data["analyzed_posts"]] == ["rd-a1"]
    assert data["counts"]["positive"] == 1


@pytest.mark.asyncio
async def test_reddit_refresh_failure_is_502(classifier):
    reddit_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
    settings = Settings(_env_file=None, REDDIT_QUERY="programming")
    app = create_app(settings=settings, corpus=RedditCorpus(client=reddit_client), classifier=classifier)

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post("/analyze", json={"keyword": "firebase"})
    await reddit_client.aclose()

    assert resp.status_code == 502
    assert classifier.calls == []

"""Unit tests for the Tavily search client."""

import asyncio

import aiohttp
import pytest

from omnireport.config import TAVILY_API_URL, TAVILY_MAX_RESULTS
from omnireport.exceptions import MissingCredential, SearchServiceError
from omnireport.search import search_tavily

pytestmark = pytest.mark.unit


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse used as a context manager."""

    def __init__(self, status=200, payload=None, reason="OK"):
        self.status = status
        self.reason = reason
        self.payload = payload

    async def json(self, content_type="application/json"):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, json=None, headers=None):
        self.calls.append({"url": url, "json": json, "headers": headers})
        if self.error:
            raise self.error
        return self.response


async def test_search_returns_results_in_order():
    session = FakeSession(FakeResponse(payload={
        "results": [
            {"title": "First", "url": "https://one", "content": "c1", "score": 0.9},
            {"title": "Second", "url": "https://two", "content": "c2", "score": 0.4},
        ]
    }))

    results = await search_tavily(session, "Company X earnings", "tvly-key")

    assert [r.url for r in results] == ["https://one", "https://two"]
    assert results[0].title == "First"
    assert results[0].score == 0.9

    call = session.calls[0]
    assert call["url"] == TAVILY_API_URL
    assert call["json"] == {
        "api_key": "tvly-key",
        "query": "Company X earnings",
        "search_depth": "advanced",
        "include_answer": False,
        "max_results": TAVILY_MAX_RESULTS,
        "topic": "general",
    }
    assert call["headers"]["Content-Type"] == "application/json"


async def test_search_tolerates_missing_fields():
    session = FakeSession(FakeResponse(payload={"results": [{"url": "https://x"}, "junk", {"title": None}]}))

    results = await search_tavily(session, "q", "key")

    assert len(results) == 2
    assert results[0].title == ""
    assert results[0].content == ""
    assert results[0].score == 0.0
    assert results[1].url == ""


async def test_empty_result_list():
    session = FakeSession(FakeResponse(payload={"results": []}))
    assert await search_tavily(session, "q", "key") == []


async def test_http_error_carries_status():
    session = FakeSession(FakeResponse(status=401, reason="Unauthorized"))

    with pytest.raises(SearchServiceError) as exc_info:
        await search_tavily(session, "q", "bad-key")

    assert exc_info.value.status == 401
    assert str(exc_info.value) == "Tavily error: 401 - Unauthorized"


async def test_http_error_without_reason():
    session = FakeSession(FakeResponse(status=500, reason=None))

    with pytest.raises(SearchServiceError) as exc_info:
        await search_tavily(session, "q", "key")

    assert exc_info.value.status == 500
    assert exc_info.value.message == "request failed"


async def test_malformed_body():
    session = FakeSession(FakeResponse(payload={"answer": "no results key"}))

    with pytest.raises(SearchServiceError, match="results"):
        await search_tavily(session, "q", "key")


@pytest.mark.parametrize("score", ["high", [0.5], {"value": 1}])
async def test_malformed_score(score):
    session = FakeSession(FakeResponse(payload={"results": [{"url": "https://x", "score": score}]}))

    with pytest.raises(SearchServiceError, match="malformed result"):
        await search_tavily(session, "q", "key")


async def test_numeric_string_score_accepted():
    session = FakeSession(FakeResponse(payload={"results": [{"url": "https://x", "score": "0.75"}]}))

    results = await search_tavily(session, "q", "key")

    assert results[0].score == 0.75


async def test_invalid_json_body():
    session = FakeSession(FakeResponse(payload=ValueError("Expecting value")))

    with pytest.raises(SearchServiceError, match="not valid JSON"):
        await search_tavily(session, "q", "key")


async def test_transport_error():
    session = FakeSession(error=aiohttp.ClientConnectionError("connection refused"))

    with pytest.raises(SearchServiceError) as exc_info:
        await search_tavily(session, "q", "key")

    assert exc_info.value.status is None
    assert "connection refused" in str(exc_info.value)


async def test_timeout():
    session = FakeSession(error=asyncio.TimeoutError())

    with pytest.raises(SearchServiceError, match="timed out"):
        await search_tavily(session, "q", "key")


async def test_missing_api_key():
    session = FakeSession(FakeResponse(payload={"results": []}))

    with pytest.raises(MissingCredential):
        await search_tavily(session, "q", "")

    assert session.calls == []


async def test_blank_query():
    session = FakeSession(FakeResponse(payload={"results": []}))

    with pytest.raises(ValueError):
        await search_tavily(session, "   ", "key")

    assert session.calls == []

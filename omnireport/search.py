"""Tavily search API client (async).

A single POST per query, no retries and no caching: every failure surfaces
immediately as a SearchServiceError.

API Documentation: https://docs.tavily.com/
"""

import time
from typing import Any

import aiohttp

from omnireport.config import (
    TAVILY_API_URL,
    TAVILY_MAX_RESULTS,
    TAVILY_SEARCH_DEPTH,
    TAVILY_TOPIC,
)
from omnireport.exceptions import MissingCredential, SearchServiceError
from omnireport.logging import get_logger
from omnireport.models import SearchResult

log = get_logger(__name__)


def _build_payload(query: str, api_key: str) -> dict[str, Any]:
    return {
        "api_key": api_key,
        "query": query,
        "search_depth": TAVILY_SEARCH_DEPTH,
        "include_answer": False,
        "max_results": TAVILY_MAX_RESULTS,
        "topic": TAVILY_TOPIC,
    }


def _parse_results(data: Any) -> list[SearchResult]:
    """Convert a Tavily response body into SearchResult models."""
    if not isinstance(data, dict) or not isinstance(data.get("results"), list):
        raise SearchServiceError("response has no 'results' list")

    results = []
    for item in data["results"]:
        if not isinstance(item, dict):
            continue
        try:
            score = float(item.get("score") or 0.0)
        except (TypeError, ValueError) as e:
            raise SearchServiceError(f"malformed result: score {item.get('score')!r}") from e
        results.append(SearchResult(
            title=str(item.get("title") or ""),
            url=str(item.get("url") or ""),
            content=str(item.get("content") or ""),
            score=score,
        ))
    return results


async def search_tavily(
    session: aiohttp.ClientSession,
    query: str,
    api_key: str,
) -> list[SearchResult]:
    """Run an advanced Tavily search.

    Args:
        session: aiohttp ClientSession shared by the current run
        query: Search query text
        api_key: Tavily API key

    Returns:
        Results in the ranking order returned by Tavily

    Raises:
        MissingCredential: If the API key is empty
        SearchServiceError: On a non-2xx status, transport error or malformed body
    """
    if not query or not query.strip():
        raise ValueError("Search query must not be empty")
    if not api_key:
        raise MissingCredential("search")

    start_time = time.monotonic()
    log.info("search_request_start", query=query, max_results=TAVILY_MAX_RESULTS)

    try:
        async with session.post(
            TAVILY_API_URL,
            json=_build_payload(query, api_key),
            headers={"Content-Type": "application/json"},
        ) as response:
            if response.status >= 400:
                reason = response.reason or "request failed"
                log.error("search_request_failed", query=query, status=response.status, reason=reason)
                raise SearchServiceError(reason, status=response.status)
            data = await response.json(content_type=None)
    except aiohttp.ClientError as e:
        log.error("search_transport_error", query=query, error=str(e))
        raise SearchServiceError(str(e) or type(e).__name__) from e
    except TimeoutError as e:
        log.error("search_timeout", query=query)
        raise SearchServiceError("request timed out") from e
    except ValueError as e:
        log.error("search_invalid_json", query=query, error=str(e))
        raise SearchServiceError("response is not valid JSON") from e

    results = _parse_results(data)
    log.info(
        "search_request_complete",
        query=query,
        results=len(results),
        duration_sec=round(time.monotonic() - start_time, 2),
    )
    return results

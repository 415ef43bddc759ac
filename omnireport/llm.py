"""OpenRouter chat-completion client.

OpenRouter speaks the OpenAI wire protocol, so the official async SDK is
pointed at its base URL. Calls are atomic: no streaming and no retries.
"""

import asyncio
import time
from weakref import WeakKeyDictionary

import openai
from openai import AsyncOpenAI

from omnireport.config import (
    APP_REFERER,
    APP_TITLE,
    GENERATION_MAX_TOKENS,
    GENERATION_TEMPERATURE,
    OPENROUTER_BASE_URL,
)
from omnireport.exceptions import GenerationServiceError, MissingCredential
from omnireport.logging import get_logger

log = get_logger(__name__)

# Clients are bound to the event loop that created their connection pool,
# so keep one per (loop, API key)
_async_clients: WeakKeyDictionary[asyncio.AbstractEventLoop, dict[str, AsyncOpenAI]] = WeakKeyDictionary()


def _get_async_client(api_key: str) -> AsyncOpenAI:
    """Get or create the async OpenRouter client for the running loop and API key."""
    bucket = _async_clients.setdefault(asyncio.get_running_loop(), {})
    client = bucket.get(api_key)
    if client is None:
        client = AsyncOpenAI(
            api_key=api_key,
            base_url=OPENROUTER_BASE_URL,
            max_retries=0,
            default_headers={
                "HTTP-Referer": APP_REFERER,
                "X-Title": APP_TITLE,
            },
        )
        bucket[api_key] = client
    return client


def _upstream_message(error: openai.APIStatusError) -> str:
    """Best available error message from an OpenRouter failure body."""
    body = error.body
    if isinstance(body, dict):
        message = body.get("message")
        if not message and isinstance(body.get("error"), dict):
            message = body["error"].get("message")
        if message:
            return str(message)
    return error.message or "request failed"


async def generate_text(
    messages: list[dict[str, str]],
    model: str,
    api_key: str,
    json_mode: bool = False,
) -> str:
    """Generate a completion for role-tagged messages.

    Args:
        messages: Ordered {"role", "content"} messages
        model: OpenRouter model id
        api_key: OpenRouter API key
        json_mode: Ask the model to answer with a single JSON object. The
            return value is still raw text and may carry code fences.

    Returns:
        The first choice's message content

    Raises:
        MissingCredential: If the API key is empty
        GenerationServiceError: On a non-2xx response or transport failure
    """
    if not api_key:
        raise MissingCredential("generation")

    client = _get_async_client(api_key)
    params = {
        "model": model,
        "messages": messages,
        "temperature": GENERATION_TEMPERATURE,
        "max_tokens": GENERATION_MAX_TOKENS,
    }
    if json_mode:
        params["response_format"] = {"type": "json_object"}

    start_time = time.monotonic()
    log.info("openrouter_request_start", model=model, json_mode=json_mode, messages=len(messages))

    try:
        response = await client.chat.completions.create(**params)
    except openai.APIStatusError as e:
        message = _upstream_message(e)
        log.error("openrouter_request_failed", model=model, status=e.status_code, error=message)
        raise GenerationServiceError(message, status=e.status_code) from e
    except openai.APIConnectionError as e:
        log.error("openrouter_connection_error", model=model, error=str(e))
        raise GenerationServiceError(str(e)) from e

    if not response.choices:
        log.error("openrouter_empty_response", model=model)
        raise GenerationServiceError("response contains no choices")

    content = response.choices[0].message.content or ""
    log.info(
        "openrouter_request_complete",
        model=model,
        chars=len(content),
        duration_sec=round(time.monotonic() - start_time, 2),
    )
    return content

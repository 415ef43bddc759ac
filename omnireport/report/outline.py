"""Report outline planning.

One search gathers background on the subject, then one JSON-mode generation
call turns that context into a report title and an ordered chapter list.
"""

import json
import re
import time
from collections.abc import Callable

import aiohttp
from pydantic import BaseModel, ValidationError, field_validator

from omnireport.exceptions import OutlineParseError
from omnireport.llm import generate_text
from omnireport.logging import get_logger
from omnireport.models import Credentials, Outline, SearchResult, StepType
from omnireport.prompts import (
    DEFAULT_TITLE_TEMPLATE,
    OUTLINE_QUERY_KEYWORDS,
    OUTLINE_SYSTEM_PROMPT,
    OUTLINE_USER_TEMPLATE,
)
from omnireport.search import search_tavily

log = get_logger(__name__)

_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)


class _OutlinePayload(BaseModel):
    """Shape expected from the planner's JSON answer."""
    title: str | None = None
    chapters: list[str]

    @field_validator("chapters")
    @classmethod
    def _drop_blank_chapters(cls, chapters: list[str]) -> list[str]:
        cleaned = [c.strip() for c in chapters if c.strip()]
        if not cleaned:
            raise ValueError("chapters must contain at least one title")
        return cleaned


def build_outline_query(subject: str) -> str:
    """Search query used to gather planning context."""
    return f"{subject} {OUTLINE_QUERY_KEYWORDS}"


def format_outline_context(results: list[SearchResult]) -> str:
    """Flatten search results into one line per source."""
    return "\n".join(f"- {r.title}: {r.content}" for r in results)


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers the model may emit around JSON."""
    return _FENCE_PATTERN.sub("", text).strip()


def parse_outline(raw: str, subject: str) -> Outline:
    """Parse the planner's raw answer into an Outline.

    Args:
        raw: Raw text returned by the generation call
        subject: Report subject, used for the fallback title

    Returns:
        Outline with a non-empty, ordered chapter list

    Raises:
        OutlineParseError: If the text is not a JSON object with usable chapters
    """
    cleaned = strip_code_fences(raw or "")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise OutlineParseError(f"invalid JSON: {e.msg}", raw=raw) from e

    if not isinstance(data, dict):
        raise OutlineParseError("expected a JSON object", raw=raw)

    try:
        payload = _OutlinePayload.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "outline"
        raise OutlineParseError(f"{field}: {first['msg']}", raw=raw) from e

    title = (payload.title or "").strip() or DEFAULT_TITLE_TEMPLATE.format(subject=subject)
    return Outline(title=title, chapters=payload.chapters)


async def generate_outline(
    session: aiohttp.ClientSession,
    subject: str,
    credentials: Credentials,
    progress_callback: Callable[[str, StepType], None] | None = None,
) -> Outline:
    """Plan the report title and chapters for a subject.

    Args:
        session: aiohttp ClientSession shared by the current run
        subject: Report subject entered by the user
        credentials: API keys and model id
        progress_callback: Optional callback(message, step_type) for progress steps

    Returns:
        The parsed Outline
    """
    start_time = time.monotonic()
    log.info("outline_planning_start", subject=subject, model=credentials.model)

    results = await search_tavily(session, build_outline_query(subject), credentials.search_api_key)
    if progress_callback:
        progress_callback(f"已找到 {len(results)} 个核心来源，正在构建分析框架...", StepType.SUCCESS)
        progress_callback("正在规划专业报告章节架构...", StepType.INFO)

    messages = [
        {"role": "system", "content": OUTLINE_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": OUTLINE_USER_TEMPLATE.format(
                subject=subject,
                context=format_outline_context(results),
            ),
        },
    ]
    raw = await generate_text(messages, credentials.model, credentials.generation_api_key, json_mode=True)

    log.debug("outline_raw_response", raw=raw[:500])
    outline = parse_outline(raw, subject)

    log.info(
        "outline_planning_complete",
        title=outline.title,
        num_chapters=len(outline.chapters),
        duration_sec=round(time.monotonic() - start_time, 2),
    )
    return outline

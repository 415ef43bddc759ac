"""Per-section research and writing.

Each section gets its own search, its newly discovered sources are merged into
the run-wide reference list, and the chapter is written from that search
context. Failures are not caught here; they abort the whole run.
"""

import time
from collections.abc import Callable, Sequence

import aiohttp

from omnireport.exceptions import GenerationServiceError
from omnireport.llm import generate_text
from omnireport.logging import get_logger
from omnireport.models import (
    Credentials,
    Reference,
    SearchResult,
    SectionDraft,
    SectionStatus,
)
from omnireport.prompts import (
    SECTION_QUERY_KEYWORDS,
    SECTION_USER_TEMPLATE,
    SECTION_WRITER_PROMPT,
)
from omnireport.search import search_tavily

log = get_logger(__name__)


def build_section_query(subject: str, chapter_title: str) -> str:
    """Search query scoped to one chapter."""
    return f"{subject} {chapter_title} {SECTION_QUERY_KEYWORDS}"


def format_section_context(results: list[SearchResult]) -> str:
    """Format search results as source blocks for the writer prompt."""
    return "\n\n".join(f"来源 ({r.title}): {r.content}" for r in results)


def merge_references(
    references: Sequence[Reference],
    results: list[SearchResult],
) -> list[Reference]:
    """Create references for results whose url has not been seen in this run.

    Ids continue from the current reference count, in discovery order.
    Existing references are never modified.

    Args:
        references: All references accumulated so far in the run
        results: Search results of the current section

    Returns:
        Only the newly created references
    """
    seen_urls = {ref.url for ref in references}
    new_refs: list[Reference] = []

    for result in results:
        if not result.url or result.url in seen_urls:
            continue
        seen_urls.add(result.url)
        new_refs.append(Reference(
            id=len(references) + len(new_refs) + 1,
            title=result.title or result.url,
            url=result.url,
        ))

    return new_refs


def build_section_messages(
    subject: str,
    chapter_title: str,
    results: list[SearchResult],
) -> list[dict[str, str]]:
    """Build the chat messages for writing one chapter."""
    system_prompt = SECTION_WRITER_PROMPT.format(
        subject=subject,
        chapter_title=chapter_title,
        search_context=format_section_context(results),
    )
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": SECTION_USER_TEMPLATE.format(chapter_title=chapter_title)},
    ]


async def process_section(
    session: aiohttp.ClientSession,
    subject: str,
    chapter_title: str,
    credentials: Credentials,
    references: Sequence[Reference],
    progress_callback: Callable[[SectionStatus, list[Reference]], None] | None = None,
) -> SectionDraft:
    """Research and write a single section.

    The callback fires with RESEARCHING before the search and with WRITING
    (plus the new references) before the generation call, so observers can
    publish each transition separately.

    Args:
        session: aiohttp ClientSession shared by the current run
        subject: Report subject
        chapter_title: Title of the chapter to write
        credentials: API keys and model id
        references: References accumulated so far in the run
        progress_callback: Optional callback(status, new_references)

    Returns:
        SectionDraft with the markdown content and the new references

    Raises:
        GenerationServiceError: If the model answers with blank content
    """
    start_time = time.monotonic()
    log.info("section_research_start", section=chapter_title)
    if progress_callback:
        progress_callback(SectionStatus.RESEARCHING, [])

    results = await search_tavily(
        session,
        build_section_query(subject, chapter_title),
        credentials.search_api_key,
    )
    new_refs = merge_references(references, results)
    log.info(
        "section_research_complete",
        section=chapter_title,
        results=len(results),
        new_references=len(new_refs),
    )

    if progress_callback:
        progress_callback(SectionStatus.WRITING, new_refs)

    messages = build_section_messages(subject, chapter_title, results)
    content = await generate_text(messages, credentials.model, credentials.generation_api_key)

    log.info(
        "section_writing_complete",
        section=chapter_title,
        word_count=len(content.split()),
        duration_sec=round(time.monotonic() - start_time, 2),
    )
    if not content.strip():
        log.error("section_content_empty", section=chapter_title)
        raise GenerationServiceError("response content is empty")

    return SectionDraft(content=content, new_references=new_refs)

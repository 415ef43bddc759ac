"""Error taxonomy for report generation.

Every error raised here is fatal to the current run: the generator catches it
once, records a single error step and marks the run as failed.
"""

from __future__ import annotations


class OmniReportError(Exception):
    """Base class for all OmniReport errors."""


class MissingCredential(OmniReportError):
    """A required API key is empty."""

    def __init__(self, *services: str) -> None:
        self.services = services
        names = ", ".join(services) or "unknown"
        super().__init__(f"Missing API key for: {names}")


class UpstreamServiceError(OmniReportError):
    """An upstream HTTP service answered with a failure or could not be reached."""

    service = "upstream"

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        self.message = message
        if status is None:
            super().__init__(f"{self.service} error: {message}")
        else:
            super().__init__(f"{self.service} error: {status} - {message}")


class SearchServiceError(UpstreamServiceError):
    """The search API call failed."""

    service = "Tavily"


class GenerationServiceError(UpstreamServiceError):
    """The language-model API call failed."""

    service = "OpenRouter"


class OutlineParseError(OmniReportError):
    """The planner response was not a usable outline."""

    def __init__(self, detail: str, raw: str = "") -> None:
        self.detail = detail
        self.raw = raw
        super().__init__(f"生成大纲格式解析失败，请重试。({detail})")

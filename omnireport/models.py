"""Pydantic models for report generation.

`RunState` is immutable: the generator publishes a fresh snapshot after every
mutation, so observers always see complete, ordered intermediate states.
"""

import time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from omnireport.config import DEFAULT_MODEL


class ReportStatus(str, Enum):
    """Lifecycle of a single report run."""
    IDLE = "idle"
    PLANNING = "planning"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


class SectionStatus(str, Enum):
    """Progress of one report section."""
    PENDING = "pending"
    RESEARCHING = "researching"
    WRITING = "writing"
    COMPLETED = "completed"
    ERROR = "error"


class StepType(str, Enum):
    """Category of a progress log entry."""
    INFO = "info"
    SEARCH = "search"
    WRITING = "writing"
    SUCCESS = "success"
    ERROR = "error"


class Credentials(BaseModel):
    """API keys for both upstream services plus the selected model."""
    search_api_key: str = Field("", description="Tavily API key")
    generation_api_key: str = Field("", description="OpenRouter API key")
    model: str = Field(DEFAULT_MODEL, description="OpenRouter model id")

    def missing(self) -> list[str]:
        """Names of the services whose key is empty."""
        missing = []
        if not self.search_api_key.strip():
            missing.append("search")
        if not self.generation_api_key.strip():
            missing.append("generation")
        return missing

    @property
    def is_complete(self) -> bool:
        return not self.missing()


class SearchResult(BaseModel):
    """A single hit returned by the search API."""
    title: str = ""
    url: str = ""
    content: str = Field("", description="Snippet or body excerpt")
    score: float = Field(0.0, description="Relevance score on the source's scale")


class Reference(BaseModel):
    """A deduplicated citation collected during a run."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1, description="1-based discovery order across the run")
    title: str
    url: str


class ReportSection(BaseModel):
    """One chapter of the report."""
    model_config = ConfigDict(frozen=True)

    title: str
    content: str = Field("", description="Markdown body, empty until written")
    status: SectionStatus = SectionStatus.PENDING


class GenerationStep(BaseModel):
    """One entry of the append-only progress log."""
    model_config = ConfigDict(frozen=True)

    message: str
    type: StepType = StepType.INFO
    timestamp: float = Field(default_factory=time.time)
    error: str | None = Field(None, description="Exception class name for error steps")


class Outline(BaseModel):
    """Planned report title and ordered chapter titles."""
    title: str
    chapters: list[str] = Field(default_factory=list)


class SectionDraft(BaseModel):
    """Output of researching and writing one section."""
    content: str
    new_references: list[Reference] = Field(default_factory=list)


class RunState(BaseModel):
    """Aggregate state of one report run."""
    model_config = ConfigDict(frozen=True)

    status: ReportStatus = ReportStatus.IDLE
    subject: str = ""
    title: str = ""
    sections: tuple[ReportSection, ...] = ()
    references: tuple[Reference, ...] = ()
    steps: tuple[GenerationStep, ...] = ()

    @property
    def is_finished(self) -> bool:
        return self.status in (ReportStatus.COMPLETED, ReportStatus.FAILED)

"""OmniReport: subject-to-report generation with web research.

Main entry point:
    from omnireport import Credentials, ReportGenerator

Example:
    generator = ReportGenerator(Credentials(
        search_api_key="tvly-...",
        generation_api_key="sk-or-...",
    ))
    state = await generator.start("特斯拉财报舆情分析")
    markdown = build_markdown(state)
"""

from omnireport.exceptions import (
    GenerationServiceError,
    MissingCredential,
    OmniReportError,
    OutlineParseError,
    SearchServiceError,
)
from omnireport.models import (
    Credentials,
    GenerationStep,
    Reference,
    ReportSection,
    ReportStatus,
    RunState,
    SearchResult,
    SectionStatus,
    StepType,
)
from omnireport.report import (
    ReportGenerator,
    build_markdown,
    export_pdf,
    export_word,
)

__version__ = "0.1.0"

__all__ = [
    # Models
    "Credentials",
    "GenerationStep",
    "Reference",
    "ReportSection",
    "ReportStatus",
    "RunState",
    "SearchResult",
    "SectionStatus",
    "StepType",
    # Errors
    "OmniReportError",
    "MissingCredential",
    "SearchServiceError",
    "GenerationServiceError",
    "OutlineParseError",
    # Pipeline
    "ReportGenerator",
    "build_markdown",
    "export_word",
    "export_pdf",
]

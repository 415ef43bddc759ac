"""Report generation pipeline: outline planning, section writing, export."""

from omnireport.report.export import (
    build_markdown,
    export_filename,
    export_pdf,
    export_word,
    render_report_html,
)
from omnireport.report.generator import ReportGenerator
from omnireport.report.outline import (
    build_outline_query,
    generate_outline,
    parse_outline,
    strip_code_fences,
)
from omnireport.report.writer import (
    build_section_query,
    merge_references,
    process_section,
)

__all__ = [
    # Generator
    "ReportGenerator",
    # Outline
    "generate_outline",
    "parse_outline",
    "strip_code_fences",
    "build_outline_query",
    # Writer
    "process_section",
    "merge_references",
    "build_section_query",
    # Export
    "build_markdown",
    "render_report_html",
    "export_word",
    "export_pdf",
    "export_filename",
]

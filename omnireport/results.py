"""Organized storage of exported reports.

Creates a directory structure like:
reports/
└── subject_slug/
    ├── metadata.json
    ├── <title>_report.md
    ├── <title>.doc
    └── <title>.pdf
"""

import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any

from omnireport.config import REPORTS_DIR
from omnireport.logging import get_logger
from omnireport.models import ReportStatus, RunState
from omnireport.report.export import build_markdown, export_filename, export_pdf, export_word

log = get_logger(__name__)

EXPORT_FORMATS = ("md", "doc", "pdf")


class ResultsManager:
    """Writes report exports into one directory per subject."""

    def __init__(self, base_dir: Path | str = REPORTS_DIR):
        """Initialize the results manager.

        Args:
            base_dir: Base directory for storing reports
        """
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _slugify(self, subject: str) -> str:
        """Convert a subject to a filesystem-safe slug."""
        slug = subject.lower()
        slug = re.sub(r'[^\w\s-]', '', slug)
        slug = re.sub(r'[-\s]+', '_', slug)
        slug = slug.strip('_')
        if len(slug) > 100:
            slug = slug[:100]
        return slug or "report"

    def get_report_dir(self, subject: str) -> Path:
        """Get or create the directory for a subject."""
        report_dir = self.base_dir / self._slugify(subject)
        report_dir.mkdir(parents=True, exist_ok=True)
        return report_dir

    def save_metadata(self, state: RunState, exports: dict[str, str]) -> Path:
        """Save run metadata next to the exports.

        Args:
            state: Finished run state
            exports: Mapping of format -> written filename

        Returns:
            Path to saved metadata file
        """
        metadata: dict[str, Any] = {
            "subject": state.subject,
            "title": state.title,
            "status": state.status.value,
            "sections": [s.title for s in state.sections],
            "references": [ref.model_dump() for ref in state.references],
            "exports": exports,
            "created_at": datetime.now().isoformat(),
        }
        metadata_file = self.get_report_dir(state.subject) / "metadata.json"
        with open(metadata_file, "w", encoding="utf-8") as f:
            json.dump(metadata, f, indent=2, ensure_ascii=False)
        return metadata_file

    def save_exports(self, state: RunState, formats: list[str] | tuple[str, ...] = EXPORT_FORMATS) -> list[Path]:
        """Export a completed report in the requested formats.

        Args:
            state: Run state with status COMPLETED
            formats: Any of "md", "doc", "pdf"

        Returns:
            Paths of the written export files
        """
        if state.status != ReportStatus.COMPLETED:
            raise ValueError(f"Only completed reports can be exported (status={state.status.value})")
        unknown = [fmt for fmt in formats if fmt not in EXPORT_FORMATS]
        if unknown:
            raise ValueError(f"Unsupported export format(s): {', '.join(unknown)}")

        report_dir = self.get_report_dir(state.subject)
        written: dict[str, str] = {}
        paths: list[Path] = []

        for fmt in formats:
            if fmt == "md":
                path = report_dir / export_filename(state.title, "_report.md")
                path.write_text(build_markdown(state), encoding="utf-8")
            elif fmt == "doc":
                path = report_dir / export_filename(state.title, ".doc")
                path.write_bytes(export_word(state))
            else:
                path = report_dir / export_filename(state.title, ".pdf")
                path.write_bytes(export_pdf(state))
            written[fmt] = path.name
            paths.append(path)

        self.save_metadata(state, written)
        log.info("report_exported", subject=state.subject, dir=str(report_dir), formats=list(written))
        return paths

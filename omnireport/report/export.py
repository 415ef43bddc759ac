"""Report exporters.

Pure functions from a finished RunState to Markdown text, a Word-compatible
HTML document and a paginated PDF. No network access.
"""

import html
import os
import re
from datetime import date

import markdown2
from fpdf import FPDF, XPos, YPos

from omnireport.config import APP_TITLE, PDF_FONT_CANDIDATES, PDF_FONT_PATH
from omnireport.logging import get_logger
from omnireport.models import RunState

log = get_logger(__name__)

REFERENCES_HEADING = "参考资料索引 (References)"

_MARKDOWN_EXTRAS = ["fenced-code-blocks", "tables", "strike", "cuddled-lists"]


def export_filename(title: str, suffix: str) -> str:
    """Build a download filename from the report title.

    Args:
        title: Report title
        suffix: Filename ending, e.g. "_report.md" or ".pdf"
    """
    stem = re.sub(r"\s+", "_", title.strip()) or "report"
    stem = re.sub(r'[\\/:*?"<>|]', "", stem)
    return f"{stem}{suffix}"


def build_markdown(state: RunState, generated_on: date | None = None) -> str:
    """Render the report as a Markdown document."""
    generated_on = generated_on or date.today()
    lines = [
        f"# {state.title}",
        "",
        f"> 由 {APP_TITLE} 研究报告分析系统生成于 {generated_on.isoformat()}",
        "",
    ]

    for section in state.sections:
        lines.extend([f"## {section.title}", "", section.content, ""])

    lines.extend(["", "---", "", f"## {REFERENCES_HEADING}", ""])
    for ref in state.references:
        lines.append(f"[{ref.id}] [{ref.title}]({ref.url})")

    return "\n".join(lines) + "\n"


def render_report_html(state: RunState, generated_on: date | None = None) -> str:
    """Render the report body as HTML, the same layout the viewer shows."""
    generated_on = generated_on or date.today()
    title = html.escape(state.title)

    parts = [
        '<div class="report-header" style="text-align:center">',
        f"<h1>{title}</h1>",
        f"<p>生成时间: {generated_on.isoformat()}</p>",
        f"<p>{APP_TITLE} 研究报告分析系统</p>",
        "</div>",
    ]

    for section in state.sections:
        parts.append('<div class="report-section">')
        parts.append(f"<h2>{html.escape(section.title)}</h2>")
        parts.append(markdown2.markdown(section.content, extras=_MARKDOWN_EXTRAS))
        parts.append("</div>")

    if state.references:
        parts.append('<div class="report-references">')
        parts.append(f"<h2>{REFERENCES_HEADING}</h2>")
        parts.append("<ul>")
        for ref in state.references:
            parts.append(
                f'<li>[{ref.id}] <a href="{html.escape(ref.url, quote=True)}">'
                f"{html.escape(ref.title)}</a></li>"
            )
        parts.append("</ul>")
        parts.append("</div>")

    return "\n".join(parts)


def export_word(state: RunState, generated_on: date | None = None) -> bytes:
    """Wrap the rendered report in an Office HTML document (.doc)."""
    header = (
        "<html xmlns:o='urn:schemas-microsoft-com:office:office' "
        "xmlns:w='urn:schemas-microsoft-com:office:word' "
        "xmlns='http://www.w3.org/TR/REC-html40'>"
        f"<head><meta charset='utf-8'><title>{html.escape(state.title)}</title></head><body>"
    )
    footer = "</body></html>"
    document = header + render_report_html(state, generated_on) + footer
    # BOM so Word picks up the UTF-8 encoding
    return "\ufeff".encode("utf-8") + document.encode("utf-8")


def _find_unicode_font() -> str | None:
    candidates = [PDF_FONT_PATH] if PDF_FONT_PATH else []
    candidates.extend(PDF_FONT_CANDIDATES)
    for path in candidates:
        if path and os.path.exists(path):
            return path
    return None


def _markdown_to_plain_lines(content: str) -> list[str]:
    """Reduce markdown to readable plain lines for fixed-layout output."""
    lines = []
    for line in content.splitlines():
        line = re.sub(r"^#{1,6}\s*", "", line.strip())
        line = re.sub(r"\*\*(.+?)\*\*", r"\1", line)
        line = re.sub(r"\[([^\]]+)\]\(([^)]+)\)", r"\1 (\2)", line)
        line = re.sub(r"^[-*+]\s+", "• ", line)
        lines.append(line)
    return lines


class _ReportPDF(FPDF):
    """A4 portrait document with an optional CJK font."""

    def __init__(self) -> None:
        super().__init__(orientation="portrait", unit="mm", format="A4")
        self.set_margins(10, 10, 10)
        self.set_auto_page_break(auto=True, margin=10)
        self.unicode_font = False

        font_path = _find_unicode_font()
        if font_path:
            try:
                self.add_font("ReportFont", "", font_path)
                self.add_font("ReportFont", "B", font_path)
                self.set_font("ReportFont", size=12)
                self.unicode_font = True
            except Exception as e:
                log.warning("pdf_font_load_failed", font=font_path, error=str(e))
        if not self.unicode_font:
            log.debug("pdf_font_fallback", font="Helvetica")
            self.set_font("Helvetica", size=12)

    def printable(self, value: str) -> str:
        """Make text printable with the active font."""
        if self.unicode_font:
            return value
        value = value.replace("•", "-")
        return value.encode("latin-1", "replace").decode("latin-1")

    def block(self, value: str, size: int, height: float, style: str = "", align: str = "L") -> None:
        self.set_font(self.font_family, style, size)
        self.multi_cell(0, height, self.printable(value), align=align, new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def export_pdf(state: RunState, generated_on: date | None = None) -> bytes:
    """Render the report as a paginated A4 PDF."""
    generated_on = generated_on or date.today()
    pdf = _ReportPDF()
    pdf.add_page()

    pdf.block(state.title, size=20, height=12, style="B", align="C")
    pdf.block(f"生成时间: {generated_on.isoformat()}", size=10, height=6, align="C")
    pdf.ln(8)

    for section in state.sections:
        pdf.block(section.title, size=16, height=10, style="B")
        pdf.ln(2)
        for line in _markdown_to_plain_lines(section.content):
            if not line:
                pdf.ln(3)
                continue
            pdf.block(line, size=12, height=7)
        pdf.ln(6)

    if state.references:
        pdf.add_page()
        pdf.block(REFERENCES_HEADING, size=16, height=10, style="B")
        pdf.ln(2)
        for ref in state.references:
            pdf.block(f"[{ref.id}] {ref.title}", size=10, height=6)
            pdf.block(ref.url, size=9, height=5)

    return bytes(pdf.output())

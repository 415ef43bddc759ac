"""Unit tests for report exporters."""

from datetime import date

import pytest

import omnireport.report.export as export
from omnireport.models import Reference, ReportSection, ReportStatus, RunState, SectionStatus

pytestmark = pytest.mark.unit

GENERATED_ON = date(2025, 3, 14)


@pytest.fixture
def state():
    return RunState(
        status=ReportStatus.COMPLETED,
        subject="Company X earnings",
        title="Company X Deep Report",
        sections=(
            ReportSection(
                title="1. Summary",
                content="## Overview\n\nRevenue grew **12%** [1].\n\n- Margin up\n- Guidance kept",
                status=SectionStatus.COMPLETED,
            ),
            ReportSection(title="2. Timeline", content="Q1 results were strong [2].", status=SectionStatus.COMPLETED),
        ),
        references=(
            Reference(id=1, title="Earnings release", url="https://example.com/release"),
            Reference(id=2, title="Analyst note", url="https://example.com/note?a=1&b=2"),
        ),
    )


class TestExportFilename:
    """Tests for export_filename."""

    def test_whitespace_becomes_underscore(self):
        assert export.export_filename("Company X  Deep Report", "_report.md") == "Company_X_Deep_Report_report.md"

    def test_illegal_characters_removed(self):
        assert export.export_filename('A/B: "C"?', ".pdf") == "AB_C.pdf"

    def test_empty_title(self):
        assert export.export_filename("   ", ".doc") == "report.doc"


class TestBuildMarkdown:
    """Tests for build_markdown."""

    def test_layout(self, state):
        text = export.build_markdown(state, generated_on=GENERATED_ON)
        lines = text.splitlines()

        assert lines[0] == "# Company X Deep Report"
        assert "> 由 OmniReport 研究报告分析系统生成于 2025-03-14" in lines
        assert text.index("## 1. Summary") < text.index("## 2. Timeline")
        assert text.index("## 2. Timeline") < text.index("---")
        assert f"## {export.REFERENCES_HEADING}" in lines
        assert "[1] [Earnings release](https://example.com/release)" in lines
        assert "[2] [Analyst note](https://example.com/note?a=1&b=2)" in lines

    def test_section_content_is_verbatim(self, state):
        text = export.build_markdown(state, generated_on=GENERATED_ON)
        assert state.sections[0].content in text

    def test_references_in_id_order(self, state):
        text = export.build_markdown(state, generated_on=GENERATED_ON)
        assert text.index("[1] [Earnings release]") < text.index("[2] [Analyst note]")

    def test_no_references_keeps_heading(self):
        empty = RunState(title="T", sections=(ReportSection(title="1. A", content="x"),))
        text = export.build_markdown(empty, generated_on=GENERATED_ON)
        assert text.rstrip().endswith(f"## {export.REFERENCES_HEADING}")


class TestWordExport:
    """Tests for export_word."""

    def test_bom_and_office_namespaces(self, state):
        data = export.export_word(state, generated_on=GENERATED_ON)
        assert data.startswith(b"\xef\xbb\xbf")
        document = data[3:].decode("utf-8")
        assert "urn:schemas-microsoft-com:office:word" in document
        assert "<meta charset='utf-8'>" in document
        assert document.endswith("</body></html>")

    def test_body_is_rendered_html(self, state):
        document = export.export_word(state, generated_on=GENERATED_ON).decode("utf-8-sig")
        assert "<h1>Company X Deep Report</h1>" in document
        assert "<h2>1. Summary</h2>" in document
        assert "<strong>12%</strong>" in document
        assert "<li>Margin up</li>" in document
        assert 'href="https://example.com/note?a=1&amp;b=2"' in document
        assert "2025-03-14" in document

    def test_titles_are_escaped(self):
        hostile = RunState(title="<script>x</script>", sections=(ReportSection(title="A & B", content=""),))
        document = export.export_word(hostile, generated_on=GENERATED_ON).decode("utf-8-sig")
        assert "<script>" not in document
        assert "A &amp; B" in document


class TestPdfExport:
    """Tests for export_pdf."""

    def test_pdf_bytes(self, state, monkeypatch):
        monkeypatch.setattr(export, "_find_unicode_font", lambda: None)
        data = export.export_pdf(state, generated_on=GENERATED_ON)
        assert data.startswith(b"%PDF")
        assert len(data) > 500

    def test_non_latin_text_without_font(self, monkeypatch):
        monkeypatch.setattr(export, "_find_unicode_font", lambda: None)
        chinese = RunState(
            title="特斯拉 深度舆情研究报告",
            sections=(ReportSection(title="1. 舆情综述", content="- 要点 **一**"),),
            references=(Reference(id=1, title="来源", url="https://example.cn"),),
        )
        assert export.export_pdf(chinese, generated_on=GENERATED_ON).startswith(b"%PDF")


def test_markdown_to_plain_lines():
    lines = export._markdown_to_plain_lines("### Heading\n**bold** text\n- item\n[link](https://x)")
    assert lines == ["Heading", "bold text", "• item", "link (https://x)"]

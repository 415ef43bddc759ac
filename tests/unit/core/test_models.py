"""Unit tests for report domain models."""

import pytest
from pydantic import ValidationError

from omnireport.config import DEFAULT_MODEL
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

# Mark all tests in this module as unit tests
pytestmark = pytest.mark.unit


class TestEnums:
    """Tests for status and step enums."""

    def test_report_status_values(self):
        """ReportStatus covers the whole run lifecycle."""
        assert [s.value for s in ReportStatus] == [
            "idle", "planning", "generating", "completed", "failed",
        ]

    def test_section_status_values(self):
        """SectionStatus has expected values."""
        assert SectionStatus.PENDING.value == "pending"
        assert SectionStatus.RESEARCHING.value == "researching"
        assert SectionStatus.WRITING.value == "writing"
        assert SectionStatus.COMPLETED.value == "completed"
        assert SectionStatus.ERROR.value == "error"

    def test_step_type_is_string_enum(self):
        """StepType values compare equal to plain strings."""
        assert StepType.SEARCH == "search"
        assert isinstance(StepType.ERROR.value, str)


class TestCredentials:
    """Tests for Credentials model."""

    def test_defaults(self):
        """Empty credentials report both services missing."""
        creds = Credentials()
        assert creds.model == DEFAULT_MODEL
        assert creds.missing() == ["search", "generation"]
        assert not creds.is_complete

    def test_whitespace_key_counts_as_missing(self):
        """A key made of whitespace is not usable."""
        creds = Credentials(search_api_key="   ", generation_api_key="sk-or-1")
        assert creds.missing() == ["search"]

    def test_complete(self):
        """Both keys present."""
        creds = Credentials(search_api_key="tvly-1", generation_api_key="sk-or-1", model="openai/gpt-4o")
        assert creds.is_complete
        assert creds.missing() == []


class TestSearchResult:
    """Tests for SearchResult model."""

    def test_defaults(self):
        """Missing fields fall back to empty values."""
        result = SearchResult(url="https://example.com")
        assert result.title == ""
        assert result.content == ""
        assert result.score == 0.0


class TestReference:
    """Tests for Reference model."""

    def test_reference_id_must_be_positive(self):
        """Reference ids start at 1."""
        with pytest.raises(ValidationError):
            Reference(id=0, title="Zero", url="https://example.com")

    def test_reference_is_immutable(self):
        """References are never modified once assigned."""
        ref = Reference(id=1, title="One", url="https://example.com/1")
        with pytest.raises(ValidationError):
            ref.id = 2


class TestReportSection:
    """Tests for ReportSection model."""

    def test_new_section_is_pending_and_empty(self):
        """Sections start pending with no content."""
        section = ReportSection(title="1. 舆情综述")
        assert section.status == SectionStatus.PENDING
        assert section.content == ""

    def test_model_copy_produces_new_section(self):
        """Updates create a new section and leave the original untouched."""
        section = ReportSection(title="1. Summary")
        updated = section.model_copy(update={"status": SectionStatus.WRITING})
        assert updated.status == SectionStatus.WRITING
        assert section.status == SectionStatus.PENDING


class TestGenerationStep:
    """Tests for GenerationStep model."""

    def test_step_defaults(self):
        """Steps default to info with a timestamp and no error tag."""
        step = GenerationStep(message="hello")
        assert step.type == StepType.INFO
        assert step.timestamp > 0
        assert step.error is None


class TestRunState:
    """Tests for RunState model."""

    def test_initial_state(self):
        """A fresh RunState is idle and empty."""
        state = RunState()
        assert state.status == ReportStatus.IDLE
        assert state.title == ""
        assert state.sections == ()
        assert state.references == ()
        assert state.steps == ()
        assert not state.is_finished

    def test_state_is_frozen(self):
        """RunState snapshots cannot be mutated in place."""
        state = RunState()
        with pytest.raises(ValidationError):
            state.status = ReportStatus.PLANNING

    def test_is_finished(self):
        """Completed and failed are terminal states."""
        assert RunState(status=ReportStatus.COMPLETED).is_finished
        assert RunState(status=ReportStatus.FAILED).is_finished
        assert not RunState(status=ReportStatus.GENERATING).is_finished

    def test_serialization(self):
        """RunState can be dumped to JSON-compatible data."""
        state = RunState(
            status=ReportStatus.COMPLETED,
            subject="Company X earnings",
            title="Company X Deep Report",
            sections=(ReportSection(title="1. Summary", content="Body", status=SectionStatus.COMPLETED),),
            references=(Reference(id=1, title="Source", url="https://example.com"),),
        )
        data = state.model_dump(mode="json")
        assert data["status"] == "completed"
        assert data["sections"][0]["status"] == "completed"
        assert data["references"][0]["id"] == 1

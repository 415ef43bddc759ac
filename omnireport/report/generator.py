"""Report generator orchestrating the full pipeline.

This module drives one report run as a sequential state machine:
1. Plan the outline (one search + one JSON-mode generation)
2. For each chapter in order: research, merge references, write
3. Finish as COMPLETED, or as FAILED on the first error

Every mutation produces a new RunState snapshot that is published to the
event handler before the next step starts.
"""

import asyncio
import time
from typing import Any

import aiohttp

from omnireport.config import SECTION_DELAY_SECONDS
from omnireport.events import NullEventHandler, ReportEventHandler
from omnireport.exceptions import MissingCredential
from omnireport.logging import get_logger, run_context
from omnireport.models import (
    Credentials,
    GenerationStep,
    Reference,
    ReportSection,
    ReportStatus,
    RunState,
    SectionStatus,
    StepType,
)
from omnireport.report.outline import generate_outline
from omnireport.report.writer import process_section

log = get_logger(__name__)


class ReportGenerator:
    """Sequential report generation state machine.

    States: IDLE -> PLANNING -> GENERATING -> COMPLETED | FAILED. Starting a
    new run from any finished state resets everything first. A run cannot be
    cancelled once started.
    """

    def __init__(
        self,
        credentials: Credentials,
        handler: ReportEventHandler | None = None,
        section_delay: float = SECTION_DELAY_SECONDS,
    ) -> None:
        """Initialize the generator.

        Args:
            credentials: API keys and model id, replaceable between runs
            handler: Observer for state snapshots and log steps
            section_delay: Seconds to pause after each section
        """
        self.credentials = credentials
        self.handler: ReportEventHandler = handler or NullEventHandler()
        self.section_delay = section_delay
        self._state = RunState()
        self._running = False

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def is_running(self) -> bool:
        """True while a run is in flight; UIs use it to block a second start."""
        return self._running

    def reset(self) -> None:
        """Discard the current run and return to IDLE."""
        if self._running:
            log.warning("reset_ignored_while_running")
            return
        self._publish(RunState())

    # --- State publication ---

    def _publish(self, state: RunState, **kwargs: Any) -> None:
        self._state = state
        self.handler.on_state_change(state, **kwargs)

    def _update(self, **updates: Any) -> None:
        self._publish(self._state.model_copy(update=updates))

    def _add_step(self, message: str, step_type: StepType, error: str | None = None) -> None:
        steps = self._state.steps
        timestamp = time.time()
        if steps:
            # Keep the log ordered even if the wall clock steps backwards
            timestamp = max(timestamp, steps[-1].timestamp)
        step = GenerationStep(message=message, type=step_type, timestamp=timestamp, error=error)
        self._update(steps=steps + (step,))
        self.handler.on_step(step)

    def _update_section(self, index: int, **updates: Any) -> None:
        sections = list(self._state.sections)
        sections[index] = sections[index].model_copy(update=updates)
        self._update(sections=tuple(sections))

    def _add_references(self, new_refs: list[Reference]) -> None:
        if new_refs:
            self._update(references=self._state.references + tuple(new_refs))

    # --- Run ---

    async def start(self, subject: str) -> RunState:
        """Run the full pipeline for a subject.

        Args:
            subject: Report subject entered by the user

        Returns:
            The final RunState (COMPLETED or FAILED), or the unchanged state
            when the start was rejected

        Raises:
            MissingCredential: If either API key is missing; nothing is changed
        """
        missing = self.credentials.missing()
        if missing:
            log.warning("start_rejected_missing_credentials", missing=missing)
            raise MissingCredential(*missing)

        subject = (subject or "").strip()
        if not subject:
            log.warning("start_rejected_empty_subject")
            return self._state

        if self._running:
            log.warning("start_rejected_run_in_progress", subject=subject)
            return self._state

        self._running = True
        start_time = time.monotonic()
        try:
            with run_context(subject=subject, model=self.credentials.model):
                await self._run(subject)
        finally:
            self._running = False

        log.info(
            "report_generation_finished",
            subject=subject,
            status=self._state.status.value,
            sections=len(self._state.sections),
            references=len(self._state.references),
            duration_sec=round(time.monotonic() - start_time, 2),
        )
        return self._state

    async def _run(self, subject: str) -> None:
        self._publish(RunState(status=ReportStatus.PLANNING, subject=subject))
        log.info("report_generation_start", subject=subject, model=self.credentials.model)

        try:
            async with aiohttp.ClientSession() as session:
                self._add_step(f'正在分析主题: "{subject}"...', StepType.SEARCH)
                outline = await generate_outline(
                    session,
                    subject,
                    self.credentials,
                    progress_callback=self._add_step,
                )

                sections = tuple(ReportSection(title=chapter) for chapter in outline.chapters)
                self._update(
                    title=outline.title,
                    sections=sections,
                    status=ReportStatus.GENERATING,
                )
                self._add_step(
                    f"架构已确立: 包含 {len(sections)} 个专业板块。开始深度调研...",
                    StepType.SUCCESS,
                )

                for index in range(len(sections)):
                    await self._run_section(session, subject, index)
                    await asyncio.sleep(self.section_delay)

        except Exception as e:
            log.error(
                "report_generation_failed",
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            self._add_step(f"错误: {e}", StepType.ERROR, error=type(e).__name__)
            self._update(status=ReportStatus.FAILED)
            return

        self._update(status=ReportStatus.COMPLETED)
        self._add_step("全部分析完成。报告已生成。", StepType.SUCCESS)

    async def _run_section(self, session: aiohttp.ClientSession, subject: str, index: int) -> None:
        total = len(self._state.sections)
        title = self._state.sections[index].title

        def on_progress(status: SectionStatus, new_refs: list[Reference]) -> None:
            if status is SectionStatus.RESEARCHING:
                self._update_section(index, status=status)
                self._add_step(f"[{index + 1}/{total}] 正在调研: {title}", StepType.SEARCH)
            elif status is SectionStatus.WRITING:
                self._add_references(new_refs)
                self._update_section(index, status=status)
                self._add_step(f"正在撰写: {title}...", StepType.WRITING)

        draft = await process_section(
            session,
            subject,
            title,
            self.credentials,
            self._state.references,
            progress_callback=on_progress,
        )

        self._update_section(index, content=draft.content, status=SectionStatus.COMPLETED)
        self._add_step(f"已完成: {title}", StepType.SUCCESS)

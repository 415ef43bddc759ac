"""Rich UI components for report generation progress."""

from datetime import datetime
from typing import Any

from rich import box
from rich.console import Console, Group
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from omnireport.models import (
    GenerationStep,
    Reference,
    ReportSection,
    ReportStatus,
    RunState,
    SectionStatus,
    StepType,
)

# Shared console instance
console = Console()

STEP_ICONS = {
    StepType.SEARCH: ("🔍", "blue"),
    StepType.WRITING: ("✍️ ", "magenta"),
    StepType.SUCCESS: ("✅", "green"),
    StepType.ERROR: ("❌", "red"),
    StepType.INFO: ("⏳", "dim"),
}

SECTION_STYLES = {
    SectionStatus.PENDING: "[dim]等待中[/dim]",
    SectionStatus.RESEARCHING: "[bold blue]调研中...[/bold blue]",
    SectionStatus.WRITING: "[bold magenta]撰写中...[/bold magenta]",
    SectionStatus.COMPLETED: "[green]已完成[/green]",
    SectionStatus.ERROR: "[red]失败[/red]",
}


def format_step(step: GenerationStep) -> Text:
    """Render one log step as `HH:MM:SS icon message`."""
    icon, style = STEP_ICONS.get(step.type, STEP_ICONS[StepType.INFO])
    clock = datetime.fromtimestamp(step.timestamp).strftime("%H:%M:%S")

    line = Text()
    line.append(f"{clock} ", style="dim")
    line.append(f"{icon} ", style=style)
    line.append(step.message, style="red" if step.type == StepType.ERROR else "white")
    return line


def create_sections_table(sections: tuple[ReportSection, ...] | list[ReportSection]) -> Table:
    """Create a table of section titles and their status."""
    table = Table(
        title="[bold cyan]报告章节[/bold cyan]",
        box=box.ROUNDED,
        header_style="bold magenta",
        title_justify="left",
    )
    table.add_column("#", style="dim", width=4, justify="center")
    table.add_column("章节", style="cyan", max_width=60, overflow="ellipsis")
    table.add_column("状态", width=12, justify="center")
    table.add_column("字数", style="yellow", width=8, justify="right")

    for i, section in enumerate(sections, 1):
        table.add_row(
            str(i),
            section.title,
            SECTION_STYLES[section.status],
            str(len(section.content)) if section.content else "-",
        )
    return table


def create_references_table(references: tuple[Reference, ...] | list[Reference], top_n: int = 20) -> Table:
    """Create a table of collected references."""
    table = Table(
        title="[bold cyan]资料来源索引 (References)[/bold cyan]",
        box=box.SIMPLE,
        title_justify="left",
    )
    table.add_column("ID", style="dim", width=5, justify="right")
    table.add_column("标题", style="white", max_width=50, overflow="ellipsis")
    table.add_column("URL", style="blue", max_width=60, overflow="ellipsis")

    for ref in references[:top_n]:
        table.add_row(f"[{ref.id}]", ref.title, ref.url)
    if len(references) > top_n:
        table.add_row("...", f"[dim]and {len(references) - top_n} more[/dim]", "")
    return table


def render_summary(state: RunState, show_content: bool = False) -> None:
    """Print the final report summary panel."""
    if state.status == ReportStatus.COMPLETED:
        border, headline = "green", "[bold green]报告生成完成[/bold green]"
    elif state.status == ReportStatus.FAILED:
        border, headline = "red", "[bold red]报告生成失败[/bold red]"
    else:
        border, headline = "dim", f"[dim]{state.status.value}[/dim]"

    parts: list[Any] = [Text(state.title or "(untitled)", style="bold"), Text("")]
    if state.sections:
        parts.append(create_sections_table(state.sections))
    if state.references:
        parts.append(create_references_table(state.references))

    console.print(Panel(Group(*parts), title=headline, border_style=border, box=box.ROUNDED))

    if show_content:
        for section in state.sections:
            if section.content:
                console.rule(section.title)
                console.print(Markdown(section.content))


class ConsoleProgressHandler:
    """Event handler printing the activity log as the run progresses."""

    def __init__(self, output: Console | None = None) -> None:
        self.console = output or console

    def on_step(self, step: GenerationStep, **kwargs: Any) -> None:
        self.console.print(format_step(step))

    def on_state_change(self, state: RunState, **kwargs: Any) -> None:
        # Steps already narrate every transition
        pass

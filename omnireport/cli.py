"""CLI entrypoints for OmniReport."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from omnireport.config import CREDENTIALS_FILE, DEFAULT_MODELS, LOG_LEVEL, REPORTS_DIR
from omnireport.credentials import load_credentials, save_credentials
from omnireport.display import ConsoleProgressHandler, console, render_summary
from omnireport.exceptions import MissingCredential
from omnireport.logging import configure_logging, get_logger
from omnireport.models import Credentials, ReportStatus, RunState
from omnireport.report.generator import ReportGenerator
from omnireport.results import EXPORT_FORMATS, ResultsManager

app = typer.Typer(add_completion=False, help="OmniReport: web-researched analysis reports")
logger = get_logger(__name__)

SERVICE_LABELS = {"search": "Tavily API Key", "generation": "OpenRouter API Key"}


def _load(model: str | None, credentials_file: Path) -> Credentials:
    credentials = load_credentials(credentials_file)
    if model:
        credentials = credentials.model_copy(update={"model": model})
    return credentials


def _missing_hint(error: MissingCredential) -> None:
    labels = ", ".join(SERVICE_LABELS.get(s, s) for s in error.services)
    console.print(f"[red]缺少 {labels}。[/red] 请先运行 [bold]omnireport configure[/bold] 设置密钥。")


def _export(state: RunState, formats: list[str], output_dir: Path) -> None:
    paths = ResultsManager(output_dir).save_exports(state, formats)
    for path in paths:
        console.print(f"[green]已导出[/green] {path}")


@app.command()
def run(
    subject: str = typer.Argument(..., help="Subject to research, e.g. '特斯拉财报舆情分析'"),
    model: str | None = typer.Option(None, "--model", "-m", help="OpenRouter model id (overrides saved choice)"),
    output_dir: Path = typer.Option(REPORTS_DIR, "--output-dir", "-o", help="Directory for exported reports"),
    formats: list[str] = typer.Option(list(EXPORT_FORMATS), "--format", "-f", help="Export format: md, doc or pdf"),
    no_export: bool = typer.Option(False, "--no-export", help="Do not write export files"),
    show_content: bool = typer.Option(False, "--show-content", help="Print the section texts when done"),
    credentials_file: Path = typer.Option(CREDENTIALS_FILE, "--credentials-file", help="Saved credentials file"),
    log_level: str = typer.Option(LOG_LEVEL, "--log-level", help="Log level"),
) -> None:
    """Generate one report for SUBJECT and export it."""
    configure_logging(cli_mode=True, log_level=log_level)
    unknown = [f for f in formats if f not in EXPORT_FORMATS]
    if unknown:
        raise typer.BadParameter(f"Unsupported format(s): {', '.join(unknown)}", param_hint="--format")
    if not subject.strip():
        raise typer.BadParameter("Subject must not be empty.", param_hint="SUBJECT")

    generator = ReportGenerator(_load(model, credentials_file), handler=ConsoleProgressHandler())
    logger.info("cli_run_requested", subject=subject, model=generator.credentials.model)

    try:
        state = asyncio.run(generator.start(subject))
    except MissingCredential as e:
        _missing_hint(e)
        raise typer.Exit(code=1)

    render_summary(state, show_content=show_content)
    if state.status != ReportStatus.COMPLETED:
        raise typer.Exit(code=1)
    if not no_export:
        _export(state, formats, output_dir)


@app.command()
def interactive(
    model: str | None = typer.Option(None, "--model", "-m", help="OpenRouter model id (overrides saved choice)"),
    output_dir: Path = typer.Option(REPORTS_DIR, "--output-dir", "-o", help="Directory for exported reports"),
    credentials_file: Path = typer.Option(CREDENTIALS_FILE, "--credentials-file", help="Saved credentials file"),
    log_level: str = typer.Option(LOG_LEVEL, "--log-level", help="Log level"),
) -> None:
    """Generate reports one after another in a single session."""
    configure_logging(cli_mode=True, log_level=log_level)
    generator = ReportGenerator(_load(model, credentials_file), handler=ConsoleProgressHandler())
    console.print("[bold]OmniReport 研究报告分析系统[/bold]  (留空回车退出)")
    asyncio.run(_interactive_session(generator, output_dir, credentials_file))


async def _interactive_session(generator: ReportGenerator, output_dir: Path, credentials_file: Path) -> None:
    # One event loop for the whole session so HTTP clients stay reusable;
    # blocking prompts run in a worker thread
    subject = ""
    while True:
        if not subject:
            answer = await asyncio.to_thread(typer.prompt, "主题", default="", show_default=False)
            subject = answer.strip()
            if not subject:
                break

        try:
            state = await generator.start(subject)
        except MissingCredential as e:
            _missing_hint(e)
            generator.credentials = await asyncio.to_thread(
                _prompt_credentials, generator.credentials, e.services
            )
            save_credentials(generator.credentials, credentials_file)
            # Same subject again with the new keys
            continue

        subject = ""
        render_summary(state)
        if state.status == ReportStatus.COMPLETED and await asyncio.to_thread(
            typer.confirm, "导出报告?", default=True
        ):
            _export(state, list(EXPORT_FORMATS), output_dir)


def _prompt_credentials(credentials: Credentials, services: tuple[str, ...] | list[str]) -> Credentials:
    updates = {}
    if "search" in services:
        updates["search_api_key"] = typer.prompt(SERVICE_LABELS["search"], hide_input=True)
    if "generation" in services:
        updates["generation_api_key"] = typer.prompt(SERVICE_LABELS["generation"], hide_input=True)
    return credentials.model_copy(update=updates)


@app.command()
def configure(
    search_key: str | None = typer.Option(None, "--search-key", help="Tavily API key"),
    generation_key: str | None = typer.Option(None, "--generation-key", help="OpenRouter API key"),
    model: str | None = typer.Option(None, "--model", "-m", help="Default OpenRouter model id"),
    credentials_file: Path = typer.Option(CREDENTIALS_FILE, "--credentials-file", help="Saved credentials file"),
) -> None:
    """Save API keys and the default model."""
    credentials = load_credentials(credentials_file)
    updates = {}
    if search_key is not None:
        updates["search_api_key"] = search_key
    if generation_key is not None:
        updates["generation_api_key"] = generation_key
    if model is not None:
        updates["model"] = model
    credentials = credentials.model_copy(update=updates)

    given = {"search": search_key is not None, "generation": generation_key is not None}
    missing = [s for s in credentials.missing() if not given[s]]
    if missing:
        credentials = _prompt_credentials(credentials, missing)

    path = save_credentials(credentials, credentials_file)
    typer.echo(f"Saved credentials to {path} (model: {credentials.model})")


@app.command()
def models() -> None:
    """List suggested OpenRouter models."""
    for model_id, name in DEFAULT_MODELS:
        typer.echo(f"{model_id}\t{name}")


if __name__ == "__main__":
    app()

"""Typer CLI entrypoint for feed-summarizer."""

from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional

import typer
import yaml
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from .config import (
    AppConfig,
    ConfigRepository,
    FileFormat,
    GenAIConfig,
    OutputDestination,
)
from .engine import (
    FeedFetcher,
    GenAIClient,
    PageFetcher,
    extract_and_format,
    load_output_template,
    new_genai_client,
)
from .engine.exporter import FileExporter, SQLiteExporter
from .errors import AggregatedError, ConfigError, FeedSummarizerError
from .logging_conf import configure_logging, tail_log
from .summarizer import Summarizer, SummaryResult

app = typer.Typer(
    help="Summarize RSS feed content using AI.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(name="config", help="Inspect configuration.", no_args_is_help=True)
log_app = typer.Typer(name="log", help="Inspect log files.", no_args_is_help=True)

# stdout carries command output; status and errors go to stderr
console = Console()
err_console = Console(stderr=True)


@dataclass
class AppState:
    repository: ConfigRepository
    config: AppConfig
    page_fetcher: PageFetcher
    feed_fetcher: FeedFetcher
    client_factory: Callable[[GenAIConfig], GenAIClient]

    def close(self) -> None:
        self.page_fetcher.close()


def build_state(verbose: bool) -> AppState:
    repository = ConfigRepository()
    configure_logging(verbose=verbose, log_dir=repository.locator.logs_dir)
    config = repository.load()
    page_fetcher = PageFetcher(config.fetch)
    return AppState(
        repository=repository,
        config=config,
        page_fetcher=page_fetcher,
        feed_fetcher=FeedFetcher(page_fetcher),
        client_factory=new_genai_client,
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _fail(message: str, error: BaseException | None = None) -> typer.Exit:
    err_console.print(message, style="red", markup=False, highlight=False)
    if isinstance(error, AggregatedError):
        for cause in error.causes:
            err_console.print(f"  - {cause}", style="red", markup=False, highlight=False)
    return typer.Exit(code=1)


def _dump_json(values: Any) -> str:
    return json.dumps(values, ensure_ascii=False, indent=2)


def _render_fetch_table(results: List[SummaryResult]) -> Table:
    table = Table(title="Page fetch results", box=box.SIMPLE_HEAD)
    table.add_column("Feed", style="cyan", overflow="fold")
    table.add_column("Items", justify="right")
    table.add_column("Fetched", style="green", justify="right")
    table.add_column("Failed", style="red", justify="right")
    for result in results:
        error = result.fetch_outcome.error
        table.add_row(
            result.feed_title or result.feed_url,
            str(len(result.articles)),
            str(len(result.fetch_outcome.pages)),
            str(len(error) if error else 0),
        )
    return table


def _resolve_genai_config(base: GenAIConfig, kind: Optional[str], model: Optional[str]) -> GenAIConfig:
    payload = base.model_dump(mode="json")
    if kind:
        payload["kind"] = kind
    if model:
        payload["model"] = model
    try:
        return GenAIConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"unsupported API type: {kind}") from exc


def _write_output(
    state: AppState,
    destination: OutputDestination,
    file_format: FileFormat,
    result: SummaryResult,
    values: List[Any],
) -> None:
    output = state.config.output
    root = state.repository.locator.project_root
    if destination is OutputDestination.STANDARD:
        typer.echo(_dump_json(values))
        return
    if not values:
        err_console.print(f"No summaries to store for {result.feed_url}", style="yellow")
        return
    exporter: FileExporter | SQLiteExporter
    if destination is OutputDestination.FILE:
        exporter = FileExporter(
            output.resolve(output.outputs_dir, root),
            result.feed_title or result.feed_url,
            file_format.value,
        )
    else:
        exporter = SQLiteExporter(output.resolve(output.store_path, root), kind=output.store_kind)
    with exporter:
        exporter.export_many(values)
    err_console.print(f"Saved {len(values)} summaries to {exporter.path}", style="green")


app.add_typer(config_app, name="config")
app.add_typer(log_app, name="log")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
) -> None:
    ctx.obj = build_state(verbose)


@app.command("summarize", help="Summarize one or more RSS feeds.")
def summarize(
    ctx: typer.Context,
    urls: List[str] = typer.Argument(..., help="RSS feed URL(s) to summarize."),
    gen_api_kind: Optional[str] = typer.Option(
        None, "--gen-api-kind", help="Generative AI API type (currently only 'gemini' is supported)."
    ),
    model: Optional[str] = typer.Option(None, "--model", help="Model name passed to the AI API."),
    system_prompt: Optional[Path] = typer.Option(
        None, "--system-prompt", help="Path to a custom system prompt text file."
    ),
    user_prompt: Optional[Path] = typer.Option(
        None, "--user-prompt", help="Path to a custom user prompt template file."
    ),
    format_output: bool = typer.Option(
        False, "--format", help="Format output as JSON with the output template."
    ),
    output_template: Optional[Path] = typer.Option(
        None, "--output-template", help="Custom output template path (only used with --format)."
    ),
    output_dest: Optional[OutputDestination] = typer.Option(
        None, "--output-dest", case_sensitive=False, help="Where formatted output is written."
    ),
    file_format: Optional[FileFormat] = typer.Option(
        None, "--file-format", case_sensitive=False, help="File layout for --output-dest file."
    ),
) -> None:
    state = _get_state(ctx)
    config = state.config
    results: List[SummaryResult] = []
    try:
        genai_config = _resolve_genai_config(config.genai, gen_api_kind, model)
        summarizer = Summarizer(
            state.client_factory(genai_config),
            state.feed_fetcher.fetch,
            state.page_fetcher.fetch,
            fetch_config=config.fetch,
        )
        system_path = system_prompt or config.prompts.system_prompt_path
        user_path = user_prompt or config.prompts.user_prompt_path
        if system_path or user_path:
            summarizer.load_prompts(system_path, user_path)

        should_format = format_output or config.output.format_output
        template = (
            load_output_template(output_template or config.output.template_path)
            if should_format
            else None
        )
        destination = output_dest or config.output.destination
        layout = file_format or config.output.file_format

        for url in urls:
            result = summarizer.summarize(url)
            results.append(result)
            if template is None:
                typer.echo(result.text)
                continue
            _write_output(state, destination, layout, result, result.format(template))
    except FeedSummarizerError as exc:
        raise _fail(f"Failed to summarize feed: {exc}", exc) from exc
    finally:
        state.close()
    if results:
        err_console.print(_render_fetch_table(results))


@app.command("fetch", help="Fetch an RSS feed and print it as JSON.")
def fetch(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="RSS feed URL."),
) -> None:
    state = _get_state(ctx)
    try:
        feed = state.feed_fetcher.fetch(url)
    except FeedSummarizerError as exc:
        raise _fail(str(exc), exc) from exc
    finally:
        state.close()
    typer.echo(_dump_json(asdict(feed)))


@app.command("format", help="Extract JSON from text and reshape it with the output template.")
def format_text(
    ctx: typer.Context,
    source: Optional[Path] = typer.Argument(
        None, exists=True, dir_okay=False, help="File holding the text; reads stdin when omitted."
    ),
    output_template: Optional[Path] = typer.Option(
        None, "--output-template", help="Custom output template path."
    ),
) -> None:
    state = _get_state(ctx)
    text = source.read_text(encoding="utf-8") if source else sys.stdin.read()
    try:
        template = load_output_template(output_template or state.config.output.template_path)
        values = extract_and_format(text, template)
    except FeedSummarizerError as exc:
        raise _fail(f"Failed to format text: {exc}", exc) from exc
    finally:
        state.close()
    typer.echo(_dump_json(values))


@config_app.command("show", help="Print the effective configuration as YAML.")
def config_show(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    state.close()
    typer.echo(f"# {state.repository.locator.config_path()}")
    typer.echo(
        yaml.safe_dump(state.config.model_dump(mode="json"), allow_unicode=True, sort_keys=False)
    )


@log_app.command("tail", help="Show the last lines of the application log.")
def log_tail(
    ctx: typer.Context,
    lines: int = typer.Option(50, "--lines", "-n", min=1, help="Number of lines to show."),
    errors: bool = typer.Option(False, "--errors", help="Show error.log instead."),
) -> None:
    state = _get_state(ctx)
    state.close()
    log_file = state.repository.locator.logs_dir / ("error.log" if errors else "summarizer.log")
    content = tail_log(log_file, lines)
    if not content:
        console.print(f"No log entries in {log_file}", style="yellow")
        raise typer.Exit(code=0)
    for line in content:
        typer.echo(line.rstrip("\n"))


__all__ = ["AppState", "app", "build_state"]

"""Document Review Pipeline CLI."""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from docreview.config import settings
from docreview.defaults import load_defaults
from docreview.errors import PipelineError
from docreview.models import (
    DocumentCategory,
    InputDocument,
    PatientContext,
    ReviewContext,
    ReviewRequest,
    TextBlock,
)
from docreview.pipeline import ReasoningInvoker, ReviewPipeline

app = typer.Typer(
    name="docreview",
    help="Review patient document bundles and produce a structured eligibility decision",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Route library logging through rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _load_documents(paths: list[Path], category: DocumentCategory) -> list[InputDocument]:
    return [InputDocument.from_path(path, category) for path in paths]


def _read_optional(path: Optional[Path]) -> Optional[str]:
    return path.read_text(encoding="utf-8") if path else None


def _usage_table(result) -> Table:
    table = Table(title="Token Usage", show_header=False)
    table.add_column("metric", style="dim")
    table.add_column("value", justify="right")
    usage = result.usage
    table.add_row("Input tokens", str(usage.input_tokens))
    table.add_row("Output tokens", str(usage.output_tokens))
    table.add_row("Cache creation tokens", str(usage.cache_creation_input_tokens))
    table.add_row("Cache read tokens", str(usage.cache_read_input_tokens))
    table.add_row("Cache", usage.cache_status)
    table.add_row("Model", result.model or "-")
    return table


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, help="Logging level"),
) -> None:
    """Document Review Pipeline."""
    configure_logging(log_level)


@app.command()
def review(
    intake: list[Path] = typer.Option([], "--intake", help="Intake form file (repeatable)"),
    medical_record: list[Path] = typer.Option(
        [], "--medical-record", help="Medical record file (repeatable)"
    ),
    id_proof: list[Path] = typer.Option([], "--id-proof", help="Identity document (repeatable)"),
    name: Optional[str] = typer.Option(None, help="Patient name"),
    state: Optional[str] = typer.Option(None, help="Patient state"),
    age: Optional[str] = typer.Option(None, help="Patient age"),
    instructions_file: Optional[Path] = typer.Option(
        None, exists=True, dir_okay=False, readable=True, help="Override instructions text"
    ),
    criteria_file: Optional[Path] = typer.Option(
        None, exists=True, dir_okay=False, readable=True, help="Override criteria text"
    ),
    output: Optional[Path] = typer.Option(None, help="Write the decision JSON to this file"),
) -> None:
    """Review one submission and print the decision."""
    try:
        documents = (
            _load_documents(intake, DocumentCategory.INTAKE)
            + _load_documents(medical_record, DocumentCategory.MEDICAL_RECORD)
            + _load_documents(id_proof, DocumentCategory.IDENTITY_PROOF)
        )
    except FileNotFoundError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)

    context = ReviewContext(
        patient=PatientContext(name=name, state=state, age=age),
        instructions=_read_optional(instructions_file),
        criteria=_read_optional(criteria_file),
    )

    console.print(f"[bold blue]Reviewing:[/bold blue] {len(documents)} document(s)")
    try:
        pipeline = ReviewPipeline(settings)
        result = pipeline.review(documents, context)
    except PipelineError as exc:
        err_console.print_json(json.dumps(exc.to_dict()))
        raise typer.Exit(code=1)

    decision_json = result.decision.model_dump_json(indent=2)
    if output:
        output.write_text(decision_json, encoding="utf-8")
        console.print(f"[dim]Decision written to {output}[/dim]")
    console.print_json(decision_json)
    console.print(_usage_table(result))


@app.command()
def defaults() -> None:
    """Print the active default instructions and criteria."""
    try:
        active = load_defaults(settings)
    except PipelineError as exc:
        err_console.print_json(json.dumps(exc.to_dict()))
        raise typer.Exit(code=1)
    console.print_json(json.dumps({"prompt": active.instructions, "criteria": active.criteria}))


@app.command()
def ping() -> None:
    """Check credentials and model access with a minimal request."""
    console.print("[bold blue]Testing reasoning service...[/bold blue]")
    console.print(f"[dim]Model: {settings.model}, Region: {settings.region}[/dim]")

    request = ReviewRequest(
        blocks=[TextBlock(body="Reply with the single word: ready")],
        instructions="",
    )
    try:
        result = ReasoningInvoker(settings).invoke(request, settings.model)
    except PipelineError as exc:
        err_console.print(f"[red]{exc.kind.value}:[/red] {exc.message}")
        raise typer.Exit(code=1)

    console.print(f"[green]OK[/green] {result.raw_text.strip()}")
    console.print(_usage_table(result))


if __name__ == "__main__":
    app()

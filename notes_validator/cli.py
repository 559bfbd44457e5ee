"""CLI for checking clinical notes against the required SOAP elements."""

from __future__ import annotations

import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config.settings import AnalyzerSettings, LLMSettings
from notes_validator.analysis import AnalysisReport, build_analyzer
from notes_validator.catalog import SOAP_SECTION_LABELS, SOAP_TAGS, get_catalog
from notes_validator.common.text_io import load_note
from observability.logging_config import configure_logging

app = typer.Typer(help="Clinical notes validator (SOAP format)")
console = Console()

SECTION_STYLES = {"S": "blue", "O": "green", "A": "yellow", "P": "magenta"}

NOTE_ARGUMENT = typer.Argument(..., help="Note text or path to a plain-text note")


@app.callback()
def _cli_entry(
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit structured JSON logs on stderr."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log tier fallbacks."),
) -> None:
    if json_logs or verbose:
        configure_logging(level=logging.DEBUG if verbose else logging.INFO, structured=json_logs)


@app.command("analyze")
def analyze_command(
    note_source: str = NOTE_ARGUMENT,
    element: Optional[List[str]] = typer.Option(
        None, "--element", "-e", help="Restrict the check to these elements (repeatable)."
    ),
    json_output: bool = typer.Option(False, "--json", help="Emit the report as JSON"),
) -> None:
    """Report which required elements the note documents; exit 1 when any are missing."""
    note = load_note(note_source)
    analyzer = build_analyzer(AnalyzerSettings(), LLMSettings())
    report = analyzer.analyze_note(note, element or None)

    if json_output:
        typer.echo(report.model_dump_json(indent=2))
    else:
        _print_report(report)

    if not report.complete:
        raise typer.Exit(code=1)


@app.command("sections")
def sections_command(note_source: str = NOTE_ARGUMENT) -> None:
    """Show how the note is split into SOAP sections."""
    note = load_note(note_source)
    sections = build_analyzer(AnalyzerSettings(), LLMSettings()).split(note)
    console.print(f"[dim]strategy: {sections.strategy}[/dim]")
    for tag in SOAP_TAGS:
        body = sections[tag] or "[dim](empty)[/dim]"
        console.print(Panel(body, title=f"{tag}: {SOAP_SECTION_LABELS[tag]}", border_style=SECTION_STYLES[tag]))


@app.command("elements")
def elements_command() -> None:
    """List the required elements grouped by SOAP section."""
    catalog = get_catalog()
    table = Table(title="Required Information (SOAP Format)")
    table.add_column("Section", style="cyan")
    table.add_column("Element")
    table.add_column("Description")
    for tag in SOAP_TAGS:
        for spec in catalog.by_section(tag):
            table.add_row(f"{tag}: {SOAP_SECTION_LABELS[tag]}", spec.name, spec.description)
    console.print(table)


def _print_report(report: AnalysisReport) -> None:
    if report.complete:
        console.print("[green]Notes are complete[/green]")
    else:
        console.print(f"[yellow]Missing required information ({len(report.missing_elements)} elements)[/yellow]")

    if report.detected_elements:
        table = Table(title="Detected Information (SOAP Format)", show_lines=False)
        table.add_column("Section", style="cyan")
        table.add_column("Element")
        table.add_column("Detected text")
        table.add_column("Tier", style="dim")
        tiers = {outcome.element: outcome.tier for outcome in report.outcomes}
        for tag in SOAP_TAGS:
            for name in report.soap_sections.get(tag, []):
                table.add_row(tag, name, report.detected_text.get(name, ""), tiers.get(name, ""))
        console.print(table)

    if report.missing_elements:
        catalog = get_catalog()
        table = Table(title="Missing Elements (SOAP Format)")
        table.add_column("Section", style="cyan")
        table.add_column("Element", style="red")
        table.add_column("Description")
        for tag in SOAP_TAGS:
            for name in report.missing_elements:
                spec = catalog.lookup(name)
                section = spec.soap_section if spec else "S"
                if section != tag:
                    continue
                table.add_row(tag, name, spec.description if spec else "")
        console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()

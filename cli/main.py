"""
SCRIPTORIUM - Main CLI Application

Command-line interface for reference resolution, cross-reference timelines,
LLM cross references, sequential commentary and reading coverage.
"""
import asyncio
import json
import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from config import get_config
from core.errors import ScriptoriumError, ScriptoriumValidationError, error_handler
from data.canon import POSITION_TABLE_PSALMS, Testament
from data.coverage import coverage_percent, testament_coverage, update_coverage
from data.references import canon_position, resolve, testament
from data.schemas import BookCoverage, payload_markdown
from observability import get_logger
from pipeline.commentary import CommentarySession, CommentaryStore, ProviderCommentaryGenerator
from pipeline.cross_references import CrossReferenceFinder
from pipeline.timeline import build_timeline, layout_timeline
from providers.registry import ProviderRegistry

# Initialize app
app = typer.Typer(
    name="scriptorium",
    help="SCRIPTORIUM - Scripture study toolkit",
    add_completion=False
)

console = Console()
logger = get_logger("scriptorium.cli")


class OutputFormat(str, Enum):
    """Output format options."""
    JSON = "json"
    TABLE = "table"


@app.callback()
def _setup(verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")):
    config = get_config()
    config.setup_logging()
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _fail(error: ScriptoriumError) -> None:
    console.print(f"[red]Error: {error.message}[/red]")
    for suggestion in error.suggestions:
        console.print(f"  [dim]{suggestion}[/dim]")
    raise typer.Exit(1)


@error_handler(OSError, ValueError, reraise_as=ScriptoriumValidationError)
def _read_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


@app.command("config")
def show_config():
    """Show the active configuration (secrets omitted)."""
    console.print_json(json.dumps(get_config().to_dict()))


@app.command("resolve")
def resolve_command(
    reference: str = typer.Argument(..., help="Reference such as 'John 3:16' or '1 John 4:8'"),
    psalm_spelling: str = typer.Option(
        POSITION_TABLE_PSALMS, "--psalm-spelling", help="Spelling of the Psalter accepted in input"
    ),
    output: OutputFormat = typer.Option(OutputFormat.TABLE, "--output", "-o", help="Output format"),
):
    """Resolve a reference and show its place in the canon."""
    resolved = resolve(reference, psalms_spelling=psalm_spelling)
    if resolved is None:
        console.print(f"[red]Could not resolve: {reference}[/red]")
        raise typer.Exit(1)

    which = testament(resolved.book)
    position = canon_position(resolved.book)

    if output == OutputFormat.JSON:
        console.print_json(json.dumps({
            **resolved.to_dict(),
            "testament": which.value if which else None,
            "position": position,
        }))
        return

    table = Table(title=str(resolved))
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Book", resolved.book)
    table.add_row("Chapter", str(resolved.chapter))
    table.add_row("Verse", str(resolved.verse))
    table.add_row("Testament", which.value if which else "-")
    table.add_row("Canon position", f"{position:.4f}")
    console.print(table)


@app.command()
def timeline(
    source: str = typer.Argument(..., help="Source verse"),
    cross_refs: List[str] = typer.Argument(..., help="Cross references"),
    svg: Optional[Path] = typer.Option(None, "--svg", help="Write an SVG rendering to this path"),
    radius: Optional[float] = typer.Option(None, "--radius", "-r", help="Circle radius"),
    cx: Optional[float] = typer.Option(None, "--cx", help="Circle centre x"),
    cy: Optional[float] = typer.Option(None, "--cy", help="Circle centre y"),
):
    """Cluster cross references by book around the canon circle."""
    result = build_timeline(source, cross_refs)
    if result is None:
        console.print(f"[red]Could not resolve source verse: {source}[/red]")
        raise typer.Exit(1)

    layout = layout_timeline(result, cx, cy, radius, config=get_config().timeline)

    table = Table(title=f"Timeline for {result.source}")
    table.add_column("Book", style="cyan")
    table.add_column("Position", style="yellow")
    table.add_column("References")
    table.add_column("Thickness", style="green")

    for cluster_layout in layout.clusters:
        cluster = cluster_layout.cluster
        table.add_row(
            cluster.book,
            f"{cluster.position:.4f}",
            ", ".join(str(m.reference) for m in cluster.references),
            f"{cluster_layout.thickness:.1f}",
        )

    console.print(table)
    dropped = len(cross_refs) - result.reference_count
    if dropped:
        console.print(f"[yellow]{dropped} reference(s) could not be resolved and were skipped[/yellow]")

    if svg:
        svg.write_text(layout.render_svg(), encoding="utf-8")
        console.print(f"[green]SVG saved to {svg}[/green]")


@app.command("cross-refs")
def cross_refs_command(
    reference: str = typer.Argument(..., help="Verse reference"),
    text: str = typer.Argument(..., help="Verse text"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="openai or gemini"),
    max_results: int = typer.Option(8, "--max", "-m", help="Maximum results"),
):
    """Ask a language model for a verse's cross references."""
    registry = ProviderRegistry.from_config(get_config().llm)
    console.print(f"[bold]Finding cross-references for: {reference}[/bold]")

    try:
        finder = CrossReferenceFinder(registry.get(provider))
        references = asyncio.run(finder.find(reference, text, max_results=max_results))
    except ScriptoriumError as e:
        _fail(e)

    table = Table(title=f"Cross-References for {reference}")
    table.add_column("Reference", style="cyan")
    table.add_column("Resolved", style="green")
    for ref in references:
        resolved = resolve(ref)
        table.add_row(ref, str(resolved) if resolved else "[red]unresolved[/red]")
    console.print(table)


@app.command()
def commentary(
    verse_refs: List[str] = typer.Argument(..., help="Study verses in study order"),
    texts_file: Path = typer.Option(..., "--texts-file", "-t", help="JSON object mapping verse to text"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="openai or gemini"),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="The question this study answers"),
    existing: Optional[Path] = typer.Option(None, "--existing", "-e", help="Previously saved commentaries"),
    save: Optional[Path] = typer.Option(None, "--save", "-s", help="Save commentaries to file"),
):
    """Generate commentary for each verse in turn, building on the verses before it."""
    if not texts_file.exists():
        console.print(f"[red]Error: Input file not found: {texts_file}[/red]")
        raise typer.Exit(1)

    registry = ProviderRegistry.from_config(get_config().llm)

    try:
        verse_texts = _read_json(texts_file)
        store = CommentaryStore.from_list(_read_json(existing)) if existing else None
        generator = ProviderCommentaryGenerator(registry.get(provider), verse_texts, original_query=query)
        session = CommentarySession(verse_refs, generator, store=store)
        with console.status("Generating commentary..."):
            results = asyncio.run(session.generate_all())
    except ScriptoriumError as e:
        _fail(e)

    for result in results:
        console.print(Panel(Markdown(payload_markdown(result.commentary)), title=result.verse_ref))

    if save:
        save.write_text(json.dumps(session.store.to_list(), indent=2), encoding="utf-8")
        console.print(f"[green]Commentaries saved to {save}[/green]")


@app.command()
def coverage(
    references: List[str] = typer.Argument(..., help="References studied"),
    existing: Optional[Path] = typer.Option(None, "--existing", "-e", help="Saved coverage JSON"),
    save: Optional[Path] = typer.Option(None, "--save", "-s", help="Save updated coverage"),
):
    """Record studied chapters and summarize canon coverage."""
    previous: List[BookCoverage] = []
    if existing and existing.exists():
        try:
            previous = [BookCoverage.from_dict(item) for item in _read_json(existing)]
        except ScriptoriumError as e:
            _fail(e)

    updated = update_coverage(previous, references)

    table = Table(title="Coverage")
    table.add_column("Book", style="cyan")
    table.add_column("Chapters read")
    for entry in updated:
        table.add_row(entry.book, ", ".join(str(c) for c in entry.chapters_read))
    console.print(table)

    console.print(f"Bible: [green]{coverage_percent(updated):.1f}%[/green]")
    console.print(f"Old Testament: [green]{testament_coverage(updated, Testament.OLD):.1f}%[/green]")
    console.print(f"New Testament: [green]{testament_coverage(updated, Testament.NEW):.1f}%[/green]")

    if save:
        save.write_text(json.dumps([c.to_dict() for c in updated], indent=2), encoding="utf-8")
        console.print(f"[green]Coverage saved to {save}[/green]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()

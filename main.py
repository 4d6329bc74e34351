"""Main CLI entry point for the screenplay ingestion pipeline."""
import asyncio
import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from utils.logger import setup_logger
from monitoring.progress_tracker import ProgressTracker
from pipeline.processor import ScriptProcessor
from screenplay.character_extractor import CharacterExtractor
from screenplay.scene_segmenter import SceneSegmenter
import config

logger = setup_logger(__name__)
console = Console()


@click.group()
def cli():
    """Screenplay Ingestion - scenes and characters from PDF or text scripts"""
    pass


@cli.command()
@click.option('--file', 'file_path', required=True, type=click.Path(exists=True), help='Path to PDF or text script')
@click.option('--json', 'json_out', type=click.Path(), help='Write the full result as JSON to this path')
@click.option('--min-occurrences', type=int, default=config.MIN_CHARACTER_OCCURRENCES,
              show_default=True, help='Cues a name needs before it is reported')
@click.option('--no-ocr', is_flag=True, help='Never fall back to OCR')
@click.option('--merge-suggested', is_flag=True, help='Merge every duplicate group under its suggested name')
def process(file_path, json_out, min_occurrences, no_ocr, merge_suggested):
    """Extract scenes and characters from a screenplay."""
    console.print("\n[bold cyan]Screenplay Ingestion[/bold cyan]\n")

    processor = ScriptProcessor(
        extractor=CharacterExtractor(min_occurrences=min_occurrences),
        enable_ocr=not no_ocr
    )
    tracker = ProgressTracker(console)

    with tracker.create_progress() as progress:
        task = progress.add_task("Starting...", total=100)
        result = asyncio.run(processor.process(file_path, on_progress=tracker.callback(progress, task)))

    if not result.success:
        console.print(f"[red]Error: {result.error}[/red]")
        if result.details:
            console.print(f"[dim]{result.details}[/dim]")
        if result.suggestion:
            console.print(f"[yellow]{result.suggestion}[/yellow]")
        if json_out:
            _write_json(Path(json_out), result.model_dump(mode="json"))
        raise SystemExit(1)

    characters = result.characters
    if merge_suggested and result.duplicates:
        characters = processor.merge_characters(result, {i: None for i in range(len(result.duplicates))})
        console.print(f"[green]✓ Merged {len(result.duplicates)} duplicate groups[/green]")

    console.print(f"[green]✓ Processed via {result.method} in {result.processing_time:.2f}s[/green]\n")

    scene_table = Table(title=f"Scenes ({len(result.scenes)})")
    scene_table.add_column("#", style="cyan")
    scene_table.add_column("I/E")
    scene_table.add_column("Location")
    scene_table.add_column("Time")
    scene_table.add_column("Characters")
    for scene in result.scenes:
        scene_table.add_row(
            scene.number,
            scene.interior_exterior,
            scene.location,
            scene.time_of_day,
            ", ".join(scene.characters)
        )
    console.print(scene_table)

    character_table = Table(title=f"Characters ({len(characters)})")
    character_table.add_column("Name", style="cyan")
    character_table.add_column("Cues", justify="right")
    character_table.add_column("Dialogue", justify="right")
    character_table.add_column("Scenes", justify="right")
    character_table.add_column("Confidence", justify="right")
    for character in characters:
        confidence = f"{character.confidence:.0%}"
        if character.is_suspicious:
            confidence = f"[red]{confidence}[/red]"
        elif character.is_low_confidence:
            confidence = f"[yellow]{confidence}[/yellow]"
        character_table.add_row(
            character.name,
            str(character.occurrences),
            str(character.dialogue_count),
            str(character.scene_count),
            confidence
        )
    console.print(character_table)

    if result.duplicates and not merge_suggested:
        console.print("\n[bold]Possible duplicates[/bold]")
        for index, group in enumerate(result.duplicates):
            names = ", ".join(c.name for c in group.characters)
            console.print(f"  [{index}] {names} -> [cyan]{group.suggested_name}[/cyan]")

    for warning in result.warnings or []:
        console.print(f"[yellow]⚠ {warning}[/yellow]")

    if json_out:
        data = result.model_dump(mode="json")
        data["characters"] = [c.model_dump(mode="json") for c in characters]
        _write_json(Path(json_out), data)
        console.print(f"\n[green]✓ Exported result to {json_out}[/green]")


@cli.command()
@click.argument('text')
def parse_heading(text):
    """Parse a single scene heading line."""
    heading = SceneSegmenter().parse_heading(text)
    if heading is None:
        console.print("[yellow]Not a scene heading[/yellow]")
        raise SystemExit(1)

    table = Table(show_header=False)
    table.add_row("Number", heading.number or "-")
    table.add_row("Int/Ext", heading.interior_exterior)
    table.add_row("Location", heading.location)
    table.add_row("Time", heading.time_of_day)
    console.print(table)


def _write_json(path: Path, data: dict):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


if __name__ == "__main__":
    cli()

"""CLI interface for the YouTube transcript service"""

import json
import logging
from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table

from .api.transcript_fetcher import TranscriptFetcher
from .api.youtube_client import YouTubeClient
from .config import config
from .errors import AcquisitionFailed, InvalidIdentifier
from .models import TranscriptResponse

app = typer.Typer(
    name="yt-transcript",
    help="Fetch YouTube caption transcripts through a chain of fallback strategies",
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _resolve_or_exit(video: str) -> str:
    try:
        return YouTubeClient.extract_video_id(video)
    except InvalidIdentifier as e:
        console.print(f"[red]Error:[/red] {str(e)}", style="bold")
        raise typer.Exit(1)


@app.command()
def fetch(
    video: str = typer.Argument(..., help="YouTube video ID or URL"),
    lang: str = typer.Option(config.default_language, "--lang", "-l", help="Preferred language code"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the transcript JSON to this file instead of stdout"
    ),
    text_only: bool = typer.Option(False, "--text", "-t", help="Print only the full transcript text"),
    verbose: bool = typer.Option(False, "--verbose", help="Log every strategy attempt"),
):
    """Fetch the transcript for a single video

    Examples:
        python -m yt_transcript_service.main fetch dQw4w9WgXcQ
        python -m yt_transcript_service.main fetch "https://youtu.be/dQw4w9WgXcQ" --lang es
        python -m yt_transcript_service.main fetch dQw4w9WgXcQ -o transcript.json
    """
    _configure_logging(verbose)
    video_id = _resolve_or_exit(video)

    try:
        result = TranscriptFetcher().fetch_transcript(video_id, lang)
    except AcquisitionFailed as e:
        console.print(f"[red]No transcript available for {video_id} ({lang}):[/red] {str(e)}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        raise typer.Exit(130)

    if text_only:
        typer.echo(result.full_text)
        return

    payload = TranscriptResponse.from_result(video_id, result).to_json_dict()
    if output is None:
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)

    console.print(f"[green]Output saved to:[/green] {output.absolute()}")
    console.print(
        f"Method: {result.method} | Language: {result.language} | "
        f"Segments: {len(result.segments)} | Words: {result.word_count:,}"
    )


@app.command()
def debug(
    video: str = typer.Argument(..., help="YouTube video ID or URL"),
    lang: str = typer.Option(config.default_language, "--lang", "-l", help="Preferred language code"),
    verbose: bool = typer.Option(False, "--verbose", help="Log every strategy attempt"),
):
    """Run every strategy independently and show what each one returns"""
    _configure_logging(verbose)
    video_id = _resolve_or_exit(video)

    report = TranscriptFetcher().debug_strategies(video_id, lang)

    table = Table(title=f"Strategies for {video_id} ({lang})")
    table.add_column("Strategy", style="cyan")
    table.add_column("Result")
    table.add_column("Time (ms)", justify="right")
    table.add_column("Segments", justify="right")
    table.add_column("Language / Error")

    for entry in report.strategies:
        if entry.skipped:
            status = "[yellow]skipped[/yellow]"
        elif entry.success:
            status = "[green]ok[/green]"
        else:
            status = "[red]failed[/red]"
        detail = (entry.language if entry.success else entry.error) or ""
        table.add_row(
            entry.name,
            status,
            f"{entry.processing_time_ms:.0f}",
            str(entry.segment_count),
            detail,
        )

    console.print(table)
    if not report.any_success:
        raise typer.Exit(1)


@app.command()
def serve(
    host: str = typer.Option(config.host, "--host", help="Interface to bind"),
    port: int = typer.Option(config.port, "--port", "-p", help="Port to listen on"),
):
    """Run the HTTP API"""
    from .server import create_app

    _configure_logging(False)
    config.validate()
    console.print(f"[bold cyan]YouTube Transcript API[/bold cyan] running on {host}:{port}")
    create_app().run(host=host, port=port, debug=False)


@app.command()
def version():
    """Show version information"""
    from . import __version__

    console.print(f"[bold cyan]YouTube Transcript Service[/bold cyan] v{__version__}")


def main():
    """Main entry point"""
    app()


if __name__ == "__main__":
    main()

"""
cs2coach CLI - Command Line Interface for match ratings

Provides commands for:
- Rating a player from a decoded event stream
- Listing the players of a match
- Listing stored training records
- Exporting trainer feature vectors
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from cs2coach import __version__
from cs2coach.analysis.rating import PerformanceRatingResult, PerformanceScorer
from cs2coach.core.config import LoggingConfig, get_config, load_config, set_config
from cs2coach.core.errors import CoachError, PlayerNotFoundError
from cs2coach.core.models import MatchLedger
from cs2coach.core.session import parse
from cs2coach.core.stream import JsonlEventStream
from cs2coach.core.utils import format_percentage
from cs2coach.pipeline.training_store import TrainingStore

app = typer.Typer(
    name="cs2coach",
    help="CS2 match performance ratings from decoded event streams",
    add_completion=False,
)
console = Console()
logger = logging.getLogger(__name__)


def setup_logging(settings: LoggingConfig, verbose: bool = False) -> None:
    """Configure root logging from the logging config section."""
    level = logging.DEBUG if verbose else getattr(logging, settings.level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=settings.format,
        filename=settings.file,
        force=True,
    )


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]cs2coach[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output"),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (.yaml, .toml or .json)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """cs2coach - CS2 Performance Ratings"""
    if config_file is not None:
        set_config(load_config(config_file))
    setup_logging(get_config().logging, verbose)


def _load_match(stream_path: Path) -> MatchLedger:
    try:
        with JsonlEventStream(stream_path) as stream:
            return parse(stream)
    except CoachError as e:
        console.print(f"[red]Error parsing event stream:[/red] {e}")
        raise typer.Exit(1)


def _display_rating(ledger: MatchLedger, result: PerformanceRatingResult) -> None:
    """Display the rating breakdown and key metrics."""
    m = result.metrics

    title = f"{result.player_name} on {ledger.map_name or 'unknown map'}"
    summary = Table(title=title, show_header=False)
    summary.add_column("Property", style="cyan")
    summary.add_column("Value", style="green")
    summary.add_row("Performance Score", f"{result.score:.1f} / 100 ({result.tier})")
    summary.add_row("Combat", f"{result.combat:.1f} / 40")
    summary.add_row("Impact", f"{result.impact:.1f} / 25")
    summary.add_row("Utility", f"{result.utility:.1f} / 20")
    summary.add_row("Economy", f"{result.economy:.1f} / 15")
    console.print(summary)
    console.print()

    table = Table(title="Detailed Metrics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("K/D", f"{m['kdr']:.2f}")
    table.add_row("Kills / Round", f"{m['kills_per_round']:.2f}")
    table.add_row("Headshot %", format_percentage(m["headshot_fraction"]))
    table.add_row("Opening Duel Win %", format_percentage(m["opening_duel_win_rate"]))
    table.add_row("Clutches Won", f"{int(m['clutch_wins'])}/{int(m['clutch_attempts'])}")
    table.add_row("Trade Effectiveness", format_percentage(m["trade_effectiveness"]))
    table.add_row("Flash Assists", str(int(m["flash_assists"])))
    table.add_row("Utility Damage / Round", f"{m['utility_damage_per_round']:.1f}")
    table.add_row("Support Score", f"{m['support_score']:.2f}")
    table.add_row("Accuracy", format_percentage(m["average_accuracy"]))
    if m["economy_samples"] > 0:
        table.add_row("Avg Equipment Value", f"${m['average_equipment_value']:,.0f}")
    else:
        table.add_row("Avg Equipment Value", "[yellow]no buy data[/yellow]")
    console.print(table)


@app.command()
def rate(
    stream_path: Path = typer.Argument(
        ...,
        help="Decoded event stream (.jsonl or .jsonl.gz)",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    player: str = typer.Argument(..., help="Player name or Steam ID"),
    save: bool = typer.Option(
        True, "--save/--no-save", help="Store the rated match as a training record"
    ),
    training_dir: Optional[Path] = typer.Option(
        None, "--training-dir", "-t", help="Training record directory"
    ),
) -> None:
    """
    Rate one player's performance in a match.
    """
    ledger = _load_match(stream_path)

    try:
        record = ledger.find_player(player)
    except PlayerNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    result = PerformanceScorer(ledger).rate(record.stable_id)
    _display_rating(ledger, result)

    if save:
        path = TrainingStore(training_dir).save(ledger, result)
        console.print(f"\n[green]Training record saved:[/green] {path}")


@app.command()
def players(
    stream_path: Path = typer.Argument(
        ...,
        help="Decoded event stream (.jsonl or .jsonl.gz)",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
) -> None:
    """
    List the players of a match.
    """
    ledger = _load_match(stream_path)

    table = Table(title=f"Players ({ledger.map_name or 'unknown map'})")
    table.add_column("Player", style="cyan")
    table.add_column("ID", justify="right")
    table.add_column("K", justify="right")
    table.add_column("D", justify="right")
    table.add_column("A", justify="right")
    table.add_column("HS%", justify="right")

    for p in sorted(ledger.players.values(), key=lambda x: x.kills, reverse=True):
        table.add_row(
            p.display_name,
            str(p.stable_id),
            str(p.kills),
            str(p.deaths),
            str(p.assists),
            f"{p.headshot_percentage:.1f}%",
        )
    console.print(table)


@app.command("list")
def list_records(
    training_dir: Optional[Path] = typer.Option(
        None, "--training-dir", "-t", help="Training record directory"
    ),
) -> None:
    """
    List stored training records.
    """
    store = TrainingStore(training_dir)
    records = store.load_all()
    if not records:
        console.print(f"[yellow]No training records in {store.directory}[/yellow]")
        return

    table = Table(title=f"Training Records ({len(records)})")
    table.add_column("Timestamp", style="cyan")
    table.add_column("Player")
    table.add_column("Map")
    table.add_column("Score", justify="right")
    for record in records:
        table.add_row(
            record.timestamp,
            record.player_name,
            record.map_name,
            f"{record.performance_rating:.1f}",
        )
    console.print(table)


@app.command("export-features")
def export_features(
    output: Path = typer.Argument(..., help="Output CSV file", dir_okay=False),
    training_dir: Optional[Path] = typer.Option(
        None, "--training-dir", "-t", help="Training record directory"
    ),
) -> None:
    """
    Export trainer feature vectors built from the stored training records.
    """
    frame = TrainingStore(training_dir).prepare_training_frame()
    if frame.empty:
        console.print("[yellow]No training records to export[/yellow]")
        raise typer.Exit(1)

    frame.to_csv(output, index=False)
    console.print(f"[green]Exported {len(frame)} rows to[/green] {output}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()

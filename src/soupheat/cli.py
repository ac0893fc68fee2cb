"""
SoupHeat CLI - Command Line Interface for match replay folders

Provides commands for:
- Listing match summaries in a folder
- Showing and batch-loading match details
- Building the match index and watching a folder for changes
- Generating heatmap data and exporting matches
- Serving the HTTP API
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
import uvicorn
import yaml
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from soupheat import __version__
from soupheat.core.config import (
    config_to_dict,
    configure_logging,
    generate_default_config,
    get_config,
    load_config,
    set_config,
)
from soupheat.core.errors import SoupHeatError
from soupheat.core.schemas import MatchDetail
from soupheat.export import EXPORT_FORMATS, export_heatmap, export_matches
from soupheat.infra.watcher import IndexWatcher, MatchFileEvent
from soupheat.pipeline.library import MatchLibrary, filter_summaries
from soupheat.visualization.heatmaps import PLAYER_MODES, HeatmapFilters, generate_kill_heatmap

app = typer.Typer(
    name="soupheat",
    help="Match replay ingestion and retrieval for kill heatmaps",
    add_completion=False,
)
console = Console()

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]SoupHeat[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output"
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (.yaml, .toml or .json)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """SoupHeat - Match Replay Heatmap Data"""
    if config_file is not None:
        set_config(load_config(config_file))
    configure_logging(get_config().logging)
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _library() -> MatchLibrary:
    return MatchLibrary(get_config())


def _fail(error: Exception) -> None:
    console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(1)


def _load_details(
    library: MatchLibrary,
    root: Path,
    match_ids: list[str],
    batch_size: Optional[int] = None,
) -> list[MatchDetail]:
    """Fetch details with a progress bar; errors end the command."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Loading match details...", total=len(match_ids))

        def on_progress(processed: int, total: int) -> None:
            progress.update(task, completed=processed, total=total)

        try:
            return library.get_matches(root, match_ids, batch_size, on_progress)
        except (SoupHeatError, ValueError) as e:
            _fail(e)


def _build_filters(
    players: Optional[list[str]],
    mode: str,
    weapons: Optional[list[str]],
    rounds: Optional[list[int]],
    time_start: Optional[float],
    time_end: Optional[float],
) -> HeatmapFilters:
    time_range = None
    if time_start is not None or time_end is not None:
        time_range = (time_start or 0.0, time_end if time_end is not None else float("inf"))
    try:
        return HeatmapFilters(
            players=frozenset(players) if players else None,
            player_mode=mode,
            weapons=frozenset(weapons) if weapons else None,
            rounds=frozenset(rounds) if rounds else None,
            time_range=time_range,
        )
    except ValueError as e:
        _fail(e)


@app.command("list")
def list_matches(
    root: Path = typer.Argument(..., help="Folder containing match files"),
    map_name: Optional[str] = typer.Option(None, "--map", "-m", help="Only matches on this map"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Only matches from this region"),
    as_json: bool = typer.Option(False, "--json", help="Print summaries as JSON"),
) -> None:
    """
    List match summaries found under ROOT.

    Every match file in the folder tree is parsed; files that cannot be
    read are skipped with a warning. The match index is rebuilt as well.
    """
    library = _library()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=as_json,
    ) as progress:
        task = progress.add_task("Loading matches...", total=None)

        def on_progress(processed: int, total: int) -> None:
            progress.update(task, completed=processed, total=total)

        try:
            summaries = library.load_matches(root, on_progress)
        except SoupHeatError as e:
            _fail(e)

    selected = filter_summaries(summaries, map_name=map_name, region=region)

    if as_json:
        typer.echo(json.dumps([s.to_dict() for s in selected], indent=2))
        return

    table = Table(title=f"Matches ({len(selected)} of {len(summaries)})")
    table.add_column("Match ID", style="cyan")
    table.add_column("Map", style="green")
    table.add_column("Region")
    table.add_column("Start (UTC)")
    table.add_column("Score", justify="right")

    for summary in selected:
        table.add_row(
            summary.match_id,
            summary.map,
            summary.region,
            summary.game_start.strftime("%Y-%m-%d %H:%M"),
            summary.score,
        )

    console.print(table)


@app.command()
def show(
    root: Path = typer.Argument(..., help="Folder containing match files"),
    match_id: str = typer.Argument(..., help="Match identifier"),
) -> None:
    """
    Show the details of one match.
    """
    try:
        detail = _library().get_match(root, match_id)
    except SoupHeatError as e:
        _fail(e)

    info_table = Table(title="Match Information", show_header=False)
    info_table.add_column("Property", style="cyan")
    info_table.add_column("Value", style="green")
    info_table.add_row("Match ID", detail.match_id)
    info_table.add_row("Map", detail.map)
    info_table.add_row("Region", detail.region)
    info_table.add_row("Start (UTC)", detail.game_start.isoformat())
    info_table.add_row("Duration", f"{detail.game_length_millis / 1000:.0f} seconds")
    info_table.add_row("Rounds", str(detail.rounds_played))
    info_table.add_row("Winning Team", detail.winning_team)
    info_table.add_row("Kill Events", str(len(detail.kill_events)))
    console.print(info_table)
    console.print()

    players_table = Table(title="Players")
    players_table.add_column("Player", style="cyan")
    players_table.add_column("Agent")
    players_table.add_column("Team")
    players_table.add_column("K", justify="right")
    players_table.add_column("D", justify="right")
    players_table.add_column("A", justify="right")
    players_table.add_column("Score", justify="right")

    for player in sorted(detail.players, key=lambda p: (p.team, -p.score)):
        if player.is_observer:
            continue
        players_table.add_row(
            player.display_name,
            player.agent or "-",
            player.team,
            str(player.kills),
            str(player.deaths),
            str(player.assists),
            str(player.score),
        )

    console.print(players_table)


@app.command()
def batch(
    root: Path = typer.Argument(..., help="Folder containing match files"),
    match_ids: list[str] = typer.Argument(..., help="Match identifiers"),
    batch_size: Optional[int] = typer.Option(
        None, "--batch-size", "-b", min=1, help="Concurrent loads per batch (default: from config)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print details as JSON"),
) -> None:
    """
    Load several match details, batched, in the order given.
    """
    details = _load_details(_library(), root, match_ids, batch_size)

    if as_json:
        typer.echo(json.dumps([d.to_dict() for d in details], indent=2))
        return

    table = Table(title=f"Loaded {len(details)} matches")
    table.add_column("Match ID", style="cyan")
    table.add_column("Map", style="green")
    table.add_column("Players", justify="right")
    table.add_column("Rounds", justify="right")
    table.add_column("Kills", justify="right")

    for detail in details:
        table.add_row(
            detail.match_id,
            detail.map,
            str(len(detail.players)),
            str(detail.rounds_played),
            str(len(detail.kill_events)),
        )

    console.print(table)


@app.command()
def index(
    root: Path = typer.Argument(..., help="Folder containing match files"),
) -> None:
    """
    Build the match index for ROOT and show its statistics.
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Scanning match files...", total=None)
        try:
            stats = _library().build_index(root)
        except SoupHeatError as e:
            _fail(e)
        progress.update(task, description="Index built!")

    table = Table(title="Match Index", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Root", str(stats["root"]))
    table.add_row("Entries", str(stats["entries"]))
    table.add_row("Duplicate IDs", str(stats["collisions"]))
    table.add_row("Skipped Files", str(stats["skipped"]))
    table.add_row("Built At", str(stats["built_at"]))
    console.print(table)


@app.command()
def heatmap(
    root: Path = typer.Argument(..., help="Folder containing match files"),
    match_ids: list[str] = typer.Argument(..., help="Match identifiers"),
    output: Path = typer.Option(
        ..., "--output", "-o", help="Output file (.json or .csv)"
    ),
    players: Optional[list[str]] = typer.Option(None, "--player", "-p", help="Player puuid (repeatable)"),
    mode: str = typer.Option(
        "both", "--mode", help=f"Player filter mode: {', '.join(PLAYER_MODES)}"
    ),
    weapons: Optional[list[str]] = typer.Option(None, "--weapon", "-w", help="Weapon name (repeatable)"),
    rounds: Optional[list[int]] = typer.Option(None, "--round", "-r", help="Round number (repeatable)"),
    time_start: Optional[float] = typer.Option(None, "--time-start", help="Earliest second in the round"),
    time_end: Optional[float] = typer.Option(None, "--time-end", help="Latest second in the round"),
) -> None:
    """
    Generate kill/death heatmap points for one or more matches.
    """
    filters = _build_filters(players, mode, weapons, rounds, time_start, time_end)
    details = _load_details(_library(), root, match_ids)

    data = generate_kill_heatmap(details, filters)
    export_config = get_config().export
    try:
        path = export_heatmap(
            data, output, indent=export_config.json_indent, delimiter=export_config.csv_delimiter
        )
    except OSError as e:
        _fail(e)

    console.print(
        f"[green]Heatmap written:[/green] {path} "
        f"({data['total']} points from {data['kill_events']} kills)"
    )


@app.command()
def export(
    root: Path = typer.Argument(..., help="Folder containing match files"),
    match_ids: list[str] = typer.Argument(..., help="Match identifiers"),
    output: Path = typer.Option(..., "--output", "-o", help="Output file"),
    fmt: Optional[str] = typer.Option(
        None, "--format", "-f", help=f"Export format: {', '.join(EXPORT_FORMATS)} (default: from config)"
    ),
) -> None:
    """
    Export match details (json) or kill events (csv) to a file.
    """
    export_config = get_config().export
    fmt = fmt or export_config.default_format
    if fmt.lower() not in EXPORT_FORMATS:
        _fail(ValueError(f"Unknown export format: {fmt}. Use one of: {', '.join(EXPORT_FORMATS)}"))

    details = _load_details(_library(), root, match_ids)
    try:
        path = export_matches(
            details,
            output,
            fmt,
            indent=export_config.json_indent,
            delimiter=export_config.csv_delimiter,
        )
    except OSError as e:
        _fail(e)
    console.print(f"[green]Exported {len(details)} matches:[/green] {path}")


@app.command()
def watch(
    root: Path = typer.Argument(..., help="Folder to watch"),
) -> None:
    """
    Watch ROOT and rebuild the match index whenever match files change.
    """
    watcher_config = get_config().watcher
    library = _library()
    watcher = IndexWatcher(
        root,
        library.index,
        debounce_seconds=watcher_config.debounce_seconds,
        recursive=watcher_config.recursive,
    )

    @watcher.on_rebuild
    def report(events: list[MatchFileEvent]) -> None:
        console.print(
            f"[green]Index rebuilt[/green] after {len(events)} change(s): "
            f"{len(library.index)} matches"
        )

    console.print("\n[bold blue]SoupHeat[/bold blue] - Watching for match changes\n")
    console.print(f"[cyan]Folder:[/cyan] {root}")
    console.print("\nPress [bold]Ctrl+C[/bold] to stop...\n")

    try:
        watcher.start(blocking=True)
    except SoupHeatError as e:
        _fail(e)
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopping watcher...[/yellow]")
        watcher.stop()


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload (development)"),
) -> None:
    """
    Start the HTTP API server.
    """
    console.print(f"[bold blue]SoupHeat[/bold blue] API on http://{host}:{port}")
    uvicorn.run(
        "soupheat.api:app",
        host=host,
        port=port,
        reload=reload,
        log_level=get_config().logging.level.lower(),
    )


@app.command()
def config(
    init: Optional[Path] = typer.Option(
        None, "--init", help="Write a default configuration file to this path"
    ),
) -> None:
    """
    Show the active configuration, or write a default one with --init.
    """
    if init is not None:
        if init.exists():
            _fail(FileExistsError(f"Refusing to overwrite existing file: {init}"))
        try:
            generate_default_config(init)
        except (OSError, ValueError) as e:
            _fail(e)
        console.print(f"[green]Configuration written:[/green] {init}")
        return

    typer.echo(yaml.safe_dump(config_to_dict(get_config()), sort_keys=False))


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()

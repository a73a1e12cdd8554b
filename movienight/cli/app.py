"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.discord_guild import DiscordGuild
from ..adapters.mock_guild import MockGuild
from ..adapters.movie_storage import MovieStorage
from ..adapters.tmdb_client import TMDbClient
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import MovieNightError
from ..domain.guild import GuildProtocol
from ..domain.models import Movie, MovieCandidate
from ..services.movie_scheduler import MovieScheduler
from ..services.watchlist import WatchlistService

app = typer.Typer(
    name="movienight",
    help="Curate the movie night watchlist and schedule movie nights",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
MockOption = Annotated[bool, typer.Option("--mock", help="Use the offline mock guild instead of Discord.")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _build_guild(config: AppConfig, mock: bool) -> Optional[GuildProtocol]:
    """Pick the chat server backend; None means events are not managed."""
    if mock:
        return MockGuild(data_file=config.mock_guild_path)
    if config.discord.is_configured():
        return DiscordGuild(token=config.discord.token, guild_id=config.discord.guild_id)
    return None


def _build_service(config: AppConfig, mock: bool) -> WatchlistService:
    guild = _build_guild(config, mock)
    if guild is None:
        console.print("[yellow]⚠  No Discord guild configured: movie night events are not managed.[/yellow]")

    return WatchlistService(
        storage=MovieStorage(config.watchlist_path),
        metadata=TMDbClient(api_key=config.tmdb.api_key),
        scheduler=MovieScheduler(config.scheduling.to_policy()),
        guild=guild,
    )


def _choose(options: List[str], prompt: str) -> int:
    """Let the user pick one of several options by number."""
    for idx, label in enumerate(options, 1):
        console.print(f"  {idx}. {label}")

    choice = typer.prompt(f"\n→ {prompt}", default=1, type=int)
    if not 1 <= choice <= len(options):
        console.print(f"[red]Error: {choice} is not a valid choice.[/red]")
        raise typer.Exit(1)
    return choice - 1


@app.command()
def add(
    title: Annotated[str, typer.Argument(help="Movie title")],
    year: Annotated[Optional[int], typer.Option("--year", "-y", help="Release year")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Add a movie to the watchlist and schedule its movie night.

    Examples:

        movienight add "Dune" --year 2021

        movienight add "Heat" --mock
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        if not config.tmdb.api_key:
            console.print("[bold red]Error:[/bold red] TMDb API key missing (tmdb.api_key or TMDB_KEY).")
            raise typer.Exit(1)

        service = _build_service(config, mock)
        candidates = service.search(title, year)

        candidate: MovieCandidate = candidates[0]
        if len(candidates) > 1:
            console.print(f"I found multiple results for [bold]{title}[/bold]:")
            candidate = candidates[_choose([c.display_name() for c in candidates], "Select the correct movie")]

        result = service.add_candidate(candidate)

        console.print(f"[green]✓ Added [bold]{result.movie.title}[/bold] ({result.movie.year})[/green]")
        if result.event is not None:
            console.print(f"  🎬 Movie night: {result.event.start.in_timezone(config.scheduling.timezone).format('dddd, DD.MM.YYYY HH:mm')}")
        elif result.error:
            console.print(f"[yellow]⚠ Not scheduled: {result.error}[/yellow]")

    except (FileNotFoundError, ValueError, MovieNightError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def remove(
    query: Annotated[str, typer.Argument(help="Part of the movie title")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Remove a movie from the watchlist and cancel its movie night.
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        service = _build_service(config, mock)

        matches = service.find_matches(query)
        if not matches:
            console.print(f"I couldn't find any movies matching [bold]{query}[/bold].")
            raise typer.Exit(1)

        index, _ = matches[0]
        if len(matches) > 1:
            console.print("I found multiple movies:")
            index, _ = matches[_choose([m.display_name() for _, m in matches], "Movie to remove")]

        movie = service.remove(index)
        console.print(f"[green]🗑 Removed [bold]{movie.title}[/bold] from the movie list.[/green]")

    except (FileNotFoundError, ValueError, MovieNightError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command("list")
def list_movies(
    page: Annotated[int, typer.Option("--page", "-p", help="Page number, starting at 1")] = 1,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Show the watchlist, one page at a time.
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        storage = MovieStorage(config.watchlist_path)
        service = WatchlistService(storage=storage, metadata=TMDbClient(api_key=config.tmdb.api_key))

        if not service.movies:
            console.print("The movie list is currently empty.")
            return

        current = service.page(page - 1)
        console.print()

        if current.next_up is not None:
            console.print(Panel.fit(
                _describe(current.next_up),
                title=f"Next Up: {current.next_up.display_name()}"
            ))
        else:
            table = Table(title="Movie List", show_header=True, header_style="bold cyan")
            table.add_column("#", style="dim", justify="right")
            table.add_column("Title", style="bold yellow")
            table.add_column("Year")
            table.add_column("Runtime")
            table.add_column("Poster", style="dim")

            for position, movie in current.entries:
                table.add_row(
                    str(position),
                    movie.title,
                    str(movie.year),
                    f"{movie.runtime_minutes} Min." if movie.runtime_minutes else "?",
                    movie.poster_url or "",
                )
            console.print(table)

        console.print(f"[dim]Page {current.number + 1} of {current.total_pages}[/dim]\n")

    except (FileNotFoundError, ValueError, MovieNightError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command("next-slot")
def next_slot(
    runtime: Annotated[int, typer.Option("--runtime", "-r", help="Runtime in minutes")] = 0,
    title: Annotated[str, typer.Option("--title", "-t", help="Title, used for duplicate detection")] = "Preview",
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    Show the slot a movie would get, without creating an event.
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        guild = _build_guild(config, mock)
        if guild is None:
            console.print("[bold red]Error:[/bold red] No Discord guild configured. Use --mock or set discord.token/guild_id.")
            raise typer.Exit(1)

        scheduler = MovieScheduler(config.scheduling.to_policy())
        movie = Movie(title=title, runtime_minutes=max(runtime, 0))
        slot = scheduler.preview_slot(runtime, movie, guild)

        console.print(f"\n[bold green]✓ Next free slot:[/bold green] {slot.in_timezone(config.scheduling.timezone)}\n")

    except (FileNotFoundError, ValueError, MovieNightError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def slots(
    config_file: ConfigOption = None,
):
    """
    List the configured weekly slot template in priority order.
    """
    try:
        config = _load_config(config_file)
        policy = config.scheduling.to_policy()

        table = Table(title=f"Weekly Slots ({policy.timezone})", show_header=True, header_style="bold cyan")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Slot", style="bold yellow")

        for idx, slot in enumerate(policy.slots, 1):
            table.add_row(str(idx), str(slot))

        console.print()
        console.print(table)
        console.print(f"Long movies: more than {policy.max_weekday_runtime} Min. | Buffer: {policy.buffer_minutes} Min.\n")

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]movienight[/bold cyan] version [bold]{__version__}[/bold]\n")


def _describe(movie: Movie) -> str:
    lines = [f"[bold]Year:[/bold] {movie.year}"]
    if movie.runtime_minutes:
        lines.append(f"[bold]Runtime:[/bold] {movie.runtime_minutes} Min.")
    if movie.poster_url:
        lines.append(f"[bold]Poster:[/bold] {movie.poster_url}")
    if movie.scheduled_event_id is not None:
        lines.append(f"[bold]Event:[/bold] {movie.scheduled_event_id}")
    return "\n".join(lines)


if __name__ == "__main__":
    app()

"""
Main CLI application using Typer.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, List, Optional, Set

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.graph_client import GraphClient
from ..adapters.mock_graph_client import MockGraphClient
from ..config import AppConfig
from ..domain.exceptions import AvailabilityError
from ..domain.models import AvailabilityRequest, CandidateSlot, TimeRange
from ..domain.scheduling_engine import SchedulingEngine
from ..schemas import AvailabilityRequestBody, slots_to_json
from ..services.availability_finder import AvailabilityFinderService

app = typer.Typer(
    name="availabilityfinder",
    help="Find free time windows across one or more calendars",
    add_completion=False
)

console = Console()
error_console = Console(stderr=True)

TOKEN_ENVVAR = "AVAILABILITYFINDER_GRAPH_TOKEN"

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
StartOption = Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")]
EndOption = Annotated[Optional[str], typer.Option("--end", help="End date, inclusive (YYYY-MM-DD)")]
ThisWeekOption = Annotated[bool, typer.Option("--this-week", help="Search from now until the end of this week.")]
NextWeekOption = Annotated[bool, typer.Option("--next-week", help="Search next week (Monday to Sunday).")]
MockOption = Annotated[bool, typer.Option("--mock", help="Use mock calendar data instead of Microsoft Graph.")]
MockDataOption = Annotated[Optional[Path], typer.Option("--mock-data", help="Mock calendar JSON file (implies --mock).")]
TokenOption = Annotated[Optional[str], typer.Option("--token", envvar=TOKEN_ENVVAR, help="Microsoft Graph access token.")]
JsonOption = Annotated[bool, typer.Option("--json", help="Print the result as JSON.")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")]


def _configure_logging(level: str) -> None:
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path], verbose: bool) -> AppConfig:
    config = AppConfig.load(config_file)
    _configure_logging("DEBUG" if verbose else config.log_level)
    return config


def _determine_time_range(
    *,
    tz: str,
    this_week: bool,
    next_week: bool,
    start_option: Optional[str],
    end_option: Optional[str]
) -> TimeRange:
    """
    Resolve the desired time window based on shortcut flags or explicit dates.
    """
    if this_week and next_week:
        raise typer.BadParameter("--this-week and --next-week cannot be combined.")

    now = pendulum.now(tz)

    if this_week:
        return TimeRange(start=now, end=now.end_of("week"))

    if next_week:
        next_monday = now.next(pendulum.MONDAY).start_of("day")
        return TimeRange(start=next_monday, end=next_monday.add(days=6).end_of("day"))

    try:
        if start_option:
            start_date = pendulum.from_format(start_option, "YYYY-MM-DD", tz=tz).start_of("day")
        else:
            start_date = now.start_of("day")

        if end_option:
            end_date = pendulum.from_format(end_option, "YYYY-MM-DD", tz=tz).end_of("day")
        else:
            end_date = start_date.add(days=7).end_of("day")
    except ValueError as e:
        raise typer.BadParameter(f"Could not parse date: {e}")

    if start_date >= end_date:
        raise typer.BadParameter("The start date must be before the end date.")

    return TimeRange(start=start_date, end=end_date)


def _parse_days(value: Optional[str], default: List[int]) -> Set[int]:
    """Parse a comma separated list of ISO weekday codes (1=Monday)."""
    if not value:
        return set(default)

    try:
        days = {int(part) for part in value.split(",") if part.strip()}
    except ValueError:
        raise typer.BadParameter(f"Days must be numbers from 1 (Monday) to 7 (Sunday), got '{value}'")

    return days


def _parse_time(value: Optional[str], default):
    if not value:
        return default

    try:
        return pendulum.from_format(value, "HH:mm").time()
    except ValueError:
        raise typer.BadParameter(f"Times must look like HH:MM, got '{value}'")


def _build_service(
    config: AppConfig,
    *,
    mock: bool,
    mock_data: Optional[Path],
    token: Optional[str]
) -> AvailabilityFinderService:
    if mock or mock_data:
        client = MockGraphClient(config=config, data_file=mock_data)
    else:
        access_token = token or config.graph.access_token
        if not access_token:
            raise typer.BadParameter(
                f"No Microsoft Graph access token. Pass --token, set {TOKEN_ENVVAR} or use --mock."
            )
        client = GraphClient(
            access_token=access_token,
            endpoint=config.graph.endpoint,
            timeout=config.graph.timeout_seconds,
        )

    engine = SchedulingEngine(settings=config.engine.to_settings())
    return AvailabilityFinderService(calendar_client=client, engine=engine)


def _print_slots(slots: List[CandidateSlot], as_json: bool, top: Optional[int]) -> None:
    shown = slots[:top] if top else slots

    if as_json:
        typer.echo(slots_to_json(shown))
        return

    console.print()
    if not shown:
        console.print(
            "[yellow]⚠ No available time slots found.[/yellow]\n"
            "Try a longer period or a shorter minimum duration."
        )
        return

    table = Table(
        title=f"{len(slots)} available time slot(s)",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("When", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Multi-day", justify="center")

    for idx, slot in enumerate(shown, 1):
        score = f"{slot.confidence_score}"
        if slot.degraded_confidence:
            score = f"[yellow]{score} ![/yellow]"
        table.add_row(str(idx), slot.format_display(), score, "✓" if slot.is_multi_day else "")

    console.print(table)

    if any(slot.degraded_confidence for slot in shown):
        console.print("[yellow]! Some participants' availability was unknown on these days.[/yellow]")
    console.print()


def _fail(message: str) -> None:
    error_console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


@app.command()
def find(
    participants: Annotated[Optional[List[str]], typer.Argument(help="Participant names or email addresses.")] = None,
    config_file: ConfigOption = None,
    start: StartOption = None,
    end: EndOption = None,
    this_week: ThisWeekOption = False,
    next_week: NextWeekOption = False,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Minimum duration in minutes")] = None,
    window_start: Annotated[Optional[str], typer.Option("--from", help="Preferred daily start (HH:MM)")] = None,
    window_end: Annotated[Optional[str], typer.Option("--to", help="Preferred daily end (HH:MM)")] = None,
    days: Annotated[Optional[str], typer.Option("--days", help="Weekdays to search, e.g. 1,2,3,4,5 (1=Monday)")] = None,
    consecutive: Annotated[Optional[int], typer.Option("--consecutive", "-n", help="Consecutive qualifying days required")] = None,
    request_file: Annotated[Optional[Path], typer.Option("--request", help="JSON request body (camelCase fields)")] = None,
    top: Annotated[Optional[int], typer.Option("--top", help="Show only the best N slots")] = None,
    mock: MockOption = False,
    mock_data: MockDataOption = None,
    token: TokenOption = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """
    Find available time windows.

    Examples:

        # One week of 60 minute windows for two people
        availabilityfinder find alice bob --duration 60

        # Three consecutive weekdays, 09:00-17:00
        availabilityfinder find alice --consecutive 3 --next-week

        # Request body as used by the HTTP endpoint
        availabilityfinder find alice --request request.json --json

        # Use mock data (for testing without Microsoft Graph)
        availabilityfinder find alice bob --mock --start 2024-11-25 --end 2024-11-29
    """
    try:
        config = _load_config(config_file, verbose)
        tz = config.timezone
        defaults = config.defaults

        participant_emails = config.resolve_participants(participants or [])

        if request_file:
            body = AvailabilityRequestBody.model_validate(
                json.loads(request_file.read_text(encoding="utf-8"))
            )
            request = body.to_request(
                tz,
                default_start=defaults.get_start_time(),
                default_end=defaults.get_end_time(),
            )
        else:
            time_range = _determine_time_range(
                tz=tz,
                this_week=this_week,
                next_week=next_week,
                start_option=start,
                end_option=end,
            )
            request = AvailabilityRequest(
                start_date=time_range.start,
                end_date=time_range.end,
                minimum_duration_minutes=duration if duration is not None else defaults.duration_minutes,
                preferred_start=_parse_time(window_start, defaults.get_start_time()),
                preferred_end=_parse_time(window_end, defaults.get_end_time()),
                consecutive_days_required=consecutive if consecutive is not None else defaults.consecutive_days,
                days_of_week=frozenset(_parse_days(days, defaults.days_of_week)),
            )

        service = _build_service(config, mock=mock, mock_data=mock_data, token=token)

        if not as_json:
            console.print(f"[bold cyan]Participants:[/bold cyan] {', '.join(participant_emails)}")
            console.print(
                f"[bold cyan]Period:[/bold cyan] {request.start_date.format('YYYY-MM-DD HH:mm')} - "
                f"{request.end_date.format('YYYY-MM-DD HH:mm')}"
            )
            console.print(f"[bold cyan]Minimum duration:[/bold cyan] {request.minimum_duration_minutes} minutes")

        slots = asyncio.run(
            service.find_availability(
                request=request,
                participants=participant_emails,
                timezone=tz,
            )
        )

        _print_slots(slots, as_json, top)

    except (FileNotFoundError, ValueError, AvailabilityError) as e:
        _fail(str(e))


@app.command()
def common(
    participants: Annotated[List[str], typer.Argument(help="Participant names or email addresses.")],
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Meeting duration in minutes")] = None,
    config_file: ConfigOption = None,
    start: StartOption = None,
    end: EndOption = None,
    this_week: ThisWeekOption = False,
    next_week: NextWeekOption = False,
    top: Annotated[Optional[int], typer.Option("--top", help="Show only the best N slots")] = None,
    mock: MockOption = False,
    mock_data: MockDataOption = None,
    token: TokenOption = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """
    Suggest meeting windows in which all participants are free.
    """
    try:
        config = _load_config(config_file, verbose)
        tz = config.timezone

        participant_emails = config.resolve_participants(participants)
        date_range = _determine_time_range(
            tz=tz,
            this_week=this_week,
            next_week=next_week,
            start_option=start,
            end_option=end,
        )

        service = _build_service(config, mock=mock, mock_data=mock_data, token=token)

        slots = asyncio.run(
            service.find_common_meeting_slots(
                participants=participant_emails,
                duration_minutes=duration if duration is not None else config.defaults.duration_minutes,
                date_range=date_range,
                timezone=tz,
                preferred_start=config.defaults.get_start_time(),
                preferred_end=config.defaults.get_end_time(),
                days_of_week=config.defaults.days_of_week,
            )
        )

        _print_slots(slots, as_json, top)

    except (FileNotFoundError, ValueError, AvailabilityError) as e:
        _fail(str(e))


@app.command()
def list_participants(config_file: ConfigOption = None):
    """
    List all configured participants.
    """
    try:
        config = AppConfig.load(config_file)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    if not config.participants:
        console.print("[yellow]No participants defined in the config file.[/yellow]")
        return

    table = Table(
        title="Configured participants",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Name (alias)", style="bold yellow")
    table.add_column("E-mail", style="dim")

    for participant in config.participants:
        table.add_row(participant.name, participant.email)

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]availabilityfinder[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()

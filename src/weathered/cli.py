"""Command-line entry point: query stations, points and observations."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from datetime import UTC

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .client import Client
from .config import Settings, load_settings
from .exceptions import ConfigError, InvalidQueryError, ResponseDecodeError, TransportError
from .log_setup import setup_logger
from .models import (
    ErrorResponse,
    Observation,
    ObservationResponse,
    PointResponse,
    QuantitativeValue,
    StationResponse,
)
from .pagination import next_cursor


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse weathered CLI arguments."""
    parser = argparse.ArgumentParser(description="Query the api.weather.gov public API.")
    parser.add_argument(
        "--max-print",
        type=int,
        default=None,
        help="Number of observations to print.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    station = subparsers.add_parser("station", help="Show station metadata.")
    station.add_argument("station_id", help="Station identifier, e.g. KSEA.")

    observations = subparsers.add_parser("observations", help="List station observations.")
    observations.add_argument("station_id", help="Station identifier, e.g. KSEA.")
    observations.add_argument("--start", default=None, help="ISO-8601 lower bound.")
    observations.add_argument("--end", default=None, help="ISO-8601 upper bound.")
    observations.add_argument("--limit", type=int, default=None, help="Page size.")
    observations.add_argument("--cursor", default=None, help="Cursor from a previous page.")

    latest = subparsers.add_parser("latest", help="Show the latest station observation.")
    latest.add_argument("station_id", help="Station identifier, e.g. KSEA.")

    point = subparsers.add_parser("point", help="Resolve a latitude/longitude.")
    point.add_argument("lat", type=float, help="Latitude.")
    point.add_argument("lon", type=float, help="Longitude.")
    return parser.parse_args(argv)


def _format_value(value: QuantitativeValue | None) -> str:
    if value is None or value.value is None:
        return "-"
    unit = (value.unit_code or "").removeprefix("wmoUnit:")
    return f"{value.value:g} {unit}".strip()


def _print_error(console: Console, error: ErrorResponse) -> None:
    console.print(f"[red]{error.status} {escape(error.title)}[/red]: {escape(error.detail)}")


def _print_station(console: Console, station: StationResponse) -> None:
    props = station.properties
    table = Table(title=f"Station {props.station_identifier}")
    table.add_column("Field")
    table.add_column("Value", overflow="fold")
    table.add_row("Name", props.name or "-")
    table.add_row("Time zone", props.time_zone or "-")
    table.add_row("Elevation", _format_value(props.elevation))
    table.add_row("Forecast", props.forecast or "-")
    table.add_row("Id", station.id)
    console.print(table)


def _print_point(console: Console, point: PointResponse) -> None:
    props = point.properties
    table = Table(title="Point")
    table.add_column("Field")
    table.add_column("Value", overflow="fold")
    grid = (
        f"{props.grid_id} {props.grid_x},{props.grid_y}"
        if props.grid_id is not None
        else "-"
    )
    table.add_row("Grid", grid)
    table.add_row("Time zone", props.time_zone or "-")
    table.add_row("Forecast", props.forecast or "-")
    table.add_row("Stations", props.observation_stations or "-")
    console.print(table)


def _print_observations(
    console: Console,
    observations: Sequence[Observation],
    *,
    title: str,
    max_print: int,
) -> None:
    if not observations:
        console.print("No observations found.")
        return

    table = Table(title=title)
    table.add_column("Timestamp (UTC)")
    table.add_column("Description", overflow="fold")
    table.add_column("Temp")
    table.add_column("Dewpoint")
    table.add_column("Wind")
    table.add_column("Humidity")
    for observation in observations[:max_print]:
        props = observation.properties
        table.add_row(
            props.timestamp.astimezone(UTC).isoformat(),
            props.text_description or "-",
            _format_value(props.temperature),
            _format_value(props.dewpoint),
            _format_value(props.wind_speed),
            _format_value(props.relative_humidity),
        )
    console.print(table)


def _print_page(
    console: Console,
    page: ObservationResponse,
    *,
    station_id: str,
    max_print: int,
) -> None:
    console.print(f"Station={station_id} observations={len(page.features)}")
    _print_observations(
        console,
        page.features,
        title=f"Observations at {station_id}",
        max_print=max_print,
    )
    cursor = next_cursor(page)
    if cursor:
        console.print(f"Next page: --cursor {escape(cursor)}")


def run_command(
    args: argparse.Namespace,
    client: Client,
    console: Console,
    settings: Settings,
) -> int:
    """Execute one subcommand; returns 1 when the API answered with an error."""
    max_print = args.max_print or settings.max_print

    if args.command == "station":
        station = client.get_station_by_station_id(args.station_id)
        if isinstance(station, ErrorResponse):
            _print_error(console, station)
            return 1
        _print_station(console, station)
        return 0

    if args.command == "observations":
        page = client.get_station_observations(
            args.station_id,
            start=args.start,
            end=args.end,
            limit=args.limit,
            cursor=args.cursor,
        )
        if isinstance(page, ErrorResponse):
            _print_error(console, page)
            return 1
        _print_page(console, page, station_id=args.station_id, max_print=max_print)
        return 0

    if args.command == "latest":
        observation = client.get_latest_station_observation(args.station_id)
        if isinstance(observation, ErrorResponse):
            _print_error(console, observation)
            return 1
        _print_observations(
            console,
            [observation],
            title=f"Latest observation at {args.station_id}",
            max_print=1,
        )
        return 0

    point = client.get_point(args.lat, args.lon)
    if isinstance(point, ErrorResponse):
        _print_error(console, point)
        return 1
    _print_point(console, point)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the weathered CLI."""
    args = parse_args(argv)
    logger = setup_logger()
    console = Console()

    if args.max_print is not None and args.max_print <= 0:
        logger.error("--max-print must be > 0 when provided.")
        return 2

    try:
        settings = load_settings()
        options = settings.to_options()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    logger.setLevel(settings.log_level)
    logger.debug("Loaded settings: %s", settings.safe_summary())

    try:
        with Client(options) as client:
            return run_command(args, client, console, settings)
    except InvalidQueryError as exc:
        logger.error("Invalid query: %s", exc)
        return 2
    except (TransportError, ResponseDecodeError) as exc:
        logger.error("weather.gov request failure: %s", exc)
        return 4


if __name__ == "__main__":
    sys.exit(main())

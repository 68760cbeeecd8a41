#!/usr/bin/env python3
"""CLI tool for line and station management.

Provides command-line access to the same services the API uses, for
seeding local databases and inspecting lines without going through HTTP.

Usage:
    # Create stations
    python -m subway.cli create-station "Gangnam"

    # Create a line running all day every 6 minutes
    python -m subway.cli create-line "2호선" --interval 6

    # Register a station on a line
    python -m subway.cli add-station <line-id> <station-id>

    # Connect two stations (10 minutes, 1.5 km)
    python -m subway.cli add-section <line-id> <upstream-id> <downstream-id> --minutes 10 --distance 1.5

    # Remove a station, joining its neighbours
    python -m subway.cli remove-station <line-id> <station-id>

    # Show a line in travel order
    python -m subway.cli show-line <line-id>
"""

import argparse
import asyncio
import sys
import uuid
from collections.abc import Awaitable, Callable, Sequence
from datetime import time
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from subway.core.config import settings
from subway.core.database import get_session_factory
from subway.core.exceptions import SubwayError
from subway.core.logging import configure_logging
from subway.models.line import Line
from subway.schemas.lines import CreateLineRequest, CreateSectionRequest
from subway.services.line_service import LineService
from subway.services.station_service import StationService

CommandHandler = Callable[[argparse.Namespace, AsyncSession], Awaitable[int]]


def _print_line(line: Line) -> None:
    """Print a line's stations and sections in travel order."""
    print(f"{line.name} ({line.id})")
    print(f"   Hours:    {line.start_time.strftime('%H:%M')} - {line.end_time.strftime('%H:%M')}")
    print(f"   Interval: every {line.interval} min")

    names = {station.id: station.name for station in line.stations}
    ordered = line.get_sections_in_order()
    if not ordered:
        print("   No sections yet")
    for section in ordered:
        print(
            f"   {names[section.upstream_station_id]} -> {names[section.downstream_station_id]}: "
            f"{section.duration.minutes:g} min, {section.distance.value} km"
        )
    if ordered:
        print(f"   Total:    {line.total_duration().minutes:g} min, {line.total_distance().value} km")


async def cmd_create_station(args: argparse.Namespace, session: AsyncSession) -> int:
    """
    Create a station record.

    Args:
        args: Parsed command-line arguments
        session: Database session

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        station = await StationService(session).create_station(args.name)
    except (SubwayError, ValueError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    print("✅ Created station successfully!")
    print(f"   Station ID: {station.id}")
    print(f"   Name:       {station.name}")
    return 0


async def cmd_create_line(args: argparse.Namespace, session: AsyncSession) -> int:
    """Create a line."""
    try:
        request = CreateLineRequest(name=args.name, start_time=args.start, end_time=args.end, interval=args.interval)
        line = await LineService(session).create_line(request)
    except (SubwayError, ValueError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    print("✅ Created line successfully!")
    print(f"   Line ID: {line.id}")
    print(f"   Name:    {line.name}")
    return 0


async def cmd_add_station(args: argparse.Namespace, session: AsyncSession) -> int:
    """Register a station on a line."""
    try:
        line = await LineService(session).add_station_to_line(args.line_id, args.station_id)
    except SubwayError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    print(f"✅ Station added to {line.name}")
    return 0


async def cmd_add_section(args: argparse.Namespace, session: AsyncSession) -> int:
    """Connect two stations of a line."""
    try:
        request = CreateSectionRequest(
            upstream_station_id=args.upstream_id,
            downstream_station_id=args.downstream_id,
            duration_minutes=args.minutes,
            distance=args.distance,
        )
        line = await LineService(session).add_section(args.line_id, request)
    except (SubwayError, ValueError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    print("✅ Section added")
    _print_line(line)
    return 0


async def cmd_remove_station(args: argparse.Namespace, session: AsyncSession) -> int:
    """Remove a station from a line."""
    try:
        line = await LineService(session).remove_station(args.line_id, args.station_id)
    except SubwayError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    print("✅ Station removed")
    _print_line(line)
    return 0


async def cmd_show_line(args: argparse.Namespace, session: AsyncSession) -> int:
    """Show a line in travel order."""
    try:
        line = await LineService(session).get_line_by_id(args.line_id)
        _print_line(line)
    except SubwayError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1
    return 0


COMMAND_HANDLERS: dict[str, CommandHandler] = {
    "create-station": cmd_create_station,
    "create-line": cmd_create_line,
    "add-station": cmd_add_station,
    "add-section": cmd_add_section,
    "remove-station": cmd_remove_station,
    "show-line": cmd_show_line,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one sub-command per handler."""
    parser = argparse.ArgumentParser(
        prog="subway-cli",
        description="Manage subway lines, stations and sections",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    create_station_parser = subparsers.add_parser("create-station", help="Create a station record")
    create_station_parser.add_argument("name", type=str, help="Unique station name")

    create_line_parser = subparsers.add_parser("create-line", help="Create a line")
    create_line_parser.add_argument("name", type=str, help="Unique line name")
    create_line_parser.add_argument("--interval", type=int, required=True, help="Minutes between departures")
    create_line_parser.add_argument(
        "--start", type=time.fromisoformat, default=time.min, help="First departure (HH:MM, default 00:00)"
    )
    create_line_parser.add_argument(
        "--end", type=time.fromisoformat, default=time.max, help="Last departure (HH:MM, default end of day)"
    )

    add_station_parser = subparsers.add_parser("add-station", help="Register a station on a line")
    add_station_parser.add_argument("line_id", type=uuid.UUID, help="Line UUID")
    add_station_parser.add_argument("station_id", type=uuid.UUID, help="Station UUID")

    add_section_parser = subparsers.add_parser("add-section", help="Connect two stations of a line")
    add_section_parser.add_argument("line_id", type=uuid.UUID, help="Line UUID")
    add_section_parser.add_argument("upstream_id", type=uuid.UUID, help="Upstream station UUID")
    add_section_parser.add_argument("downstream_id", type=uuid.UUID, help="Downstream station UUID")
    add_section_parser.add_argument("--minutes", type=float, required=True, help="Travel time in minutes")
    add_section_parser.add_argument("--distance", type=Decimal, required=True, help="Travel distance in km")

    remove_station_parser = subparsers.add_parser("remove-station", help="Remove a station from a line")
    remove_station_parser.add_argument("line_id", type=uuid.UUID, help="Line UUID")
    remove_station_parser.add_argument("station_id", type=uuid.UUID, help="Station UUID")

    show_line_parser = subparsers.add_parser("show-line", help="Show a line in travel order")
    show_line_parser.add_argument("line_id", type=uuid.UUID, help="Line UUID")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # Show help if no command provided
    if not args.command:
        parser.print_help()
        return 1

    configure_logging(log_level=settings.LOG_LEVEL)
    handler = COMMAND_HANDLERS[args.command]

    async def run_with_session() -> int:
        async with get_session_factory()() as session:
            return await handler(args, session)

    return asyncio.run(run_with_session())


if __name__ == "__main__":
    sys.exit(main())

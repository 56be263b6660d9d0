"""Command-line interface for Punch Clock.

Punch Clock records when you start and stop working and reports the hours.

CONCEPTS:
---------
- PUNCH:   A single timestamped IN or OUT event, stored locally.

- SESSION: An IN punch followed by the next OUT punch. An IN with no OUT
           yet is the running session and counts up to now.

- REPORT:  Weekly totals, daily totals and the full punch history as plain
           text, ready to paste into an e-mail.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import NoReturn

from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.table import Table

from punchclock import __version__
from punchclock.clock import (
    InvalidTimestamp,
    PunchClockError,
    PunchClockService,
    PunchType,
    format_date,
    format_hours,
    format_punch_time,
)
from punchclock.clock.timeutil import parse_timestamp
from punchclock.config import settings

console = Console()

# Help text shown when no command is given
WELCOME_TEXT = f"""
# Punch Clock v{__version__}

A personal time clock.

## Quick Start

```bash
punch in                     # Start working
punch out                    # Stop working
punch status                 # Hours worked today
punch report                 # Weekly, daily and detailed report
```

Use `punch --help` to see all commands.
"""


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    fmt = "%(name)s: %(message)s" if verbose else "%(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        handlers=[RichHandler(rich_tracebacks=True, console=console, show_path=verbose)],
    )


def _get_service() -> PunchClockService:
    return PunchClockService(settings=settings)


def _describe_timestamp(service: PunchClockService, timestamp: str) -> str:
    """Render a stored timestamp in local time, or verbatim if unparseable."""
    try:
        moment = parse_timestamp(timestamp, service.tz)
    except InvalidTimestamp:
        return f"{timestamp} [red](invalid)[/red]"
    return f"{format_date(moment.date(), include_year=True)} {format_punch_time(moment)}"


def cmd_in(args: argparse.Namespace) -> None:
    """Clock in."""
    service = _get_service()
    punch = service.clock_in()
    console.print(f"[green]Clocked in[/green] at {_describe_timestamp(service, punch.timestamp)}")


def cmd_out(args: argparse.Namespace) -> None:
    """Clock out."""
    service = _get_service()
    punch = service.clock_out()
    console.print(f"[red]Clocked out[/red] at {_describe_timestamp(service, punch.timestamp)}")
    console.print(f"Hours today: [bold]{format_hours(service.hours_today())}[/bold]")


def cmd_toggle(args: argparse.Namespace) -> None:
    """Clock in or out, whichever applies."""
    service = _get_service()
    punch = service.toggle()
    if punch.type == PunchType.IN:
        console.print(f"[green]Clocked in[/green] at {_describe_timestamp(service, punch.timestamp)}")
    else:
        console.print(f"[red]Clocked out[/red] at {_describe_timestamp(service, punch.timestamp)}")


def cmd_status(args: argparse.Namespace) -> None:
    """Show clock status and hours worked today."""
    service = _get_service()
    status = service.status()

    if status.clocked_in:
        console.print("[green]Clocked in[/green]")
    else:
        console.print("[yellow]Clocked out[/yellow]")

    if status.open_since is not None:
        console.print(
            f"  Running since: {format_date(status.open_since.date(), include_year=True)} "
            f"{format_punch_time(status.open_since)}"
        )
    if status.last_punch is not None:
        console.print(
            f"  Last punch:    {status.last_punch.type.value.upper()} "
            f"{_describe_timestamp(service, status.last_punch.timestamp)}"
        )
    console.print(f"  Hours today:   [bold]{format_hours(status.hours_today)}[/bold]")

    if status.clocked_in != (status.open_since is not None):
        console.print(
            "[dim]Note: the clock state and the punch history disagree; "
            "check recent edits with 'punch history'.[/dim]"
        )


def cmd_today(args: argparse.Namespace) -> None:
    """Print hours worked today."""
    service = _get_service()
    console.print(format_hours(service.hours_today()))


def cmd_daily(args: argparse.Namespace) -> None:
    """Show daily totals."""
    service = _get_service()
    days = service.daily_totals()
    if args.limit:
        days = days[: args.limit]

    if not days:
        console.print("[yellow]No punch history available.[/yellow]")
        return

    table = Table(title="Daily Totals")
    table.add_column("Day", style="cyan")
    table.add_column("Hours", style="white", justify="right")
    table.add_column("", style="green")
    for bucket in days:
        table.add_row(
            format_date(bucket.day, include_year=True),
            f"{bucket.hours:.2f}",
            format_hours(bucket.hours),
        )
    console.print(table)


def cmd_weekly(args: argparse.Namespace) -> None:
    """Show weekly totals."""
    service = _get_service()
    weeks = service.weekly_totals()
    if args.limit:
        weeks = weeks[: args.limit]

    if not weeks:
        console.print("[yellow]No punch history available.[/yellow]")
        return

    table = Table(title="Weekly Totals")
    table.add_column("Week", style="cyan")
    table.add_column("Hours", style="white", justify="right")
    table.add_column("", style="green")
    for bucket in weeks:
        table.add_row(
            f"{format_date(bucket.week_start)} - {format_date(bucket.week_end)}",
            f"{bucket.hours:.2f}",
            format_hours(bucket.hours),
        )
    console.print(table)


def cmd_history(args: argparse.Namespace) -> None:
    """Show stored punches, newest first."""
    service = _get_service()
    punches = service.punches()
    if args.limit:
        punches = punches[: args.limit]

    if not punches:
        console.print("[yellow]No punch history available.[/yellow]")
        return

    table = Table(title="Punch History")
    table.add_column("Type", style="bold")
    table.add_column("When", style="white")
    table.add_column("Timestamp", style="dim")
    for punch in punches:
        color = "green" if punch.type == PunchType.IN else "red"
        table.add_row(
            f"[{color}]{punch.type.value.upper()}[/{color}]",
            _describe_timestamp(service, punch.timestamp),
            punch.timestamp,
        )
    console.print(table)


def cmd_report(args: argparse.Namespace) -> None:
    """Print or save the plain-text report."""
    service = _get_service()
    content = service.report()

    if args.output:
        output = Path(args.output).expanduser()
        output.write_text(content, encoding="utf-8")
        console.print(f"[green]Report written to[/green] {output}")
    else:
        console.print(content, markup=False, highlight=False, end="")


def cmd_edit(args: argparse.Namespace) -> None:
    """Edit a stored punch."""
    if args.to is None and args.type is None:
        console.print("[red]Error:[/red] specify --to and/or --type")
        sys.exit(1)

    service = _get_service()
    updated = service.edit_punch(args.timestamp, new_timestamp=args.to, new_type=args.type)
    console.print(
        f"[green]Updated punch:[/green] {updated.type.value.upper()} "
        f"{_describe_timestamp(service, updated.timestamp)}"
    )


def cmd_delete(args: argparse.Namespace) -> None:
    """Delete a stored punch."""
    service = _get_service()
    service.delete_punch(args.timestamp)
    console.print(f"[green]Deleted punch[/green] {args.timestamp}")


def cmd_import(args: argparse.Namespace) -> None:
    """Import punches from a YAML or JSON file."""
    service = _get_service()
    result = service.import_punches(args.file)
    console.print(f"[green]Imported {result.imported} punches[/green] from {args.file}")
    if result.duplicates:
        console.print(f"  [dim]Skipped {result.duplicates} already stored[/dim]")
    if result.invalid:
        console.print(f"  [yellow]Skipped {result.invalid} invalid records[/yellow]")


def cmd_reset(args: argparse.Namespace) -> None:
    """Delete all punches and the clock state."""
    if not args.yes:
        answer = console.input(
            "Are you sure you want to reset all clock data? This cannot be undone. [y/N] "
        )
        if answer.strip().lower() not in ("y", "yes"):
            console.print("[dim]Cancelled.[/dim]")
            return

    _get_service().reset()
    console.print("[green]All clock data has been reset.[/green]")


def cmd_version(args: argparse.Namespace) -> None:
    """Show version information."""
    console.print(f"[bold]Punch Clock[/bold] v{__version__}")
    console.print(f"Storage: {settings.get_storage_path()}")
    console.print(f"Timezone: {settings.timezone or 'system local'}")
    console.print(f"Split weeks: {'yes' if settings.split_weeks else 'no'}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``punch`` command."""
    parser = argparse.ArgumentParser(
        prog="punch",
        description="Punch Clock - personal time clock",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show detailed output")

    subparsers = parser.add_subparsers(dest="command")

    in_parser = subparsers.add_parser("in", help="Clock in")
    in_parser.set_defaults(func=cmd_in)

    out_parser = subparsers.add_parser("out", help="Clock out")
    out_parser.set_defaults(func=cmd_out)

    toggle_parser = subparsers.add_parser("toggle", help="Clock in or out, whichever applies")
    toggle_parser.set_defaults(func=cmd_toggle)

    status_parser = subparsers.add_parser("status", help="Show clock status and hours today")
    status_parser.set_defaults(func=cmd_status)

    today_parser = subparsers.add_parser("today", help="Print hours worked today")
    today_parser.set_defaults(func=cmd_today)

    daily_parser = subparsers.add_parser("daily", help="Show daily totals")
    daily_parser.add_argument("-n", "--limit", type=int, default=0, help="Show only the N most recent days")
    daily_parser.set_defaults(func=cmd_daily)

    weekly_parser = subparsers.add_parser("weekly", help="Show weekly totals")
    weekly_parser.add_argument("-n", "--limit", type=int, default=0, help="Show only the N most recent weeks")
    weekly_parser.set_defaults(func=cmd_weekly)

    history_parser = subparsers.add_parser("history", help="Show stored punches")
    history_parser.add_argument("-n", "--limit", type=int, default=0, help="Show only the N most recent punches")
    history_parser.set_defaults(func=cmd_history)

    report_parser = subparsers.add_parser(
        "report",
        help="Print the plain-text report",
        description="Weekly totals, daily totals and the detailed punch history.",
        epilog="""Examples:
  punch report                       Print to the terminal
  punch report -o report.txt         Save to a file""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    report_parser.add_argument("-o", "--output", help="Write the report to this file")
    report_parser.set_defaults(func=cmd_report)

    edit_parser = subparsers.add_parser(
        "edit",
        help="Change a punch's timestamp or type",
        description="Identify the punch by its stored timestamp (see 'punch history').",
    )
    edit_parser.add_argument("timestamp", help="Stored timestamp of the punch")
    edit_parser.add_argument("--to", help="New ISO-8601 timestamp")
    edit_parser.add_argument("--type", choices=[t.value for t in PunchType], help="New punch type")
    edit_parser.set_defaults(func=cmd_edit)

    delete_parser = subparsers.add_parser("delete", help="Delete a punch")
    delete_parser.add_argument("timestamp", help="Stored timestamp of the punch")
    delete_parser.set_defaults(func=cmd_delete)

    import_parser = subparsers.add_parser(
        "import",
        help="Import punches from a YAML or JSON file",
        epilog="""File format:
  punches:
    - timestamp: "2024-01-01T09:00:00.000Z"
      type: in
    - timestamp: "2024-01-01T17:00:00.000Z"
      type: out""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    import_parser.add_argument("file", help="File to import")
    import_parser.set_defaults(func=cmd_import)

    reset_parser = subparsers.add_parser("reset", help="Delete all punches and the clock state")
    reset_parser.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
    reset_parser.set_defaults(func=cmd_reset)

    version_parser = subparsers.add_parser("version", help="Show version information")
    version_parser.set_defaults(func=cmd_version)

    return parser


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the Punch Clock CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    # No command given - show welcome
    if args.command is None:
        console.print(Markdown(WELCOME_TEXT))
        sys.exit(0)

    try:
        args.func(args)
    except (PunchClockError, ValueError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()

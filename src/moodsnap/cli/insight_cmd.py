"""Insight commands - ensure daily, weekly and monthly snapshots from a capture file"""

import asyncio
import json
import logging
import sys
from datetime import date, datetime, timezone
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from moodsnap.models.capture import Capture
from moodsnap.types import InsightOutcome, InsightType

logger = logging.getLogger(__name__)
console = Console()


def setup_logging(verbose: bool):
    """Configure logging based on verbosity"""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def get_engine():
    """Get the engine lazily so settings load after .env"""
    from moodsnap.engine import get_engine as _get_engine
    return _get_engine()


def load_captures(path: Path) -> list[Capture]:
    """Read captures from a JSON file: a list, or an object with a "captures" list

    Raises:
        click.BadParameter: If the file is not valid JSON or a capture is malformed
    """
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{path} is not valid JSON: {e}") from e

    items = data.get('captures', []) if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise click.BadParameter(f"{path} must contain a list of captures")

    try:
        return [Capture.model_validate(item) for item in items]
    except ValidationError as e:
        raise click.BadParameter(f"Invalid capture in {path}: {e}") from e


def print_outcome(outcome: InsightOutcome, as_json: bool):
    if as_json:
        payload = {
            "status": outcome.status,
            "reason": outcome.reason,
            "errors": outcome.errors,
            "snapshot": outcome.snapshot.to_dict() if outcome.snapshot else None,
        }
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    color = {"generated": "green", "cached": "cyan", "fallback": "yellow"}.get(outcome.status, "magenta")
    console.print(f"[bold]Status:[/bold] [{color}]{outcome.status}[/{color}]")

    if outcome.reason:
        console.print(f"[bold]Reason:[/bold] {outcome.reason}")

    snapshot = outcome.snapshot
    if snapshot is None:
        return

    console.print(
        f"[bold]Period:[/bold] {snapshot.type.value} {snapshot.start_date} to {snapshot.end_date}"
    )
    console.print()
    console.print(snapshot.content)

    flow = snapshot.mood_summary.get("mood_flow")
    if isinstance(flow, list) and flow:
        table = Table(title="Mood flow")
        table.add_column("Mood")
        table.add_column("Share", justify="right")
        table.add_column("Color")
        for segment in flow:
            table.add_row(segment["mood"], f"{segment['percentage']}%", segment["color"])
        console.print()
        console.print(table)

    if outcome.errors:
        console.print()
        console.print("[yellow]Validation notes:[/yellow]")
        for error in outcome.errors:
            console.print(f"  - {error}")


def run_insight(
    insight_type: InsightType,
    user: str,
    day: datetime | None,
    captures_file: Path,
    force: bool,
    as_json: bool,
    verbose: bool
):
    setup_logging(verbose)
    captures = load_captures(captures_file)
    target: date | datetime = day.date() if day else datetime.now(timezone.utc)

    try:
        engine = get_engine()
        outcome = asyncio.run(
            engine.ensure_insight(insight_type, user, target, captures, force=force)
        )
    except Exception as e:
        console.print(f"[red]Failed to ensure {insight_type.value} insight: {e}[/red]")
        sys.exit(1)

    print_outcome(outcome, as_json)


def insight_options(func):
    """Options shared by the period commands"""
    func = click.option('--verbose', '-v', is_flag=True, help='Verbose output')(func)
    func = click.option('--json', 'as_json', is_flag=True, help='Print the outcome as JSON')(func)
    func = click.option('--force', '-f', is_flag=True, help='Regenerate even if a snapshot exists')(func)
    func = click.option('--date', '-d', 'day', type=click.DateTime(formats=['%Y-%m-%d']),
                        help='Any day in the period (default: today)')(func)
    func = click.option('--captures', '-c', 'captures_file', required=True,
                        type=click.Path(exists=True, dir_okay=False, path_type=Path),
                        help='JSON file of captures')(func)
    func = click.option('--user', '-u', required=True, help='User ID owning the captures')(func)
    return func


@click.command()
@insight_options
def daily(user, captures_file, day, force, as_json, verbose):
    """
    Ensure the daily insight for a day.

    Examples:
        moodsnap daily -u alice -c captures.json -d 2025-02-04
        moodsnap daily -u alice -c captures.json --force --json
    """
    run_insight(InsightType.DAILY, user, day, captures_file, force, as_json, verbose)


@click.command()
@insight_options
def weekly(user, captures_file, day, force, as_json, verbose):
    """Ensure the weekly insight for the Sunday-Saturday week containing a day."""
    run_insight(InsightType.WEEKLY, user, day, captures_file, force, as_json, verbose)


@click.command()
@insight_options
def monthly(user, captures_file, day, force, as_json, verbose):
    """
    Ensure the monthly insight for the month containing a day.

    Without --force the month must be at least a week old and have enough
    active days.
    """
    run_insight(InsightType.MONTHLY, user, day, captures_file, force, as_json, verbose)


@click.command()
@click.option('--captures', '-c', 'captures_file', required=True,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='JSON file of captures')
@click.option('--as-of', 'as_of', type=click.DateTime(formats=['%Y-%m-%d', '%Y-%m-%dT%H:%M:%S']),
              help='Cut-off instant, UTC (default: now)')
@click.option('--user', '-u', help='User ID, to resolve custom mood names')
@click.option('--json', 'as_json', is_flag=True, help='Print signals as JSON')
def signals(captures_file: Path, as_of: datetime | None, user: str | None, as_json: bool):
    """Show month signals, title phrase and reasoning without generating."""
    setup_logging(False)
    captures = load_captures(captures_file)
    cutoff = as_of.replace(tzinfo=timezone.utc) if as_of else datetime.now(timezone.utc)

    result = get_engine().compute_month_signals(captures, cutoff, user_id=user)

    if as_json:
        click.echo(json.dumps(result, indent=2, ensure_ascii=False))
        return

    data = result["signals"]
    table = Table(title=f"Month signals as of {cutoff:%Y-%m-%d %H:%M} UTC")
    table.add_column("Signal")
    table.add_column("Value")
    table.add_row("Total captures", str(data["total_captures"]))
    table.add_row("Active days", str(data["active_days"]))
    table.add_row("Dominant mood", data["dominant_mood"])
    table.add_row("Runner-up mood", data["runner_up_mood"] or "-")
    table.add_row("Volatility", f"{data['volatility_score']:.2f}")
    table.add_row("Last 7 days", data["last_7_days_shift"])
    energy = result["energy_percentages"]
    table.add_row("Energy", f"{energy['high']}% high / {energy['medium']}% medium / {energy['low']}% low")
    console.print(table)
    console.print()
    console.print(f"[bold]{result['phrase']}[/bold]")
    console.print(result["reasoning"])

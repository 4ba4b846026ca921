"""Snapshot archive commands"""

import json

import click
from rich.console import Console
from rich.table import Table

from moodsnap.types import InsightType

console = Console()

PREVIEW_CHARS = 60


def get_engine():
    """Get the engine lazily so settings load after .env"""
    from moodsnap.engine import get_engine as _get_engine
    return _get_engine()


@click.command()
@click.option('--user', '-u', required=True, help='User ID')
@click.option('--type', '-t', 'insight_type', type=click.Choice([t.value for t in InsightType]),
              help='Only this insight type')
@click.option('--limit', '-l', default=20, type=int, help='Maximum snapshots (default: 20)')
@click.option('--json', 'as_json', is_flag=True, help='Print snapshots as JSON')
def snapshots(user: str, insight_type: str | None, limit: int, as_json: bool):
    """
    List stored insight snapshots, newest period first.

    Examples:
        moodsnap snapshots -u alice
        moodsnap snapshots -u alice -t monthly --json
    """
    rows = get_engine().list_snapshots(user, insight_type, limit)

    if as_json:
        click.echo(json.dumps([s.to_dict() for s in rows], indent=2, ensure_ascii=False))
        return

    if not rows:
        console.print("[yellow]No snapshots found.[/yellow]")
        return

    table = Table(title=f"Snapshots for {user}")
    table.add_column("Type")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Source")
    table.add_column("Content")

    for snapshot in rows:
        source = snapshot.mood_summary.get("meta", {}).get("source", {}).get("content", "-")
        preview = snapshot.content[:PREVIEW_CHARS]
        if len(snapshot.content) > PREVIEW_CHARS:
            preview += "..."
        table.add_row(
            snapshot.type.value,
            snapshot.start_date.isoformat(),
            snapshot.end_date.isoformat(),
            source,
            preview,
        )

    console.print(table)
    console.print(f"{len(rows)} snapshots")

"""Mood dictionary commands"""

import sys

import click
from rich.console import Console
from rich.table import Table

console = Console()


def get_engine():
    """Get the engine lazily so settings load after .env"""
    from moodsnap.engine import get_engine as _get_engine
    return _get_engine()


def get_custom_source():
    """Mood source that supports custom mood mutations, or exit"""
    engine = get_engine()
    source = engine.mood_source
    if not hasattr(source, 'create_custom'):
        console.print(
            f"[red]Mood source '{source.get_name()}' does not support custom moods. "
            f"Set MOODSNAP_MOOD_SOURCE_PROVIDER=sqlite.[/red]"
        )
        sys.exit(1)
    return engine, source


@click.group()
def moods():
    """Inspect the mood dictionary and manage custom moods."""
    pass


@moods.command(name='list')
@click.option('--user', '-u', help='Include this user\'s custom moods')
@click.option('--custom-only', is_flag=True, help='Only custom moods')
def list_moods(user: str | None, custom_only: bool):
    """List system and custom moods."""
    entries = get_engine().get_moods(user)
    if custom_only:
        entries = [m for m in entries if m.type == 'custom']

    table = Table(title="Moods")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Color")
    for mood in entries:
        table.add_row(mood.id, mood.name, mood.type, f"[{mood.color}]{mood.color}[/]")
    console.print(table)


@moods.command(name='add')
@click.argument('name')
@click.option('--user', '-u', required=True, help='Owner of the custom mood')
@click.option('--color', help='Hex color (default: derived from the name)')
def add_mood(name: str, user: str, color: str | None):
    """Create a custom mood."""
    engine, source = get_custom_source()
    try:
        mood = source.create_custom(user, name, color)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    engine.invalidate_moods()
    console.print(f"[green]Created {mood.name} ({mood.id})[/green]")


@moods.command(name='rename')
@click.argument('mood_id')
@click.argument('name')
@click.option('--user', '-u', required=True, help='Owner of the custom mood')
def rename_mood(mood_id: str, name: str, user: str):
    """Rename a custom mood. Past captures keep the old name."""
    engine, source = get_custom_source()
    if not source.rename_custom(user, mood_id, name):
        console.print(f"[yellow]No live custom mood {mood_id} for {user}[/yellow]")
        sys.exit(1)
    engine.invalidate_moods()
    console.print(f"[green]Renamed {mood_id} to {name}[/green]")


@moods.command(name='delete')
@click.argument('mood_id')
@click.option('--user', '-u', required=True, help='Owner of the custom mood')
def delete_mood(mood_id: str, user: str):
    """Soft-delete a custom mood."""
    engine, source = get_custom_source()
    if not source.delete_custom(user, mood_id):
        console.print(f"[yellow]No live custom mood {mood_id} for {user}[/yellow]")
        sys.exit(1)
    engine.invalidate_moods()
    console.print(f"[green]Deleted {mood_id}[/green]")

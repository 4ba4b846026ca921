"""Providers diagnostic command"""

import sys

import click
from rich.console import Console
from rich.table import Table

from moodsnap.providers import plugin_loader

console = Console()

# Settings field naming the configured provider for each group
SETTINGS_FIELDS = {
    'generation': 'generation_provider',
    'snapshot_store': 'snapshot_store_provider',
    'mood_source': 'mood_source_provider',
}


def configured_providers() -> dict[str, str]:
    """Provider name selected in settings for each group"""
    from moodsnap.config import settings
    return {group: getattr(settings, field) for group, field in SETTINGS_FIELDS.items()}


@click.command()
def providers():
    """List discovered providers and mark the configured ones"""
    configured = configured_providers()
    missing = []

    for provider_type in plugin_loader.PROVIDER_GROUPS:
        discovered = plugin_loader.get_providers(provider_type)
        selected = configured[provider_type]

        table = Table(title=f"{provider_type} ({len(discovered)})")
        table.add_column("Name")
        table.add_column("Module")
        table.add_column("Active")
        for name, cls in sorted(discovered.items()):
            table.add_row(name, cls.__module__, "[green]yes[/green]" if name == selected else "")
        console.print(table)

        if selected not in discovered:
            missing.append(f"{provider_type}={selected}")

    if missing:
        console.print(f"[red]Configured but not installed: {', '.join(missing)}[/red]")
        sys.exit(1)
    console.print("[green]All configured providers are available[/green]")

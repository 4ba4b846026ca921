"""Main CLI entry point"""

from pathlib import Path

import click
from dotenv import load_dotenv

# Load .env file from current working directory before importing anything else
# This ensures environment variables are set before pydantic-settings reads them
_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)


@click.group()
@click.version_option(version='0.1.0', prog_name='moodsnap')
def cli():
    """moodsnap CLI - Generate, inspect and archive mood insight snapshots"""
    pass


def setup_cli():
    """Register all CLI commands"""
    from .insight_cmd import daily, monthly, signals, weekly
    from .mood_cmd import moods
    from .providers_cmd import providers
    from .snapshot_cmd import snapshots

    cli.add_command(daily, name='daily')
    cli.add_command(weekly, name='weekly')
    cli.add_command(monthly, name='monthly')
    cli.add_command(signals, name='signals')
    cli.add_command(snapshots, name='snapshots')
    cli.add_command(moods, name='moods')
    cli.add_command(providers, name='providers')


# Setup commands when module is imported
setup_cli()

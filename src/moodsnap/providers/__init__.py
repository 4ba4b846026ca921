"""Provider package - Extensible provider architecture for moodsnap

Providers are discovered via Python entry points, allowing both built-in
and external providers to be registered in pyproject.toml.

Usage:
    from moodsnap.providers import GenerationProviderFactory
    provider = GenerationProviderFactory.create(settings)

External plugins can add providers by defining entry points:
    [project.entry-points."moodsnap.generation"]
    my_provider = "my_package.provider:MyGenerationProvider"
"""

from . import plugin_loader
from .base import GenerationProvider, MoodSource, SnapshotStoreProvider
from .factories import (
    GenerationProviderFactory,
    MoodSourceFactory,
    SnapshotStoreProviderFactory,
)

__all__ = [
    'plugin_loader',
    'GenerationProvider',
    'MoodSource',
    'SnapshotStoreProvider',
    'GenerationProviderFactory',
    'MoodSourceFactory',
    'SnapshotStoreProviderFactory',
]

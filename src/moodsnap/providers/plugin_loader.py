"""Plugin loader for moodsnap providers - Entry point based discovery

Discovers and loads providers from entry points for all provider types.
Both built-in providers (from this package) and external plugins
(from third-party packages) are discovered via the same mechanism.

Entry Point Groups:
    - moodsnap.generation: Text generation providers
    - moodsnap.snapshot_store: Insight snapshot stores
    - moodsnap.mood_source: Mood dictionary sources

Usage:
    # Get all providers of a type
    providers = get_providers('generation')  # {'none': NoneGenerationProvider, ...}

    # Get a specific provider class
    provider_class = get_provider_class('snapshot_store', 'sqlite')
"""

import importlib.metadata
import logging
from typing import Union

from .base import GenerationProvider, MoodSource, SnapshotStoreProvider

logger = logging.getLogger(__name__)

# Type alias for any provider class
ProviderType = Union[
    type[GenerationProvider],
    type[SnapshotStoreProvider],
    type[MoodSource],
]

# Entry point groups for each provider type
PROVIDER_GROUPS = {
    'generation': 'moodsnap.generation',
    'snapshot_store': 'moodsnap.snapshot_store',
    'mood_source': 'moodsnap.mood_source',
}

# Cache for loaded providers: {provider_type: {name: class}}
_provider_cache: dict[str, dict[str, ProviderType]] = {}


def discover_providers(group: str) -> dict[str, ProviderType]:
    """Discover providers for a specific entry point group

    Args:
        group: Entry point group name (e.g., 'moodsnap.generation')

    Returns:
        Dictionary mapping provider names to provider classes

    Note:
        Providers with missing dependencies are skipped with a debug log.
    """
    providers = {}

    try:
        eps = importlib.metadata.entry_points().select(group=group)
    except Exception as e:
        logger.warning(f"Failed to discover providers for {group}: {e}")
        return providers

    for ep in eps:
        try:
            providers[ep.name] = ep.load()
            logger.debug(f"Discovered provider: {group}.{ep.name}")
        except ImportError as e:
            # Missing optional dependency - this is expected and normal
            logger.debug(f"Skipping {group}.{ep.name}: missing dependency - {e}")
        except Exception as e:
            logger.warning(f"Failed to load provider {group}.{ep.name}: {e}")

    return providers


def get_providers(provider_type: str) -> dict[str, ProviderType]:
    """Get all discovered providers for a type

    Args:
        provider_type: Provider type ('generation', 'snapshot_store', 'mood_source')

    Returns:
        Dictionary mapping provider names to provider classes
    """
    cached = _provider_cache.get(provider_type)
    if not cached:
        group = PROVIDER_GROUPS.get(provider_type)
        if group:
            _provider_cache[provider_type] = discover_providers(group)
        else:
            logger.warning(f"Unknown provider type: {provider_type}")
            _provider_cache[provider_type] = {}

    return _provider_cache[provider_type]


def get_provider_class(provider_type: str, name: str) -> ProviderType | None:
    """Get a specific provider class, or None if not found"""
    return get_providers(provider_type).get(name)


def get_available_providers(provider_type: str) -> list[str]:
    """Get list of available provider names for a type"""
    return list(get_providers(provider_type).keys())


def reset() -> None:
    """Reset plugin loader cache

    For testing purposes only. Clears all cached providers
    so they will be rediscovered on next access.
    """
    global _provider_cache
    _provider_cache = {}
    logger.debug("Plugin loader cache reset")


def register_provider(provider_type: str, name: str, provider_class: ProviderType) -> None:
    """Manually register a provider

    For testing and runtime registration. Providers registered this way
    take precedence over entry point discovered providers.

    Example:
        >>> register_provider('generation', 'test', MockGenerationProvider)
    """
    get_providers(provider_type)[name] = provider_class
    logger.debug(f"Manually registered provider: {provider_type}.{name}")

"""Provider factories - Factory pattern with entry point discovery

All factories use the plugin_loader to discover providers via entry points.
This provides a unified mechanism for both built-in and external providers.
"""

import logging

from moodsnap.config import Settings

from . import plugin_loader
from .base import GenerationProvider, MoodSource, SnapshotStoreProvider

logger = logging.getLogger(__name__)


class GenerationProviderFactory:
    """Factory for creating generation providers

    Providers are discovered via entry points in the 'moodsnap.generation' group.

    Available providers:
        - none: No collaborator, every insight uses deterministic fallback
        - ollama: Local Ollama models over HTTP
    """

    @classmethod
    def create(cls, settings: Settings) -> GenerationProvider:
        """Create generation provider based on settings

        Args:
            settings: Application settings with generation_provider configured

        Returns:
            Generation provider instance

        Raises:
            ValueError: If provider not found or dependencies missing
        """
        provider_name = settings.generation_provider
        provider_class = plugin_loader.get_provider_class('generation', provider_name)

        if not provider_class:
            available = ', '.join(cls.get_available_providers())
            raise ValueError(
                f"Unknown generation provider: {provider_name}. "
                f"Available: {available or 'none (check dependencies)'}"
            )

        logger.info(f"Creating generation provider: {provider_name}")
        return provider_class(settings)

    @classmethod
    def get_available_providers(cls) -> list[str]:
        """Get list of available generation providers"""
        return plugin_loader.get_available_providers('generation')

    @classmethod
    def register(cls, name: str, provider_class: type[GenerationProvider]) -> None:
        """Manually register a provider (for testing)"""
        plugin_loader.register_provider('generation', name, provider_class)


class SnapshotStoreProviderFactory:
    """Factory for creating snapshot stores

    Providers are discovered via entry points in the 'moodsnap.snapshot_store' group.

    Available providers:
        - sqlite: Local SQLite file with a unique (user_id, type, start_date) index
        - memory: In-process store for tests and ephemeral runs
    """

    @classmethod
    def create(cls, settings: Settings) -> SnapshotStoreProvider:
        """Create snapshot store based on settings

        Raises:
            ValueError: If provider not found or dependencies missing
        """
        provider_name = settings.snapshot_store_provider
        provider_class = plugin_loader.get_provider_class('snapshot_store', provider_name)

        if not provider_class:
            available = ', '.join(cls.get_available_providers())
            raise ValueError(
                f"Unknown snapshot store provider: {provider_name}. "
                f"Available: {available or 'none (check dependencies)'}"
            )

        logger.info(f"Creating snapshot store: {provider_name}")
        return provider_class(settings)

    @classmethod
    def get_available_providers(cls) -> list[str]:
        """Get list of available snapshot stores"""
        return plugin_loader.get_available_providers('snapshot_store')

    @classmethod
    def register(cls, name: str, provider_class: type[SnapshotStoreProvider]) -> None:
        """Manually register a provider (for testing)"""
        plugin_loader.register_provider('snapshot_store', name, provider_class)


class MoodSourceFactory:
    """Factory for creating mood dictionary sources

    Providers are discovered via entry points in the 'moodsnap.mood_source' group.

    Available providers:
        - system: Built-in vocabulary only
        - sqlite: Built-in vocabulary plus per-user custom moods
    """

    @classmethod
    def create(cls, settings: Settings) -> MoodSource:
        """Create mood source based on settings

        Raises:
            ValueError: If provider not found or dependencies missing
        """
        provider_name = settings.mood_source_provider
        provider_class = plugin_loader.get_provider_class('mood_source', provider_name)

        if not provider_class:
            available = ', '.join(cls.get_available_providers())
            raise ValueError(
                f"Unknown mood source: {provider_name}. "
                f"Available: {available or 'none (check dependencies)'}"
            )

        logger.info(f"Creating mood source: {provider_name}")
        return provider_class(settings)

    @classmethod
    def get_available_providers(cls) -> list[str]:
        """Get list of available mood sources"""
        return plugin_loader.get_available_providers('mood_source')

    @classmethod
    def register(cls, name: str, provider_class: type[MoodSource]) -> None:
        """Manually register a provider (for testing)"""
        plugin_loader.register_provider('mood_source', name, provider_class)

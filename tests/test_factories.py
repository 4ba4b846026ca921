"""Tests for provider factories and entry point discovery"""

import pytest

from moodsnap.config import Settings
from moodsnap.providers import (
    GenerationProviderFactory,
    MoodSourceFactory,
    SnapshotStoreProviderFactory,
    plugin_loader,
)
from moodsnap.providers.base import GenerationProvider
from moodsnap.providers.generation.none import NoneGenerationProvider
from moodsnap.providers.moods.system import SystemMoodSource
from moodsnap.providers.snapshot.memory import InMemorySnapshotStore


class EchoGenerationProvider(GenerationProvider):
    def __init__(self, settings):
        self.settings = settings

    def generate(self, prompt, **kwargs):
        return prompt


class TestGenerationProviderFactory:
    """Generation provider creation"""

    def setup_method(self):
        plugin_loader.reset()

    def teardown_method(self):
        plugin_loader.reset()

    def test_registered_provider(self):
        GenerationProviderFactory.register("test", EchoGenerationProvider)
        provider = GenerationProviderFactory.create(Settings(generation_provider="test"))

        assert isinstance(provider, EchoGenerationProvider)
        assert "test" in GenerationProviderFactory.get_available_providers()

    def test_builtin_none_provider(self):
        provider = GenerationProviderFactory.create(Settings(generation_provider="none"))
        assert isinstance(provider, NoneGenerationProvider)
        with pytest.raises(NotImplementedError):
            provider.generate("anything")

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown generation provider: nope"):
            GenerationProviderFactory.create(Settings(generation_provider="nope"))


class TestStoreAndMoodFactories:
    """Snapshot store and mood source creation"""

    def setup_method(self):
        plugin_loader.reset()

    def teardown_method(self):
        plugin_loader.reset()

    def test_memory_store(self):
        store = SnapshotStoreProviderFactory.create(Settings(snapshot_store_provider="memory"))
        assert isinstance(store, InMemorySnapshotStore)

    def test_system_mood_source(self):
        source = MoodSourceFactory.create(Settings(mood_source_provider="system"))
        assert isinstance(source, SystemMoodSource)

    def test_unknown_store(self):
        with pytest.raises(ValueError, match="Unknown snapshot store provider"):
            SnapshotStoreProviderFactory.create(Settings(snapshot_store_provider="redis"))

    def test_unknown_mood_source(self):
        with pytest.raises(ValueError, match="Unknown mood source"):
            MoodSourceFactory.create(Settings(mood_source_provider="ldap"))


class TestPluginLoader:
    """Entry point discovery"""

    def setup_method(self):
        plugin_loader.reset()

    def test_builtin_groups_discovered(self):
        assert {"none", "ollama"} <= set(plugin_loader.get_available_providers("generation"))
        assert {"sqlite", "memory"} <= set(plugin_loader.get_available_providers("snapshot_store"))
        assert {"system", "sqlite"} <= set(plugin_loader.get_available_providers("mood_source"))

    def test_unknown_type(self):
        assert plugin_loader.get_providers("vector_db") == {}

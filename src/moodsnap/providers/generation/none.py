"""Null generation provider - every insight uses the deterministic fallback"""

from moodsnap.config import Settings
from moodsnap.providers.base import GenerationProvider


class NoneGenerationProvider(GenerationProvider):
    """Null provider that raises if generation is requested

    Use this for offline deployments. The orchestrator treats the error like
    any other collaborator failure and stores fallback content.
    """

    def __init__(self, settings: Settings):
        """Initialize none provider (no configuration needed)"""
        pass

    def generate(self, prompt: str, **kwargs) -> str:
        raise NotImplementedError(
            "Text generation is not available (generation_provider='none'). "
            "Configure a generation provider (e.g. ollama) to get narrative insights."
        )

    def get_name(self) -> str:
        return "none"

"""Ollama generation provider"""

import logging

import httpx

from moodsnap.config import Settings
from moodsnap.providers.base import GenerationProvider
from moodsnap.providers.resilience import CircuitBreaker, retry_call

logger = logging.getLogger(__name__)


class OllamaGenerationProvider(GenerationProvider):
    """Local Ollama model over its HTTP API.

    The read timeout equals the orchestrator's generation timeout so a hung
    request is torn down rather than left running after the caller gave up.
    Transport errors are retried; repeated failures open the circuit breaker.
    """

    def __init__(self, settings: Settings, http_client: httpx.Client | None = None):
        self.settings = settings
        self.model = settings.ollama_model
        self.base_url = settings.ollama_url.rstrip("/")
        self.temperature = settings.generation_temperature
        self.max_retries = settings.ollama_max_retries
        self.retry_base_delay = settings.ollama_retry_base_delay
        self.retry_max_delay = settings.ollama_retry_max_delay

        self.client = http_client or httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(
                settings.generation_timeout,
                connect=settings.ollama_connect_timeout,
            ),
        )
        self.circuit_breaker = CircuitBreaker(
            threshold=settings.ollama_circuit_breaker_threshold,
            timeout=settings.ollama_circuit_breaker_timeout,
            half_open_max_calls=settings.ollama_circuit_breaker_half_open_max_calls,
            name="ollama",
        )

        logger.info(f"Ollama provider initialized: {self.base_url}, model {self.model}")

    def _post_generate(self, payload: dict) -> str:
        response = self.client.post("/api/generate", json=payload)
        response.raise_for_status()
        return response.json()["response"]

    def generate(self, prompt: str, **kwargs) -> str:
        """Generate text from prompt

        Raises:
            CircuitOpenError: If the breaker is open
            httpx.HTTPError: On network errors, HTTP errors or timeout
            KeyError: If the response body has no "response" field
        """
        payload = {
            "model": kwargs.get("model", self.model),
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": kwargs.get("temperature", self.temperature)
            }
        }

        return self.circuit_breaker.call(
            retry_call,
            self._post_generate,
            payload,
            max_retries=self.max_retries,
            base_delay=self.retry_base_delay,
            max_delay=self.retry_max_delay,
            exceptions=(httpx.TransportError,),
            operation_name="Ollama generate",
        )

    def is_healthy(self) -> bool:
        """Check if Ollama responds. Bypasses the circuit breaker."""
        try:
            response = self.client.get("/api/version", timeout=self.settings.ollama_connect_timeout)
            response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.warning(f"Ollama health check failed: {e}")
            return False

    def get_stats(self) -> dict:
        return {
            "base_url": self.base_url,
            "model": self.model,
            **self.circuit_breaker.get_stats(),
        }

    def get_default_model(self) -> str:
        """Get the configured default model"""
        return self.model

    def get_name(self) -> str:
        """Get provider name"""
        return f"ollama/{self.model}"

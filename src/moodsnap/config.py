"""Configuration management for moodsnap - provider selection and insight policy"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings.

    Provider Selection:
        Provider names are strings that map to entry points. Core provides:
        - Generation: none, ollama
        - Snapshot store: sqlite, memory
        - Mood source: system, sqlite

    Insight Policy:
        Eligibility thresholds, leakage policy and generation timeout live here
        so deployments can tune them through the environment or a .env file.
    """

    # ===== Provider Selection =====
    # String-based to support dynamic plugin discovery
    generation_provider: str = Field(
        default="none",
        description="Generation provider name (discovered via moodsnap.generation entry points)"
    )
    snapshot_store_provider: str = Field(
        default="sqlite",
        description="Snapshot store name (discovered via moodsnap.snapshot_store entry points)"
    )
    mood_source_provider: str = Field(
        default="system",
        description="Mood dictionary source name (discovered via moodsnap.mood_source entry points)"
    )

    # ===== Generation =====
    generation_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Seconds to wait for the generation collaborator before falling back"
    )
    generation_temperature: float = 0.7

    # ===== Ollama Configuration =====
    ollama_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2"
    ollama_connect_timeout: float = 5.0
    ollama_max_retries: int = 1  # Retries inside the generation timeout budget
    ollama_retry_base_delay: float = 0.5
    ollama_retry_max_delay: float = 4.0
    ollama_circuit_breaker_threshold: int = 5  # Failures before opening
    ollama_circuit_breaker_timeout: float = 60.0  # Recovery window (seconds)
    ollama_circuit_breaker_half_open_max_calls: int = 1

    # ===== Storage =====
    snapshot_db_path: str = "data/snapshots.db"
    mood_db_path: str = "data/moods.db"
    sqlite_write_retries: int = 3

    # ===== Mood Dictionary Cache =====
    mood_cache_ttl_seconds: float = Field(default=300.0, ge=0)  # 5 minutes

    # ===== Insight Policy =====
    timezone: str | None = None  # IANA zone name; None = process local time
    auto_daily_insights: bool = True
    monthly_min_day_of_month: int = Field(default=7, ge=1, le=31)
    monthly_min_active_days: int = Field(default=7, ge=0)
    label_leakage_policy: Literal["warn", "reject"] = "warn"
    strict_language_checks: bool = False

    # ===== Prompt Bounds =====
    month_note_snippets: int = 3  # Notes per day in the monthly digest
    note_snippet_chars: int = 120
    max_prompt_captures: int = 300

    # ===== Application Settings =====
    log_level: str = "info"

    class Config:
        env_file = ".env"
        env_prefix = "MOODSNAP_"
        case_sensitive = False
        extra = "ignore"  # Ignore unknown fields from .env

    def get_generation_model(self) -> str | None:
        """Get generation model name based on provider"""
        defaults = {
            "ollama": self.ollama_model,
        }
        return defaults.get(self.generation_provider)


# Global settings instance
settings = Settings()

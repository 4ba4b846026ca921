"""Base provider interfaces - Abstract base classes for all providers"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from moodsnap.types import InsightSnapshot, InsightType, MoodEntry


class GenerationProvider(ABC):
    """Abstract base class for the text generation collaborator.

    Output is untrusted: callers always run it through validation.
    """

    @abstractmethod
    def generate(self, prompt: str, **kwargs) -> str:
        """
        Generate text from a prompt

        Args:
            prompt: Input prompt
            **kwargs: Provider-specific parameters

        Returns:
            Raw generated text (prose or JSON, possibly fenced)
        """
        pass

    def get_default_model(self) -> str | None:
        """
        Get the default model ID for this provider.

        Returns:
            Model ID string, or None when the provider has no model
        """
        return None

    def get_name(self) -> str:
        """Get provider name"""
        return self.__class__.__name__


class MoodSource(ABC):
    """Abstract base class for mood dictionary sources"""

    @abstractmethod
    def fetch_system(self) -> list[MoodEntry]:
        """Get all system moods"""
        pass

    @abstractmethod
    def fetch_custom(self, user_id: str) -> list[MoodEntry]:
        """
        Get a user's custom moods, excluding soft-deleted ones

        Args:
            user_id: Authenticated user ID

        Returns:
            Custom mood entries
        """
        pass

    def get_name(self) -> str:
        """Get provider name"""
        return self.__class__.__name__


class SnapshotStoreProvider(ABC):
    """Abstract base class for insight snapshot storage

    Implementations must keep at most one snapshot per
    (user_id, type, start_date), enforced by the storage itself so that
    concurrent writers converge on a single row.
    """

    @abstractmethod
    def fetch(
        self,
        user_id: str,
        insight_type: InsightType,
        start_date: date
    ) -> InsightSnapshot | None:
        """
        Point lookup by the uniqueness key

        Returns:
            Snapshot or None if the period has none yet
        """
        pass

    @abstractmethod
    def upsert(
        self,
        user_id: str,
        insight_type: InsightType,
        start_date: date,
        end_date: date,
        content: str,
        mood_summary: dict[str, Any],
        capture_ids: list[str],
        force: bool = False
    ) -> InsightSnapshot:
        """
        Atomic conditional write keyed on (user_id, type, start_date)

        Without ``force`` an existing row wins and is returned unchanged.
        With ``force`` the row's content is replaced, keeping created_at.

        Returns:
            The stored snapshot
        """
        pass

    @abstractmethod
    def list_snapshots(
        self,
        user_id: str,
        insight_type: InsightType | None = None,
        limit: int = 50
    ) -> list[InsightSnapshot]:
        """
        List a user's snapshots, newest period first

        Args:
            user_id: Owner
            insight_type: Optional type filter
            limit: Maximum results
        """
        pass

    def get_name(self) -> str:
        """Get provider name"""
        return self.__class__.__name__

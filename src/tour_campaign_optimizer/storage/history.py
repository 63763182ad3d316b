"""Optimization history stores.

Entries are keyed by campaign id. Lookups are exact: the entries of
``"abc"`` and ``"abc123"`` never mix.
"""

import logging
from abc import ABC, abstractmethod

from tour_campaign_optimizer.models.results import OptimizationHistoryEntry

logger = logging.getLogger(__name__)


class HistoryStore(ABC):
    """Interface for optimization history storage."""

    @abstractmethod
    def append(self, key: str, entry: OptimizationHistoryEntry) -> None:
        """Record an entry under a campaign key."""
        pass

    @abstractmethod
    def get(self, key: str) -> list[OptimizationHistoryEntry]:
        """Entries stored under exactly this key, oldest first."""
        pass

    @abstractmethod
    def clear(self, key: str | None = None) -> None:
        """Remove the entries of one key, or every entry when key is None."""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        pass


class InMemoryHistoryStore(HistoryStore):
    """Process-local history store.

    Not thread-safe; intended for a single event loop.
    """

    def __init__(self):
        self._entries: dict[str, list[OptimizationHistoryEntry]] = {}

    def append(self, key: str, entry: OptimizationHistoryEntry) -> None:
        self._entries.setdefault(key, []).append(entry)
        logger.debug(f"Stored {entry.type} entry for {key}")

    def get(self, key: str) -> list[OptimizationHistoryEntry]:
        return list(self._entries.get(key, []))

    def clear(self, key: str | None = None) -> None:
        if key is None:
            self._entries.clear()
            logger.info("Cleared all optimization history")
        else:
            self._entries.pop(key, None)
            logger.info(f"Cleared optimization history for {key}")

    def keys(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())

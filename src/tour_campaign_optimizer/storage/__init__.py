"""Optimization history storage."""

from tour_campaign_optimizer.storage.history import HistoryStore, InMemoryHistoryStore

__all__ = ["HistoryStore", "InMemoryHistoryStore"]

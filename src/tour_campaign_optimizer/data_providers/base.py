"""Base interface for historical tour performance providers."""

import re
from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from tour_campaign_optimizer.core.exceptions import DataProviderError
from tour_campaign_optimizer.models.campaign import TourPerformanceRecord

ALL_TOUR_TYPES = "all"

_LAST_N_DAYS = re.compile(r"^last(\d+)days$")


def parse_date_range(date_range: str, now: datetime) -> datetime | None:
    """Return the earliest timestamp covered by a ``lastNdays`` range.

    Returns None for ``all``. Raises DataProviderError for anything else.
    """
    if date_range == "all":
        return None
    match = _LAST_N_DAYS.match(date_range)
    if not match:
        raise DataProviderError(
            f"Unsupported date range '{date_range}', expected 'lastNdays' or 'all'"
        )
    return now - timedelta(days=int(match.group(1)))


def wants_tour_type(tour_types: list[str] | None, tour_type: str) -> bool:
    if not tour_types or ALL_TOUR_TYPES in tour_types:
        return True
    return tour_type in tour_types


class PerformanceDataProvider(ABC):
    """Interface for providers of historical per-tour performance."""

    @abstractmethod
    async def get_tour_performance(
        self,
        date_range: str = "last365days",
        tour_types: list[str] | None = None,
    ) -> list[TourPerformanceRecord]:
        """Fetch per-tour performance records.

        Args:
            date_range: ``lastNdays`` or ``all``
            tour_types: Tour types to include, None or ["all"] for every type

        Returns:
            Performance records, timestamped where the source knows the period

        Raises:
            DataProviderError: If the records cannot be fetched
        """
        pass

"""Provider serving a fixed list of performance records."""

from collections.abc import Callable, Iterable
from datetime import datetime

from tour_campaign_optimizer.data_providers.base import (
    PerformanceDataProvider,
    parse_date_range,
    wants_tour_type,
)
from tour_campaign_optimizer.models.base import utc_now
from tour_campaign_optimizer.models.campaign import TourPerformanceRecord


class StaticPerformanceProvider(PerformanceDataProvider):
    """Serve records supplied up front, e.g. exported from a reporting system.

    Records without a timestamp are returned for every date range.
    """

    def __init__(
        self,
        records: Iterable[TourPerformanceRecord | dict],
        clock: Callable[[], datetime] | None = None,
    ):
        self.records = [
            record
            if isinstance(record, TourPerformanceRecord)
            else TourPerformanceRecord.model_validate(record)
            for record in records
        ]
        self.clock = clock or utc_now

    async def get_tour_performance(
        self,
        date_range: str = "last365days",
        tour_types: list[str] | None = None,
    ) -> list[TourPerformanceRecord]:
        since = parse_date_range(date_range, self.clock())
        return [
            record
            for record in self.records
            if wants_tour_type(tour_types, record.tour_type)
            and (since is None or record.timestamp is None or record.timestamp >= since)
        ]

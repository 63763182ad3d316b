"""Mock data provider for testing and demos."""

import random
from collections.abc import Callable
from datetime import datetime, timezone

from tour_campaign_optimizer.constants import (
    SEASONAL_FACTORS,
    TOUR_TYPES,
    get_season_for_month,
)
from tour_campaign_optimizer.data_providers.base import (
    PerformanceDataProvider,
    parse_date_range,
    wants_tour_type,
)
from tour_campaign_optimizer.models.base import utc_now
from tour_campaign_optimizer.models.campaign import TourPerformanceRecord

BASE_MONTHLY_BOOKINGS = 40
BASE_ROAS = 3.0
ALL_TIME_MONTHS = 24


class MockPerformanceProvider(PerformanceDataProvider):
    """Mock data provider for testing purposes.

    Generates one record per tour type and month, shaped by the seasonal
    demand multipliers, so seasonal analysis has realistic input without a
    reporting backend.
    """

    def __init__(self, seed: int = 42, clock: Callable[[], datetime] | None = None):
        """Initialize the mock data provider.

        Args:
            seed: Random seed for consistent test data generation
            clock: Returns the current time
        """
        self.seed = seed
        self.clock = clock or utc_now

    def _add_variance(
        self, rng: random.Random, base_value: float, variance_pct: float = 0.2
    ) -> float:
        """Add seeded random variance to a base value.

        Args:
            rng: Seeded random generator for this request
            base_value: The base value to vary
            variance_pct: Percentage variance (0.2 = ±20%)

        Returns:
            Value with random variance applied
        """
        variance = base_value * variance_pct
        return max(0, base_value + rng.uniform(-variance, variance))

    def _months_back(self, now: datetime, count: int) -> list[datetime]:
        """First day of the current month and the ``count - 1`` months before it."""
        months = []
        year, month = now.year, now.month
        for _ in range(count):
            months.append(datetime(year, month, 1, 12, tzinfo=timezone.utc))
            month -= 1
            if month == 0:
                year, month = year - 1, 12
        return months

    async def get_tour_performance(
        self,
        date_range: str = "last365days",
        tour_types: list[str] | None = None,
    ) -> list[TourPerformanceRecord]:
        """Return sample monthly performance per tour type."""
        now = self.clock()
        since = parse_date_range(date_range, now)
        if since is None:
            month_count = ALL_TIME_MONTHS
        else:
            month_count = max(1, (now - since).days // 30)

        # Fresh generator per call so repeated calls return identical data
        rng = random.Random(self.seed)
        records = []
        for period in self._months_back(now, month_count):
            season = SEASONAL_FACTORS[get_season_for_month(period.month - 1)]
            for tour_type, tour in TOUR_TYPES.items():
                if not wants_tour_type(tour_types, tour_type):
                    continue
                boost = 1.2 if tour_type in season.top_tours else 1.0
                bookings = round(
                    self._add_variance(
                        rng, BASE_MONTHLY_BOOKINGS * season.demand_multiplier * boost
                    )
                )
                revenue = bookings * tour.average_price
                roas = self._add_variance(
                    rng, BASE_ROAS * season.demand_multiplier**0.5, 0.15
                )
                records.append(
                    TourPerformanceRecord(
                        tour_type=tour_type,
                        timestamp=period,
                        revenue=revenue,
                        conversions=bookings,
                        cost=round(revenue / roas) if roas > 0 else 0,
                    )
                )
        return records

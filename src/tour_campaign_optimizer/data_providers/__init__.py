"""Data providers for historical tour performance.

- Static records supplied by the caller
- Seeded mock data for testing and demos
"""

from tour_campaign_optimizer.data_providers.base import PerformanceDataProvider
from tour_campaign_optimizer.data_providers.mock_provider import (
    MockPerformanceProvider,
)
from tour_campaign_optimizer.data_providers.static_provider import (
    StaticPerformanceProvider,
)

__all__ = [
    "MockPerformanceProvider",
    "PerformanceDataProvider",
    "StaticPerformanceProvider",
]

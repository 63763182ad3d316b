"""Tour catalogue data access."""

from tour_campaign_optimizer.tours.cache import (
    InMemoryTourCache,
    RedisTourCache,
    TourCache,
)
from tour_campaign_optimizer.tours.models import TourConfig, TourRow
from tour_campaign_optimizer.tours.service import (
    ToursService,
    TourRepository,
    config_key_to_tour_type,
    extract_time_slots,
    format_duration,
    get_config_key,
)

__all__ = [
    "InMemoryTourCache",
    "RedisTourCache",
    "TourCache",
    "TourConfig",
    "TourRepository",
    "TourRow",
    "ToursService",
    "config_key_to_tour_type",
    "extract_time_slots",
    "format_duration",
    "get_config_key",
]

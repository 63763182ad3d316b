"""Static lookup tables for Kyoto tour campaign optimization.

Month indexes are zero-based (0 = January) throughout the package.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class CompetitionLevel(str, Enum):
    """Auction competition level."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


class BidStrategy(str, Enum):
    """Bid strategy stance for a keyword category."""

    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class OptimizationType(str, Enum):
    """Kinds of optimization run by the coordinator."""

    CONVERSION_VALUE = "conversion_value"
    AUDIENCE_INSIGHTS = "audience_insights"
    SEASONAL_TRACKING = "seasonal_tracking"
    BID_RECOMMENDATIONS = "bid_recommendations"


@dataclass(frozen=True)
class SeasonalFactor:
    """Demand profile of one tourism season."""

    months: tuple[int, ...]
    demand_multiplier: float
    competition_level: CompetitionLevel
    recommended_budget_increase: float
    top_tours: tuple[str, ...]


@dataclass(frozen=True)
class TourType:
    """Catalogue characteristics of a tour product."""

    name: str
    average_price: int
    duration: float
    seasonality: str
    target_audience: str


@dataclass(frozen=True)
class DeviceBenchmark:
    """Expected performance for a device class."""

    expected_conversion_rate: float
    expected_roas: float
    traffic_share: float


@dataclass(frozen=True)
class TimePatterns:
    """Hour-of-day and calendar demand patterns."""

    high_performance_hours: tuple[int, ...]
    low_performance_hours: tuple[int, ...]
    weekend_multiplier: float
    weekday_multiplier: float
    holiday_multiplier: float


@dataclass(frozen=True)
class AudienceSegment:
    """Reference audience segment."""

    name: str
    expected_roas: float
    preferred_tours: tuple[str, ...]
    seasonality: str


@dataclass(frozen=True)
class KeywordCategory:
    """Performance expectations for a keyword category."""

    expected_ctr: float
    expected_conversion_rate: float
    expected_roas: float
    bid_strategy: BidStrategy


@dataclass(frozen=True)
class GeographicPerformance:
    """Performance expectations for a source market."""

    expected_roas: float
    competition_level: CompetitionLevel


# Northern hemisphere: winter wraps around the year boundary
SEASONAL_FACTORS: MappingProxyType = MappingProxyType(
    {
        # Cherry blossom season
        "spring": SeasonalFactor(
            months=(2, 3, 4),
            demand_multiplier=1.8,
            competition_level=CompetitionLevel.HIGH,
            recommended_budget_increase=0.4,
            top_tours=("gion", "morning", "cultural"),
        ),
        "summer": SeasonalFactor(
            months=(5, 6, 7),
            demand_multiplier=1.2,
            competition_level=CompetitionLevel.MEDIUM,
            recommended_budget_increase=0.1,
            top_tours=("morning", "cultural"),
        ),
        # Autumn foliage
        "autumn": SeasonalFactor(
            months=(8, 9, 10),
            demand_multiplier=1.6,
            competition_level=CompetitionLevel.HIGH,
            recommended_budget_increase=0.3,
            top_tours=("morning", "gion", "uji"),
        ),
        "winter": SeasonalFactor(
            months=(11, 0, 1),
            demand_multiplier=0.8,
            competition_level=CompetitionLevel.LOW,
            recommended_budget_increase=-0.2,
            top_tours=("cultural", "night"),
        ),
    }
)

DEFAULT_SEASON = "spring"

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

# Priority weights used when ranking recommendations
PRIORITY_LEVELS = MappingProxyType(
    {"critical": 100, "high": 90, "medium": 70, "low": 50}
)

TOUR_TYPES: MappingProxyType = MappingProxyType(
    {
        "gion": TourType(
            name="Gion Cultural Tour",
            average_price=12000,
            duration=3,
            seasonality="high_spring_autumn",
            target_audience="cultural_enthusiasts",
        ),
        "morning": TourType(
            name="Morning Bamboo Tour",
            average_price=8000,
            duration=2.5,
            seasonality="consistent",
            target_audience="nature_lovers",
        ),
        "night": TourType(
            name="Night Photography Tour",
            average_price=15000,
            duration=4,
            seasonality="low_summer",
            target_audience="photography_enthusiasts",
        ),
        "cultural": TourType(
            name="Cultural Heritage Tour",
            average_price=10000,
            duration=3.5,
            seasonality="winter_friendly",
            target_audience="history_buffs",
        ),
        "uji": TourType(
            name="Uji Tea Experience",
            average_price=9000,
            duration=3,
            seasonality="autumn_peak",
            target_audience="tea_enthusiasts",
        ),
    }
)

DEVICE_BENCHMARKS: MappingProxyType = MappingProxyType(
    {
        "mobile": DeviceBenchmark(
            expected_conversion_rate=1.8, expected_roas=2.8, traffic_share=0.6
        ),
        "desktop": DeviceBenchmark(
            expected_conversion_rate=2.5, expected_roas=3.2, traffic_share=0.3
        ),
        "tablet": DeviceBenchmark(
            expected_conversion_rate=2.0, expected_roas=3.0, traffic_share=0.1
        ),
    }
)

TIME_PATTERNS = TimePatterns(
    high_performance_hours=(9, 10, 11, 19, 20, 21),
    low_performance_hours=(1, 2, 3, 4, 5, 6),
    weekend_multiplier=1.3,
    weekday_multiplier=1.0,
    holiday_multiplier=1.5,
)

AUDIENCE_SEGMENTS: MappingProxyType = MappingProxyType(
    {
        "cultural_enthusiasts": AudienceSegment(
            name="Cultural Enthusiasts",
            expected_roas=3.5,
            preferred_tours=("gion", "cultural"),
            seasonality="spring_autumn",
        ),
        "photography_lovers": AudienceSegment(
            name="Photography Lovers",
            expected_roas=3.2,
            preferred_tours=("night", "morning"),
            seasonality="autumn",
        ),
        "budget_travelers": AudienceSegment(
            name="Budget Travelers",
            expected_roas=2.5,
            preferred_tours=("morning", "cultural"),
            seasonality="winter",
        ),
        "luxury_travelers": AudienceSegment(
            name="Luxury Travelers",
            expected_roas=4.0,
            preferred_tours=("night", "gion"),
            seasonality="spring",
        ),
        "nature_lovers": AudienceSegment(
            name="Nature Lovers",
            expected_roas=3.0,
            preferred_tours=("morning", "uji"),
            seasonality="spring_autumn",
        ),
    }
)

KEYWORD_CATEGORIES: MappingProxyType = MappingProxyType(
    {
        "branded": KeywordCategory(
            expected_ctr=8.0,
            expected_conversion_rate=5.0,
            expected_roas=4.5,
            bid_strategy=BidStrategy.AGGRESSIVE,
        ),
        "generic_tours": KeywordCategory(
            expected_ctr=2.5,
            expected_conversion_rate=2.0,
            expected_roas=3.0,
            bid_strategy=BidStrategy.MODERATE,
        ),
        "location_specific": KeywordCategory(
            expected_ctr=3.0,
            expected_conversion_rate=2.5,
            expected_roas=3.2,
            bid_strategy=BidStrategy.MODERATE,
        ),
        "activity_specific": KeywordCategory(
            expected_ctr=2.8,
            expected_conversion_rate=2.2,
            expected_roas=3.1,
            bid_strategy=BidStrategy.MODERATE,
        ),
        "competitor": KeywordCategory(
            expected_ctr=1.8,
            expected_conversion_rate=1.5,
            expected_roas=2.5,
            bid_strategy=BidStrategy.CONSERVATIVE,
        ),
    }
)

GEOGRAPHIC_PERFORMANCE: MappingProxyType = MappingProxyType(
    {
        "domestic": MappingProxyType(
            {
                "tokyo": GeographicPerformance(3.2, CompetitionLevel.HIGH),
                "osaka": GeographicPerformance(3.0, CompetitionLevel.MEDIUM),
                "kyoto": GeographicPerformance(2.8, CompetitionLevel.VERY_HIGH),
                "other": GeographicPerformance(2.5, CompetitionLevel.LOW),
            }
        ),
        "international": MappingProxyType(
            {
                "usa": GeographicPerformance(3.5, CompetitionLevel.MEDIUM),
                "europe": GeographicPerformance(3.3, CompetitionLevel.MEDIUM),
                "australia": GeographicPerformance(3.1, CompetitionLevel.LOW),
                "asia": GeographicPerformance(2.9, CompetitionLevel.HIGH),
            }
        ),
    }
)

# History scope for seasonal analyses that are not tied to a campaign
SEASONAL_SCOPE = "seasonal_analysis"

MAX_REPORT_HISTORY = 10


def get_season_for_month(month: int) -> str:
    """Return the season containing a zero-based month index.

    Falls back to spring for indexes outside 0-11.
    """
    for season, factor in SEASONAL_FACTORS.items():
        if month in factor.months:
            return season
    return DEFAULT_SEASON


def get_month_name(month: int) -> str:
    """Return the English month name for a zero-based month index."""
    if 0 <= month < len(MONTH_NAMES):
        return MONTH_NAMES[month]
    return "Unknown"

"""Pydantic models for campaign snapshots, recommendations and results."""

from tour_campaign_optimizer.models.analysis import (
    Recommendation,
    RecommendationPriority,
    RecommendationType,
)
from tour_campaign_optimizer.models.campaign import (
    AudienceRecord,
    CampaignData,
    ConversionRecord,
    DeviceRecord,
    KeywordRecord,
    LocationRecord,
    MetricsRecord,
    TimeSlotRecord,
    TourPerformanceRecord,
)
from tour_campaign_optimizer.models.results import (
    AudienceInsights,
    BidRecommendations,
    ConversionValueOptimization,
    OptimizationHistoryEntry,
    OptimizationReport,
    OptimizationSummary,
    SeasonalAnalysis,
)

__all__ = [
    "AudienceInsights",
    "AudienceRecord",
    "BidRecommendations",
    "CampaignData",
    "ConversionRecord",
    "ConversionValueOptimization",
    "DeviceRecord",
    "KeywordRecord",
    "LocationRecord",
    "MetricsRecord",
    "OptimizationHistoryEntry",
    "OptimizationReport",
    "OptimizationSummary",
    "Recommendation",
    "RecommendationPriority",
    "RecommendationType",
    "SeasonalAnalysis",
    "TimeSlotRecord",
    "TourPerformanceRecord",
]

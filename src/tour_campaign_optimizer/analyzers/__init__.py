"""Campaign analyzers."""

from tour_campaign_optimizer.analyzers.audience_insights import (
    AudienceInsightsGenerator,
)
from tour_campaign_optimizer.analyzers.base import BaseAnalyzer
from tour_campaign_optimizer.analyzers.bid_recommendations import (
    BidRecommendationEngine,
)
from tour_campaign_optimizer.analyzers.conversion_value import (
    ConversionValueOptimizer,
)
from tour_campaign_optimizer.analyzers.seasonal_performance import (
    SeasonalPerformanceTracker,
)

__all__ = [
    "AudienceInsightsGenerator",
    "BaseAnalyzer",
    "BidRecommendationEngine",
    "ConversionValueOptimizer",
    "SeasonalPerformanceTracker",
]

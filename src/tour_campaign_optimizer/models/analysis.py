"""Recommendation models shared by all analyzers."""

from enum import Enum

from pydantic import Field

from tour_campaign_optimizer.models.base import BaseTCOModel


class RecommendationPriority(str, Enum):
    """Priority levels for recommendations."""

    CRITICAL = "critical"  # Must fix immediately
    HIGH = "high"  # Should fix soon
    MEDIUM = "medium"  # Important but not urgent
    LOW = "low"  # Nice to have


class RecommendationType(str, Enum):
    """Types of recommendations."""

    # Conversion value
    BID_SCHEDULING = "bid_scheduling"
    SEASONAL_OPTIMIZATION = "seasonal_optimization"
    DEVICE_OPTIMIZATION = "device_optimization"
    AUDIENCE_OPTIMIZATION = "audience_optimization"
    KEYWORD_OPTIMIZATION = "keyword_optimization"
    VALUE_IMPROVEMENT = "value_improvement"

    # Audience targeting
    INCREASE_BUDGET = "increase_budget"
    PAUSE_AUDIENCE = "pause_audience"
    DEMOGRAPHIC_FOCUS = "demographic_focus"

    # Bidding
    OPTIMIZE_TARGETING = "optimize_targeting"
    QUALITY_IMPROVEMENT = "quality_improvement"

    # Seasonal
    SEASONAL_BUDGET_ADJUSTMENT = "seasonal_budget_adjustment"
    PEAK_SEASON_PREPARATION = "peak_season_preparation"
    TOUR_SEASONAL_FOCUS = "tour_seasonal_focus"
    LOW_SEASON_OPTIMIZATION = "low_season_optimization"


class Recommendation(BaseTCOModel):
    """An advisory produced by an analyzer, meant for display."""

    type: RecommendationType = Field(..., description="Type of recommendation")
    priority: RecommendationPriority = Field(..., description="Priority level")
    title: str = Field(..., description="Short title")
    description: str = Field(..., description="Detailed description")
    action: str = Field(..., description="What to do")
    expected_impact: str = Field(..., description="Expected impact if implemented")


def priority_for_adjustment(
    adjustment: float, high_above: float
) -> RecommendationPriority:
    """High priority when the adjustment magnitude exceeds a cut-off."""
    if abs(adjustment) > high_above:
        return RecommendationPriority.HIGH
    return RecommendationPriority.MEDIUM

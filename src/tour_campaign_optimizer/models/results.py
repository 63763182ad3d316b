"""Result models returned by the analyzers and the optimizer."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field, field_serializer

from tour_campaign_optimizer.constants import OptimizationType
from tour_campaign_optimizer.models.analysis import (
    Recommendation,
    RecommendationPriority,
)
from tour_campaign_optimizer.models.base import (
    BaseTCOModel,
    TimestampedModel,
    utc_now,
)
from tour_campaign_optimizer.models.campaign import AudienceRecord, KeywordRecord


class RiskLevel(str, Enum):
    """Risk of applying a set of bid adjustments."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ============================================================================
# Conversion value
# ============================================================================


class ValueBucket(BaseTCOModel):
    """Total, count and average of conversion values in a group."""

    total_value: float = 0
    count: int = 0
    average_value: float = 0


class ValueDistribution(BaseTCOModel):
    """Order statistics of conversion values."""

    min: float = 0
    max: float = 0
    median: float = 0
    q1: float = 0
    q3: float = 0
    standard_deviation: float = 0


class ValueTrend(BaseTCOModel):
    """Average value of the earlier half of conversions against the later half."""

    available: bool = False
    first_half_average: float = 0
    second_half_average: float = 0
    change_percent: float = 0
    direction: str = "stable"


class ConversionValueMetrics(BaseTCOModel):
    """Conversion value metrics of a campaign."""

    total_conversion_value: float = 0
    average_conversion_value: float = 0
    conversion_value_per_click: float = 0
    conversion_value_per_impression: float = 0
    value_per_tour: dict[str, ValueBucket] = Field(default_factory=dict)
    value_distribution: ValueDistribution = Field(default_factory=ValueDistribution)
    trend_analysis: ValueTrend = Field(default_factory=ValueTrend)


class DayOfWeekPatterns(BaseTCOModel):
    by_day: dict[str, ValueBucket] = Field(default_factory=dict)
    best_day: str | None = None


class TimeOfDayPatterns(BaseTCOModel):
    by_hour: dict[int, ValueBucket] = Field(default_factory=dict)
    high_value_hours: list[int] = Field(default_factory=list)
    value_increase: float | None = Field(
        None, description="Percent lift of high value hours over the overall average"
    )


class DevicePatterns(BaseTCOModel):
    value_per_conversion: dict[str, float] = Field(default_factory=dict)
    high_value_device: str | None = None
    value_increase: float | None = None


class AudiencePatterns(BaseTCOModel):
    high_value_audiences: list[str] = Field(default_factory=list)


class KeywordPatterns(BaseTCOModel):
    high_value_keywords: list[str] = Field(default_factory=list)


class ValuePatterns(BaseTCOModel):
    """Where high-value conversions come from."""

    seasonal_patterns: dict[str, ValueBucket] = Field(default_factory=dict)
    day_of_week_patterns: DayOfWeekPatterns = Field(default_factory=DayOfWeekPatterns)
    time_of_day_patterns: TimeOfDayPatterns = Field(default_factory=TimeOfDayPatterns)
    device_patterns: DevicePatterns = Field(default_factory=DevicePatterns)
    audience_patterns: AudiencePatterns = Field(default_factory=AudiencePatterns)
    keyword_patterns: KeywordPatterns = Field(default_factory=KeywordPatterns)


class ConversionValueOptimization(TimestampedModel):
    """Result of a conversion value optimization run."""

    campaign_id: str
    current_metrics: ConversionValueMetrics
    value_optimization: ValuePatterns
    recommendations: list[Recommendation] = Field(default_factory=list)
    confidence_score: float = Field(default=0, ge=0, le=1)


# ============================================================================
# Audience insights
# ============================================================================


class AudiencePerformance(AudienceRecord):
    """Audience record enriched with derived metrics."""

    roas: float = 0
    conversion_rate: float = 0
    cost_per_conversion: float = 0
    performance_score: float = 0


class AudienceMetrics(BaseTCOModel):
    total_audiences: int = 0
    avg_roas: float = 0
    avg_conversion_rate: float = 0
    total_impressions: float = 0
    total_conversions: float = 0
    total_value: float = 0


class DemographicSegment(BaseTCOModel):
    segment: str
    conversion_rate: float


class DemographicInsights(BaseTCOModel):
    top_demographic: str | None = None
    poor_performing_demographics: list[DemographicSegment] = Field(
        default_factory=list
    )


class BehavioralInsights(BaseTCOModel):
    top_behaviors: list[str] = Field(default_factory=list)
    engagement_patterns: dict[str, float] = Field(
        default_factory=dict, description="Click-through rate per behavior segment"
    )


class InterestInsights(BaseTCOModel):
    top_interests: list[str] = Field(default_factory=list)
    interest_performance: dict[str, float] = Field(
        default_factory=dict, description="Performance score per interest segment"
    )


class AudienceAnalysis(BaseTCOModel):
    top_performing_audiences: list[AudiencePerformance] = Field(default_factory=list)
    underperforming_audiences: list[AudiencePerformance] = Field(default_factory=list)
    audience_metrics: AudienceMetrics = Field(default_factory=AudienceMetrics)
    demographic_insights: DemographicInsights = Field(
        default_factory=DemographicInsights
    )
    behavioral_insights: BehavioralInsights = Field(default_factory=BehavioralInsights)
    interest_insights: InterestInsights = Field(default_factory=InterestInsights)


class ExpansionOpportunity(BaseTCOModel):
    type: str
    title: str
    description: str
    potential_reach: str
    expected_performance: str


class ExclusionRecommendation(BaseTCOModel):
    type: str
    audience_id: str | None = None
    audience_name: str | None = None
    demographic: str | None = None
    reason: str
    recommendation: str


class AudienceInsights(TimestampedModel):
    """Result of an audience insights run."""

    campaign_id: str
    audience_analysis: AudienceAnalysis
    targeting_recommendations: list[Recommendation] = Field(default_factory=list)
    expansion_opportunities: list[ExpansionOpportunity] = Field(default_factory=list)
    exclusion_recommendations: list[ExclusionRecommendation] = Field(
        default_factory=list
    )


# ============================================================================
# Bid recommendations
# ============================================================================


class OverallPerformance(BaseTCOModel):
    roas: float = 0
    conversion_rate: float = 0
    cost_per_conversion: float = 0
    avg_cpc: float = 0
    quality_score: float = 5


class KeywordPerformance(KeywordRecord):
    """Keyword record enriched with derived metrics."""

    roas: float = 0
    conversion_rate: float = 0
    cost_per_conversion: float = 0
    performance_score: float = 0


class DevicePerformance(BaseTCOModel):
    roas: float = 0
    conversion_rate: float = 0
    cost_per_conversion: float = 0


class KeywordAdjustment(BaseTCOModel):
    keyword: str
    current_bid: float
    recommended_adjustment: int = Field(..., description="Bid change in percent")
    new_bid: float
    reason: str
    priority: RecommendationPriority
    expected_impact: str


class DeviceAdjustment(BaseTCOModel):
    device: str
    current_adjustment: int = 0
    recommended_adjustment: int
    reason: str
    priority: RecommendationPriority
    expected_impact: str


class DimensionAdjustment(BaseTCOModel):
    """Bid change for a location, audience or hour relative to its group."""

    name: str
    performance: float
    group_average: float
    recommended_adjustment: int
    reason: str
    priority: RecommendationPriority = RecommendationPriority.MEDIUM


class BidAdjustments(BaseTCOModel):
    keywords: list[KeywordAdjustment] = Field(default_factory=list)
    devices: dict[str, DeviceAdjustment] = Field(default_factory=dict)
    locations: dict[str, DimensionAdjustment] = Field(default_factory=dict)
    audiences: dict[str, DimensionAdjustment] = Field(default_factory=dict)
    schedule: dict[int, DimensionAdjustment] = Field(default_factory=dict)


class ExpectedImpact(BaseTCOModel):
    estimated_cost_change: float = 0
    estimated_conversion_change: float = 0
    estimated_revenue_change: float = 0
    risk_level: RiskLevel = RiskLevel.LOW


class BidRecommendations(TimestampedModel):
    """Result of a bid recommendation run."""

    campaign_id: str
    current_bid_strategy: str = "unknown"
    overall_performance: OverallPerformance = Field(default_factory=OverallPerformance)
    keyword_performance: list[KeywordPerformance] = Field(default_factory=list)
    device_performance: dict[str, DevicePerformance] = Field(default_factory=dict)
    recommendations: list[Recommendation] = Field(default_factory=list)
    adjustments: BidAdjustments = Field(default_factory=BidAdjustments)
    expected_impact: ExpectedImpact = Field(default_factory=ExpectedImpact)
    confidence_level: float = Field(default=0, ge=0, le=1)


# ============================================================================
# Seasonal performance
# ============================================================================


class MonthlyBucket(BaseTCOModel):
    revenue: float = 0
    conversions: float = 0
    cost: float = 0


class MonthPerformance(BaseTCOModel):
    month: int = Field(..., ge=0, le=11)
    month_name: str
    performance: float
    revenue: float | None = None


class SeasonalPatterns(BaseTCOModel):
    has_seasonality: bool = False
    strong_seasonality: bool = False
    patterns: str = ""


class YearOverYearComparison(BaseTCOModel):
    available: bool = False
    message: str = ""
    current_year: int | None = None
    previous_year: int | None = None
    current_revenue: float = 0
    previous_revenue: float = 0
    change_percent: float = 0
    shared_months: list[int] = Field(default_factory=list)


class SeasonalTrends(BaseTCOModel):
    monthly_performance: dict[int, MonthlyBucket] = Field(default_factory=dict)
    seasonal_patterns: SeasonalPatterns = Field(default_factory=SeasonalPatterns)
    year_over_year_comparison: YearOverYearComparison = Field(
        default_factory=YearOverYearComparison
    )
    peak_seasons: list[MonthPerformance] = Field(default_factory=list)
    low_seasons: list[MonthPerformance] = Field(default_factory=list)


class TourSeasonality(BaseTCOModel):
    best_months: list[MonthPerformance] = Field(default_factory=list)
    worst_months: list[MonthPerformance] = Field(default_factory=list)
    seasonal_variation: float = Field(
        default=0, description="Coefficient of variation of monthly ROAS"
    )


class WeatherCorrelation(BaseTCOModel):
    available: bool = False
    message: str = ""


class SeasonalPrediction(BaseTCOModel):
    expected_revenue: float | None = None
    expected_bookings: float | None = None
    recommended_budget: float | None = None
    confidence: float | None = None
    demand_multiplier: float | None = None
    competition_level: str | None = None
    recommended_budget_change: float | None = None
    top_tours: list[str] | None = None


class SeasonalPredictions(BaseTCOModel):
    next_month: SeasonalPrediction | None = None
    next_quarter: SeasonalPrediction | None = None
    next_season: SeasonalPrediction | None = None


class SeasonalAnalysis(TimestampedModel):
    """Result of a seasonal performance tracking run."""

    campaign_id: str | None = None
    date_range: str
    tour_types: list[str] = Field(default_factory=lambda: ["all"])
    records_analyzed: int = 0
    seasonal_trends: SeasonalTrends = Field(default_factory=SeasonalTrends)
    tour_type_seasonality: dict[str, TourSeasonality] = Field(default_factory=dict)
    weather_correlation: WeatherCorrelation | None = None
    predictions: SeasonalPredictions | None = None
    recommendations: list[Recommendation] = Field(default_factory=list)


# ============================================================================
# Optimization history
# ============================================================================


class OptimizationHistoryEntry(BaseTCOModel):
    """One stored optimization run. Entries are never mutated after creation."""

    model_config = {**BaseTCOModel.model_config, "frozen": True}

    campaign_id: str | None = None
    type: OptimizationType
    timestamp: datetime = Field(default_factory=utc_now)
    payload: dict[str, Any] = Field(default_factory=dict)

    @field_serializer("timestamp")
    def serialize_timestamp(self, dt: datetime) -> str:
        return dt.isoformat()


class OptimizationSummary(BaseTCOModel):
    total_optimizations: int = 0
    conversion_optimizations: int = 0
    audience_optimizations: int = 0
    seasonal_optimizations: int = 0
    bid_optimizations: int = 0
    last_week_optimizations: int = 0
    message: str | None = None


class OptimizationReport(BaseTCOModel):
    """Aggregated optimization history of a campaign."""

    campaign_id: str
    last_optimized: datetime | None = None
    optimization_count: int = 0
    optimization_types: list[str] = Field(default_factory=list)
    history: list[OptimizationHistoryEntry] = Field(default_factory=list)
    summary: OptimizationSummary = Field(default_factory=OptimizationSummary)

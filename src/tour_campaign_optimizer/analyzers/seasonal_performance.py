"""Seasonal performance tracker.

Groups historical per-tour performance by calendar month, ranks months by
ROAS, and projects the coming month, quarter and season from the history
and the fixed Kyoto seasonal factors. Predictions apply a flat growth
assumption; there is no trend regression.
"""

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable
from datetime import datetime

from tour_campaign_optimizer.analyzers.base import BaseAnalyzer
from tour_campaign_optimizer.constants import (
    SEASONAL_FACTORS,
    OptimizationType,
    get_month_name,
    get_season_for_month,
)
from tour_campaign_optimizer.core.config import OptimizationThresholds
from tour_campaign_optimizer.core.exceptions import (
    CampaignOptimizerError,
    DataProviderError,
)
from tour_campaign_optimizer.data_providers.base import PerformanceDataProvider
from tour_campaign_optimizer.data_providers.mock_provider import (
    MockPerformanceProvider,
)
from tour_campaign_optimizer.models.analysis import (
    Recommendation,
    RecommendationPriority,
    RecommendationType,
)
from tour_campaign_optimizer.models.campaign import TourPerformanceRecord
from tour_campaign_optimizer.models.results import (
    MonthlyBucket,
    MonthPerformance,
    SeasonalAnalysis,
    SeasonalPatterns,
    SeasonalPrediction,
    SeasonalPredictions,
    SeasonalTrends,
    TourSeasonality,
    WeatherCorrelation,
    YearOverYearComparison,
)
from tour_campaign_optimizer.utils.metrics import (
    calculate_percentage_change,
    calculate_roas,
    calculate_standard_deviation,
    safe_mean,
)

logger = logging.getLogger(__name__)

PEAK_SEASON_COUNT = 3
BEST_TOUR_MONTHS = 3
WORST_TOUR_MONTHS = 2

# Flat growth applied to last year's figures
GROWTH_ASSUMPTION = 1.1
BUDGET_GROWTH = 1.15
NEXT_MONTH_CONFIDENCE = 0.75
NEXT_QUARTER_CONFIDENCE = 0.65
NEXT_SEASON_CONFIDENCE = 0.85

PEAK_DEMAND_MULTIPLIER = 1.3
SEASONALITY_MONTHS = 6
STRONG_SEASONALITY_MONTHS = 9

NO_YOY_MESSAGE = "Requires multiple years of data for comparison"
NO_WEATHER_MESSAGE = "Weather data integration not implemented"


class SeasonalPerformanceTracker(BaseAnalyzer):
    """Track seasonal booking patterns across tour types."""

    optimization_type = OptimizationType.SEASONAL_TRACKING

    def __init__(
        self,
        provider: PerformanceDataProvider | None = None,
        thresholds: OptimizationThresholds | None = None,
        clock: Callable[[], datetime] | None = None,
        currency: str = "JPY",
    ):
        """Initialize the tracker.

        Args:
            provider: Source of historical per-tour performance
            thresholds: Rule thresholds
            clock: Returns the current time, injectable for tests
            currency: Account currency used in recommendation text
        """
        super().__init__(thresholds=thresholds, clock=clock, currency=currency)
        self.provider = (
            provider if provider is not None else MockPerformanceProvider(clock=self.clock)
        )
        self._latest: SeasonalAnalysis | None = None

    @property
    def latest_analysis(self) -> SeasonalAnalysis | None:
        """The most recent analysis produced by this tracker."""
        return self._latest

    async def track_performance(
        self,
        date_range: str = "last365days",
        tour_types: list[str] | None = None,
        include_weather_data: bool = False,
        include_predictions: bool = True,
        campaign_id: str | None = None,
    ) -> SeasonalAnalysis:
        return await self.analyze(
            date_range=date_range,
            tour_types=tour_types,
            include_weather_data=include_weather_data,
            include_predictions=include_predictions,
            campaign_id=campaign_id,
        )

    async def analyze(
        self,
        date_range: str = "last365days",
        tour_types: list[str] | None = None,
        include_weather_data: bool = False,
        include_predictions: bool = True,
        campaign_id: str | None = None,
    ) -> SeasonalAnalysis:
        """Analyze seasonal performance over a date range.

        Args:
            date_range: ``lastNdays`` or ``all``
            tour_types: Tour types to include, defaults to all
            include_weather_data: Attach the weather correlation section
            include_predictions: Attach next month/quarter/season predictions
            campaign_id: Campaign the analysis is recorded against, if any

        Returns:
            SeasonalAnalysis with trends, per-tour seasonality and recommendations

        Raises:
            DataProviderError: If historical records cannot be fetched
        """
        tour_types = tour_types or ["all"]
        logger.info(
            f"Tracking seasonal performance for {date_range} "
            f"(tour types: {', '.join(tour_types)})"
        )

        records = await self._fetch_records(date_range, tour_types)

        trends = self._analyze_seasonal_trends(records)
        seasonality = self._analyze_tour_type_seasonality(records)

        analysis = SeasonalAnalysis(
            timestamp=self.clock(),
            campaign_id=campaign_id,
            date_range=date_range,
            tour_types=tour_types,
            records_analyzed=len(records),
            seasonal_trends=trends,
            tour_type_seasonality=seasonality,
        )

        if include_weather_data:
            analysis.weather_correlation = self._analyze_weather_correlation(records)

        if include_predictions:
            analysis.predictions = self._generate_predictions(trends)

        analysis.recommendations = self._generate_recommendations(seasonality)

        self._latest = analysis
        logger.info(
            f"Seasonal analysis complete: {len(records)} records, "
            f"{len(trends.monthly_performance)} months, "
            f"{len(analysis.recommendations)} recommendations"
        )
        return analysis

    async def _fetch_records(
        self, date_range: str, tour_types: list[str]
    ) -> list[TourPerformanceRecord]:
        try:
            return await self.provider.get_tour_performance(
                date_range=date_range, tour_types=tour_types
            )
        except CampaignOptimizerError:
            raise
        except Exception as e:
            logger.error(f"Failed to fetch tour performance: {e}", exc_info=True)
            raise DataProviderError(f"Failed to fetch tour performance: {e}") from e

    def _record_month(self, record: TourPerformanceRecord) -> int:
        if record.timestamp is None:
            return self._current_month()
        return record.timestamp.month - 1

    def _group_by_month(
        self, records: Iterable[TourPerformanceRecord]
    ) -> dict[int, MonthlyBucket]:
        monthly: dict[int, MonthlyBucket] = {}
        for record in records:
            bucket = monthly.setdefault(self._record_month(record), MonthlyBucket())
            bucket.revenue += record.revenue
            bucket.conversions += record.conversions
            bucket.cost += record.cost
        return dict(sorted(monthly.items()))

    def _rank_months(self, monthly: dict[int, MonthlyBucket]) -> list[MonthPerformance]:
        """Months ordered by ROAS, best first. Ties keep calendar order."""
        ranked = [
            MonthPerformance(
                month=month,
                month_name=get_month_name(month),
                performance=calculate_roas(bucket.revenue, bucket.cost),
                revenue=bucket.revenue,
            )
            for month, bucket in monthly.items()
        ]
        ranked.sort(key=lambda item: item.performance, reverse=True)
        return ranked

    def _analyze_seasonal_trends(
        self, records: list[TourPerformanceRecord]
    ) -> SeasonalTrends:
        if not records:
            return SeasonalTrends(
                year_over_year_comparison=YearOverYearComparison(message=NO_YOY_MESSAGE)
            )

        monthly = self._group_by_month(records)
        ranked = self._rank_months(monthly)
        peaks = ranked[:PEAK_SEASON_COUNT]

        return SeasonalTrends(
            monthly_performance=monthly,
            seasonal_patterns=self._identify_patterns(monthly, peaks),
            year_over_year_comparison=self._compare_year_over_year(records),
            peak_seasons=peaks,
            low_seasons=ranked[-PEAK_SEASON_COUNT:],
        )

    def _identify_patterns(
        self, monthly: dict[int, MonthlyBucket], peaks: list[MonthPerformance]
    ) -> SeasonalPatterns:
        seasons = []
        for peak in peaks:
            season = get_season_for_month(peak.month)
            if season not in seasons:
                seasons.append(season)

        patterns = ""
        if peaks:
            patterns = (
                f"Highest ROAS in {', '.join(peak.month_name for peak in peaks)} "
                f"({' and '.join(seasons)})"
            )

        return SeasonalPatterns(
            has_seasonality=len(monthly) > SEASONALITY_MONTHS,
            strong_seasonality=len(monthly) > STRONG_SEASONALITY_MONTHS,
            patterns=patterns,
        )

    def _compare_year_over_year(
        self, records: list[TourPerformanceRecord]
    ) -> YearOverYearComparison:
        """Compare revenue of the latest year with the year before it.

        Only months present in both years are compared, so a partial current
        year is not measured against a full previous one.
        """
        by_year: dict[int, dict[int, float]] = defaultdict(lambda: defaultdict(float))
        for record in records:
            if record.timestamp is not None:
                by_year[record.timestamp.year][record.timestamp.month - 1] += (
                    record.revenue
                )

        if len(by_year) < 2:
            return YearOverYearComparison(message=NO_YOY_MESSAGE)

        current_year = max(by_year)
        previous_year = current_year - 1
        if previous_year not in by_year:
            return YearOverYearComparison(
                message=f"No data for {previous_year} to compare with {current_year}"
            )

        shared = sorted(set(by_year[current_year]) & set(by_year[previous_year]))
        if not shared:
            return YearOverYearComparison(
                current_year=current_year,
                previous_year=previous_year,
                message=f"No overlapping months between {previous_year} and {current_year}",
            )

        current_revenue = sum(by_year[current_year][month] for month in shared)
        previous_revenue = sum(by_year[previous_year][month] for month in shared)
        change = calculate_percentage_change(previous_revenue, current_revenue)
        return YearOverYearComparison(
            available=True,
            message=(
                f"Revenue {change:+.1f}% versus {previous_year} "
                f"over {len(shared)} shared months"
            ),
            current_year=current_year,
            previous_year=previous_year,
            current_revenue=current_revenue,
            previous_revenue=previous_revenue,
            change_percent=change,
            shared_months=shared,
        )

    def _analyze_tour_type_seasonality(
        self, records: list[TourPerformanceRecord]
    ) -> dict[str, TourSeasonality]:
        by_type: dict[str, list[TourPerformanceRecord]] = defaultdict(list)
        for record in records:
            by_type[record.tour_type].append(record)

        seasonality = {}
        for tour_type, tour_records in by_type.items():
            ranked = self._rank_months(self._group_by_month(tour_records))
            # Per-tour months report performance only
            ranked = [month.model_copy(update={"revenue": None}) for month in ranked]
            seasonality[tour_type] = TourSeasonality(
                best_months=ranked[:BEST_TOUR_MONTHS],
                worst_months=ranked[-WORST_TOUR_MONTHS:],
                seasonal_variation=self._seasonal_variation(
                    [month.performance for month in ranked]
                ),
            )
        return seasonality

    @staticmethod
    def _seasonal_variation(performances: list[float]) -> float:
        """Coefficient of variation, 0 below two months or for a zero mean."""
        if len(performances) < 2:
            return 0
        mean = safe_mean(performances)
        if mean <= 0:
            return 0
        return calculate_standard_deviation(performances) / mean

    def _analyze_weather_correlation(
        self, records: list[TourPerformanceRecord]
    ) -> WeatherCorrelation:
        # No weather source is wired in
        return WeatherCorrelation(available=False, message=NO_WEATHER_MESSAGE)

    def _generate_predictions(self, trends: SeasonalTrends) -> SeasonalPredictions:
        monthly = trends.monthly_performance
        current_month = self._current_month()
        next_month = (current_month + 1) % 12
        predictions = SeasonalPredictions()

        if next_month in monthly:
            history = monthly[next_month]
            predictions.next_month = SeasonalPrediction(
                expected_revenue=history.revenue * GROWTH_ASSUMPTION,
                expected_bookings=history.conversions * GROWTH_ASSUMPTION,
                recommended_budget=history.cost * BUDGET_GROWTH,
                confidence=NEXT_MONTH_CONFIDENCE,
            )

        quarter = [
            monthly[month]
            for month in ((current_month + offset) % 12 for offset in (1, 2, 3))
            if month in monthly
        ]
        if quarter:
            predictions.next_quarter = SeasonalPrediction(
                expected_revenue=sum(b.revenue for b in quarter) * GROWTH_ASSUMPTION,
                expected_bookings=sum(b.conversions for b in quarter)
                * GROWTH_ASSUMPTION,
                recommended_budget=sum(b.cost for b in quarter) * BUDGET_GROWTH,
                confidence=NEXT_QUARTER_CONFIDENCE,
            )

        season = SEASONAL_FACTORS[get_season_for_month(next_month)]
        predictions.next_season = SeasonalPrediction(
            demand_multiplier=season.demand_multiplier,
            competition_level=season.competition_level.value,
            recommended_budget_change=season.recommended_budget_increase,
            top_tours=list(season.top_tours),
            confidence=NEXT_SEASON_CONFIDENCE,
        )
        return predictions

    def _generate_recommendations(
        self, seasonality: dict[str, TourSeasonality]
    ) -> list[Recommendation]:
        recommendations = []
        current_month = self._current_month()
        season_name, season = self._current_season()

        recommendations.append(
            Recommendation(
                type=RecommendationType.SEASONAL_BUDGET_ADJUSTMENT,
                priority=RecommendationPriority.HIGH,
                title=f"{season_name.capitalize()} Season Strategy",
                description=(
                    f"Current season has {season.demand_multiplier}x demand "
                    f"multiplier with {season.competition_level.value} competition"
                ),
                action=(
                    f"Adjust budgets by {season.recommended_budget_increase * 100:.0f}% "
                    f"and focus on {', '.join(season.top_tours)} tours"
                ),
                expected_impact=(
                    f"Potential {season.demand_multiplier * 15:.0f}% increase in bookings"
                ),
            )
        )

        upcoming_name = get_season_for_month((current_month + 1) % 12)
        if SEASONAL_FACTORS[upcoming_name].demand_multiplier > PEAK_DEMAND_MULTIPLIER:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.PEAK_SEASON_PREPARATION,
                    priority=RecommendationPriority.MEDIUM,
                    title="Prepare for Upcoming Peak Season",
                    description=f"{upcoming_name} season approaching with high demand expected",
                    action="Increase budget caps and prepare additional ad creative for peak season",
                    expected_impact="Avoid missing opportunities during high-demand periods",
                )
            )

        for tour_type, data in seasonality.items():
            if any(month.month == current_month for month in data.best_months):
                recommendations.append(
                    Recommendation(
                        type=RecommendationType.TOUR_SEASONAL_FOCUS,
                        priority=RecommendationPriority.MEDIUM,
                        title=f"{tour_type.capitalize()} Tour Peak Season",
                        description=f"{tour_type} tours perform exceptionally well this month",
                        action=f"Increase {tour_type} tour promotion and budget allocation",
                        expected_impact="Maximize revenue during optimal performance period",
                    )
                )

        if season.demand_multiplier < 1.0:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.LOW_SEASON_OPTIMIZATION,
                    priority=RecommendationPriority.MEDIUM,
                    title="Low Season Cost Optimization",
                    description=(
                        "Current low season provides opportunity for "
                        "cost-efficient customer acquisition"
                    ),
                    action="Focus on long-term value customers and test new targeting strategies",
                    expected_impact="Build customer base efficiently during low-competition periods",
                )
            )

        return recommendations

"""Campaign optimization coordinator.

Validates campaign snapshots, runs the analyzers and keeps a history of
every optimization per campaign.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, ValidationError

from tour_campaign_optimizer.analyzers import (
    AudienceInsightsGenerator,
    BidRecommendationEngine,
    ConversionValueOptimizer,
    SeasonalPerformanceTracker,
)
from tour_campaign_optimizer.constants import (
    MAX_REPORT_HISTORY,
    SEASONAL_SCOPE,
    OptimizationType,
)
from tour_campaign_optimizer.core.config import Settings, get_settings
from tour_campaign_optimizer.core.exceptions import InvalidCampaignDataError
from tour_campaign_optimizer.data_providers import PerformanceDataProvider
from tour_campaign_optimizer.models.base import utc_now
from tour_campaign_optimizer.models.campaign import CampaignData
from tour_campaign_optimizer.models.results import (
    AudienceInsights,
    BidRecommendations,
    ConversionValueOptimization,
    OptimizationHistoryEntry,
    OptimizationReport,
    OptimizationSummary,
    SeasonalAnalysis,
)
from tour_campaign_optimizer.storage import HistoryStore, InMemoryHistoryStore

logger = logging.getLogger(__name__)

NO_HISTORY_MESSAGE = "No optimization history available"
RECENT_WINDOW = timedelta(days=7)


class CampaignOptimizer:
    """Entry point for campaign optimization.

    Every successful run is appended to the history store under its
    campaign id. Seasonal runs without a campaign id are stored under
    ``SEASONAL_SCOPE``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        history_store: HistoryStore | None = None,
        performance_provider: PerformanceDataProvider | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the optimizer.

        Args:
            settings: Application settings (defaults to get_settings())
            history_store: Where optimization runs are recorded
            performance_provider: Source of historical tour performance
            clock: Returns the current time, injectable for tests
        """
        self.settings = settings or get_settings()
        self.history_store = (
            history_store if history_store is not None else InMemoryHistoryStore()
        )
        self.clock = clock or utc_now

        thresholds = self.settings.thresholds
        currency = self.settings.currency
        self.conversion_value_optimizer = ConversionValueOptimizer(
            thresholds=thresholds, clock=self.clock, currency=currency
        )
        self.audience_insights_generator = AudienceInsightsGenerator(
            thresholds=thresholds, clock=self.clock, currency=currency
        )
        self.bid_recommendation_engine = BidRecommendationEngine(
            thresholds=thresholds,
            impact=self.settings.impact,
            clock=self.clock,
            currency=currency,
        )
        self.seasonal_tracker = SeasonalPerformanceTracker(
            provider=performance_provider,
            thresholds=thresholds,
            clock=self.clock,
            currency=currency,
        )

    def _validate(self, campaign_data: CampaignData | Mapping[str, Any]) -> CampaignData:
        """Coerce input into a CampaignData snapshot.

        Raises:
            InvalidCampaignDataError: If the data fails validation
        """
        if isinstance(campaign_data, CampaignData):
            return campaign_data
        try:
            return CampaignData.model_validate(campaign_data)
        except ValidationError as e:
            raise InvalidCampaignDataError(
                f"Invalid campaign data: {e.error_count()} validation error(s)",
                issues=e.errors(include_url=False, include_context=False),
            ) from e

    def _record(
        self, key: str, optimization_type: OptimizationType, result: BaseModel
    ) -> None:
        entry = OptimizationHistoryEntry(
            campaign_id=key,
            type=optimization_type,
            timestamp=self.clock(),
            payload=result.model_dump(mode="json"),
        )
        self.history_store.append(key, entry)

    async def optimize_conversion_value(
        self, campaign_data: CampaignData | Mapping[str, Any]
    ) -> ConversionValueOptimization:
        """Analyze booking value and recommend value-focused changes."""
        try:
            campaign = self._validate(campaign_data)
            result = await self.conversion_value_optimizer.optimize(campaign)
            self._record(campaign.campaign_id, OptimizationType.CONVERSION_VALUE, result)
            return result
        except Exception as e:
            logger.error(f"Conversion value optimization error: {e}", exc_info=True)
            raise

    async def generate_audience_insights(
        self, campaign_data: CampaignData | Mapping[str, Any]
    ) -> AudienceInsights:
        """Rank audiences and recommend targeting changes."""
        try:
            campaign = self._validate(campaign_data)
            result = await self.audience_insights_generator.generate_insights(campaign)
            self._record(
                campaign.campaign_id, OptimizationType.AUDIENCE_INSIGHTS, result
            )
            return result
        except Exception as e:
            logger.error(f"Audience insights error: {e}", exc_info=True)
            raise

    async def track_seasonal_performance(
        self,
        date_range: str = "last365days",
        tour_types: list[str] | None = None,
        include_weather_data: bool = False,
        include_predictions: bool = True,
        campaign_id: str | None = None,
    ) -> SeasonalAnalysis:
        """Analyze seasonal booking patterns from historical performance."""
        try:
            result = await self.seasonal_tracker.track_performance(
                date_range=date_range,
                tour_types=tour_types,
                include_weather_data=include_weather_data,
                include_predictions=include_predictions,
                campaign_id=campaign_id,
            )
            self._record(
                campaign_id or SEASONAL_SCOPE, OptimizationType.SEASONAL_TRACKING, result
            )
            return result
        except Exception as e:
            logger.error(f"Seasonal tracking error: {e}", exc_info=True)
            raise

    async def generate_bid_recommendations(
        self, campaign_data: CampaignData | Mapping[str, Any]
    ) -> BidRecommendations:
        """Recommend keyword, device and dimension bid adjustments."""
        try:
            campaign = self._validate(campaign_data)
            result = await self.bid_recommendation_engine.generate_recommendations(
                campaign
            )
            self._record(
                campaign.campaign_id, OptimizationType.BID_RECOMMENDATIONS, result
            )
            return result
        except Exception as e:
            logger.error(f"Bid recommendations error: {e}", exc_info=True)
            raise

    def get_optimization_history(self, campaign_id: str) -> list[OptimizationHistoryEntry]:
        """Entries recorded for exactly this campaign id, newest first."""
        entries = self.history_store.get(campaign_id)
        # Reversed first so entries sharing a timestamp also come out newest first
        return sorted(reversed(entries), key=lambda entry: entry.timestamp, reverse=True)

    async def get_optimization_report(self, campaign_id: str) -> OptimizationReport:
        """Summarize the optimization history of a campaign."""
        history = self.get_optimization_history(campaign_id)
        types = list(dict.fromkeys(entry.type for entry in history))
        return OptimizationReport(
            campaign_id=campaign_id,
            last_optimized=history[0].timestamp if history else None,
            optimization_count=len(history),
            optimization_types=types,
            history=history[:MAX_REPORT_HISTORY],
            summary=self._summarize(history),
        )

    def _summarize(self, history: list[OptimizationHistoryEntry]) -> OptimizationSummary:
        if not history:
            return OptimizationSummary(message=NO_HISTORY_MESSAGE)

        def count(optimization_type: OptimizationType) -> int:
            return sum(1 for entry in history if entry.type == optimization_type.value)

        week_ago = self.clock() - RECENT_WINDOW
        return OptimizationSummary(
            total_optimizations=len(history),
            conversion_optimizations=count(OptimizationType.CONVERSION_VALUE),
            audience_optimizations=count(OptimizationType.AUDIENCE_INSIGHTS),
            seasonal_optimizations=count(OptimizationType.SEASONAL_TRACKING),
            bid_optimizations=count(OptimizationType.BID_RECOMMENDATIONS),
            last_week_optimizations=sum(
                1 for entry in history if entry.timestamp > week_ago
            ),
        )

    def clear_history(self, campaign_id: str | None = None) -> None:
        """Drop the history of one campaign, or all history when None."""
        self.history_store.clear(campaign_id)

"""Base analyzer class for the campaign optimizer."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from tour_campaign_optimizer.constants import (
    SEASONAL_FACTORS,
    OptimizationType,
    SeasonalFactor,
    get_season_for_month,
)
from tour_campaign_optimizer.core.config import OptimizationThresholds
from tour_campaign_optimizer.models.base import utc_now
from tour_campaign_optimizer.utils.metrics import format_currency


class BaseAnalyzer(ABC):
    """Base class for all analyzers.

    Analyzers are stateless: each call derives metrics from its input and
    applies fixed threshold rules to build a list of recommendations.
    """

    optimization_type: OptimizationType

    def __init__(
        self,
        thresholds: OptimizationThresholds | None = None,
        clock: Callable[[], datetime] | None = None,
        currency: str = "JPY",
    ):
        """Initialize the analyzer.

        Args:
            thresholds: Rule thresholds (defaults to OptimizationThresholds())
            clock: Returns the current time, injectable for tests
            currency: Account currency used in recommendation text
        """
        self.thresholds = thresholds or OptimizationThresholds()
        self.clock = clock or utc_now
        self.currency = currency

    @abstractmethod
    async def analyze(self, *args: Any, **kwargs: Any) -> BaseModel:
        """Run the analysis and return its result model."""
        pass

    def _current_month(self) -> int:
        """Zero-based month index of the injected clock."""
        return self.clock().month - 1

    def _current_season(self) -> tuple[str, SeasonalFactor]:
        season = get_season_for_month(self._current_month())
        return season, SEASONAL_FACTORS[season]

    def _format_currency(self, amount: float) -> str:
        return format_currency(amount, self.currency)

"""Bid recommendation engine.

Turns keyword, device, location, audience and hour-of-day performance into
percentage bid adjustments and estimates their combined impact.
"""

import logging
from collections.abc import Callable, Mapping
from datetime import datetime

from tour_campaign_optimizer.analyzers.base import BaseAnalyzer
from tour_campaign_optimizer.constants import OptimizationType
from tour_campaign_optimizer.core.config import ImpactModel, OptimizationThresholds
from tour_campaign_optimizer.models.analysis import (
    Recommendation,
    RecommendationPriority,
    RecommendationType,
    priority_for_adjustment,
)
from tour_campaign_optimizer.models.campaign import CampaignData, KeywordRecord
from tour_campaign_optimizer.models.results import (
    BidAdjustments,
    BidRecommendations,
    DeviceAdjustment,
    DevicePerformance,
    DimensionAdjustment,
    ExpectedImpact,
    KeywordAdjustment,
    KeywordPerformance,
    OverallPerformance,
    RiskLevel,
)
from tour_campaign_optimizer.utils.metrics import (
    calculate_confidence_score,
    calculate_conversion_rate,
    calculate_cost_per_conversion,
    calculate_roas,
    safe_mean,
)

logger = logging.getLogger(__name__)

# Impressions at which the keyword volume component is maxed out
KEYWORD_VOLUME_NORMALIZER = 1000

# Spend above which a loss-making keyword gets the deepest cut
HIGH_SPEND_THRESHOLD = 5000

DEFAULT_QUALITY_SCORE = 5
LOW_QUALITY_SCORE = 6

DIMENSION_ADJUSTMENT = 10


class BidRecommendationEngine(BaseAnalyzer):
    """Recommend bid adjustments from campaign performance."""

    optimization_type = OptimizationType.BID_RECOMMENDATIONS

    def __init__(
        self,
        thresholds: OptimizationThresholds | None = None,
        impact: ImpactModel | None = None,
        clock: Callable[[], datetime] | None = None,
        currency: str = "JPY",
    ):
        super().__init__(thresholds=thresholds, clock=clock, currency=currency)
        self.impact = impact or ImpactModel()

    async def generate_recommendations(
        self, campaign_data: CampaignData
    ) -> BidRecommendations:
        return await self.analyze(campaign_data)

    async def analyze(self, campaign_data: CampaignData) -> BidRecommendations:
        """Generate bid recommendations for a campaign.

        Args:
            campaign_data: Snapshot with aggregate, keyword and device metrics

        Returns:
            Per-dimension adjustments, expected impact and overall advice
        """
        logger.info(
            f"Generating bid recommendations for campaign {campaign_data.campaign_id} "
            f"({len(campaign_data.keywords)} keywords, "
            f"{len(campaign_data.device_breakdown)} devices)"
        )
        overall = self._analyze_overall_performance(campaign_data)
        device_performance = self._analyze_device_performance(campaign_data)

        adjustments = BidAdjustments(
            keywords=self._generate_keyword_adjustments(campaign_data.keywords),
            devices=self._generate_device_adjustments(device_performance),
            locations=self._generate_dimension_adjustments(
                {loc.location: loc.performance for loc in campaign_data.location_data},
                "location",
            ),
            audiences=self._generate_dimension_adjustments(
                {
                    audience.name: (
                        audience.performance
                        if audience.performance is not None
                        else calculate_roas(audience.conversion_value, audience.cost)
                    )
                    for audience in campaign_data.audience_data
                },
                "audience",
            ),
            schedule=self._generate_dimension_adjustments(
                {slot.hour: slot.performance for slot in campaign_data.time_data},
                "hour",
            ),
        )

        result = BidRecommendations(
            campaign_id=campaign_data.campaign_id,
            timestamp=self.clock(),
            current_bid_strategy=campaign_data.bid_strategy or "unknown",
            overall_performance=overall,
            keyword_performance=[
                self._score_keyword(keyword) for keyword in campaign_data.keywords
            ],
            device_performance=device_performance,
            adjustments=adjustments,
            expected_impact=self._calculate_expected_impact(adjustments),
            recommendations=self._generate_overall_recommendations(
                overall, adjustments
            ),
            confidence_level=calculate_confidence_score(
                campaign_data, self.thresholds, now=self.clock()
            ),
        )
        logger.info(
            f"Recommended {len(adjustments.keywords)} keyword and "
            f"{len(adjustments.devices)} device bid adjustments"
        )
        return result

    def _analyze_overall_performance(
        self, campaign_data: CampaignData
    ) -> OverallPerformance:
        conversions = campaign_data.conversion_count
        return OverallPerformance(
            roas=calculate_roas(campaign_data.conversion_value, campaign_data.cost),
            conversion_rate=calculate_conversion_rate(conversions, campaign_data.clicks),
            cost_per_conversion=calculate_cost_per_conversion(
                campaign_data.cost, conversions
            ),
            avg_cpc=(
                campaign_data.cost / campaign_data.clicks
                if campaign_data.clicks > 0
                else 0
            ),
            quality_score=(
                campaign_data.avg_quality_score
                if campaign_data.avg_quality_score is not None
                else DEFAULT_QUALITY_SCORE
            ),
        )

    def calculate_keyword_performance_score(self, keyword: KeywordRecord) -> float:
        """Weighted score out of 100: ROAS 50, conversion rate 30, volume 20."""
        roas = calculate_roas(keyword.conversion_value, keyword.cost)
        conversion_rate = calculate_conversion_rate(keyword.conversions, keyword.clicks)

        roas_score = min(roas / self.thresholds.roas_target * 50, 50)
        conversion_score = min(
            conversion_rate / self.thresholds.conversion_rate_target * 30, 30
        )
        volume_score = min(keyword.impressions / KEYWORD_VOLUME_NORMALIZER * 20, 20)
        return roas_score + conversion_score + volume_score

    def _score_keyword(self, keyword: KeywordRecord) -> KeywordPerformance:
        return KeywordPerformance(
            **keyword.model_dump(),
            roas=calculate_roas(keyword.conversion_value, keyword.cost),
            conversion_rate=calculate_conversion_rate(
                keyword.conversions, keyword.clicks
            ),
            cost_per_conversion=calculate_cost_per_conversion(
                keyword.cost, keyword.conversions
            ),
            performance_score=self.calculate_keyword_performance_score(keyword),
        )

    def _analyze_device_performance(
        self, campaign_data: CampaignData
    ) -> dict[str, DevicePerformance]:
        return {
            device: DevicePerformance(
                roas=calculate_roas(data.conversion_value, data.cost),
                conversion_rate=calculate_conversion_rate(data.conversions, data.clicks),
                cost_per_conversion=calculate_cost_per_conversion(
                    data.cost, data.conversions
                ),
            )
            for device, data in campaign_data.device_breakdown.items()
        }

    def keyword_adjustment(self, keyword: KeywordRecord) -> tuple[int, str]:
        """Pick the bid change for a keyword; the first matching rule wins.

        Returns:
            Adjustment in percent (0 when no rule matches) and the reason
        """
        target = self.thresholds.roas_target
        roas = calculate_roas(keyword.conversion_value, keyword.cost)

        if roas > target * 1.5 and keyword.conversions >= 3:
            return 25, f"Excellent ROAS of {roas:.2f}:1"
        if roas > target and keyword.conversions >= 2:
            return 15, f"Good ROAS of {roas:.2f}:1"
        if roas < 1 and keyword.cost > HIGH_SPEND_THRESHOLD:
            return -50, f"Poor ROAS of {roas:.2f}:1"
        if roas < target * 0.5:
            return -25, f"Below target ROAS of {roas:.2f}:1"
        return 0, ""

    def _generate_keyword_adjustments(
        self, keywords: list[KeywordRecord]
    ) -> list[KeywordAdjustment]:
        adjustments = []
        for keyword in keywords:
            adjustment, reason = self.keyword_adjustment(keyword)
            if adjustment == 0:
                continue
            logger.debug(
                f"Keyword '{keyword.keyword}' scored "
                f"{self.calculate_keyword_performance_score(keyword):.1f}, "
                f"adjusting bid {adjustment:+d}%"
            )
            adjustments.append(
                KeywordAdjustment(
                    keyword=keyword.keyword,
                    current_bid=keyword.avg_cpc,
                    recommended_adjustment=adjustment,
                    new_bid=keyword.avg_cpc * (1 + adjustment / 100),
                    reason=reason,
                    priority=priority_for_adjustment(adjustment, 20),
                    expected_impact=self._describe_keyword_impact(adjustment),
                )
            )
        return sorted(
            adjustments,
            key=lambda item: abs(item.recommended_adjustment),
            reverse=True,
        )

    def _describe_keyword_impact(self, adjustment: int) -> str:
        direction = "increase" if adjustment > 0 else "decrease"
        magnitude = abs(adjustment)
        if magnitude > 20:
            return f"Significant {direction} in impressions and clicks expected"
        if magnitude > 10:
            return f"Moderate {direction} in performance expected"
        return f"Minor {direction} in metrics expected"

    def _generate_device_adjustments(
        self, device_performance: dict[str, DevicePerformance]
    ) -> dict[str, DeviceAdjustment]:
        target = self.thresholds.roas_target
        adjustments = {}

        for device, performance in device_performance.items():
            roas = performance.roas
            if roas > target * 1.3:
                adjustment, reason = 20, f"Strong ROAS of {roas:.2f}:1 on {device}"
            elif roas > target:
                adjustment, reason = 10, f"Good ROAS of {roas:.2f}:1 on {device}"
            elif roas < target * 0.7:
                adjustment = -15
                reason = f"Below target ROAS of {roas:.2f}:1 on {device}"
            else:
                continue

            adjustments[device] = DeviceAdjustment(
                device=device,
                recommended_adjustment=adjustment,
                reason=reason,
                priority=priority_for_adjustment(adjustment, 15),
                expected_impact=f"{abs(adjustment)}% change in {device} performance",
            )
        return adjustments

    def _generate_dimension_adjustments(
        self, performance: Mapping, label: str
    ) -> dict:
        """Bid entries up or down when they stray from the group average."""
        if len(performance) < 2:
            return {}

        average = safe_mean(list(performance.values()))
        if average <= 0:
            return {}

        deviation = self.thresholds.performance_deviation
        adjustments = {}
        for name, value in performance.items():
            if value >= average * (1 + deviation):
                adjustment = DIMENSION_ADJUSTMENT
            elif value <= average * (1 - deviation):
                adjustment = -DIMENSION_ADJUSTMENT
            else:
                continue
            adjustments[name] = DimensionAdjustment(
                name=str(name),
                performance=value,
                group_average=average,
                recommended_adjustment=adjustment,
                reason=(
                    f"{label.capitalize()} {name} performs "
                    f"{value / average:.2f}x the group average"
                ),
            )
        return adjustments

    def _calculate_expected_impact(self, adjustments: BidAdjustments) -> ExpectedImpact:
        cost_change = 0.0
        if adjustments.keywords:
            cost_change += safe_mean(
                [abs(k.recommended_adjustment) for k in adjustments.keywords]
            )
        if adjustments.devices:
            cost_change += (
                safe_mean(
                    [abs(d.recommended_adjustment) for d in adjustments.devices.values()]
                )
                * self.impact.device_weight
            )

        conversion_change = cost_change * self.impact.conversion_efficiency
        revenue_change = conversion_change * self.impact.revenue_multiplier

        if cost_change > self.impact.high_risk_threshold:
            risk = RiskLevel.HIGH
        elif cost_change > self.impact.medium_risk_threshold:
            risk = RiskLevel.MEDIUM
        else:
            risk = RiskLevel.LOW

        return ExpectedImpact(
            estimated_cost_change=cost_change,
            estimated_conversion_change=conversion_change,
            estimated_revenue_change=revenue_change,
            risk_level=risk,
        )

    def _generate_overall_recommendations(
        self, overall: OverallPerformance, adjustments: BidAdjustments
    ) -> list[Recommendation]:
        recommendations = []

        if overall.roas > self.thresholds.roas_target * 1.5:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.INCREASE_BUDGET,
                    priority=RecommendationPriority.HIGH,
                    title="Increase Campaign Budget",
                    description=(
                        f"Excellent ROAS of {overall.roas:.2f}:1 indicates "
                        "opportunity for growth"
                    ),
                    action="Consider increasing daily budget by 30-50%",
                    expected_impact="Potential 25-40% increase in conversions",
                )
            )

        if overall.roas < 1:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.OPTIMIZE_TARGETING,
                    priority=RecommendationPriority.CRITICAL,
                    title="Critical Performance Issues",
                    description=f"ROAS of {overall.roas:.2f}:1 is below break-even",
                    action="Pause underperforming keywords and audiences immediately",
                    expected_impact="Stop losses and improve overall efficiency",
                )
            )

        high_priority = [
            k for k in adjustments.keywords if k.priority == RecommendationPriority.HIGH
        ]
        if high_priority:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.KEYWORD_OPTIMIZATION,
                    priority=RecommendationPriority.HIGH,
                    title="Critical Keyword Bid Adjustments",
                    description=(
                        f"{len(high_priority)} keywords need immediate bid adjustments"
                    ),
                    action="Implement recommended keyword bid changes",
                    expected_impact="Improve keyword-level ROAS by 15-30%",
                )
            )

        if adjustments.devices:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.DEVICE_OPTIMIZATION,
                    priority=RecommendationPriority.MEDIUM,
                    title="Device Bid Adjustments",
                    description=(
                        f"{len(adjustments.devices)} devices show performance "
                        "variations"
                    ),
                    action="Apply recommended device bid adjustments",
                    expected_impact="Optimize performance across all devices",
                )
            )

        if overall.quality_score < LOW_QUALITY_SCORE:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.QUALITY_IMPROVEMENT,
                    priority=RecommendationPriority.MEDIUM,
                    title="Improve Quality Score",
                    description=(
                        f"Average Quality Score of {overall.quality_score:g} is "
                        "below optimal"
                    ),
                    action=(
                        "Improve ad relevance, landing page experience, and "
                        "expected CTR"
                    ),
                    expected_impact="Reduce costs and improve ad positions",
                )
            )

        return recommendations

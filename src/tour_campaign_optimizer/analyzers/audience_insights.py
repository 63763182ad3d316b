"""Audience insights generator.

Scores audience segments, splits them into top and underperforming groups,
and recommends where to focus, expand or exclude targeting.
"""

import logging

from tour_campaign_optimizer.analyzers.base import BaseAnalyzer
from tour_campaign_optimizer.constants import OptimizationType
from tour_campaign_optimizer.models.analysis import (
    Recommendation,
    RecommendationPriority,
    RecommendationType,
)
from tour_campaign_optimizer.models.campaign import AudienceRecord, CampaignData
from tour_campaign_optimizer.models.results import (
    AudienceAnalysis,
    AudienceInsights,
    AudienceMetrics,
    AudiencePerformance,
    BehavioralInsights,
    DemographicInsights,
    DemographicSegment,
    ExclusionRecommendation,
    ExpansionOpportunity,
    InterestInsights,
)
from tour_campaign_optimizer.utils.metrics import (
    calculate_conversion_rate,
    calculate_cost_per_conversion,
    calculate_ctr,
    calculate_roas,
)

logger = logging.getLogger(__name__)

# Impressions at which the volume component of the score is maxed out
AUDIENCE_VOLUME_NORMALIZER = 10000

PAUSE_ROAS_THRESHOLD = 1.0
EXCLUSION_ROAS_THRESHOLD = 0.5
TOP_SEGMENTS = 3


def top_slice_size(count: int) -> int:
    """Size of the top 30% (rounded up)."""
    return (3 * count + 9) // 10


def bottom_slice_start(count: int) -> int:
    """Start index of the bottom 30% (70% rounded down)."""
    return (7 * count) // 10


class AudienceInsightsGenerator(BaseAnalyzer):
    """Generate audience targeting insights for a campaign."""

    optimization_type = OptimizationType.AUDIENCE_INSIGHTS

    async def generate_insights(self, campaign_data: CampaignData) -> AudienceInsights:
        return await self.analyze(campaign_data)

    async def analyze(self, campaign_data: CampaignData) -> AudienceInsights:
        """Generate audience insights.

        Args:
            campaign_data: Snapshot carrying per-audience metrics

        Returns:
            Audience analysis plus targeting, expansion and exclusion advice
        """
        logger.info(
            f"Generating audience insights for campaign {campaign_data.campaign_id} "
            f"({len(campaign_data.audience_data)} audiences)"
        )
        analysis = self._analyze_audience_performance(campaign_data.audience_data)

        return AudienceInsights(
            campaign_id=campaign_data.campaign_id,
            timestamp=self.clock(),
            audience_analysis=analysis,
            targeting_recommendations=self._generate_targeting_recommendations(
                analysis
            ),
            expansion_opportunities=self._identify_expansion_opportunities(analysis),
            exclusion_recommendations=self._generate_exclusion_recommendations(
                analysis
            ),
        )

    def calculate_performance_score(self, audience: AudienceRecord) -> float:
        """Weighted score out of 100: ROAS 50, conversion rate 30, volume 20."""
        roas = calculate_roas(audience.conversion_value, audience.cost)
        conversion_rate = calculate_conversion_rate(audience.conversions, audience.clicks)

        roas_score = min(roas / self.thresholds.roas_target * 50, 50)
        conversion_score = min(
            conversion_rate / self.thresholds.conversion_rate_target * 30, 30
        )
        volume_score = min(audience.impressions / AUDIENCE_VOLUME_NORMALIZER * 20, 20)
        return roas_score + conversion_score + volume_score

    def _score_audience(self, audience: AudienceRecord) -> AudiencePerformance:
        return AudiencePerformance(
            **audience.model_dump(),
            roas=calculate_roas(audience.conversion_value, audience.cost),
            conversion_rate=calculate_conversion_rate(
                audience.conversions, audience.clicks
            ),
            cost_per_conversion=calculate_cost_per_conversion(
                audience.cost, audience.conversions
            ),
            performance_score=self.calculate_performance_score(audience),
        )

    def _analyze_audience_performance(
        self, audiences: list[AudienceRecord]
    ) -> AudienceAnalysis:
        if not audiences:
            return AudienceAnalysis()

        ranked = sorted(
            (self._score_audience(audience) for audience in audiences),
            key=lambda audience: audience.performance_score,
            reverse=True,
        )
        count = len(ranked)

        # A single audience lands in both slices
        return AudienceAnalysis(
            top_performing_audiences=ranked[: top_slice_size(count)],
            underperforming_audiences=ranked[bottom_slice_start(count) :],
            audience_metrics=self._calculate_overall_metrics(ranked),
            demographic_insights=self._analyze_demographics(ranked),
            behavioral_insights=self._analyze_behaviors(ranked),
            interest_insights=self._analyze_interests(ranked),
        )

    def _calculate_overall_metrics(
        self, ranked: list[AudiencePerformance]
    ) -> AudienceMetrics:
        total_clicks = sum(a.clicks for a in ranked)
        total_conversions = sum(a.conversions for a in ranked)
        total_cost = sum(a.cost for a in ranked)
        total_value = sum(a.conversion_value for a in ranked)
        return AudienceMetrics(
            total_audiences=len(ranked),
            avg_roas=calculate_roas(total_value, total_cost),
            avg_conversion_rate=calculate_conversion_rate(
                total_conversions, total_clicks
            ),
            total_impressions=sum(a.impressions for a in ranked),
            total_conversions=total_conversions,
            total_value=total_value,
        )

    def _analyze_demographics(
        self, ranked: list[AudiencePerformance]
    ) -> DemographicInsights:
        demographics = [a for a in ranked if a.category == "demographic"]
        if not demographics:
            return DemographicInsights()

        poor_cutoff = self.thresholds.conversion_rate_target / 2
        return DemographicInsights(
            top_demographic=demographics[0].name,
            poor_performing_demographics=[
                DemographicSegment(segment=a.name, conversion_rate=a.conversion_rate)
                for a in demographics
                if a.clicks > 0 and a.conversion_rate < poor_cutoff
            ],
        )

    def _analyze_behaviors(self, ranked: list[AudiencePerformance]) -> BehavioralInsights:
        behaviors = [a for a in ranked if a.category == "behavior"]
        return BehavioralInsights(
            top_behaviors=[a.name for a in behaviors[:TOP_SEGMENTS]],
            engagement_patterns={
                a.name: calculate_ctr(a.clicks, a.impressions) for a in behaviors
            },
        )

    def _analyze_interests(self, ranked: list[AudiencePerformance]) -> InterestInsights:
        interests = [a for a in ranked if a.category == "interest"]
        return InterestInsights(
            top_interests=[a.name for a in interests[:TOP_SEGMENTS]],
            interest_performance={
                a.name: round(a.performance_score, 2) for a in interests
            },
        )

    def _generate_targeting_recommendations(
        self, analysis: AudienceAnalysis
    ) -> list[Recommendation]:
        recommendations = []

        if analysis.top_performing_audiences:
            top = analysis.top_performing_audiences[0]
            recommendations.append(
                Recommendation(
                    type=RecommendationType.INCREASE_BUDGET,
                    priority=RecommendationPriority.HIGH,
                    title="Increase Budget for Top Performing Audience",
                    description=(
                        f'"{top.name}" has exceptional performance with '
                        f"{top.roas:.2f}:1 ROAS"
                    ),
                    action=f"Increase budget allocation by 30-50% for {top.name}",
                    expected_impact="Potential 20-35% increase in overall campaign ROAS",
                )
            )

        if analysis.underperforming_audiences:
            worst = analysis.underperforming_audiences[-1]
            if worst.roas < PAUSE_ROAS_THRESHOLD:
                recommendations.append(
                    Recommendation(
                        type=RecommendationType.PAUSE_AUDIENCE,
                        priority=RecommendationPriority.HIGH,
                        title="Pause Underperforming Audience",
                        description=(
                            f'"{worst.name}" has poor ROAS of {worst.roas:.2f}:1'
                        ),
                        action=(
                            f"Consider pausing or reducing budget for {worst.name}"
                        ),
                        expected_impact="Improve overall campaign efficiency by 10-20%",
                    )
                )

        top_demographic = analysis.demographic_insights.top_demographic
        if top_demographic:
            recommendations.append(
                Recommendation(
                    type=RecommendationType.DEMOGRAPHIC_FOCUS,
                    priority=RecommendationPriority.MEDIUM,
                    title="Focus on High-Converting Demographics",
                    description=f"{top_demographic} shows superior performance",
                    action="Create dedicated campaigns targeting similar demographics",
                    expected_impact="Potential 15-25% improvement in conversion rates",
                )
            )

        return recommendations

    def _identify_expansion_opportunities(
        self, analysis: AudienceAnalysis
    ) -> list[ExpansionOpportunity]:
        opportunities = []

        if analysis.top_performing_audiences:
            opportunities.append(
                ExpansionOpportunity(
                    type="similar_audiences",
                    title="Create Similar Audiences",
                    description=(
                        "Expand reach by creating lookalike audiences based on "
                        "top performers"
                    ),
                    potential_reach="Estimated 2-3x audience expansion",
                    expected_performance="70-85% of original audience performance",
                )
            )

        if analysis.interest_insights.top_interests:
            opportunities.append(
                ExpansionOpportunity(
                    type="interest_expansion",
                    title="Expand Interest Targeting",
                    description=(
                        "Add interests related to "
                        f"{', '.join(analysis.interest_insights.top_interests)} "
                        "to capture a broader audience"
                    ),
                    potential_reach="Estimated 50-100% audience increase",
                    expected_performance="60-80% of current performance",
                )
            )

        opportunities.append(
            ExpansionOpportunity(
                type="geographic_expansion",
                title="Geographic Expansion",
                description="Test performance in similar geographic markets",
                potential_reach="Market-dependent expansion",
                expected_performance="Variable based on market similarity",
            )
        )
        return opportunities

    def _generate_exclusion_recommendations(
        self, analysis: AudienceAnalysis
    ) -> list[ExclusionRecommendation]:
        exclusions = [
            ExclusionRecommendation(
                type="audience_exclusion",
                audience_id=audience.audience_id,
                audience_name=audience.name,
                reason=f"Very poor ROAS of {audience.roas:.2f}:1",
                recommendation="Add to exclusion list for future campaigns",
            )
            for audience in analysis.underperforming_audiences
            if audience.roas < EXCLUSION_ROAS_THRESHOLD
        ]

        for demographic in analysis.demographic_insights.poor_performing_demographics:
            exclusions.append(
                ExclusionRecommendation(
                    type="demographic_exclusion",
                    demographic=demographic.segment,
                    reason=(
                        f"Low conversion rate of {demographic.conversion_rate:.2f}%"
                    ),
                    recommendation=(
                        "Consider excluding from broad targeting campaigns"
                    ),
                )
            )
        return exclusions

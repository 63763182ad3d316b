"""Unit tests for the audience insights generator."""

import pytest

from tour_campaign_optimizer.analyzers.audience_insights import (
    AudienceInsightsGenerator,
    bottom_slice_start,
    top_slice_size,
)
from tour_campaign_optimizer.models.campaign import AudienceRecord, CampaignData


def _ranked_audiences(count):
    """Audiences whose ROAS falls with their index, so rank follows index."""
    return [
        {
            "name": f"Audience {i}",
            "audienceId": f"aud-{i}",
            "category": "interest",
            "impressions": 5000,
            "clicks": 100,
            "conversions": 2,
            "cost": 10000,
            "conversionValue": 2500 * (count - i),
        }
        for i in range(count)
    ]


@pytest.fixture
def generator(clock):
    return AudienceInsightsGenerator(clock=clock)


class TestSlicing:
    """Test top and bottom slice boundaries."""

    def test_ten_audiences(self):
        assert top_slice_size(10) == 3
        assert bottom_slice_start(10) == 7

    @pytest.mark.parametrize("count", range(2, 51))
    def test_slices_do_not_overlap_beyond_one_audience(self, count):
        assert top_slice_size(count) <= bottom_slice_start(count)

    def test_single_audience_is_in_both_slices(self):
        assert top_slice_size(1) == 1
        assert bottom_slice_start(1) == 0

    @pytest.mark.asyncio
    async def test_ten_audiences_split(self, generator):
        campaign = CampaignData.model_validate(
            {"campaignId": "c1", "audienceData": _ranked_audiences(10)}
        )

        result = await generator.generate_insights(campaign)

        analysis = result.audience_analysis
        top = [a.name for a in analysis.top_performing_audiences]
        under = [a.name for a in analysis.underperforming_audiences]
        assert top == ["Audience 0", "Audience 1", "Audience 2"]
        assert under == ["Audience 7", "Audience 8", "Audience 9"]

    @pytest.mark.asyncio
    async def test_single_audience(self, generator):
        campaign = CampaignData.model_validate(
            {"campaignId": "c1", "audienceData": _ranked_audiences(1)}
        )

        result = await generator.generate_insights(campaign)

        analysis = result.audience_analysis
        assert analysis.top_performing_audiences[0].name == "Audience 0"
        assert analysis.underperforming_audiences[0].name == "Audience 0"


class TestPerformanceScore:
    def test_maximum_score(self, generator):
        audience = AudienceRecord(
            name="Luxury",
            impressions=10000,
            clicks=100,
            conversions=4,
            cost=10000,
            conversion_value=60000,
        )
        assert generator.calculate_performance_score(audience) == 100

    def test_weighted_components(self, generator):
        audience = AudienceRecord(
            name="Mid",
            impressions=5000,
            clicks=100,
            conversions=1,
            cost=10000,
            conversion_value=15000,
        )
        # ROAS 1.5 -> 25, CR 1% -> 15, 5000 impressions -> 10
        assert generator.calculate_performance_score(audience) == pytest.approx(50)

    def test_no_spend_scores_zero_roas(self, generator):
        audience = AudienceRecord(name="Empty")
        assert generator.calculate_performance_score(audience) == 0


class TestInsights:
    """Test insights on the shared campaign snapshot."""

    @pytest.mark.asyncio
    async def test_ranking_and_metrics(self, generator, campaign_data):
        result = await generator.generate_insights(
            CampaignData.model_validate(campaign_data)
        )

        analysis = result.audience_analysis
        assert [a.name for a in analysis.top_performing_audiences] == [
            "Culture Enthusiasts"
        ]
        assert [a.name for a in analysis.underperforming_audiences] == [
            "Budget Travelers"
        ]
        assert analysis.top_performing_audiences[0].roas == 6.0
        assert analysis.audience_metrics.total_audiences == 3
        assert analysis.audience_metrics.total_conversions == 43
        assert analysis.audience_metrics.avg_roas == pytest.approx(519000 / 155000)

    @pytest.mark.asyncio
    async def test_category_insights(self, generator, campaign_data):
        result = await generator.generate_insights(
            CampaignData.model_validate(campaign_data)
        )

        analysis = result.audience_analysis
        assert analysis.demographic_insights.top_demographic == "Adults 25-34"
        assert analysis.demographic_insights.poor_performing_demographics == []
        assert analysis.behavioral_insights.top_behaviors == ["Budget Travelers"]
        assert analysis.behavioral_insights.engagement_patterns[
            "Budget Travelers"
        ] == pytest.approx(500 / 7000 * 100)
        assert analysis.interest_insights.top_interests == ["Culture Enthusiasts"]

    @pytest.mark.asyncio
    async def test_targeting_recommendations(self, generator, campaign_data):
        result = await generator.generate_insights(
            CampaignData.model_validate(campaign_data)
        )

        recommendations = result.targeting_recommendations
        assert [r.type for r in recommendations] == [
            "increase_budget",
            "pause_audience",
            "demographic_focus",
        ]
        assert "6.00:1" in recommendations[0].description
        assert "Budget Travelers" in recommendations[1].action

    @pytest.mark.asyncio
    async def test_expansion_and_exclusions(self, generator, campaign_data):
        result = await generator.generate_insights(
            CampaignData.model_validate(campaign_data)
        )

        assert [o.type for o in result.expansion_opportunities] == [
            "similar_audiences",
            "interest_expansion",
            "geographic_expansion",
        ]
        assert len(result.exclusion_recommendations) == 1
        exclusion = result.exclusion_recommendations[0]
        assert exclusion.type == "audience_exclusion"
        assert exclusion.audience_id == "aud-3"
        assert exclusion.reason == "Very poor ROAS of 0.20:1"

    @pytest.mark.asyncio
    async def test_poor_demographic_excluded(self, generator):
        campaign = CampaignData.model_validate(
            {
                "campaignId": "c1",
                "audienceData": [
                    {
                        "name": "Adults 65+",
                        "category": "Demographic",
                        "impressions": 4000,
                        "clicks": 400,
                        "conversions": 2,
                        "cost": 20000,
                        "conversionValue": 30000,
                    }
                ],
            }
        )

        result = await generator.generate_insights(campaign)

        poor = result.audience_analysis.demographic_insights.poor_performing_demographics
        assert [p.segment for p in poor] == ["Adults 65+"]
        assert result.exclusion_recommendations[-1].type == "demographic_exclusion"
        assert result.exclusion_recommendations[-1].demographic == "Adults 65+"

    @pytest.mark.asyncio
    async def test_no_audiences(self, generator):
        result = await generator.generate_insights(CampaignData(campaign_id="c1"))

        assert result.audience_analysis.top_performing_audiences == []
        assert result.targeting_recommendations == []
        assert [o.type for o in result.expansion_opportunities] == [
            "geographic_expansion"
        ]
        assert result.exclusion_recommendations == []

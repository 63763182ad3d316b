"""Unit tests for the conversion value optimizer."""

import pytest

from tour_campaign_optimizer.analyzers.conversion_value import ConversionValueOptimizer
from tour_campaign_optimizer.models.campaign import CampaignData


def _types(recommendations):
    return [r.type for r in recommendations]


@pytest.fixture
def optimizer(clock):
    return ConversionValueOptimizer(clock=clock)


@pytest.fixture
def valued_campaign(campaign_data):
    """Campaign with three low-value afternoon and three high-value morning bookings."""
    conversions = [
        {"value": 5000, "tourType": "morning", "timestamp": "2025-04-01T15:00:00Z"},
        {"value": 5000, "tourType": "morning", "timestamp": "2025-04-02T15:00:00Z"},
        {"value": 5000, "tourType": "morning", "timestamp": "2025-04-03T15:00:00Z"},
        {"value": 15000, "tourType": "night", "timestamp": "2025-04-04T10:00:00Z"},
        {"value": 15000, "tourType": "night", "timestamp": "2025-04-05T10:00:00Z"},
        {"value": 15000, "tourType": "night", "timestamp": "2025-04-06T10:00:00Z"},
    ]
    return CampaignData.model_validate({**campaign_data, "conversions": conversions})


class TestMetrics:
    """Test conversion value metrics."""

    @pytest.mark.asyncio
    async def test_two_conversions(self, optimizer):
        campaign = CampaignData.model_validate(
            {
                "campaignId": "c1",
                "clicks": 100,
                "impressions": 5000,
                "conversions": [{"value": 10000}, {"value": 6000}],
            }
        )

        result = await optimizer.optimize(campaign)

        metrics = result.current_metrics
        assert metrics.total_conversion_value == 16000
        assert metrics.average_conversion_value == 8000
        assert metrics.conversion_value_per_click == 160
        assert metrics.conversion_value_per_impression == pytest.approx(3.2)
        assert metrics.value_per_tour["unknown"].count == 2
        # 8000 is not below the low-value threshold
        assert "value_improvement" not in _types(result.recommendations)

    @pytest.mark.asyncio
    async def test_value_per_tour_and_distribution(self, optimizer, valued_campaign):
        result = await optimizer.optimize(valued_campaign)

        metrics = result.current_metrics
        assert metrics.total_conversion_value == 60000
        assert metrics.value_per_tour["night"].average_value == 15000
        assert metrics.value_per_tour["morning"].total_value == 15000

        distribution = metrics.value_distribution
        assert distribution.min == 5000
        assert distribution.max == 15000
        assert distribution.median == 15000
        assert distribution.q1 == 5000
        assert distribution.q3 == 15000
        assert distribution.standard_deviation == 5000

    @pytest.mark.asyncio
    async def test_trend_compares_halves(self, optimizer, valued_campaign):
        result = await optimizer.optimize(valued_campaign)

        trend = result.current_metrics.trend_analysis
        assert trend.available
        assert trend.first_half_average == 5000
        assert trend.second_half_average == 15000
        assert trend.change_percent == 200
        assert trend.direction == "increasing"

    @pytest.mark.asyncio
    async def test_no_conversion_records(self, optimizer):
        campaign = CampaignData(campaign_id="c1", conversions=25)

        result = await optimizer.optimize(campaign)

        assert result.current_metrics.total_conversion_value == 0
        assert result.value_optimization.seasonal_patterns == {}
        assert not result.current_metrics.trend_analysis.available


class TestPatterns:
    """Test value pattern detection."""

    @pytest.mark.asyncio
    async def test_high_value_hours(self, optimizer, valued_campaign):
        result = await optimizer.optimize(valued_campaign)

        time_patterns = result.value_optimization.time_of_day_patterns
        assert time_patterns.high_value_hours == [10]
        assert time_patterns.value_increase == 50.0
        assert set(time_patterns.by_hour) == {10, 15}

    @pytest.mark.asyncio
    async def test_single_hour_has_no_high_value_hours(self, optimizer):
        campaign = CampaignData.model_validate(
            {
                "campaignId": "c1",
                "conversions": [
                    {"value": 9000, "timestamp": "2025-04-01T10:00:00Z"},
                    {"value": 30000, "timestamp": "2025-04-02T10:00:00Z"},
                ],
            }
        )

        result = await optimizer.optimize(campaign)

        assert result.value_optimization.time_of_day_patterns.high_value_hours == []
        assert "bid_scheduling" not in _types(result.recommendations)

    @pytest.mark.asyncio
    async def test_seasonal_and_weekday_buckets(self, optimizer, valued_campaign):
        result = await optimizer.optimize(valued_campaign)

        patterns = result.value_optimization
        assert set(patterns.seasonal_patterns) == {"spring"}
        assert patterns.seasonal_patterns["spring"].count == 6
        # 2025-04-01 was a Tuesday
        assert patterns.day_of_week_patterns.by_day["Tuesday"].average_value == 5000
        assert patterns.day_of_week_patterns.best_day == "Friday"

    @pytest.mark.asyncio
    async def test_high_value_device(self, optimizer, valued_campaign):
        result = await optimizer.optimize(valued_campaign)

        devices = result.value_optimization.device_patterns
        assert devices.high_value_device == "mobile"
        assert devices.value_increase == pytest.approx(36.4)

    @pytest.mark.asyncio
    async def test_high_value_keywords(self, optimizer, valued_campaign):
        result = await optimizer.optimize(valued_campaign)

        keywords = result.value_optimization.keyword_patterns.high_value_keywords
        assert "gion walking tour" in keywords
        assert "cheap kyoto tour" not in keywords

    @pytest.mark.asyncio
    async def test_no_high_value_audiences_when_values_are_close(
        self, optimizer, valued_campaign
    ):
        result = await optimizer.optimize(valued_campaign)

        assert result.value_optimization.audience_patterns.high_value_audiences == []


class TestRecommendations:
    """Test conversion value recommendations."""

    @pytest.mark.asyncio
    async def test_recommendation_set(self, optimizer, valued_campaign):
        result = await optimizer.optimize(valued_campaign)

        assert _types(result.recommendations) == [
            "bid_scheduling",
            "seasonal_optimization",
            "device_optimization",
            "keyword_optimization",
        ]
        scheduling = result.recommendations[0]
        assert scheduling.description == "Conversions during 10:00 have 50% higher value"

    @pytest.mark.asyncio
    async def test_seasonal_recommendation_follows_clock(self, optimizer, valued_campaign):
        result = await optimizer.optimize(valued_campaign)

        seasonal = next(
            r for r in result.recommendations if r.type == "seasonal_optimization"
        )
        assert seasonal.title == "Spring Season Optimization"
        assert "40%" in seasonal.action
        assert "gion, morning, cultural" in seasonal.action

    @pytest.mark.asyncio
    async def test_low_average_value_alert(self, optimizer):
        campaign = CampaignData.model_validate(
            {"campaignId": "c1", "conversions": [{"value": 5000}, {"value": 5000}]}
        )

        result = await optimizer.optimize(campaign)

        alert = next(r for r in result.recommendations if r.type == "value_improvement")
        assert alert.priority == "high"
        assert "¥5,000" in alert.description

    @pytest.mark.asyncio
    async def test_confidence_score_bounds(self, optimizer, valued_campaign):
        result = await optimizer.optimize(valued_campaign)

        assert 0 <= result.confidence_score <= 1
        assert result.campaign_id == "kyoto-spring-001"

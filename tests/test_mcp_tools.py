"""Integration tests for MCP server tools.

Tools run against the real optimizer with the default in-memory history
store and the seeded mock performance provider.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from tour_campaign_optimizer.core.exceptions import CampaignOptimizerError
from tour_campaign_optimizer.server import (
    CampaignDataRequest,
    CampaignHistoryRequest,
    ClearHistoryRequest,
    SeasonalTrackingRequest,
    clear_optimization_history,
    generate_audience_insights,
    generate_bid_recommendations,
    get_optimization_history,
    get_optimization_report,
    optimize_conversion_value,
    reset_optimizer_for_testing,
    track_seasonal_performance,
)

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_singleton_optimizer(settings):
    """Reset the singleton optimizer before each test."""
    reset_optimizer_for_testing()
    yield
    reset_optimizer_for_testing()


@pytest.fixture
def campaign_request(campaign_data):
    return CampaignDataRequest(campaign_data=campaign_data)


# ============================================================================
# Optimization tools
# ============================================================================


@pytest.mark.asyncio
async def test_optimize_conversion_value_success(campaign_request):
    result = await optimize_conversion_value.fn(campaign_request)

    assert result["status"] == "success"
    assert result["metadata"]["campaign_id"] == "kyoto-spring-001"
    assert 0 <= result["metadata"]["confidence_score"] <= 1
    assert result["data"]["campaign_id"] == "kyoto-spring-001"
    assert result["message"] == (
        f"Generated {len(result['data']['recommendations'])} recommendations"
    )


@pytest.mark.asyncio
async def test_generate_audience_insights_success(campaign_request):
    result = await generate_audience_insights.fn(campaign_request)

    assert result["status"] == "success"
    assert result["metadata"]["audience_count"] == 3
    assert result["data"]["exclusion_recommendations"]


@pytest.mark.asyncio
async def test_generate_bid_recommendations_success(campaign_request):
    result = await generate_bid_recommendations.fn(campaign_request)

    assert result["status"] == "success"
    assert result["metadata"]["risk_level"] == "high"
    assert len(result["data"]["adjustments"]["keywords"]) == 3
    assert result["message"].startswith("Generated 3 keyword adjustments")


@pytest.mark.asyncio
async def test_track_seasonal_performance_defaults():
    result = await track_seasonal_performance.fn(SeasonalTrackingRequest())

    assert result["status"] == "success"
    assert result["metadata"]["record_count"] == 60
    assert result["metadata"]["date_range"] == "last365days"
    assert result["data"]["predictions"] is not None


@pytest.mark.asyncio
async def test_track_seasonal_performance_filtered():
    request = SeasonalTrackingRequest(
        date_range="last90days",
        tour_types=["gion"],
        include_predictions=False,
    )

    result = await track_seasonal_performance.fn(request)

    assert result["status"] == "success"
    assert result["metadata"]["record_count"] == 3
    assert result["data"]["predictions"] is None


# ============================================================================
# Error handling
# ============================================================================


@pytest.mark.asyncio
async def test_invalid_campaign_data():
    request = CampaignDataRequest(campaign_data={"impressions": -5})

    result = await generate_bid_recommendations.fn(request)

    assert result["status"] == "error"
    assert result["error_code"] == "INVALID_INPUT"
    assert result["details"]["retry_allowed"] is False
    assert result["details"]["issues"]
    assert result["data"] is None


@pytest.mark.asyncio
async def test_unsupported_date_range():
    result = await track_seasonal_performance.fn(
        SeasonalTrackingRequest(date_range="last-quarter")
    )

    assert result["status"] == "error"
    assert result["error_code"] == "DATA_PROVIDER_ERROR"
    assert result["details"]["retry_allowed"] is True


@pytest.mark.asyncio
async def test_analysis_error(campaign_request):
    optimizer = MagicMock()
    optimizer.optimize_conversion_value = AsyncMock(
        side_effect=CampaignOptimizerError("no conversions to analyze")
    )

    with patch("tour_campaign_optimizer.server._get_optimizer", return_value=optimizer):
        result = await optimize_conversion_value.fn(campaign_request)

    assert result["error_code"] == "ANALYSIS_ERROR"
    assert "no conversions to analyze" in result["message"]


@pytest.mark.asyncio
async def test_unexpected_error(campaign_request):
    optimizer = MagicMock()
    optimizer.generate_audience_insights = AsyncMock(side_effect=RuntimeError("boom"))

    with patch("tour_campaign_optimizer.server._get_optimizer", return_value=optimizer):
        result = await generate_audience_insights.fn(campaign_request)

    assert result["error_code"] == "INTERNAL_ERROR"
    assert "boom" not in result["message"]


# ============================================================================
# History tools
# ============================================================================


@pytest.mark.asyncio
async def test_history_report_and_clear(campaign_request):
    history_request = CampaignHistoryRequest(campaign_id="kyoto-spring-001")

    await optimize_conversion_value.fn(campaign_request)
    await generate_bid_recommendations.fn(campaign_request)

    history = await get_optimization_history.fn(history_request)
    assert history["status"] == "success"
    assert history["metadata"]["record_count"] == 2
    assert [entry["type"] for entry in history["data"]] == [
        "bid_recommendations",
        "conversion_value",
    ]

    report = await get_optimization_report.fn(history_request)
    assert report["data"]["optimization_count"] == 2
    assert report["data"]["summary"]["bid_optimizations"] == 1

    cleared = await clear_optimization_history.fn(
        ClearHistoryRequest(campaign_id="kyoto-spring-001")
    )
    assert cleared["status"] == "success"
    assert cleared["message"] == "Cleared optimization history for kyoto-spring-001"
    assert cleared["data"] is None

    history = await get_optimization_history.fn(history_request)
    assert history["data"] == []


@pytest.mark.asyncio
async def test_history_survives_between_requests(campaign_request):
    await generate_audience_insights.fn(campaign_request)
    await generate_audience_insights.fn(campaign_request)

    history = await get_optimization_history.fn(
        CampaignHistoryRequest(campaign_id="kyoto-spring-001")
    )

    assert history["metadata"]["record_count"] == 2


@pytest.mark.asyncio
async def test_clear_all_history(campaign_request):
    await optimize_conversion_value.fn(campaign_request)
    await track_seasonal_performance.fn(SeasonalTrackingRequest())

    cleared = await clear_optimization_history.fn(ClearHistoryRequest())

    assert cleared["message"] == "Cleared optimization history for all campaigns"
    report = await get_optimization_report.fn(
        CampaignHistoryRequest(campaign_id="seasonal_analysis")
    )
    assert report["data"]["optimization_count"] == 0


@pytest.mark.asyncio
async def test_report_for_unknown_campaign():
    result = await get_optimization_report.fn(
        CampaignHistoryRequest(campaign_id="never-optimized")
    )

    assert result["status"] == "success"
    assert result["data"]["optimization_count"] == 0
    assert result["data"]["summary"]["message"]

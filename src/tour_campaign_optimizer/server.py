"""FastMCP server exposing the tour campaign optimizer."""

import logging
from enum import Enum
from typing import Any

from fastmcp import FastMCP
from pydantic import BaseModel, Field

from tour_campaign_optimizer.core.config import get_settings, setup_logging
from tour_campaign_optimizer.core.exceptions import (
    CampaignOptimizerError,
    DataProviderError,
    InvalidCampaignDataError,
)
from tour_campaign_optimizer.optimizer import CampaignOptimizer

logger = logging.getLogger(__name__)

SERVER_NAME = "Tour Campaign Optimizer"
SERVER_VERSION = "1.0.0"


# ============================================================================
# Error Codes
# ============================================================================


class ErrorCode(str, Enum):
    """Error codes for programmatic error handling."""

    INVALID_INPUT = "INVALID_INPUT"
    DATA_PROVIDER_ERROR = "DATA_PROVIDER_ERROR"
    ANALYSIS_ERROR = "ANALYSIS_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Initialize MCP server
mcp = FastMCP(SERVER_NAME)


# ============================================================================
# Helper Functions
# ============================================================================


# Global optimizer instance so history survives across requests
_optimizer_instance: CampaignOptimizer | None = None


def reset_optimizer_for_testing():
    """Reset the singleton optimizer instance (for testing only)."""
    global _optimizer_instance
    _optimizer_instance = None


def _get_optimizer() -> CampaignOptimizer:
    """Get or create the campaign optimizer (singleton pattern)."""
    global _optimizer_instance

    if _optimizer_instance is None:
        _optimizer_instance = CampaignOptimizer(settings=get_settings())
        logger.info("Campaign optimizer initialized")

    return _optimizer_instance


def _error_response(operation: str, e: Exception) -> dict[str, Any]:
    """Convert an exception raised by an optimizer operation into a payload."""
    if isinstance(e, InvalidCampaignDataError):
        logger.warning(f"Invalid input for {operation}: {e}")
        return {
            "status": "error",
            "error_code": ErrorCode.INVALID_INPUT,
            "message": f"Invalid input: {e}",
            "details": {
                "error_type": "validation",
                "retry_allowed": False,
                "issues": e.issues,
            },
            "data": None,
        }
    if isinstance(e, DataProviderError):
        logger.error(f"Data provider error in {operation}: {e}", exc_info=True)
        return {
            "status": "error",
            "error_code": ErrorCode.DATA_PROVIDER_ERROR,
            "message": f"Performance data unavailable: {e}",
            "details": {"error_type": "data_provider", "retry_allowed": True},
            "data": None,
        }
    if isinstance(e, CampaignOptimizerError):
        logger.error(f"Analysis error in {operation}: {e}", exc_info=True)
        return {
            "status": "error",
            "error_code": ErrorCode.ANALYSIS_ERROR,
            "message": f"Analysis failed: {e}",
            "details": {"error_type": "analysis", "retry_allowed": False},
            "data": None,
        }
    logger.error(f"Unexpected error in {operation}: {e}", exc_info=True)
    return {
        "status": "error",
        "error_code": ErrorCode.INTERNAL_ERROR,
        "message": "An unexpected error occurred. Please contact support if this persists.",
        "details": {"error_type": "unexpected"},
        "data": None,
    }


# ============================================================================
# Models
# ============================================================================


class CampaignDataRequest(BaseModel):
    """Request model carrying a campaign performance snapshot."""

    campaign_data: dict[str, Any] = Field(
        ...,
        description=(
            "Campaign snapshot: campaignId, impressions, clicks, cost, conversions "
            "(count or list of {value, tourType, timestamp}), keywords, "
            "deviceBreakdown, audienceData, locationData, timeData"
        ),
    )


class SeasonalTrackingRequest(BaseModel):
    """Request model for seasonal performance tracking."""

    date_range: str = Field(
        "last365days", description="'lastNdays' (e.g. last90days) or 'all'"
    )
    tour_types: list[str] | None = Field(
        None, description="Tour types to include (default: all)"
    )
    include_weather_data: bool = Field(
        False, description="Attach the weather correlation section"
    )
    include_predictions: bool = Field(
        True, description="Attach next month/quarter/season predictions"
    )
    campaign_id: str | None = Field(
        None, description="Optional campaign ID to record the analysis against"
    )


class CampaignHistoryRequest(BaseModel):
    """Request model for campaign history lookups."""

    campaign_id: str = Field(..., min_length=1, description="Campaign ID")


class ClearHistoryRequest(BaseModel):
    """Request model for clearing optimization history."""

    campaign_id: str | None = Field(
        None, description="Campaign ID to clear (default: clear all history)"
    )


# ============================================================================
# Tools - Optimization
# ============================================================================


@mcp.tool()
async def optimize_conversion_value(request: CampaignDataRequest) -> dict[str, Any]:
    """
    Analyze booking value for a campaign.

    Reports total and average booking value, value per tour, value
    distribution and trend, and the hours, devices, audiences and keywords
    that bring in above-average value, with recommendations.
    """
    try:
        result = await _get_optimizer().optimize_conversion_value(request.campaign_data)
        return {
            "status": "success",
            "message": f"Generated {len(result.recommendations)} recommendations",
            "metadata": {
                "campaign_id": result.campaign_id,
                "confidence_score": result.confidence_score,
            },
            "data": result.model_dump(mode="json"),
        }
    except Exception as e:
        return _error_response("optimize_conversion_value", e)


@mcp.tool()
async def generate_audience_insights(request: CampaignDataRequest) -> dict[str, Any]:
    """
    Rank a campaign's audiences and recommend targeting changes.

    Returns top and underperforming audiences, demographic, behavioral and
    interest insights, expansion opportunities and exclusions.
    """
    try:
        result = await _get_optimizer().generate_audience_insights(request.campaign_data)
        audience_count = result.audience_analysis.audience_metrics.total_audiences
        return {
            "status": "success",
            "message": (
                f"Analyzed {audience_count} audiences, "
                f"generated {len(result.targeting_recommendations)} recommendations"
            ),
            "metadata": {
                "campaign_id": result.campaign_id,
                "audience_count": audience_count,
            },
            "data": result.model_dump(mode="json"),
        }
    except Exception as e:
        return _error_response("generate_audience_insights", e)


@mcp.tool()
async def track_seasonal_performance(request: SeasonalTrackingRequest) -> dict[str, Any]:
    """
    Analyze seasonal booking patterns across Kyoto tour types.

    Ranks calendar months by ROAS, reports per-tour seasonality and
    predicts the next month, quarter and season.
    """
    try:
        result = await _get_optimizer().track_seasonal_performance(
            date_range=request.date_range,
            tour_types=request.tour_types,
            include_weather_data=request.include_weather_data,
            include_predictions=request.include_predictions,
            campaign_id=request.campaign_id,
        )
        return {
            "status": "success",
            "message": f"Analyzed {result.records_analyzed} performance records",
            "metadata": {
                "date_range": request.date_range,
                "tour_types": result.tour_types,
                "campaign_id": request.campaign_id,
                "record_count": result.records_analyzed,
            },
            "data": result.model_dump(mode="json"),
        }
    except Exception as e:
        return _error_response("track_seasonal_performance", e)


@mcp.tool()
async def generate_bid_recommendations(request: CampaignDataRequest) -> dict[str, Any]:
    """
    Recommend bid adjustments for keywords, devices, locations, audiences
    and hours of the day, with the expected cost, conversion and revenue
    impact.
    """
    try:
        result = await _get_optimizer().generate_bid_recommendations(
            request.campaign_data
        )
        return {
            "status": "success",
            "message": (
                f"Generated {len(result.adjustments.keywords)} keyword adjustments "
                f"and {len(result.recommendations)} recommendations"
            ),
            "metadata": {
                "campaign_id": result.campaign_id,
                "confidence_level": result.confidence_level,
                "risk_level": result.expected_impact.risk_level,
            },
            "data": result.model_dump(mode="json"),
        }
    except Exception as e:
        return _error_response("generate_bid_recommendations", e)


# ============================================================================
# Tools - History
# ============================================================================


@mcp.tool()
async def get_optimization_history(request: CampaignHistoryRequest) -> dict[str, Any]:
    """
    List the optimizations recorded for a campaign, newest first.
    """
    try:
        history = _get_optimizer().get_optimization_history(request.campaign_id)
        return {
            "status": "success",
            "message": f"Retrieved {len(history)} optimization entries",
            "metadata": {
                "campaign_id": request.campaign_id,
                "record_count": len(history),
            },
            "data": [entry.model_dump(mode="json") for entry in history],
        }
    except Exception as e:
        return _error_response("get_optimization_history", e)


@mcp.tool()
async def get_optimization_report(request: CampaignHistoryRequest) -> dict[str, Any]:
    """
    Summarize a campaign's optimization history with per-type counts.
    """
    try:
        report = await _get_optimizer().get_optimization_report(request.campaign_id)
        return {
            "status": "success",
            "message": f"Report covers {report.optimization_count} optimizations",
            "metadata": {"campaign_id": request.campaign_id},
            "data": report.model_dump(mode="json"),
        }
    except Exception as e:
        return _error_response("get_optimization_report", e)


@mcp.tool()
async def clear_optimization_history(request: ClearHistoryRequest) -> dict[str, Any]:
    """
    Clear the optimization history of one campaign, or all history.
    """
    try:
        _get_optimizer().clear_history(request.campaign_id)
        scope = request.campaign_id or "all campaigns"
        return {
            "status": "success",
            "message": f"Cleared optimization history for {scope}",
            "metadata": {"campaign_id": request.campaign_id},
            "data": None,
        }
    except Exception as e:
        return _error_response("clear_optimization_history", e)


# ============================================================================
# Resources
# ============================================================================


@mcp.resource("resource://health")
def health_check() -> dict[str, Any]:
    """
    Provides server health status and configuration information.
    """
    return {
        "status": "healthy",
        "version": SERVER_VERSION,
        "server": SERVER_NAME,
        "tools_available": [
            "optimize_conversion_value",
            "generate_audience_insights",
            "track_seasonal_performance",
            "generate_bid_recommendations",
            "get_optimization_history",
            "get_optimization_report",
            "clear_optimization_history",
        ],
    }


@mcp.resource("resource://config")
def get_config() -> dict[str, Any]:
    """
    Provides the server's configuration (without exposing connection URLs).
    """
    settings = get_settings()
    return {
        "server_version": SERVER_VERSION,
        "environment": settings.environment,
        "currency": settings.currency,
        "thresholds": settings.thresholds.model_dump(mode="json"),
        "impact": settings.impact.model_dump(mode="json"),
        "features": {
            "tour_cache": {
                "ttl_seconds": settings.tours.cache_ttl_seconds,
                "backend": "redis" if settings.tours.redis_url else "memory",
            },
        },
    }


# ============================================================================
# Server Factory
# ============================================================================


def create_mcp_server() -> FastMCP:
    """
    Create and return the configured MCP server instance.

    Returns:
        FastMCP: The configured server instance ready to run.
    """
    return mcp


# ============================================================================
# Entry Point
# ============================================================================

if __name__ == "__main__":
    setup_logging(get_settings())
    # Run the MCP server
    mcp.run()

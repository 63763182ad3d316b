"""Unit tests for campaign, recommendation and history models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from tour_campaign_optimizer.constants import OptimizationType
from tour_campaign_optimizer.models import (
    AudienceRecord,
    CampaignData,
    ConversionRecord,
    OptimizationHistoryEntry,
    Recommendation,
    RecommendationPriority,
    RecommendationType,
    TimeSlotRecord,
    TourPerformanceRecord,
)
from tour_campaign_optimizer.models.analysis import priority_for_adjustment


class TestCampaignData:
    """Test CampaignData validation."""

    def test_camel_case_input(self, campaign_data):
        campaign = CampaignData.model_validate(campaign_data)
        assert campaign.campaign_id == "kyoto-spring-001"
        assert campaign.conversion_value == 1600000
        assert campaign.keywords[0].avg_cpc == 100
        assert set(campaign.device_breakdown) == {"mobile", "desktop", "tablet"}
        assert campaign.audience_data[1].category == "demographic"
        assert campaign.last_updated.tzinfo is not None

    def test_snake_case_input(self):
        campaign = CampaignData(campaign_id="c1", conversion_value=500)
        assert campaign.conversion_value == 500

    def test_missing_counters_default_to_zero(self):
        campaign = CampaignData.model_validate(
            {"campaignId": "c1", "clicks": None, "cost": None}
        )
        assert campaign.clicks == 0
        assert campaign.cost == 0
        assert campaign.impressions == 0

    def test_null_collections_default_to_empty(self):
        campaign = CampaignData.model_validate(
            {"campaignId": "c1", "keywords": None, "deviceBreakdown": None}
        )
        assert campaign.keywords == []
        assert campaign.device_breakdown == {}

    def test_campaign_id_required(self):
        with pytest.raises(ValidationError):
            CampaignData.model_validate({"impressions": 10})

    def test_empty_campaign_id_rejected(self):
        with pytest.raises(ValidationError):
            CampaignData(campaign_id="")

    def test_negative_counters_rejected(self):
        with pytest.raises(ValidationError):
            CampaignData(campaign_id="c1", cost=-1)
        with pytest.raises(ValidationError):
            CampaignData(campaign_id="c1", conversions=-3)

    def test_quality_score_range(self):
        with pytest.raises(ValidationError):
            CampaignData(campaign_id="c1", avg_quality_score=11)

    def test_conversion_count(self):
        campaign = CampaignData(campaign_id="c1", conversions=12)
        assert campaign.conversion_count == 12
        assert campaign.conversion_records == []

    def test_conversion_records(self):
        campaign = CampaignData.model_validate(
            {
                "campaignId": "c1",
                "conversions": [
                    {"value": 12000, "tourType": "gion", "timestamp": "2025-04-01T10:00:00"},
                    {"value": 8000, "date": "2025-04-02T07:30:00Z"},
                ],
            }
        )
        assert campaign.conversion_count == 2
        first, second = campaign.conversion_records
        assert first.tour_type == "gion"
        assert first.timestamp == datetime(2025, 4, 1, 10, tzinfo=timezone.utc)
        assert second.timestamp.hour == 7


class TestRecords:
    def test_audience_category_normalized(self):
        audience = AudienceRecord(name="Adults", category=" Demographic ")
        assert audience.category == "demographic"

    def test_conversion_value_defaults(self):
        assert ConversionRecord(value=None).value == 0

    def test_time_slot_hour_range(self):
        with pytest.raises(ValidationError):
            TimeSlotRecord(hour=24)

    def test_tour_performance_defaults(self):
        record = TourPerformanceRecord.model_validate(
            {"tourType": None, "revenue": None, "timestamp": "2024-10-01T00:00:00"}
        )
        assert record.tour_type == "unknown"
        assert record.revenue == 0
        assert record.timestamp.tzinfo == timezone.utc


class TestRecommendation:
    def test_enum_values_stored(self):
        recommendation = Recommendation(
            type=RecommendationType.BID_SCHEDULING,
            priority=RecommendationPriority.HIGH,
            title="t",
            description="d",
            action="a",
            expected_impact="i",
        )
        assert recommendation.type == "bid_scheduling"
        assert recommendation.model_dump()["priority"] == "high"

    @pytest.mark.parametrize(
        "adjustment,expected",
        [
            (25, RecommendationPriority.HIGH),
            (-50, RecommendationPriority.HIGH),
            (15, RecommendationPriority.MEDIUM),
            (20, RecommendationPriority.MEDIUM),
        ],
    )
    def test_priority_for_adjustment(self, adjustment, expected):
        assert priority_for_adjustment(adjustment, 20) == expected


class TestOptimizationHistoryEntry:
    def test_entries_are_immutable(self):
        entry = OptimizationHistoryEntry(
            campaign_id="c1", type=OptimizationType.BID_RECOMMENDATIONS
        )
        with pytest.raises(ValidationError):
            entry.campaign_id = "c2"

    def test_serializes_timestamp(self):
        timestamp = datetime(2025, 4, 15, 12, tzinfo=timezone.utc)
        entry = OptimizationHistoryEntry(
            campaign_id="c1",
            type=OptimizationType.CONVERSION_VALUE,
            timestamp=timestamp,
        )
        dumped = entry.model_dump(mode="json")
        assert dumped["timestamp"] == timestamp.isoformat()
        assert dumped["type"] == "conversion_value"

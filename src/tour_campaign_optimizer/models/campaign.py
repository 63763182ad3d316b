"""Campaign performance snapshot models."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from tour_campaign_optimizer.models.base import BaseTCOModel, ensure_utc

METRIC_FIELDS = ("impressions", "clicks", "conversions", "cost", "conversion_value")


class MetricsRecord(BaseTCOModel):
    """Performance counters shared by campaigns, audiences, keywords and devices.

    Missing or null counters are treated as zero. Negative counters are rejected.
    """

    impressions: float = Field(default=0, ge=0)
    clicks: float = Field(default=0, ge=0)
    conversions: float = Field(default=0, ge=0)
    cost: float = Field(default=0, ge=0, description="Spend in account currency")
    conversion_value: float = Field(default=0, ge=0, alias="conversionValue")

    @field_validator(*METRIC_FIELDS, mode="before")
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        """Default null counters to zero."""
        return 0 if v is None else v


class AudienceRecord(MetricsRecord):
    """Performance of one audience segment."""

    name: str
    audience_id: str | None = Field(None, alias="audienceId")
    category: str | None = Field(
        None, description="demographic, interest, behavior or another label"
    )
    performance: float | None = Field(
        None, description="Relative performance index used for bid adjustments"
    )

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v: str | None) -> str | None:
        """Lowercase the category label."""
        return v.strip().lower() if v else v


class KeywordRecord(MetricsRecord):
    """Performance of one keyword."""

    keyword: str
    avg_cpc: float = Field(default=0, ge=0, alias="avgCpc")

    @field_validator("avg_cpc", mode="before")
    @classmethod
    def cpc_none_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v


class DeviceRecord(MetricsRecord):
    """Performance of one device class. The device name is its key in the breakdown."""


class ConversionRecord(BaseTCOModel):
    """A single booking conversion."""

    value: float = Field(default=0, ge=0)
    tour_type: str | None = Field(None, alias="tourType")
    timestamp: datetime | None = Field(
        None, validation_alias=AliasChoices("timestamp", "date")
    )

    @field_validator("value", mode="before")
    @classmethod
    def value_none_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("timestamp")
    @classmethod
    def timestamp_to_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v else v


class LocationRecord(BaseTCOModel):
    """Relative performance of one target location."""

    location: str
    performance: float = Field(default=0, ge=0)


class TimeSlotRecord(BaseTCOModel):
    """Relative performance of one hour of the day."""

    hour: int = Field(..., ge=0, le=23)
    performance: float = Field(default=0, ge=0)


class TourPerformanceRecord(BaseTCOModel):
    """Historical performance of one tour type over a period."""

    tour_type: str = Field(default="unknown", alias="tourType")
    timestamp: datetime | None = None
    revenue: float = Field(default=0, ge=0)
    conversions: float = Field(default=0, ge=0)
    cost: float = Field(default=0, ge=0)

    @field_validator("revenue", "conversions", "cost", mode="before")
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("tour_type", mode="before")
    @classmethod
    def default_tour_type(cls, v: Any) -> Any:
        return v or "unknown"

    @field_validator("timestamp")
    @classmethod
    def timestamp_to_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v else v


class CampaignData(MetricsRecord):
    """Snapshot of a campaign's performance supplied by the caller.

    ``conversions`` is either an aggregate count or a list of individual
    conversion records. The list form drives conversion value analysis.
    """

    campaign_id: str = Field(..., min_length=1, alias="campaignId")
    name: str | None = None
    bid_strategy: str | None = Field(None, alias="bidStrategy")
    conversions: float | list[ConversionRecord] = 0
    avg_quality_score: float | None = Field(
        None, ge=0, le=10, alias="avgQualityScore"
    )
    last_updated: datetime | None = Field(None, alias="lastUpdated")

    keywords: list[KeywordRecord] = Field(default_factory=list)
    device_breakdown: dict[str, DeviceRecord] = Field(
        default_factory=dict, alias="deviceBreakdown"
    )
    audience_data: list[AudienceRecord] = Field(
        default_factory=list, alias="audienceData"
    )
    location_data: list[LocationRecord] = Field(
        default_factory=list, alias="locationData"
    )
    time_data: list[TimeSlotRecord] = Field(default_factory=list, alias="timeData")

    @field_validator("conversions")
    @classmethod
    def validate_conversion_count(
        cls, v: float | list[ConversionRecord]
    ) -> float | list[ConversionRecord]:
        """Reject negative aggregate conversion counts."""
        if not isinstance(v, list) and v < 0:
            raise ValueError("conversions must be >= 0")
        return v

    @field_validator(
        "keywords", "audience_data", "location_data", "time_data", mode="before"
    )
    @classmethod
    def none_to_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("device_breakdown", mode="before")
    @classmethod
    def none_to_empty_dict(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("last_updated")
    @classmethod
    def last_updated_to_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v else v

    @property
    def conversion_records(self) -> list[ConversionRecord]:
        """Individual conversions, empty when only a count was supplied."""
        return self.conversions if isinstance(self.conversions, list) else []

    @property
    def conversion_count(self) -> float:
        """Number of conversions in either representation."""
        if isinstance(self.conversions, list):
            return len(self.conversions)
        return self.conversions

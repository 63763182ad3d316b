"""Base model with common configuration."""

from datetime import datetime, timezone

from pydantic import BaseModel as PydanticBaseModel
from pydantic import Field, field_serializer


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class BaseTCOModel(PydanticBaseModel):
    """Base model for all tour campaign optimizer models."""

    model_config = {
        # Use enum values instead of names
        "use_enum_values": True,
        # Validate on assignment
        "validate_assignment": True,
        # Accept both snake_case names and camelCase aliases
        "populate_by_name": True,
        "extra": "ignore",
    }


class TimestampedModel(BaseTCOModel):
    """Result model stamped with the time it was produced."""

    timestamp: datetime = Field(
        default_factory=utc_now, description="When the result was produced"
    )

    @field_serializer("timestamp")
    def serialize_timestamp(self, dt: datetime) -> str:
        """Serialize datetime to ISO format."""
        return dt.isoformat()

"""Numeric helpers shared by the campaign analyzers.

Every ratio helper returns 0 instead of raising when its denominator is 0.
"""

import copy
import math
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field

from tour_campaign_optimizer.core.config import OptimizationThresholds
from tour_campaign_optimizer.models.base import ensure_utc, utc_now

PriorityLevel = Literal["critical", "high", "medium", "low"]

# camelCase keys accepted in plain mappings
_KEY_ALIASES = {
    "campaignId": "campaign_id",
    "conversionValue": "conversion_value",
    "audienceData": "audience_data",
    "lastUpdated": "last_updated",
}

CONFIDENCE_FIELDS = ("impressions", "clicks", "conversions", "cost", "conversion_value")
REQUIRED_FIELDS = ("campaign_id", "impressions", "clicks", "cost")
OPTIONAL_FIELDS = ("conversions", "conversion_value", "keywords", "audience_data")

# Assumed age in days when a snapshot carries no last_updated
DEFAULT_DATA_AGE_DAYS = 30


class CampaignDataValidation(BaseModel):
    """Field presence report for a campaign snapshot."""

    is_valid: bool = True
    missing_required: list[str] = Field(default_factory=list)
    missing_optional: list[str] = Field(default_factory=list)
    completeness: float = Field(default=0, description="Percent of fields present")


def _supplied_fields(data: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
    """Return the fields explicitly supplied in a snapshot, keyed by snake_case name."""
    if isinstance(data, BaseModel):
        return {name: getattr(data, name) for name in data.model_fields_set}
    return {_KEY_ALIASES.get(key, key): value for key, value in data.items()}


def _as_count(value: Any) -> float:
    """Numeric count of a field, 0 when it is not a number."""
    if isinstance(value, (list, tuple)):
        return len(value)
    if isinstance(value, bool) or value is None:
        return 0
    try:
        count = float(value)
    except (TypeError, ValueError):
        return 0
    return 0 if math.isnan(count) else count


def _as_datetime(value: Any) -> datetime | None:
    """Parse ISO strings and epoch milliseconds, None when unparseable."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str):
        try:
            return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    return None


def calculate_standard_deviation(values: list[float]) -> float:
    """Population standard deviation, 0 for an empty list."""
    if not values:
        return 0
    mean = sum(values) / len(values)
    variance = sum((value - mean) ** 2 for value in values) / len(values)
    return math.sqrt(variance)


def calculate_confidence_score(
    data: BaseModel | Mapping[str, Any],
    thresholds: OptimizationThresholds | None = None,
    now: datetime | None = None,
) -> float:
    """Score how far recommendations built on a snapshot can be trusted.

    Weights: data volume 40%, recency 30%, field completeness 30%.

    Args:
        data: Campaign snapshot, either a model or a plain mapping
        thresholds: Volume thresholds (defaults to OptimizationThresholds())
        now: Reference time for recency (defaults to the current UTC time)

    Returns:
        Score between 0 and 1
    """
    thresholds = thresholds or OptimizationThresholds()
    fields = _supplied_fields(data)
    score = 0.0

    conversions = _as_count(fields.get("conversions"))
    impressions = _as_count(fields.get("impressions"))
    if conversions >= thresholds.min_conversions:
        score += 0.2
    if conversions >= thresholds.min_conversions * 2:
        score += 0.1
    if impressions >= thresholds.min_impressions:
        score += 0.1

    last_updated = _as_datetime(fields.get("last_updated"))
    if last_updated is None:
        data_age = DEFAULT_DATA_AGE_DAYS
    else:
        data_age = ((now or utc_now()) - last_updated).total_seconds() / 86400

    if data_age <= 7:
        score += 0.3
    elif data_age <= 14:
        score += 0.2
    elif data_age <= 30:
        score += 0.1

    present = sum(1 for name in CONFIDENCE_FIELDS if fields.get(name) is not None)
    score += present / len(CONFIDENCE_FIELDS) * 0.3

    return max(0.0, min(score, 1.0))


def calculate_percentage_change(old_value: float, new_value: float) -> float:
    """Percent change from old to new, 100 when growing from zero."""
    if old_value == 0:
        return 100 if new_value > 0 else 0
    return (new_value - old_value) / old_value * 100


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def format_currency(value: float, currency: str = "JPY") -> str:
    """Format a money amount, e.g. ``¥12,000`` or ``1,234.5 USD``."""
    if currency == "JPY":
        return f"¥{_format_number(value)}"
    return f"{_format_number(value)} {currency}"


def format_percentage(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%"


def calculate_roas(revenue: float, cost: float) -> float:
    """Return on ad spend."""
    if cost == 0:
        return 0
    return revenue / cost


def calculate_roi(revenue: float, cost: float) -> float:
    """Return on investment in percent."""
    if cost == 0:
        return 0
    return (revenue - cost) / cost * 100


def calculate_conversion_rate(conversions: float, clicks: float) -> float:
    """Conversions per click in percent."""
    if clicks == 0:
        return 0
    return conversions / clicks * 100


def calculate_cost_per_conversion(cost: float, conversions: float) -> float:
    if conversions == 0:
        return 0
    return cost / conversions


def calculate_ctr(clicks: float, impressions: float) -> float:
    """Click-through rate in percent."""
    if impressions == 0:
        return 0
    return clicks / impressions * 100


def safe_mean(values: list[float]) -> float:
    if not values:
        return 0
    return sum(values) / len(values)


def determine_priority(impact: float, urgency: float) -> PriorityLevel:
    """Map the mean of impact and urgency (0-100) to a priority level."""
    score = (impact + urgency) / 2
    if score >= 80:
        return "critical"
    if score >= 60:
        return "high"
    if score >= 40:
        return "medium"
    return "low"


def validate_campaign_data(
    data: BaseModel | Mapping[str, Any],
) -> CampaignDataValidation:
    """Report which required and optional fields a snapshot carries.

    A field counts as missing when it was not supplied, is null, or is an empty
    string. Zero and empty collections count as present.
    """
    fields = _supplied_fields(data)
    validation = CampaignDataValidation()

    def is_missing(name: str) -> bool:
        value = fields.get(name)
        if value is None:
            return True
        return value == ""

    for name in REQUIRED_FIELDS:
        if is_missing(name):
            validation.missing_required.append(name)
            validation.is_valid = False

    for name in OPTIONAL_FIELDS:
        if is_missing(name):
            validation.missing_optional.append(name)

    total = len(REQUIRED_FIELDS) + len(OPTIONAL_FIELDS)
    present = (
        total - len(validation.missing_required) - len(validation.missing_optional)
    )
    validation.completeness = present / total * 100
    return validation


def generate_optimization_id(
    campaign_id: str, optimization_type: str, now: datetime | None = None
) -> str:
    """Build an id of the form ``{campaign}_{type}_{epoch_ms}``."""
    timestamp_ms = int((now or utc_now()).timestamp() * 1000)
    return f"{campaign_id}_{optimization_type}_{timestamp_ms}"


def deep_clone(obj: Any) -> Any:
    return copy.deepcopy(obj)

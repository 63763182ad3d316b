"""Pure helpers for campaign metrics and callback rate limiting."""

from tour_campaign_optimizer.utils.metrics import (
    CampaignDataValidation,
    calculate_confidence_score,
    calculate_conversion_rate,
    calculate_cost_per_conversion,
    calculate_ctr,
    calculate_percentage_change,
    calculate_roas,
    calculate_roi,
    calculate_standard_deviation,
    deep_clone,
    determine_priority,
    format_currency,
    format_percentage,
    generate_optimization_id,
    validate_campaign_data,
)
from tour_campaign_optimizer.utils.timing import debounce, throttle

__all__ = [
    "CampaignDataValidation",
    "calculate_confidence_score",
    "calculate_conversion_rate",
    "calculate_cost_per_conversion",
    "calculate_ctr",
    "calculate_percentage_change",
    "calculate_roas",
    "calculate_roi",
    "calculate_standard_deviation",
    "debounce",
    "deep_clone",
    "determine_priority",
    "format_currency",
    "format_percentage",
    "generate_optimization_id",
    "throttle",
    "validate_campaign_data",
]

"""Unit tests for lookup tables and season helpers."""

import pytest

from tour_campaign_optimizer.constants import (
    AUDIENCE_SEGMENTS,
    DEVICE_BENCHMARKS,
    GEOGRAPHIC_PERFORMANCE,
    KEYWORD_CATEGORIES,
    SEASONAL_FACTORS,
    TIME_PATTERNS,
    TOUR_TYPES,
    BidStrategy,
    CompetitionLevel,
    get_month_name,
    get_season_for_month,
)


class TestSeasonalFactors:
    def test_every_month_belongs_to_one_season(self):
        months = [m for factor in SEASONAL_FACTORS.values() for m in factor.months]
        assert sorted(months) == list(range(12))

    def test_spring_profile(self):
        spring = SEASONAL_FACTORS["spring"]
        assert spring.months == (2, 3, 4)
        assert spring.demand_multiplier == 1.8
        assert spring.competition_level == CompetitionLevel.HIGH
        assert spring.recommended_budget_increase == 0.4

    def test_winter_reduces_budget(self):
        assert SEASONAL_FACTORS["winter"].recommended_budget_increase < 0

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            SEASONAL_FACTORS["monsoon"] = SEASONAL_FACTORS["summer"]


class TestSeasonForMonth:
    @pytest.mark.parametrize(
        "month,season",
        [
            (0, "winter"),
            (1, "winter"),
            (2, "spring"),
            (4, "spring"),
            (5, "summer"),
            (8, "autumn"),
            (10, "autumn"),
            (11, "winter"),
        ],
    )
    def test_season_lookup(self, month, season):
        assert get_season_for_month(month) == season

    def test_out_of_range_falls_back_to_spring(self):
        assert get_season_for_month(12) == "spring"
        assert get_season_for_month(-1) == "spring"


class TestMonthNames:
    def test_zero_based(self):
        assert get_month_name(0) == "January"
        assert get_month_name(11) == "December"

    def test_unknown(self):
        assert get_month_name(12) == "Unknown"


class TestReferenceTables:
    def test_tour_prices(self):
        assert TOUR_TYPES["gion"].average_price == 12000
        assert TOUR_TYPES["morning"].average_price == 8000
        assert min(t.average_price for t in TOUR_TYPES.values()) == 8000

    def test_device_traffic_shares_sum_to_one(self):
        total = sum(b.traffic_share for b in DEVICE_BENCHMARKS.values())
        assert total == pytest.approx(1.0)

    def test_high_and_low_hours_do_not_overlap(self):
        assert not set(TIME_PATTERNS.high_performance_hours) & set(
            TIME_PATTERNS.low_performance_hours
        )

    def test_branded_keywords_bid_aggressively(self):
        assert KEYWORD_CATEGORIES["branded"].bid_strategy == BidStrategy.AGGRESSIVE
        assert KEYWORD_CATEGORIES["competitor"].bid_strategy == BidStrategy.CONSERVATIVE

    def test_audience_segments_prefer_known_tours(self):
        for segment in AUDIENCE_SEGMENTS.values():
            assert set(segment.preferred_tours) <= set(TOUR_TYPES)

    def test_geographic_markets(self):
        assert set(GEOGRAPHIC_PERFORMANCE) == {"domestic", "international"}
        assert (
            GEOGRAPHIC_PERFORMANCE["domestic"]["kyoto"].competition_level
            == CompetitionLevel.VERY_HIGH
        )

"""Pytest configuration and shared fixtures."""

import os
from datetime import datetime, timezone

import pytest

from tour_campaign_optimizer.core.config import Settings, get_settings

# Mid-April: spring, cherry blossom season
FIXED_NOW = datetime(2025, 4, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now():
    """The reference time used by the fixed clock."""
    return FIXED_NOW


@pytest.fixture
def clock():
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def settings(monkeypatch):
    """Default settings, isolated from TCO_* variables in the environment."""
    for key in list(os.environ):
        if key.startswith("TCO_"):
            monkeypatch.delenv(key, raising=False)
    return Settings()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reset the cached settings between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def campaign_data():
    """A realistic campaign snapshot in the camelCase shape callers send."""
    return {
        "campaignId": "kyoto-spring-001",
        "name": "Kyoto Spring Tours",
        "bidStrategy": "target_roas",
        "impressions": 50000,
        "clicks": 2000,
        "cost": 400000,
        "conversionValue": 1600000,
        "conversions": 120,
        "avgQualityScore": 7,
        "lastUpdated": "2025-04-12T09:00:00Z",
        "keywords": [
            {
                "keyword": "kyoto night tour",
                "impressions": 8000,
                "clicks": 400,
                "conversions": 12,
                "cost": 40000,
                "conversionValue": 240000,
                "avgCpc": 100,
            },
            {
                "keyword": "gion walking tour",
                "impressions": 6000,
                "clicks": 300,
                "conversions": 5,
                "cost": 30000,
                "conversionValue": 110000,
                "avgCpc": 100,
            },
            {
                "keyword": "cheap kyoto tour",
                "impressions": 5000,
                "clicks": 500,
                "conversions": 1,
                "cost": 60000,
                "conversionValue": 8000,
                "avgCpc": 120,
            },
        ],
        "deviceBreakdown": {
            "mobile": {
                "clicks": 1200,
                "conversions": 60,
                "cost": 200000,
                "conversionValue": 1000000,
            },
            "desktop": {
                "clicks": 600,
                "conversions": 50,
                "cost": 150000,
                "conversionValue": 500000,
            },
            "tablet": {
                "clicks": 200,
                "conversions": 10,
                "cost": 50000,
                "conversionValue": 100000,
            },
        },
        "audienceData": [
            {
                "name": "Culture Enthusiasts",
                "audienceId": "aud-1",
                "category": "interest",
                "impressions": 12000,
                "clicks": 600,
                "conversions": 30,
                "cost": 60000,
                "conversionValue": 360000,
            },
            {
                "name": "Adults 25-34",
                "audienceId": "aud-2",
                "category": "demographic",
                "impressions": 9000,
                "clicks": 450,
                "conversions": 12,
                "cost": 50000,
                "conversionValue": 150000,
            },
            {
                "name": "Budget Travelers",
                "audienceId": "aud-3",
                "category": "behavior",
                "impressions": 7000,
                "clicks": 500,
                "conversions": 1,
                "cost": 45000,
                "conversionValue": 9000,
            },
        ],
    }

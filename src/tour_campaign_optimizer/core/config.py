"""Configuration management for the tour campaign optimizer."""

import logging
import os
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environments."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogFormat(str, Enum):
    """Log format options."""

    JSON = "json"
    TEXT = "text"


class OptimizationThresholds(BaseModel):
    """Thresholds shared by the campaign analyzers."""

    min_conversions: int = Field(default=10, ge=0)
    min_impressions: int = Field(default=1000, ge=0)
    roas_target: float = Field(default=3.0, gt=0.0)
    conversion_rate_target: float = Field(
        default=2.0, gt=0.0, description="Target conversion rate in percent"
    )
    cost_per_conversion_target: float = Field(default=5000.0, gt=0.0)
    quality_score_target: float = Field(default=7.0, ge=1.0, le=10.0)
    ctr_target: float = Field(default=2.0, gt=0.0)

    # Conversion value optimizer
    low_value_threshold: float = Field(
        default=8000.0,
        ge=0.0,
        description="Average conversion value (JPY) below which an alert fires",
    )
    high_value_lift: float = Field(
        default=1.2,
        gt=1.0,
        description="Multiple of the average value that marks a high-value segment",
    )

    # Bid engine dimensions without a fixed decision table
    performance_deviation: float = Field(
        default=0.2,
        gt=0.0,
        lt=1.0,
        description="Deviation from the group mean that triggers a bid change",
    )

    @model_validator(mode="after")
    def validate_threshold_combinations(self) -> "OptimizationThresholds":
        """Validate threshold combinations make business sense."""
        if self.roas_target < 1.0:
            raise ValueError("roas_target should be >= 1.0 for profitability")
        return self


class ImpactModel(BaseModel):
    """Factors used to turn bid adjustments into an expected impact estimate.

    These are asserted constants rather than calibrated values.
    """

    device_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    conversion_efficiency: float = Field(default=0.8, ge=0.0)
    revenue_multiplier: float = Field(default=1.2, ge=0.0)
    medium_risk_threshold: float = Field(default=15.0, ge=0.0)
    high_risk_threshold: float = Field(default=30.0, ge=0.0)

    @model_validator(mode="after")
    def validate_risk_thresholds(self) -> "ImpactModel":
        """Risk thresholds must be ordered."""
        if self.high_risk_threshold <= self.medium_risk_threshold:
            raise ValueError(
                "high_risk_threshold must be greater than medium_risk_threshold"
            )
        return self


class ToursConfig(BaseModel):
    """Tour catalogue cache configuration."""

    cache_ttl_seconds: int = Field(
        default=300, ge=1, description="How long fetched tours stay fresh"
    )
    redis_url: str | None = Field(
        default=None, description="Use Redis for the tour cache when set"
    )
    default_cutoff_hours: int = Field(default=24, ge=0)

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str | None) -> str | None:
        """Validate Redis URL scheme."""
        if v and not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("redis_url must start with redis://, rediss:// or unix://")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: LogFormat = LogFormat.TEXT
    log_file: str | None = None

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level


class Settings(BaseSettings):
    """Application settings.

    Environment Variables:
        TCO_ENVIRONMENT=development|staging|production
        TCO_THRESHOLDS__ROAS_TARGET=3.0
        TCO_TOURS__CACHE_TTL_SECONDS=300
        TCO_TOURS__REDIS_URL=redis://localhost:6379/0
        TCO_LOGGING__LEVEL=INFO
        TCO_LOGGING__FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="TCO_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    environment: Environment = Environment.DEVELOPMENT
    currency: str = Field(default="JPY", min_length=3, max_length=3)

    thresholds: OptimizationThresholds = Field(default_factory=OptimizationThresholds)
    impact: ImpactModel = Field(default_factory=ImpactModel)
    tours: ToursConfig = Field(default_factory=ToursConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def get_env(self, key: str, default: str | None = None) -> str | None:
        """Get environment variable with TCO_ prefix."""
        return os.environ.get(f"TCO_{key}", default)

    @classmethod
    def from_env(cls, env_file: Path | None = None, **overrides: Any) -> "Settings":
        """Load settings from the environment, reading a .env file first if present."""
        if env_file:
            load_dotenv(env_file)
        else:
            root_dir = Path(__file__).parent.parent.parent.parent
            env_path = root_dir / ".env"
            if env_path.exists():
                load_dotenv(env_path)

        return cls(**overrides)

    def validate_required_settings(self) -> None:
        """Validate settings that depend on the environment."""
        if self.environment == Environment.PRODUCTION and self.logging.level == "DEBUG":
            logging.getLogger(__name__).warning(
                "DEBUG logging enabled in production environment"
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    try:
        settings = Settings.from_env()
        settings.validate_required_settings()
        return settings
    except (ValidationError, ValueError) as e:
        logging.error(f"Configuration error: {e}")
        raise


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper())

    if settings.logging.format == LogFormat.JSON:
        import json

        class JsonFormatter(logging.Formatter):
            def format(self, record: logging.LogRecord) -> str:
                log_data = {
                    "timestamp": self.formatTime(record),
                    "level": record.levelname,
                    "logger": record.name,
                    "message": record.getMessage(),
                    "module": record.module,
                    "function": record.funcName,
                    "line": record.lineno,
                }
                if record.exc_info:
                    log_data["exception"] = self.formatException(record.exc_info)
                return json.dumps(log_data)

        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.logging.log_file:
        log_path = Path(settings.logging.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

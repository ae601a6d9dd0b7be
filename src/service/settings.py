from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pricing.config import EstimateConfig, RelevanceConfig, WeatherConfig


class ServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Estimate rates, all currency in cents
    labor_rate_cents: int = Field(default=7500, ge=0, alias="LABOR_RATE_CENTS")
    material_rate: float = Field(default=0.2, ge=0, alias="MATERIAL_RATE")
    tax_rate: float = Field(default=0.0875, ge=0, alias="TAX_RATE")
    minimum_charge_cents: int = Field(default=2500, ge=0, alias="MINIMUM_CHARGE_CENTS")
    maximum_surge: float = Field(default=2.0, ge=0, alias="MAXIMUM_SURGE")
    surge_enabled: bool = Field(default=True, alias="SURGE_ENABLED")
    weather_adjustments: bool = Field(default=True, alias="WEATHER_ADJUSTMENTS")

    # Weather thresholds
    weather_high_temp_f: float = Field(default=85.0, alias="WEATHER_HIGH_TEMP_F")
    weather_low_temp_f: float = Field(default=40.0, alias="WEATHER_LOW_TEMP_F")
    weather_high_humidity_pct: float = Field(default=70.0, alias="WEATHER_HIGH_HUMIDITY_PCT")
    weather_high_wind_mph: float = Field(default=15.0, alias="WEATHER_HIGH_WIND_MPH")
    weather_high_uv_index: float = Field(default=7.0, alias="WEATHER_HIGH_UV_INDEX")

    # Search
    search_max_age_days: float = Field(default=365.0, gt=0, alias="SEARCH_MAX_AGE_DAYS")
    search_result_limit: int = Field(default=20, gt=0, alias="SEARCH_RESULT_LIMIT")
    search_log_limit: int = Field(default=10000, gt=0, alias="SEARCH_LOG_LIMIT")

    review_confidence_threshold: float = Field(default=0.75, ge=0, le=1, alias="REVIEW_CONFIDENCE_THRESHOLD")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

    def weather_config(self) -> WeatherConfig:
        return WeatherConfig(
            high_temp_threshold=self.weather_high_temp_f,
            low_temp_threshold=self.weather_low_temp_f,
            high_humidity_threshold=self.weather_high_humidity_pct,
            high_wind_threshold=self.weather_high_wind_mph,
            high_uv_threshold=self.weather_high_uv_index,
        )

    def estimate_config(self) -> EstimateConfig:
        return EstimateConfig(
            labor_rate=self.labor_rate_cents,
            material_rate=self.material_rate,
            tax_rate=self.tax_rate,
            minimum_charge=self.minimum_charge_cents,
            maximum_surge=self.maximum_surge,
            surge_enabled=self.surge_enabled,
            weather_adjustments=self.weather_adjustments,
            weather=self.weather_config(),
        )

    def relevance_config(self) -> RelevanceConfig:
        return RelevanceConfig(max_age_days=self.search_max_age_days)

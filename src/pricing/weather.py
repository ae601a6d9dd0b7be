from __future__ import annotations

from pricing.config import WeatherConfig
from pricing.data_models import WeatherSnapshot, require_finite

DEFAULT_WEATHER_CONFIG = WeatherConfig()


def _conditions(snapshot: WeatherSnapshot, config: WeatherConfig) -> list[tuple[str, float]]:
    temperature = require_finite(snapshot.temperature, "temperature")
    humidity = require_finite(snapshot.humidity, "humidity")
    wind_speed = require_finite(snapshot.wind_speed, "wind_speed")
    uv_index = require_finite(snapshot.uv_index, "uv_index")

    hits: list[tuple[str, float]] = []
    if temperature > config.high_temp_threshold:
        hits.append(("High temperature", config.high_temp_multiplier))
    elif temperature < config.low_temp_threshold:
        hits.append(("Low temperature", config.low_temp_multiplier))
    if humidity > config.high_humidity_threshold:
        hits.append(("High humidity", config.high_humidity_multiplier))
    if snapshot.precipitation:
        hits.append(("Precipitation", config.precipitation_multiplier))
    if wind_speed > config.high_wind_threshold:
        hits.append(("High wind", config.high_wind_multiplier))
    if uv_index > config.high_uv_threshold:
        hits.append(("High UV index", config.high_uv_multiplier))
    return hits


def weather_multiplier(snapshot: WeatherSnapshot, config: WeatherConfig = DEFAULT_WEATHER_CONFIG) -> float:
    multiplier = 1.0
    for _, factor in _conditions(snapshot, config):
        multiplier *= factor
    return multiplier


def weather_factors(snapshot: WeatherSnapshot, config: WeatherConfig = DEFAULT_WEATHER_CONFIG) -> list[str]:
    return [label for label, _ in _conditions(snapshot, config)]

"""Data source factories for plugging different forecast backends."""

from .base import CallableForecastDataSource, ForecastDataSource
from .factory import build_data_source
from .open_meteo_client import (
    AirQualitySeries,
    HourlySeries,
    WeatherSeries,
    fetch_air_hours,
    fetch_weather_hours,
)

__all__ = [
    "build_data_source",
    "ForecastDataSource",
    "CallableForecastDataSource",
    "AirQualitySeries",
    "HourlySeries",
    "WeatherSeries",
    "fetch_air_hours",
    "fetch_weather_hours",
]

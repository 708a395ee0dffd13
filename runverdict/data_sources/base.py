"""Interfaces and helpers for forecast data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from runverdict.data_sources.open_meteo_client import AirQualitySeries, WeatherSeries


class ForecastDataSource(Protocol):
    """Interface for anything that can provide hourly weather and air-quality series."""

    def fetch_weather_hours(
        self,
        latitude: float,
        longitude: float,
        *,
        timezone: str = "auto",
        forecast_days: int = 2,
        hourly_vars: Sequence[str] | None = None,
        timeout: float = 10.0,
    ) -> WeatherSeries:
        """Return hourly weather observations."""
        ...

    def fetch_air_hours(
        self,
        latitude: float,
        longitude: float,
        *,
        timezone: str = "auto",
        forecast_days: int = 2,
        hourly_vars: Sequence[str] | None = None,
        timeout: float = 10.0,
    ) -> AirQualitySeries:
        """Return hourly air-quality observations."""
        ...


@dataclass
class CallableForecastDataSource(ForecastDataSource):
    """Wrap two callables so they can be swapped for different backends or test fakes."""

    weather_hours: Callable[..., WeatherSeries]
    air_hours: Callable[..., AirQualitySeries]

    def fetch_weather_hours(self, *args, **kwargs) -> WeatherSeries:
        return self.weather_hours(*args, **kwargs)

    def fetch_air_hours(self, *args, **kwargs) -> AirQualitySeries:
        return self.air_hours(*args, **kwargs)

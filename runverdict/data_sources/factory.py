"""Factory helpers for choosing a forecast data source at startup."""

from __future__ import annotations

from runverdict import config
from runverdict.data_sources.base import CallableForecastDataSource, ForecastDataSource
from runverdict.data_sources.open_meteo_client import fetch_air_hours, fetch_weather_hours
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAME = "open_meteo"


def build_data_source(settings: config.Settings | None = None) -> ForecastDataSource:
    """Instantiate the configured forecast data source."""
    settings = settings or config.settings
    source = (settings.forecast_source or DEFAULT_SOURCE_NAME).lower()

    if source == "open_meteo":
        logger.debug("Using Open-Meteo data source")
        return CallableForecastDataSource(
            weather_hours=fetch_weather_hours,
            air_hours=fetch_air_hours,
        )

    raise ValueError(f"Unknown forecast source '{source}'")

"""Fetch weather and air-quality series and flatten them into a reading for the target hour."""
from __future__ import annotations

import datetime as dt
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo

from runverdict.aqi import is_present, resolve_aqi
from runverdict.config import Settings
from runverdict.data_sources import AirQualitySeries, ForecastDataSource, WeatherSeries
from runverdict.data_sources.open_meteo_client import empty_air_series, empty_weather_series
from runverdict.domain import AqiSource, ResolvedReading, TargetSlot
from runverdict.errors import UpstreamFetchError
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="forecast_service")

MS_TO_KMH = 3.6


@dataclass
class RunConditions:
    """Both hourly series fetched for one run."""
    weather: WeatherSeries
    air: AirQualitySeries


def target_slot(now: dt.datetime, tz: ZoneInfo | str, hour: int = 6) -> TargetSlot:
    """Today's `hour` in the given zone. Naive `now` values are taken as UTC."""
    tzinfo = ZoneInfo(tz) if isinstance(tz, str) else tz
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt.timezone.utc)
    return TargetSlot(date=now.astimezone(tzinfo).date(), hour=hour)


def _value_at(values: list, i: int) -> Optional[float]:
    if 0 <= i < len(values) and is_present(values[i]):
        return float(values[i])
    return None


def resolve_reading(
    conditions: RunConditions,
    slot: TargetSlot,
    *,
    aqi_source: AqiSource = AqiSource.AUTO,
) -> ResolvedReading:
    """
    Weather comes from the exact target hour only (unknown when the hour is
    missing); AQI uses the nearest-hour fallback.
    """
    weather = conditions.weather
    i = weather.index_for(slot)
    wind_ms = _value_at(weather.wind_speed_10m, i)
    aqi = resolve_aqi(conditions.air, slot, source=aqi_source)

    reading = ResolvedReading(
        temperature_c=_value_at(weather.temperature_2m, i),
        relative_humidity=_value_at(weather.relative_humidity_2m, i),
        wind_kmh=wind_ms * MS_TO_KMH if wind_ms is not None else None,
        aqi=aqi.aqi,
        aqi_category=aqi.category,
        aqi_origin=aqi.origin,
    )
    if i < 0:
        logger.warning("Target hour missing from weather series", extra={"target": slot.prefix})
    if aqi.index is not None and aqi.index != conditions.air.index_for(slot):
        logger.info(
            "AQI taken from a neighbouring hour",
            extra={"target": slot.prefix, "used": conditions.air.time[aqi.index]},
        )
    return reading


def _series_result(name: str, future: Future):
    """The fetched series; a malformed one (misaligned columns) counts as an upstream failure."""
    try:
        return future.result()
    except ValueError as exc:
        raise UpstreamFetchError(name, str(exc)) from exc


def fetch_conditions(settings: Settings, data_source: ForecastDataSource) -> RunConditions:
    """
    Fetch both series concurrently (one attempt each) and wait for both.

    Upstream failures propagate unless `allow_partial_upstream` is set, in
    which case the failed source contributes an empty series.
    """
    common = {
        "timezone": settings.timezone,
        "forecast_days": settings.forecast_days,
        "timeout": settings.http_timeout_seconds,
    }
    logger.info(
        "Fetching weather and air quality",
        extra={"latitude": settings.latitude, "longitude": settings.longitude, "timezone": settings.timezone},
    )

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="fetch") as pool:
        weather_future = pool.submit(
            data_source.fetch_weather_hours,
            settings.latitude,
            settings.longitude,
            hourly_vars=settings.weather_hourly_vars,
            **common,
        )
        air_future = pool.submit(
            data_source.fetch_air_hours,
            settings.latitude,
            settings.longitude,
            hourly_vars=settings.air_hourly_vars,
            **common,
        )
        results = {}
        for name, future, empty in (
            ("weather", weather_future, empty_weather_series),
            ("air", air_future, empty_air_series),
        ):
            try:
                results[name] = _series_result(name, future)
            except UpstreamFetchError as exc:
                if not settings.allow_partial_upstream:
                    raise
                logger.warning("Continuing without %s data: %s", name, exc)
                results[name] = empty()

    return RunConditions(weather=results["weather"], air=results["air"])

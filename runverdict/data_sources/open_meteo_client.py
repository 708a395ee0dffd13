"""Helpers for fetching hourly weather and air-quality series from the Open-Meteo APIs."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

import requests

from runverdict.domain import TargetSlot
from runverdict.errors import UpstreamFetchError
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag='open_meteo_client')

# One attempt per call: the run is re-triggered by the scheduler, not retried here.
session = requests.Session()

OPEN_METEO_WEATHER_URL = "https://api.open-meteo.com/v1/forecast"
OPEN_METEO_AIR_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"

DEFAULT_WEATHER_VARS = ["temperature_2m", "relative_humidity_2m", "wind_speed_10m"]
DEFAULT_AIR_VARS = ["pm2_5", "pm10", "us_aqi"]

EXPECTED_WEATHER_UNITS = {
    "temperature_2m": "°C",
    "relative_humidity_2m": "%",
    "wind_speed_10m": "m/s",
}

EXPECTED_AIR_UNITS = {
    "pm2_5": "μg/m³",
    "pm10": "μg/m³",
    "us_aqi": "USAQI",
}

# Acceptable alternative spellings that should not trigger warnings.
ALLOWED_UNIT_SYNONYMS = {
    "relative_humidity_2m": {"%", "percent"},
    "wind_speed_10m": {"m/s", "ms"},
    "pm2_5": {"μg/m³", "µg/m³", "ug/m3"},
    "pm10": {"μg/m³", "µg/m³", "ug/m3"},
    "us_aqi": {"USAQI", "aqi", "US AQI"},
}


@dataclass
class HourlySeries:
    """Hourly timestamps (local ISO strings) with parallel value columns.

    Every column has one entry per timestamp; a column left empty is filled
    with None, any other length mismatch is rejected.
    """
    time: List[str] = field(default_factory=list)

    def _columns(self) -> dict[str, list]:
        return {}

    def __post_init__(self) -> None:
        for name, column in self._columns().items():
            if not column and self.time:
                setattr(self, name, [None] * len(self.time))
            elif len(column) != len(self.time):
                raise ValueError(
                    f"series '{name}' has {len(column)} values for {len(self.time)} timestamps"
                )

    def __len__(self) -> int:
        return len(self.time)

    def index_for(self, slot: TargetSlot) -> int:
        """Position of the first timestamp in the slot's hour, or -1."""
        prefix = slot.prefix
        for i, t in enumerate(self.time):
            if str(t).startswith(prefix):
                return i
        return -1


@dataclass
class WeatherSeries(HourlySeries):
    """Hourly weather: temperature (°C), relative humidity (%), wind speed (m/s)."""
    temperature_2m: List[Optional[float]] = field(default_factory=list)
    relative_humidity_2m: List[Optional[float]] = field(default_factory=list)
    wind_speed_10m: List[Optional[float]] = field(default_factory=list)

    def _columns(self) -> dict[str, list]:
        return {
            "temperature_2m": self.temperature_2m,
            "relative_humidity_2m": self.relative_humidity_2m,
            "wind_speed_10m": self.wind_speed_10m,
        }


@dataclass
class AirQualitySeries(HourlySeries):
    """Hourly air quality: PM concentrations (µg/m³), US AQI and an optional EPA label."""
    pm2_5: List[Optional[float]] = field(default_factory=list)
    pm10: List[Optional[float]] = field(default_factory=list)
    us_aqi: List[Optional[float]] = field(default_factory=list)
    epa_health_concern: List[Optional[str]] = field(default_factory=list)

    def _columns(self) -> dict[str, list]:
        return {
            "pm2_5": self.pm2_5,
            "pm10": self.pm10,
            "us_aqi": self.us_aqi,
            "epa_health_concern": self.epa_health_concern,
        }


def empty_weather_series() -> WeatherSeries:
    return WeatherSeries()


def empty_air_series() -> AirQualitySeries:
    return AirQualitySeries()


def _warn_on_unexpected_units(units: dict, *, context: str):
    """Log a warning if Open-Meteo returns units we did not request/expect."""
    if not units:
        return
    expected_units = {**EXPECTED_WEATHER_UNITS, **EXPECTED_AIR_UNITS}
    for name, actual in units.items():
        expected = expected_units.get(name)
        if expected is None or actual is None or actual == expected:
            continue
        allowed = ALLOWED_UNIT_SYNONYMS.get(name, set())
        if actual not in allowed:
            logger.warning(
                "Unexpected Open-Meteo unit",
                extra={"context": context, "field": name, "unit": actual, "expected": expected},
            )


def _column(hourly: dict, name: str, length: int, *, source: str) -> list:
    """Return an hourly column, padded with None when the API omitted it."""
    values = hourly.get(name)
    if values is None:
        return [None] * length
    if len(values) != length:
        raise UpstreamFetchError(
            source, f"'{name}' has {len(values)} values for {length} timestamps"
        )
    return list(values)


def _get_json(url: str, params: dict, *, source: str, timeout: float) -> dict[str, Any]:
    """GET an Open-Meteo endpoint once and decode the JSON body."""
    try:
        resp = session.get(url, params=params, timeout=timeout)
        resp.raise_for_status()
    except requests.exceptions.HTTPError as exc:
        status_code = getattr(exc.response, "status_code", None)
        raise UpstreamFetchError(source, str(status_code or exc), status_code=status_code) from exc
    except requests.exceptions.RequestException as exc:
        raise UpstreamFetchError(source, str(exc)) from exc

    try:
        data = resp.json()
    except ValueError as exc:
        raise UpstreamFetchError(source, "response body is not JSON") from exc
    if not isinstance(data, dict) or not isinstance(data.get("hourly"), dict):
        raise UpstreamFetchError(source, "response has no hourly block")
    return data


def fetch_weather_hours(
    latitude: float,
    longitude: float,
    *,
    timezone: str = "auto",
    forecast_days: int = 2,
    hourly_vars: Sequence[str] | None = None,
    timeout: float = 10.0,
) -> WeatherSeries:
    """Fetch hourly temperature (°C), humidity (%) and wind speed (m/s)."""
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "hourly": ",".join(hourly_vars or DEFAULT_WEATHER_VARS),
        "forecast_days": forecast_days,
        "timezone": timezone,
        "temperature_unit": "celsius",
        "wind_speed_unit": "ms",
    }

    data = _get_json(OPEN_METEO_WEATHER_URL, params, source="weather", timeout=timeout)
    hourly = data["hourly"]
    _warn_on_unexpected_units(data.get("hourly_units") or {}, context="weather_hourly")

    times = list(hourly.get("time") or [])
    series = WeatherSeries(
        time=times,
        temperature_2m=_column(hourly, "temperature_2m", len(times), source="weather"),
        relative_humidity_2m=_column(hourly, "relative_humidity_2m", len(times), source="weather"),
        wind_speed_10m=_column(hourly, "wind_speed_10m", len(times), source="weather"),
    )
    logger.debug("Fetched weather hours", extra={"hours": len(series)})
    return series


def fetch_air_hours(
    latitude: float,
    longitude: float,
    *,
    timezone: str = "auto",
    forecast_days: int = 2,
    hourly_vars: Sequence[str] | None = None,
    timeout: float = 10.0,
) -> AirQualitySeries:
    """Fetch hourly PM2.5, PM10, US AQI and (when requested) the EPA health concern."""
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "hourly": ",".join(hourly_vars or DEFAULT_AIR_VARS),
        "forecast_days": forecast_days,
        "timezone": timezone,
    }

    data = _get_json(OPEN_METEO_AIR_URL, params, source="air quality", timeout=timeout)
    hourly = data["hourly"]
    _warn_on_unexpected_units(data.get("hourly_units") or {}, context="air_hourly")

    times = list(hourly.get("time") or [])
    labels = _column(hourly, "epa_health_concern", len(times), source="air quality")
    series = AirQualitySeries(
        time=times,
        pm2_5=_column(hourly, "pm2_5", len(times), source="air quality"),
        pm10=_column(hourly, "pm10", len(times), source="air quality"),
        us_aqi=_column(hourly, "us_aqi", len(times), source="air quality"),
        # Only text labels are authoritative; numeric concern levels are dropped.
        epa_health_concern=[v if isinstance(v, str) and v.strip() else None for v in labels],
    )
    logger.debug("Fetched air-quality hours", extra={"hours": len(series)})
    return series

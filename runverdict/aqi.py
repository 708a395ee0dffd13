"""US AQI resolution for the target hour.

Picks the AQI closest to the target slot from an hourly air-quality series,
computing it from PM2.5/PM10 concentrations with the EPA breakpoint tables when
no index value is supplied, and attaches the EPA category label. Missing data
is never an error: the degraded answer is ``AqiReading(aqi=None, category="Unknown")``.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from runverdict.data_sources.open_meteo_client import AirQualitySeries
from runverdict.domain import UNKNOWN_CATEGORY, AqiOrigin, AqiReading, AqiSource, TargetSlot

# (C_low, C_high, I_low, I_high), µg/m³ -> AQI
PM25_BREAKPOINTS = [
    (0.0, 12.0, 0, 50),
    (12.1, 35.4, 51, 100),
    (35.5, 55.4, 101, 150),
    (55.5, 150.4, 151, 200),
    (150.5, 250.4, 201, 300),
    (250.5, 350.4, 301, 400),
    (350.5, 500.4, 401, 500),
]

PM10_BREAKPOINTS = [
    (0, 54, 0, 50),
    (55, 154, 51, 100),
    (155, 254, 101, 150),
    (255, 354, 151, 200),
    (355, 424, 201, 300),
    (425, 504, 301, 400),
    (505, 604, 401, 500),
]

AQI_MAX = 500

# Upper bound (inclusive) of each category.
CATEGORY_THRESHOLDS = [
    (50, "Good"),
    (100, "Moderate"),
    (150, "Unhealthy for Sensitive Groups"),
    (200, "Unhealthy"),
    (300, "Very Unhealthy"),
]
TOP_CATEGORY = "Hazardous"


def is_present(value: object) -> bool:
    """True for real, finite numbers. None, NaN, inf, bools and strings are absent."""
    if value is None or isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _truncate(value: float, decimals: int) -> float:
    # EPA truncates concentrations to the table's precision before lookup.
    scale = 10 ** decimals
    return math.floor(value * scale + 1e-9) / scale


def aqi_from_concentration(
    concentration: Optional[float],
    breakpoints: Sequence[tuple],
    *,
    decimals: int,
) -> Optional[int]:
    """Piecewise-linear EPA interpolation. Above the table saturates at 500."""
    if not is_present(concentration):
        return None
    c = _truncate(max(0.0, float(concentration)), decimals)
    for c_low, c_high, i_low, i_high in breakpoints:
        if c_low <= c <= c_high:
            return _round_half_up((i_high - i_low) / (c_high - c_low) * (c - c_low) + i_low)
    return AQI_MAX


def aqi_from_pm25(concentration: Optional[float]) -> Optional[int]:
    """US AQI for a PM2.5 concentration in µg/m³."""
    return aqi_from_concentration(concentration, PM25_BREAKPOINTS, decimals=1)


def aqi_from_pm10(concentration: Optional[float]) -> Optional[int]:
    """US AQI for a PM10 concentration in µg/m³."""
    return aqi_from_concentration(concentration, PM10_BREAKPOINTS, decimals=0)


def category_for_aqi(aqi: Optional[float], label: Optional[str] = None) -> str:
    """Authoritative label if given, else the EPA category for the numeric AQI."""
    if label:
        return label
    if not is_present(aqi):
        return UNKNOWN_CATEGORY
    for upper, name in CATEGORY_THRESHOLDS:
        if aqi <= upper:
            return name
    return TOP_CATEGORY


def _at(values: Sequence, i: int):
    return values[i] if 0 <= i < len(values) else None


def _concentration_aqi(series: AirQualitySeries, i: int) -> Optional[AqiReading]:
    """PM2.5-derived AQI at position i, falling back to PM10."""
    for origin, convert, values in (
        (AqiOrigin.PM2_5, aqi_from_pm25, series.pm2_5),
        (AqiOrigin.PM10, aqi_from_pm10, series.pm10),
    ):
        aqi = convert(_at(values, i))
        if aqi is not None:
            return AqiReading(aqi=aqi, category=category_for_aqi(aqi), origin=origin, index=i)
    return None


def _index_aqi(series: AirQualitySeries, i: int) -> Optional[AqiReading]:
    """Supplied US AQI at position i, with its label when one came along."""
    value = _at(series.us_aqi, i)
    if not is_present(value):
        return None
    aqi = _round_half_up(value)
    label = _at(series.epa_health_concern, i)
    return AqiReading(aqi=aqi, category=category_for_aqi(aqi, label), origin=AqiOrigin.INDEX, index=i)


def reading_at(series: AirQualitySeries, i: int, source: AqiSource = AqiSource.AUTO) -> Optional[AqiReading]:
    """The usable AQI at position i under the given source policy, or None."""
    if not 0 <= i < len(series):
        return None
    if source == AqiSource.INDEX:
        return _index_aqi(series, i)
    if source == AqiSource.CONCENTRATION:
        return _concentration_aqi(series, i)
    return _index_aqi(series, i) or _concentration_aqi(series, i)


def _scan_order(target: int, length: int):
    """Exact hour, then backwards to the start, then forwards to the end."""
    if target >= 0:
        yield target
    for i in range(min(target, length) - 1, -1, -1):
        yield i
    for i in range(max(target + 1, 0), length):
        yield i


def resolve_aqi(
    series: AirQualitySeries | None,
    slot: TargetSlot,
    *,
    source: AqiSource = AqiSource.AUTO,
) -> AqiReading:
    """Return the AQI nearest the target slot by scan order, or an Unknown reading."""
    if series is None or not len(series):
        return AqiReading()

    target = series.index_for(slot)
    for i in _scan_order(target, len(series)):
        found = reading_at(series, i, source)
        if found is not None:
            return found
    return AqiReading()

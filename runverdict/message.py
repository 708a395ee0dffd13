"""Render the one-line notification text for a verdict."""

from __future__ import annotations

import math
from typing import Optional

from runverdict.aqi import is_present
from runverdict.domain import ResolvedReading, Verdict

NA = "NA"
SEPARATOR = " • "


def _round_half_up(value: float, decimals: int) -> float:
    # Ties go away from zero; plain format() would round 22.5 down to 22.
    scale = 10 ** decimals
    return math.copysign(math.floor(abs(value) * scale + 0.5) / scale, value)


def fmt(value: Optional[float], decimals: int = 0) -> str:
    """Fixed-point number, or NA when unknown."""
    if not is_present(value):
        return NA
    return f"{_round_half_up(value, decimals):.{decimals}f}"


def greeting(name: Optional[str]) -> str:
    if name:
        return f"🌅 Good morning, {name}!"
    return "🌅 Good morning!"


def aqi_text(reading: ResolvedReading) -> str:
    if not is_present(reading.aqi):
        return NA
    return f"{fmt(reading.aqi)} ({reading.aqi_category})"


def build_message(reading: ResolvedReading, verdict: Verdict, *, name: Optional[str] = None) -> str:
    """
    e.g. "🌅 Good morning, Nitay! 🏃‍♂️ 🟡 Caution • 🌡️ 30°C • 💧 50% • 💨 10 km/h • 🌫️ AQI 40 (Good)"
    """
    parts = [
        f"{greeting(name)} 🏃‍♂️ {verdict.icon.value} {verdict.text}",
        f"🌡️ {fmt(reading.temperature_c)}°C",
        f"💧 {fmt(reading.relative_humidity)}%",
        f"💨 {fmt(reading.wind_kmh)} km/h",
        f"🌫️ AQI {aqi_text(reading)}",
    ]
    return SEPARATOR.join(parts)

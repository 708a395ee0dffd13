"""Deterministic run verdict for an asthmatic runner.

Air quality is checked first and can force an indoor day on its own; heat and
humidity form the secondary check. Unknown inputs never satisfy a threshold,
so a reading with nothing known comes out as "Safe to run".
"""

from __future__ import annotations

from typing import Optional

from runverdict.aqi import is_present
from runverdict.domain import ResolvedReading, Verdict, VerdictIcon

AQI_INDOOR_MIN = 101
AQI_CAUTION_MIN = 51
TEMP_INDOOR_MIN_C = 32.0
TEMP_CAUTION_MIN_C = 28.0
HUMIDITY_CAUTION_MIN = 75.0

INDOOR_ONLY = Verdict(icon=VerdictIcon.SEVERE, text="Indoor only")
CAUTION = Verdict(icon=VerdictIcon.MODERATE, text="Caution")
SAFE_TO_RUN = Verdict(icon=VerdictIcon.SAFE, text="Safe to run")


def _at_least(value: Optional[float], threshold: float) -> bool:
    """value >= threshold, False when the value is unknown."""
    return is_present(value) and value >= threshold


def classify(
    temp_c: Optional[float],
    rh: Optional[float],
    wind_kmh: Optional[float],
    aqi: Optional[float],
) -> Verdict:
    """Apply the decision table; first matching row wins.

    ``wind_kmh`` is part of the reading but does not influence the verdict yet.
    """
    if _at_least(aqi, AQI_INDOOR_MIN):
        return INDOOR_ONLY
    if _at_least(aqi, AQI_CAUTION_MIN):
        if _at_least(temp_c, TEMP_INDOOR_MIN_C):
            return INDOOR_ONLY
        return CAUTION
    if _at_least(temp_c, TEMP_INDOOR_MIN_C):
        return INDOOR_ONLY
    if _at_least(temp_c, TEMP_CAUTION_MIN_C) or _at_least(rh, HUMIDITY_CAUTION_MIN):
        return CAUTION
    return SAFE_TO_RUN


def classify_reading(reading: ResolvedReading) -> Verdict:
    """Pure function: classify a resolved reading."""
    return classify(reading.temperature_c, reading.relative_humidity, reading.wind_kmh, reading.aqi)

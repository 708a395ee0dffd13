"""Domain vocabulary and strict schemas for the morning run verdict.

This module defines the stable contract between the data sources, the AQI
resolver, the verdict engine and the entry points: enums, the target slot, the
resolved reading, and the result payload. No interpretation logic lives here.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class _StrictBaseModel(BaseModel):
    """Base model with strict extra handling."""

    model_config = ConfigDict(extra="forbid")


class VerdictIcon(str, Enum):
    """Severity marker shown at the front of the notification."""
    SEVERE = "🔴"
    MODERATE = "🟡"
    SAFE = "🟢"


class AqiSource(str, Enum):
    """Where the resolver is allowed to take AQI values from."""
    INDEX = "index"                  # supplied US AQI series only
    CONCENTRATION = "concentration"  # computed from PM2.5, then PM10
    AUTO = "auto"                    # supplied index, computed when missing


class AqiOrigin(str, Enum):
    """How a resolved AQI value was obtained."""
    INDEX = "index"
    PM2_5 = "pm2_5"
    PM10 = "pm10"


UNKNOWN_CATEGORY = "Unknown"


class Verdict(_StrictBaseModel):
    """Go/no-go advice for the run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    icon: VerdictIcon
    text: str


class TargetSlot(_StrictBaseModel):
    """The local (date, hour) the verdict is evaluated for."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    date: dt.date
    hour: int = Field(ge=0, le=23)

    @property
    def prefix(self) -> str:
        """Timestamp prefix as Open-Meteo writes local hours, e.g. 2025-06-01T06:00."""
        return f"{self.date.isoformat()}T{self.hour:02d}:00"


class AqiReading(_StrictBaseModel):
    """Output of the air-quality resolver."""
    aqi: int | None = None
    category: str = UNKNOWN_CATEGORY
    origin: AqiOrigin | None = None
    index: int | None = None  # position in the series the value came from


class ResolvedReading(_StrictBaseModel):
    """Flattened scalars fed to the verdict engine. Any field may be unknown."""
    temperature_c: float | None = None
    relative_humidity: float | None = None
    wind_kmh: float | None = None
    aqi: int | None = None
    aqi_category: str = UNKNOWN_CATEGORY
    aqi_origin: AqiOrigin | None = None


class RunResult(_StrictBaseModel):
    """Outcome of one invocation, returned by the HTTP and CLI entry points."""
    ok: bool
    message: str | None = None
    error: str | None = None
    delivered: bool = False
    target: str | None = None
    temperature_c: float | None = None
    relative_humidity: float | None = None
    wind_kmh: float | None = None
    aqi: int | None = None
    aqi_category: str | None = None
    verdict: Verdict | None = None

    @classmethod
    def success(
        cls,
        *,
        message: str,
        slot: TargetSlot,
        reading: ResolvedReading,
        verdict: Verdict,
        delivered: bool,
    ) -> "RunResult":
        return cls(
            ok=True,
            message=message,
            delivered=delivered,
            target=slot.prefix,
            temperature_c=reading.temperature_c,
            relative_humidity=reading.relative_humidity,
            wind_kmh=reading.wind_kmh,
            aqi=reading.aqi,
            aqi_category=reading.aqi_category,
            verdict=verdict,
        )

    @classmethod
    def failure(cls, error: BaseException | str) -> "RunResult":
        return cls(ok=False, error=str(error))

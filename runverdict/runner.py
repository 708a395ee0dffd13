"""
One verdict run: resolve the target hour, fetch conditions, classify, format
and push. All decision logic is deterministic; this module only wires the
pieces together and decides what counts as failure.
"""

from __future__ import annotations

import datetime as dt

from runverdict.config import Settings, settings as default_settings
from runverdict.data_sources import ForecastDataSource, build_data_source
from runverdict.domain import RunResult
from runverdict.errors import ConfigurationError
from runverdict.forecast_service import fetch_conditions, resolve_reading, target_slot
from runverdict.message import build_message
from runverdict.notifier import NtfyNotifier
from runverdict.verdict_engine import classify_reading
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="runner")


def run_verdict(
    settings: Settings | None = None,
    *,
    data_source: ForecastDataSource | None = None,
    notifier: NtfyNotifier | None = None,
    now: dt.datetime | None = None,
    dry_run: bool = False,
) -> RunResult:
    """
    Produce today's verdict and push it.

    Raises a RunVerdictError subclass on configuration, upstream or delivery
    failure; entry points turn that into `RunResult.failure()`.
    """
    settings = settings or default_settings
    if not dry_run and not settings.ntfy_topic and not (notifier and notifier.topic):
        raise ConfigurationError("Missing ntfy topic (set NTFY_TOPIC)")

    slot = target_slot(now or dt.datetime.now(dt.timezone.utc), settings.tzinfo, settings.target_hour)
    logger.info("Evaluating run verdict", extra={"target": slot.prefix, "location": settings.location_name})

    conditions = fetch_conditions(settings, data_source or build_data_source(settings))
    reading = resolve_reading(conditions, slot, aqi_source=settings.aqi_source)
    verdict = classify_reading(reading)
    message = build_message(reading, verdict, name=settings.greeting_name)
    logger.info("Verdict %s: %s", verdict.text, message)

    if dry_run:
        logger.info("Dry run; not pushing notification")
    else:
        (notifier or NtfyNotifier.from_settings(settings)).send(message)

    return RunResult.success(
        message=message,
        slot=slot,
        reading=reading,
        verdict=verdict,
        delivered=not dry_run,
    )

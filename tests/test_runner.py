import datetime as dt
import unittest

from runverdict.config import Settings
from runverdict.data_sources import AirQualitySeries, CallableForecastDataSource, WeatherSeries
from runverdict.domain import VerdictIcon
from runverdict.errors import ConfigurationError, DeliveryError, UpstreamFetchError
from runverdict.runner import run_verdict

# 03:10 UTC == 06:10 in Jerusalem (summer time)
NOW = dt.datetime(2025, 6, 1, 3, 10, tzinfo=dt.timezone.utc)
TIMES = ["2025-06-01T05:00", "2025-06-01T06:00", "2025-06-01T07:00"]


class RecordingNotifier:
    def __init__(self, topic="runs", error=None):
        self.topic = topic
        self.error = error
        self.sent = []

    def send(self, message, topic=None):
        if self.error:
            raise self.error
        self.sent.append(message)


def _data_source(temp=30.0, rh=50.0, wind_ms=10 / 3.6, us_aqi=40):
    weather = WeatherSeries(
        time=list(TIMES),
        temperature_2m=[None, temp, None],
        relative_humidity_2m=[None, rh, None],
        wind_speed_10m=[None, wind_ms, None],
    )
    air = AirQualitySeries(time=list(TIMES), us_aqi=[None, us_aqi, None])
    return CallableForecastDataSource(lambda *a, **k: weather, lambda *a, **k: air)


class TestRunVerdict(unittest.TestCase):
    def setUp(self):
        self.settings = Settings(ntfy_topic="runs", timezone="Asia/Jerusalem", greeting_name="Nitay")

    def test_end_to_end_caution_message(self):
        notifier = RecordingNotifier()
        result = run_verdict(self.settings, data_source=_data_source(), notifier=notifier, now=NOW)

        self.assertTrue(result.ok)
        self.assertTrue(result.delivered)
        self.assertEqual(result.target, "2025-06-01T06:00")
        self.assertEqual(result.verdict.icon, VerdictIcon.MODERATE)
        self.assertEqual(
            result.message,
            "🌅 Good morning, Nitay! 🏃‍♂️ 🟡 Caution • 🌡️ 30°C • 💧 50% • 💨 10 km/h • 🌫️ AQI 40 (Good)",
        )
        self.assertEqual(notifier.sent, [result.message])
        self.assertEqual(result.temperature_c, 30.0)
        self.assertEqual(result.aqi, 40)
        self.assertEqual(result.aqi_category, "Good")

    def test_bad_air_is_indoor_only(self):
        notifier = RecordingNotifier()
        result = run_verdict(self.settings, data_source=_data_source(temp=20, rh=40, us_aqi=120),
                             notifier=notifier, now=NOW)
        self.assertEqual(result.verdict.text, "Indoor only")
        self.assertIn("AQI 120 (Unhealthy for Sensitive Groups)", result.message)

    def test_all_unknown_renders_na_and_safe(self):
        result = run_verdict(
            self.settings,
            data_source=_data_source(temp=None, rh=None, wind_ms=None, us_aqi=None),
            notifier=RecordingNotifier(),
            now=NOW,
        )
        self.assertEqual(result.verdict.text, "Safe to run")
        self.assertTrue(result.message.endswith("🌡️ NA°C • 💧 NA% • 💨 NA km/h • 🌫️ AQI NA"))
        self.assertEqual(result.aqi_category, "Unknown")

    def test_missing_topic_fails_before_fetching(self):
        fetched = []
        ds = CallableForecastDataSource(lambda *a, **k: fetched.append("w"), lambda *a, **k: fetched.append("a"))
        with self.assertRaises(ConfigurationError):
            run_verdict(Settings(ntfy_topic=None), data_source=ds, now=NOW)
        self.assertEqual(fetched, [])

    def test_unknown_timezone_fails_before_fetching(self):
        fetched = []
        ds = CallableForecastDataSource(lambda *a, **k: fetched.append("w"), lambda *a, **k: fetched.append("a"))
        with self.assertRaises(ConfigurationError):
            run_verdict(Settings(ntfy_topic="runs", timezone="Mars/Olympus_Mons"), data_source=ds, now=NOW,
                        dry_run=True)
        self.assertEqual(fetched, [])

    def test_dry_run_does_not_push(self):
        notifier = RecordingNotifier()
        result = run_verdict(Settings(ntfy_topic=None), data_source=_data_source(), notifier=notifier,
                             now=NOW, dry_run=True)
        self.assertTrue(result.ok)
        self.assertFalse(result.delivered)
        self.assertEqual(notifier.sent, [])

    def test_upstream_error_propagates_without_push(self):
        def failing(*_a, **_k):
            raise UpstreamFetchError("weather", "500", status_code=500)

        notifier = RecordingNotifier()
        ds = CallableForecastDataSource(failing, lambda *a, **k: AirQualitySeries())
        with self.assertRaises(UpstreamFetchError):
            run_verdict(self.settings, data_source=ds, notifier=notifier, now=NOW)
        self.assertEqual(notifier.sent, [])

    def test_delivery_error_propagates(self):
        notifier = RecordingNotifier(error=DeliveryError("503", status_code=503))
        with self.assertRaises(DeliveryError):
            run_verdict(self.settings, data_source=_data_source(), notifier=notifier, now=NOW)


if __name__ == "__main__":
    unittest.main()

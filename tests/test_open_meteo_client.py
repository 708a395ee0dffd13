import datetime as dt
import unittest

import requests

from runverdict.data_sources import open_meteo_client
from runverdict.domain import TargetSlot
from runverdict.errors import UpstreamFetchError


class DummyResp:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class RecordingSession:
    def __init__(self, resp):
        self.resp = resp
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if isinstance(self.resp, Exception):
            raise self.resp
        return self.resp


def _make_weather_payload():
    return {
        "hourly": {
            "time": ["2025-06-01T05:00", "2025-06-01T06:00", "2025-06-01T07:00"],
            "temperature_2m": [18.5, 19.2, None],
            "relative_humidity_2m": [80, 78, 70],
            "wind_speed_10m": [2.0, 2.5, 3.0],
        },
        "hourly_units": {
            "time": "iso8601",
            "temperature_2m": "°C",
            "relative_humidity_2m": "%",
            "wind_speed_10m": "m/s",
        },
    }


def _make_air_payload():
    return {
        "hourly": {
            "time": ["2025-06-01T05:00", "2025-06-01T06:00"],
            "pm2_5": [8.0, 9.5],
            "pm10": [20.0, None],
            "us_aqi": [33, 39],
        },
        "hourly_units": {"pm2_5": "μg/m³", "pm10": "μg/m³", "us_aqi": "USAQI"},
    }


class TestOpenMeteoClient(unittest.TestCase):
    def setUp(self):
        self._orig_session = open_meteo_client.session

    def tearDown(self):
        open_meteo_client.session = self._orig_session

    def test_fetch_weather_hours(self):
        session = RecordingSession(DummyResp(_make_weather_payload()))
        open_meteo_client.session = session

        series = open_meteo_client.fetch_weather_hours(31.7, 35.0, timezone="Asia/Jerusalem")
        self.assertEqual(len(series), 3)
        self.assertEqual(series.temperature_2m[1], 19.2)
        self.assertIsNone(series.temperature_2m[2])
        params = session.calls[0]["params"]
        self.assertEqual(params["wind_speed_unit"], "ms")
        self.assertEqual(params["timezone"], "Asia/Jerusalem")
        self.assertEqual(params["hourly"], "temperature_2m,relative_humidity_2m,wind_speed_10m")

    def test_fetch_air_hours_pads_missing_columns(self):
        open_meteo_client.session = RecordingSession(DummyResp(_make_air_payload()))

        series = open_meteo_client.fetch_air_hours(0, 0)
        self.assertEqual(series.us_aqi, [33, 39])
        self.assertEqual(series.pm10, [20.0, None])
        self.assertEqual(series.epa_health_concern, [None, None])

    def test_fetch_air_hours_keeps_text_labels_only(self):
        payload = _make_air_payload()
        payload["hourly"]["epa_health_concern"] = ["Good", 2]
        open_meteo_client.session = RecordingSession(DummyResp(payload))

        series = open_meteo_client.fetch_air_hours(0, 0)
        self.assertEqual(series.epa_health_concern, ["Good", None])

    def test_http_error_becomes_upstream_error(self):
        open_meteo_client.session = RecordingSession(DummyResp({}, status_code=503))

        with self.assertRaises(UpstreamFetchError) as ctx:
            open_meteo_client.fetch_weather_hours(0, 0)
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertIn("weather", str(ctx.exception))

    def test_transport_error_becomes_upstream_error(self):
        open_meteo_client.session = RecordingSession(requests.exceptions.ConnectionError("boom"))

        with self.assertRaises(UpstreamFetchError):
            open_meteo_client.fetch_air_hours(0, 0)

    def test_non_json_body_is_upstream_error(self):
        open_meteo_client.session = RecordingSession(DummyResp(ValueError("not json")))

        with self.assertRaises(UpstreamFetchError):
            open_meteo_client.fetch_air_hours(0, 0)

    def test_misaligned_column_is_upstream_error(self):
        payload = _make_weather_payload()
        payload["hourly"]["temperature_2m"] = [18.5]
        open_meteo_client.session = RecordingSession(DummyResp(payload))

        with self.assertRaises(UpstreamFetchError):
            open_meteo_client.fetch_weather_hours(0, 0)

    def test_single_attempt_per_call(self):
        session = RecordingSession(DummyResp({}, status_code=500))
        open_meteo_client.session = session

        with self.assertRaises(UpstreamFetchError):
            open_meteo_client.fetch_air_hours(0, 0)
        self.assertEqual(len(session.calls), 1)


class TestHourlySeries(unittest.TestCase):
    def test_index_for_matches_hour_prefix(self):
        series = open_meteo_client.WeatherSeries(
            time=["2025-06-01T05:00", "2025-06-01T06:00"],
            temperature_2m=[1.0, 2.0],
            relative_humidity_2m=[None, None],
            wind_speed_10m=[None, None],
        )
        self.assertEqual(series.index_for(TargetSlot(date=dt.date(2025, 6, 1), hour=6)), 1)
        self.assertEqual(series.index_for(TargetSlot(date=dt.date(2025, 6, 2), hour=6)), -1)

    def test_misaligned_series_rejected(self):
        with self.assertRaises(ValueError):
            open_meteo_client.AirQualitySeries(time=["2025-06-01T05:00"], us_aqi=[1, 2])


if __name__ == "__main__":
    unittest.main()

import json
import unittest
from pathlib import Path

from weather_report.client import WeatherClient, _city_path
from weather_report.config import Config
from weather_report.errors import FetchTimeoutError

FIXTURES = Path(__file__).parent / "fixtures"


class RecordingFetcher:
    def __init__(self, body: bytes = b"{}", exc: Exception | None = None):
        self.body = body
        self.exc = exc
        self.calls = []

    def __call__(self, url, timeout):
        self.calls.append((url, timeout))
        if self.exc is not None:
            raise self.exc
        return self.body


def _config(city="Tokyo"):
    return Config(api_key="KEY", city=city, source_filename="/tmp/weatherrc")


class TestCityPath(unittest.TestCase):
    def test_appends_suffix_once(self):
        self.assertEqual(_city_path("Tokyo"), "Tokyo.json")
        self.assertEqual(_city_path("Tokyo.json"), "Tokyo.json")
        self.assertEqual(_city_path(_city_path("CA/San_Francisco")), "CA/San_Francisco.json")


class TestWeatherClient(unittest.TestCase):
    def test_conditions_url_and_timeout(self):
        fetcher = RecordingFetcher(b'{"current_observation": {"weather": "Clear"}}')
        client = WeatherClient("http://api.example.com/api/", fetcher=fetcher)

        data = client.conditions(_config())

        self.assertEqual(data, {"current_observation": {"weather": "Clear"}})
        self.assertEqual(fetcher.calls, [("http://api.example.com/api/KEY/conditions/q/Tokyo.json", 6.0)])

    def test_forecast_url_does_not_duplicate_suffix(self):
        fetcher = RecordingFetcher()
        client = WeatherClient("http://api.example.com/api", fetcher=fetcher, timeout_seconds=2.5)

        client.forecast(_config(city="Tokyo.json"))

        self.assertEqual(fetcher.calls, [("http://api.example.com/api/KEY/forecast/q/Tokyo.json", 2.5)])

    def test_preserves_key_order(self):
        body = (FIXTURES / "forecast.json").read_bytes()
        client = WeatherClient(fetcher=RecordingFetcher(body))
        data = client.forecast(_config())
        self.assertEqual(list(data), ["response", "forecast"])
        self.assertEqual(data, json.loads(body))

    def test_timeout_propagates(self):
        client = WeatherClient(fetcher=RecordingFetcher(exc=FetchTimeoutError("slow")))
        with self.assertRaises(FetchTimeoutError):
            client.conditions(_config())

    def test_decode_failure_propagates(self):
        client = WeatherClient(fetcher=RecordingFetcher(b"<html>oops</html>"))
        with self.assertRaises(json.JSONDecodeError):
            client.conditions(_config())

    def test_api_key_is_masked_in_logs(self):
        client = WeatherClient(fetcher=RecordingFetcher())
        with self.assertLogs("weather_report.client", level="INFO") as logs:
            client.conditions(_config())
        joined = "\n".join(logs.output)
        self.assertNotIn("KEY", joined)
        self.assertIn("***", joined)


if __name__ == "__main__":
    unittest.main()

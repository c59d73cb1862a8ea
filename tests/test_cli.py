import contextlib
import io
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import requests

from utils.logging_utils import SUCCESS
from weather_report import cli, network
from weather_report.config import Settings

FIXTURES = Path(__file__).parent / "fixtures"


class DummyRaw:
    connection = None

    def __init__(self, body: bytes):
        self._chunks = [body]

    def read1(self, amt=None, decode_content=None):
        return self._chunks.pop(0) if self._chunks else b""


class DummyResp:
    def __init__(self, body: bytes, status_code=200):
        self.raw = DummyRaw(body)
        self.status_code = status_code

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeSession:
    """Serves fixture payloads for the conditions and forecast endpoints."""

    def __init__(self, get_exc: Exception | None = None):
        self.get_exc = get_exc
        self.urls = []

    def head(self, url, timeout=None, allow_redirects=None):
        self.urls.append(("HEAD", url))
        return type("R", (), {"status_code": 200})()

    def get(self, url, timeout=None, stream=None):
        self.urls.append(("GET", url))
        if self.get_exc is not None:
            raise self.get_exc
        feature = "conditions" if "/conditions/" in url else "forecast"
        return DummyResp((FIXTURES / f"{feature}.json").read_bytes())


class TestCli(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = Path(self._tmp.name)
        self.config_path = self.tmpdir / "weatherrc"
        self.config_path.write_text("wunderground_api_key: KEY\ncity: CA/San_Francisco\n", encoding="utf-8")
        self.cache_path = self.tmpdir / "cache.tmp"
        self.settings = Settings(config_path=self.tmpdir / "default_rc", cache_path=self.cache_path)

        self._orig_session = network.session
        self.session = FakeSession()
        network.session = self.session

        self._patches = [
            patch.object(cli, "settings", self.settings),
            patch.object(cli, "setup_logging", lambda **kwargs: None),
        ]
        for p in self._patches:
            p.start()

    def tearDown(self):
        for p in self._patches:
            p.stop()
        network.session = self._orig_session
        self._tmp.cleanup()

    def _run(self, *argv):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = cli.main(list(argv))
        return code, out.getvalue()

    def test_fresh_run_prints_summary_and_writes_cache(self):
        code, out = self._run("--config", str(self.config_path))

        self.assertEqual(code, 0)
        self.assertTrue(self.cache_path.exists())
        self.assertIn("Weather for San Francisco, CA", out)
        self.assertIn("Temperature: 66.3 F (19.1 C)", out)
        self.assertIn("Humidity: 65%", out)
        self.assertIn("Tuesday: Partly cloudy.", out)
        self.assertIn("Tuesday Night: Mostly cloudy.", out)
        self.assertNotIn("Wednesday", out)
        self.assertIn(("GET", "http://api.wunderground.com/api/KEY/conditions/q/CA/San_Francisco.json"), self.session.urls)
        self.assertIn(("GET", "http://api.wunderground.com/api/KEY/forecast/q/CA/San_Francisco.json"), self.session.urls)

    def test_second_run_uses_cache(self):
        self._run("--config", str(self.config_path))
        self.session.urls.clear()

        code, out = self._run("--config", str(self.config_path))

        self.assertEqual(code, 0)
        self.assertEqual(self.session.urls, [])
        self.assertIn("Weather for San Francisco, CA", out)

    def test_missing_config_exits_with_guidance(self):
        with self.assertLogs("weather_report.cli", level="ERROR") as logs:
            with self.assertRaises(SystemExit) as ctx:
                self._run("--config", str(self.tmpdir / "missing"))

        self.assertEqual(ctx.exception.code, 1)
        self.assertEqual(self.session.urls, [])
        joined = "\n".join(logs.output)
        self.assertIn("Config file not found", joined)
        self.assertIn("wunderground_api_key:", joined)
        self.assertIn("city:", joined)

    def test_default_config_path_comes_from_settings(self):
        with self.assertLogs("weather_report.cli", level="ERROR") as logs:
            with self.assertRaises(SystemExit):
                self._run()
        self.assertIn("default_rc", "\n".join(logs.output))

    def test_timeout_exits_without_cache_write(self):
        self.session.get_exc = requests.exceptions.ReadTimeout("slow")

        with self.assertLogs("weather_report.cli", level="ERROR") as logs:
            with self.assertRaises(SystemExit) as ctx:
                self._run("--config", str(self.config_path))

        self.assertEqual(ctx.exception.code, 1)
        self.assertFalse(self.cache_path.exists())
        self.assertIn("did not answer in time", "\n".join(logs.output))

    def test_unreachable_exits(self):
        def no_route(*_a, **_k):
            raise requests.exceptions.ConnectionError("no route")

        self.session.head = no_route
        with self.assertLogs("weather_report.cli", level="ERROR") as logs:
            with self.assertRaises(SystemExit) as ctx:
                self._run("--config", str(self.config_path))

        self.assertEqual(ctx.exception.code, 1)
        self.assertFalse(any(method == "GET" for method, _ in self.session.urls))
        self.assertIn("unreachable", "\n".join(logs.output))

    def test_corrupt_cache_exits(self):
        self.cache_path.write_bytes(b"garbage")
        with self.assertLogs("weather_report.cli", level="ERROR") as logs:
            with self.assertRaises(SystemExit) as ctx:
                self._run("--config", str(self.config_path))
        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("Cache problem", "\n".join(logs.output))

    def test_directory_at_cache_path_exits(self):
        self.cache_path.mkdir()
        with self.assertLogs("weather_report.cli", level="ERROR") as logs:
            with self.assertRaises(SystemExit) as ctx:
                self._run("--config", str(self.config_path))
        self.assertEqual(ctx.exception.code, 1)
        joined = "\n".join(logs.output)
        self.assertIn("Cache problem", joined)
        self.assertIn(f"Remove {self.cache_path}", joined)

    def test_start_and_finish_logged_at_success_level(self):
        with self.assertLogs("weather_report.cli", level=SUCCESS) as logs:
            code, _ = self._run("--config", str(self.config_path))
        self.assertEqual(code, 0)
        self.assertIn("SUCCESS:weather_report.cli:Starting weather report", logs.output)
        self.assertIn("SUCCESS:weather_report.cli:Finished weather report", logs.output)

    def test_parser_flags(self):
        args = cli.build_parser().parse_args(["-q", "-c", "--debug", "--config", "x"])
        self.assertTrue(args.quiet)
        self.assertTrue(args.colorize)
        self.assertTrue(args.debug)
        self.assertEqual(args.config, "x")


if __name__ == "__main__":
    unittest.main()

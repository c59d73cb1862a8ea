"""Glue: config -> cache lookup -> fetch on miss -> cache refresh."""
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable, Optional

from utils.logging_utils import get_tagged_logger
from weather_report.app_types import WeatherResult
from weather_report.cache import ResultCache
from weather_report.client import WeatherClient
from weather_report.config import Config, Settings, load_config
from weather_report.errors import UnreachableError
from weather_report.network import is_reachable

logger = get_tagged_logger(__name__, tag="reporter")


class WeatherReporter:
    """Read-through cache in front of the weather API."""

    def __init__(
        self,
        settings: Settings,
        *,
        cache: Optional[ResultCache] = None,
        client: Optional[WeatherClient] = None,
        probe: Callable[..., bool] = is_reachable,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings
        self.cache = cache or ResultCache(settings.cache_path, ttl_seconds=settings.cache_ttl_seconds)
        self.client = client or WeatherClient(
            settings.api_base_url,
            timeout_seconds=settings.fetch_timeout_seconds,
        )
        self.probe = probe
        self.clock = clock

    def run(self) -> WeatherResult:
        """Return a fresh-enough result, fetching and caching it if needed."""
        config = load_config(self.settings.config_path)
        logger.debug("Loaded config for city '%s' from %s", config.city, config.source_filename)

        now = self.clock()
        if self.cache.exists() and self.cache.is_valid(now):
            logger.info("Using cached result (%.0fs old)", self.cache.age(now))
            return self.cache.load()

        logger.info("Cache missing or stale; fetching from the weather API")
        return self.refresh(config, now)

    def refresh(self, config: Config, now: float) -> WeatherResult:
        """Fetch conditions and forecast, store them, and return the result."""
        if not self.probe(self.settings.probe_url, self.settings.probe_timeout_seconds):
            raise UnreachableError(f"Network is unreachable (probe: {self.settings.probe_url})")

        conditions = self.client.conditions(config)
        forecast = self.client.forecast(config)
        result = WeatherResult(
            datetime=datetime.fromtimestamp(now, timezone.utc),
            conditions=conditions,
            forecast=forecast,
        )
        self.cache.save(result)
        logger.info("Stored fresh result in %s", self.cache.path)
        return result

"""Client for the Weather Underground conditions and forecast endpoints."""
from __future__ import annotations

import json
from typing import Any, Callable, Dict

from utils.logging_utils import get_tagged_logger, mask_url
from weather_report.config import Config
from weather_report.network import fetch

logger = get_tagged_logger(__name__, tag="weather_client")

DEFAULT_BASE_URL = "http://api.wunderground.com/api"
DEFAULT_TIMEOUT_SECONDS = 6.0
JSON_SUFFIX = ".json"


def _city_path(city: str) -> str:
    """Return the city with a single trailing .json."""
    return city if city.endswith(JSON_SUFFIX) else f"{city}{JSON_SUFFIX}"


class WeatherClient:
    """Fetches current conditions and the forecast for the configured city."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        fetcher: Callable[[str, float], bytes] = fetch,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.fetcher = fetcher

    def url_for(self, feature: str, config: Config) -> str:
        """Build the endpoint URL for a feature ("conditions", "forecast")."""
        return f"{self.base_url}/{config.api_key}/{feature}/q/{_city_path(config.city)}"

    def _get_json(self, feature: str, config: Config) -> Dict[str, Any]:
        url = self.url_for(feature, config)
        logger.info("Requesting %s", mask_url(url, secrets=[config.api_key]))
        body = self.fetcher(url, self.timeout_seconds)
        return json.loads(body.decode("utf-8"))

    def conditions(self, config: Config) -> Dict[str, Any]:
        """Return the decoded current-conditions payload."""
        return self._get_json("conditions", config)

    def forecast(self, config: Config) -> Dict[str, Any]:
        """Return the decoded multi-day forecast payload."""
        return self._get_json("forecast", config)

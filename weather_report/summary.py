"""Render a WeatherResult as a few human-readable lines."""
from __future__ import annotations

from typing import Any, List, Mapping, Optional

from utils.logging_utils import get_tagged_logger
from weather_report.app_types import WeatherResult

logger = get_tagged_logger(__name__, tag="summary")


def _dig(payload: Mapping[str, Any], *keys: str) -> Optional[Any]:
    """Follow keys through nested dicts, returning None on any gap."""
    node: Any = payload
    for key in keys:
        if not isinstance(node, Mapping) or key not in node:
            return None
        node = node[key]
    return node


def forecast_entries(forecast: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    """Return the text forecast periods, oldest first."""
    days = _dig(forecast, "forecast", "txt_forecast", "forecastday")
    if not isinstance(days, list):
        return []
    return [day for day in days if isinstance(day, Mapping)]


def build_summary(result: WeatherResult, *, forecast_days: int = 2) -> List[str]:
    """
    Build the report lines for a result.

    Current conditions come from `current_observation`; the forecast lines
    are the first `forecast_days` periods of the text forecast. Fields the
    API left out are skipped.
    """
    obs = _dig(result.conditions, "current_observation") or {}
    lines: List[str] = []

    location = _dig(obs, "display_location", "full")
    if location:
        lines.append(f"Weather for {location}")

    labelled = (
        ("Conditions", _dig(obs, "weather")),
        ("Temperature", _dig(obs, "temperature_string")),
        ("Humidity", _dig(obs, "relative_humidity")),
        ("Wind", _dig(obs, "wind_string")),
    )
    for label, value in labelled:
        if value not in (None, ""):
            lines.append(f"{label}: {value}")

    for day in forecast_entries(result.forecast)[:forecast_days]:
        title = day.get("title") or "?"
        text = day.get("fcttext") or day.get("fcttext_metric") or ""
        lines.append(f"{title}: {text}".rstrip())

    if not lines:
        logger.warning("Result contained no displayable fields")
    lines.append(f"(fetched {result.datetime.isoformat(timespec='seconds')})")
    return lines

"""Shared dataclasses used across modules."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass
class WeatherResult:
    """Conditions and forecast payloads with the time they were fetched."""
    datetime: datetime
    conditions: Dict[str, Any]
    forecast: Dict[str, Any]

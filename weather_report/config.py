"""Runtime settings (environment, via pydantic) and the user's ~/.weatherrc."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
from weather_report.errors import InvalidConfigError, MissingConfigError
from weather_report.structure import Record, transform

logger = get_tagged_logger(__name__, tag="config")

API_KEY_FIELD = "wunderground_api_key"
CITY_FIELD = "city"

EXAMPLE_CONFIG = """\
# ~/.weatherrc
wunderground_api_key: 0123456789abcdef
city: Tokyo
"""


class Settings(BaseSettings):
    """Environment-driven configuration for the weather reporter."""
    model_config = SettingsConfigDict(env_prefix="WEATHER_", extra="ignore")

    config_path: Path = Path("~/.weatherrc").expanduser()
    cache_path: Path = Path("/tmp/weather_app_cache.tmp")
    cache_ttl_seconds: int = 3600
    api_base_url: str = "http://api.wunderground.com/api"
    fetch_timeout_seconds: float = 6.0
    probe_url: str = "http://api.wunderground.com"
    probe_timeout_seconds: float = 3.0
    forecast_days: int = 2
    log_level: str = "INFO"

    @field_validator("api_base_url", "probe_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("config_path", "cache_path", mode="after")
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        """Allow ~ in paths coming from the environment."""
        return Path(v).expanduser()


class Config(BaseModel):
    """Validated contents of the user's config file."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    api_key: str
    city: str
    source_filename: str

    @field_validator("api_key", "city", mode="before")
    @classmethod
    def require_non_empty_string(cls, v: Any) -> str:
        """Reject missing, non-string or blank values."""
        if not isinstance(v, str) or not v.strip():
            raise ValueError("must be a non-empty string")
        return v.strip()


def _read_tree(path: Path) -> Any:
    """Parse the YAML document at path into plain Python containers."""
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise InvalidConfigError(f"Config file {path} is not valid YAML: {exc}") from exc


def load_config(path: str | Path) -> Config:
    """
    Load ~/.weatherrc (or the given path) into a Config.

    Raises MissingConfigError when the file is absent and InvalidConfigError
    when it cannot be parsed or lacks `wunderground_api_key` / `city`.
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise MissingConfigError(str(path))

    logger.debug("Reading config from %s", path)
    tree = transform(_read_tree(path))
    if not isinstance(tree, Record):
        raise InvalidConfigError(f"Config file {path} must contain a mapping at the top level")

    missing = [name for name in (API_KEY_FIELD, CITY_FIELD) if name not in tree]
    if missing:
        raise InvalidConfigError(f"Config file {path} is missing required field(s): {', '.join(missing)}")

    try:
        return Config(
            api_key=tree.wunderground_api_key,
            city=tree.city,
            source_filename=str(path),
        )
    except ValidationError as exc:
        names = {"api_key": API_KEY_FIELD, "city": CITY_FIELD}
        fields = sorted({names.get(str(err["loc"][0]), str(err["loc"][0])) for err in exc.errors() if err.get("loc")})
        raise InvalidConfigError(
            f"Config file {path} has invalid value(s) for: {', '.join(fields)}"
        ) from exc


settings = Settings()

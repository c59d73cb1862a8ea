"""Single-slot, file-backed cache of the last WeatherResult with a TTL."""

import os
import pickle
import tempfile
from pathlib import Path
from typing import Optional

from utils.logging_utils import get_tagged_logger
from weather_report.app_types import WeatherResult
from weather_report.errors import CacheError, CacheMissingError, CorruptCacheError

logger = get_tagged_logger(__name__, tag="result_cache")

DEFAULT_CACHE_PATH = Path("/tmp/weather_app_cache.tmp")
DEFAULT_TTL_SECONDS = 3600

# Errors pickle.loads can raise on truncated or foreign bytes.
_DECODE_ERRORS = (
    pickle.UnpicklingError,
    EOFError,
    AttributeError,
    ImportError,
    IndexError,
    TypeError,
    ValueError,
)


def _discard(tmp_name: str) -> None:
    """Remove a leftover temporary file, if it is still there."""
    try:
        os.unlink(tmp_name)
    except FileNotFoundError:
        pass


class ResultCache:
    """
    One cached WeatherResult stored in a single file.

    The entry's age comes from the file's modification time. There is no
    explicit invalidation: an entry expires once `mtime + ttl` has passed and
    is replaced by the next `save`. The slot is shared by every city.
    """

    def __init__(self, path: Path | str = DEFAULT_CACHE_PATH, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        """Initialize with the backing file path and TTL (seconds)."""
        self.path = Path(path)
        self.ttl = ttl_seconds

    def exists(self) -> bool:
        """Return True if a cache entry is present."""
        return self.path.is_file()

    def _mtime(self) -> float:
        try:
            return self.path.stat().st_mtime
        except FileNotFoundError as exc:
            raise CacheMissingError(f"No cache entry at {self.path}") from exc

    def age(self, now: float) -> float:
        """Seconds elapsed between the last save and `now`."""
        return now - self._mtime()

    def is_valid(self, now: float, ttl_seconds: Optional[float] = None) -> bool:
        """
        Return True if the entry is still fresh at `now` (epoch seconds).

        Fresh means `now < mtime + ttl`; an entry is stale at exactly its
        expiry instant. Raises CacheMissingError when there is no entry, so
        callers check exists() first.
        """
        ttl = self.ttl if ttl_seconds is None else ttl_seconds
        return now < self._mtime() + ttl

    def load(self) -> WeatherResult:
        """Read and decode the cached result."""
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError as exc:
            raise CacheMissingError(f"No cache entry at {self.path}") from exc
        except OSError as exc:
            raise CorruptCacheError(f"Cache file {self.path} could not be read: {exc}") from exc

        try:
            result = pickle.loads(raw)
        except _DECODE_ERRORS as exc:
            raise CorruptCacheError(f"Cache file {self.path} could not be decoded: {exc}") from exc

        if not isinstance(result, WeatherResult):
            raise CorruptCacheError(
                f"Cache file {self.path} holds {type(result).__name__}, expected WeatherResult"
            )
        logger.debug("Loaded cached result from %s", self.path)
        return result

    def save(self, result: WeatherResult) -> None:
        """
        Persist `result`, replacing any previous entry.

        Writes to a temporary file in the same directory and renames it over
        the target, so an interrupted write never leaves a partial entry.
        """
        data = pickle.dumps(result, protocol=pickle.HIGHEST_PROTOCOL)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".partial", dir=self.path.parent)
        except OSError as exc:
            raise CacheError(f"Cannot write cache file {self.path}: {exc}") from exc

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            _discard(tmp_name)
            raise CacheError(f"Cannot write cache file {self.path}: {exc}") from exc
        except BaseException:
            _discard(tmp_name)
            raise
        logger.debug("Saved result to %s (%d bytes)", self.path, len(data))

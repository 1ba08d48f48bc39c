"""
Simple file-based cache. One pickled file per key, expiry by modification time.
"""
import hashlib
import logging
import pickle
import time
from pathlib import Path
from typing import Any, Callable

from helperkit.utils.dict_path import value

CACHE_SUFFIX = ".cache"

# what unpickling a truncated or stale entry can raise
_UNREADABLE = (pickle.UnpicklingError, EOFError, AttributeError, ImportError, ValueError, TypeError, IndexError)

logger = logging.getLogger(__name__)


class FileCache:
    """
    Stores values under `<directory>/<md5(key)>.cache`. An entry is fresh while
    its file's mtime plus the requested lifetime is in the future.
    """

    def __init__(self, directory: Path, default_ttl: int = 3600):
        self.directory = directory
        self.default_ttl = default_ttl

    def ensure_dir(self) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        return self.directory

    def path_for(self, key: str) -> Path:
        digest = hashlib.md5(key.encode("utf-8")).hexdigest()
        return self.directory / f"{digest}{CACHE_SUFFIX}"

    def get(self, key: str, default: Any = None, seconds: int | None = None) -> Any:
        """Return the cached value if present and fresh, otherwise the default."""
        ttl = self.default_ttl if seconds is None else seconds
        path = self.path_for(key)
        try:
            if path.stat().st_mtime + ttl <= time.time():
                return value(default)
            with open(path, "rb") as f:
                return pickle.load(f)
        except FileNotFoundError:
            return value(default)
        except _UNREADABLE as e:
            logger.warning("Discarding unreadable cache entry %s: %s", path.name, e)
            path.unlink(missing_ok=True)
            return value(default)

    def put(self, key: str, val: Any) -> Any:
        """Store a value and return it."""
        self.ensure_dir()
        path = self.path_for(key)
        tmp = path.with_suffix(".tmp")
        with open(tmp, "wb") as f:
            pickle.dump(val, f)
        tmp.replace(path)
        return val

    def has(self, key: str, seconds: int | None = None) -> bool:
        missing = object()
        return self.get(key, missing, seconds) is not missing

    def forget(self, key: str) -> bool:
        path = self.path_for(key)
        if path.exists():
            path.unlink()
            return True
        return False

    def clear(self) -> int:
        """Remove every cache entry. Returns the number of files deleted."""
        if not self.directory.exists():
            return 0
        removed = 0
        for path in self.directory.glob(f"*{CACHE_SUFFIX}"):
            path.unlink(missing_ok=True)
            removed += 1
        logger.info("Cleared %s cache entries from %s", removed, self.directory)
        return removed

    def remember(self, key: str, seconds: int | None, callback: Callable[[], Any]) -> Any:
        """Get a fresh cached value, or compute it with callback and store it."""
        missing = object()
        cached = self.get(key, missing, seconds)
        if cached is not missing:
            return cached
        return self.put(key, callback())

    def __call__(self, key: str | None = None, val: Any = None, seconds: int | None = None) -> Any:
        """
        cache() -> cache directory
        cache(key) -> cached value or None
        cache(key, value) -> stores and returns value
        """
        if key is None:
            return self.ensure_dir()
        if val is None:
            return self.get(key, None, seconds)
        return self.put(key, val)

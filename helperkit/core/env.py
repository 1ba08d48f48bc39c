"""
Loading of `.env` files and environment lookups.
"""
import logging
import os
from pathlib import Path
from typing import Any

from helperkit.utils.dict_path import value

ENV_FILE = ".env"

logger = logging.getLogger(__name__)


def parse_env_file(path: Path) -> dict[str, str]:
    """
    Read NAME=VALUE lines from an env file. Blank lines and # comments are
    skipped, values keep everything after the first '='.
    """
    values: dict[str, str] = {}
    if not path.exists():
        return values
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                logger.warning("Ignoring malformed line %s in %s: %r", lineno, path, line)
                continue
            name, val = line.split("=", 1)
            values[name] = val
    return values


class Environment:
    """Env file values layered over the process environment."""

    def __init__(self, values: dict[str, str] | None = None):
        self.values = dict(values or {})

    @classmethod
    def load(cls, document_root: Path, *, export: bool = False) -> 'Environment':
        """Load `<document_root>/.env`. With export=True the values also go to os.environ."""
        path = document_root / ENV_FILE
        values = parse_env_file(path)
        if values:
            logger.debug("Loaded %s values from %s", len(values), path)
        if export:
            os.environ.update(values)
        return cls(values)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value from the env file, then os.environ, then the default."""
        if key in self.values:
            return self.values[key]
        if key in os.environ:
            return os.environ[key]
        return value(default)

    def __contains__(self, key: str) -> bool:
        return key in self.values or key in os.environ

    def __call__(self, key: str, default: Any = None) -> Any:
        return self.get(key, default)

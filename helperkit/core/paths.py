"""
Default paths for the document root and per-user fallbacks.
"""
import os
from pathlib import Path
from platformdirs import user_cache_dir

APP_NAME = 'helperkit'
DOCUMENT_ROOT_ENV = "HELPERKIT_DOCUMENT_ROOT"


def default_document_root() -> Path:
    """Document root from HELPERKIT_DOCUMENT_ROOT, else the working directory."""
    if env := os.getenv(DOCUMENT_ROOT_ENV):
        return Path(env).expanduser().resolve()
    return Path.cwd().resolve()


def user_cache_path() -> Path:
    """Per-user cache directory, used when the document root isn't writable."""
    return Path(user_cache_dir(APP_NAME)).expanduser().resolve()


def resolve_under(document_root: Path, configured: Path | None, default_name: str) -> Path:
    """A configured path (relative to the document root) or <document_root>/<default_name>."""
    if configured is None:
        return document_root / default_name
    configured = configured.expanduser()
    if not configured.is_absolute():
        configured = document_root / configured
    return configured.resolve()

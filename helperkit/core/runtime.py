"""
Runtime context for helperkit: the document root and everything loaded from it.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Any

from helperkit.core import paths
from helperkit.core.cache import FileCache
from helperkit.core.crypto import EncryptionError, Encrypter
from helperkit.core.env import Environment
from helperkit.core.logs import configure_logging, log
from helperkit.core.settings import Config, Settings

APP_KEY_NAMES = ("APP_KEY", "app_key")


@dataclass
class Runtime:
    """Configuration for a helperkit application rooted at a document root."""
    document_root: Path
    env: Environment
    config: Config
    settings: Settings
    cache: FileCache
    logger: logging.Logger
    encrypter: Encrypter | None = None

    @property
    def storage_dir(self) -> Path:
        return paths.resolve_under(self.document_root, self.settings.storage_path, "storage")

    @property
    def views_dir(self) -> Path:
        return paths.resolve_under(self.document_root, self.settings.views_path, "views")

    @property
    def log_dir(self) -> Path:
        return paths.resolve_under(self.document_root, self.settings.log_path, "logs")

    @property
    def app_key(self) -> str | None:
        for name in APP_KEY_NAMES:
            if key := self.env.get(name):
                return key
        return None

    def storage(self, path: str = "") -> Path:
        """Absolute path inside the storage directory (created on demand)."""
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        return self.storage_dir / path.lstrip("/")

    def asset(self, path: str) -> str:
        """Public URL of an asset, relative to the configured base_url."""
        base = self.config.get("base_url", self.settings.base_url) or ""
        return f"{base}/{path.strip('/')}"

    def encrypt(self, val: Any, serialize: bool = True) -> str:
        if self.encrypter is None:
            raise EncryptionError("No application key configured (set APP_KEY)")
        return self.encrypter.encrypt(val, serialize)

    def decrypt(self, payload: str, unserialize: bool = True) -> Any:
        if self.encrypter is None:
            raise EncryptionError("No application key configured (set APP_KEY)")
        return self.encrypter.decrypt(payload, unserialize)

    def log(self, level: str | int, message: str, context: dict[str, Any] | None = None) -> None:
        log(self.logger, level, message, context)

    def info(self, message: str, context: dict[str, Any] | None = None) -> None:
        log(self.logger, logging.INFO, message, context)


def _resolve_cache_dir(document_root: Path, settings: Settings, logger: logging.Logger) -> Path:
    cache_dir = paths.resolve_under(document_root, settings.cache_path, "cache")
    existing = cache_dir if cache_dir.exists() else cache_dir.parent
    while not existing.exists() and existing != existing.parent:
        existing = existing.parent
    if os.access(existing, os.W_OK):
        return cache_dir
    fallback = paths.user_cache_path()
    logger.warning("Cache directory %s is not writable, using %s", cache_dir, fallback)
    return fallback


def build_runtime(
    *,
    document_root: Path | None = None,
    verbose: bool = False,
) -> Runtime:
    """Builds and returns a Runtime for a document root."""
    # 1. Directories
    if document_root is not None:
        document_root = Path(document_root).expanduser().resolve()
    else:
        document_root = paths.default_document_root()
    # 2. Env and config
    env = Environment.load(document_root)
    config = Config.load(document_root)
    settings = Settings.from_tree(config.all())
    # 3. Logging
    log_dir = paths.resolve_under(document_root, settings.log_path, "logs")
    logger = configure_logging(verbose=verbose, log_dir=log_dir)
    # 4. Create context
    rt = Runtime(
        document_root=document_root,
        env=env,
        config=config,
        settings=settings,
        cache=FileCache(_resolve_cache_dir(document_root, settings, logger), settings.cache_ttl),
        logger=logger,
    )
    if key := rt.app_key:
        rt.encrypter = Encrypter(key)
    else:
        logger.debug("No APP_KEY set; encryption helpers are disabled")
    return rt

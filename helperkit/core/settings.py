"""
Configuration tree and typed settings for helperkit.
"""
import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from helperkit.utils.dict_path import data_get, data_has, data_set

CONFIG_FILES = ("config.yaml", "config.yml", "config.json")

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Typed view of the settings helperkit itself reads from the config tree."""
    model_config = ConfigDict(extra="ignore")

    app_name: str = "helperkit"
    base_url: str = ""
    storage_path: Path | None = Field(None, description="Defaults to <document_root>/storage")
    views_path: Path | None = Field(None, description="Defaults to <document_root>/views")
    cache_path: Path | None = Field(None, description="Defaults to <document_root>/cache")
    log_path: Path | None = Field(None, description="Defaults to <document_root>/logs")
    cache_ttl: int = Field(3600, ge=0, description="Default cache lifetime in seconds")

    @classmethod
    def from_tree(cls, tree: dict[str, Any]) -> 'Settings':
        """Hydrate Settings from a config tree, falling back to defaults if invalid."""
        try:
            return cls.model_validate(tree)
        except ValidationError as e:
            logger.warning("Invalid settings in config, using defaults: %s", e)
            return cls()


def read_tree(path: Path) -> dict[str, Any]:
    """Read a YAML or JSON file into a dict. Raises on unreadable or non-mapping files."""
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top of {path}, got {type(data).__name__}")
    return data


def write_tree(path: Path, tree: Any) -> Path:
    """Write a tree back as YAML or JSON, depending on the file suffix."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix == ".json":
        path.write_text(json.dumps(tree, indent=2), encoding="utf-8")
    else:
        path.write_text(yaml.safe_dump(tree, sort_keys=False), encoding="utf-8")
    return path


def load_config_tree(document_root: Path) -> dict[str, Any]:
    """Load the first config file found in the document root. Missing or broken -> {}."""
    for name in CONFIG_FILES:
        path = document_root / name
        if not path.exists():
            continue
        try:
            return read_tree(path)
        except (json.JSONDecodeError, yaml.YAMLError, ValueError) as e:
            # Corrupted config shouldn't stop the app (failsafe)
            logger.warning("Could not read config file %s: %s", path, e)
            return {}
    return {}


class Config:
    """Dot-path access to a loaded configuration tree."""

    def __init__(self, tree: dict[str, Any] | None = None):
        self.tree = tree if tree is not None else {}

    @classmethod
    def load(cls, document_root: Path) -> 'Config':
        return cls(load_config_tree(document_root))

    def get(self, key: Any, default: Any = None) -> Any:
        return data_get(self.tree, key, default)

    def set(self, key: Any, value: Any, overwrite: bool = True) -> None:
        self.tree = data_set(self.tree, key, value, overwrite)

    def has(self, key: Any) -> bool:
        return data_has(self.tree, key)

    def all(self) -> dict[str, Any]:
        return self.tree

    def __call__(self, key: Any, default: Any = None) -> Any:
        return self.get(key, default)

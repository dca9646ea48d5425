"""Project configuration stored in ``.dna/config.toml``."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import tomli_w

from .types import ProjectConfig, ServiceError

ENV_PREFIX = "DNA_"
ENV_SEPARATOR = "__"

_KEYS = ("model.provider", "model.name", "model.api_key", "model.base_url", "storage.uri")


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Nested values from ``DNA_``-prefixed variables, ``__`` separating levels."""
    overrides: dict[str, Any] = {}
    for name, value in environ.items():
        if not name.upper().startswith(ENV_PREFIX):
            continue
        key = name[len(ENV_PREFIX):].lower()
        parts = [part for part in key.split(ENV_SEPARATOR) if part]
        if not parts:
            continue
        nested: Any = value
        for part in reversed(parts):
            nested = {part: nested}
        overrides = _deep_merge(overrides, nested)
    return overrides


def _unknown_key(key: str) -> ServiceError:
    return ServiceError(f"Unknown config key: {key}")


class ConfigService:
    """Reads and writes the configuration of one project."""

    def __init__(self, project_root: str | os.PathLike[str]) -> None:
        self.config_path = Path(project_root) / ".dna" / "config.toml"

    def init(self) -> ProjectConfig:
        """Write the default configuration and return it."""
        config = ProjectConfig()
        self.save(config)
        return config

    def load(self) -> ProjectConfig:
        """Defaults, overridden by the file, overridden by ``DNA_`` variables."""
        data = ProjectConfig().to_dict()
        if self.config_path.exists():
            try:
                with self.config_path.open("rb") as handle:
                    data = _deep_merge(data, tomllib.load(handle))
            except tomllib.TOMLDecodeError as exc:
                raise ServiceError(f"Failed to load configuration: {exc}") from exc
        data = _deep_merge(data, _env_overrides(os.environ))
        try:
            return ProjectConfig.from_dict(data)
        except ValueError as exc:
            raise ServiceError(f"Failed to load configuration: {exc}") from exc

    def save(self, config: ProjectConfig) -> None:
        """Write the configuration, creating the directory if needed."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(tomli_w.dumps(config.to_dict()), encoding="utf-8")

    def update_model(self, provider: str, name: str) -> None:
        config = self.load()
        config.model.provider = provider
        config.model.name = name
        self.save(config)

    def get(self, key: str) -> str:
        """Value for a dotted key; unset optional values read as ``""``."""
        config = self.load()
        values = {
            "model.provider": config.model.provider,
            "model.name": config.model.name,
            "model.api_key": config.model.api_key or "",
            "model.base_url": config.model.base_url or "",
            "storage.uri": config.storage.uri or "",
        }
        if key not in values:
            raise _unknown_key(key)
        return values[key]

    def set(self, key: str, value: str) -> None:
        """Set a dotted key and save."""
        if key not in _KEYS:
            raise _unknown_key(key)
        config = self.load()
        section_name, field_name = key.split(".")
        setattr(getattr(config, section_name), field_name, value)
        self.save(config)

    def resolve_storage_uri(self, project_root: str | os.PathLike[str]) -> str:
        """The storage URI: s3 URIs as given, paths relative to the project root."""
        config = self.load()
        root = Path(project_root)
        uri = config.storage.uri
        if uri is None:
            return str(root / ".dna" / "db" / "artifacts.lance")
        if uri.startswith("s3://"):
            return uri
        return str(root / uri)

    def exists(self) -> bool:
        return self.config_path.exists()
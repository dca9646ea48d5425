"""Core data types, errors and storage/embedding interfaces."""

from __future__ import annotations

import json
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from slugify import slugify

ID_ALPHABET = "23456789abcdefghjkmnpqrstuvwxyz"
ID_LENGTH = 10

DEFAULT_PROVIDER = "local"
DEFAULT_MODEL = "BAAI/bge-small-en-v1.5"

_OPTIONAL_MODEL_FIELDS = ("api_key", "base_url")


class ServiceError(Exception):
    """Base error raised by the services."""


class NotFoundError(ServiceError):
    """Raised when a requested item does not exist."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"not found: {detail}")
        self.detail = detail


def slugify_kind(value: str) -> str:
    """Turn a kind string into a kebab-case slug."""
    return slugify(value)


def generate_id() -> str:
    """Return a new 10-character identifier drawn from an unambiguous alphabet."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _format_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_timestamp(text: str) -> datetime:
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


class ContentFormat(Enum):
    """Format of an artifact's content."""

    MARKDOWN = "markdown"
    YAML = "yaml"
    JSON = "json"
    OPENAPI = "openapi"
    TEXT = "text"

    @classmethod
    def parse(cls, value: str) -> ContentFormat:
        """Parse a format name, accepting common aliases, case-insensitively."""
        try:
            return _FORMAT_ALIASES[value.lower()]
        except KeyError:
            raise ValueError(f"Invalid content format: {value}") from None

    def __str__(self) -> str:
        return self.value


_FORMAT_ALIASES = {
    "markdown": ContentFormat.MARKDOWN,
    "md": ContentFormat.MARKDOWN,
    "yaml": ContentFormat.YAML,
    "yml": ContentFormat.YAML,
    "json": ContentFormat.JSON,
    "openapi": ContentFormat.OPENAPI,
    "text": ContentFormat.TEXT,
    "txt": ContentFormat.TEXT,
}

_EXTENSIONS = {
    ContentFormat.MARKDOWN: "md",
    ContentFormat.YAML: "yaml",
    ContentFormat.JSON: "json",
    ContentFormat.OPENAPI: "yaml",
    ContentFormat.TEXT: "txt",
}


@dataclass
class Artifact:
    """A stored truth artifact."""

    id: str
    kind: str
    content: str
    format: ContentFormat
    name: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    embedding: list[float] | None = None
    embedding_model: str = ""
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    @classmethod
    def create(
        cls,
        kind: str,
        content: str,
        format: ContentFormat,
        name: str | None = None,
        metadata: dict[str, str] | None = None,
        embedding_model: str = "",
    ) -> Artifact:
        """Create an artifact with a fresh id and equal creation/update times."""
        now = _utc_now()
        return cls(
            id=generate_id(),
            kind=kind,
            content=content,
            format=format,
            name=name,
            metadata=dict(metadata or {}),
            embedding=None,
            embedding_model=embedding_model,
            created_at=now,
            updated_at=now,
        )

    def file_extension(self) -> str:
        """File extension matching the content format."""
        return _EXTENSIONS[self.format]

    def to_dict(self) -> dict[str, Any]:
        """Serialisable form; the embedding is not included."""
        return {
            "id": self.id,
            "kind": self.kind,
            "name": self.name,
            "content": self.content,
            "format": self.format.value,
            "metadata": dict(self.metadata),
            "embedding_model": self.embedding_model,
            "created_at": _format_timestamp(self.created_at),
            "updated_at": _format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Artifact:
        """Build an artifact from the form produced by ``to_dict``."""
        try:
            return cls(
                id=data["id"],
                kind=data["kind"],
                name=data.get("name"),
                content=data["content"],
                format=ContentFormat(data["format"]),
                metadata=dict(data["metadata"]),
                embedding=None,
                embedding_model=data["embedding_model"],
                created_at=_parse_timestamp(data["created_at"]),
                updated_at=_parse_timestamp(data["updated_at"]),
            )
        except KeyError as exc:
            raise ValueError(f"missing field {exc.args[0]!r}") from None

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> Artifact:
        return cls.from_dict(json.loads(text))


@dataclass
class SearchFilters:
    """Criteria for listing and searching artifacts."""

    kind: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    after: datetime | None = None
    before: datetime | None = None
    limit: int | None = None


@dataclass
class SearchResult:
    """An artifact together with its similarity score."""

    artifact: Artifact
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {"artifact": self.artifact.to_dict(), "score": self.score}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SearchResult:
        return cls(
            artifact=Artifact.from_dict(data["artifact"]),
            score=float(data["score"]),
        )


@dataclass
class ModelConfig:
    """Embedding provider configuration."""

    provider: str = DEFAULT_PROVIDER
    name: str = DEFAULT_MODEL
    api_key: str | None = None
    base_url: str | None = None

    def to_dict(self) -> dict[str, str]:
        data = {"provider": self.provider, "name": self.name}
        for key in _OPTIONAL_MODEL_FIELDS:
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class StorageConfig:
    """Storage backend configuration: a local path or an s3:// URI."""

    uri: str | None = None

    def to_dict(self) -> dict[str, str]:
        return {} if self.uri is None else {"uri": self.uri}


def _optional_str(section: dict[str, Any], key: str) -> str | None:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"config value {key!r} must be a string")
    return value


@dataclass
class ProjectConfig:
    """Project configuration."""

    model: ModelConfig = field(default_factory=ModelConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    def to_dict(self) -> dict[str, Any]:
        return {"model": self.model.to_dict(), "storage": self.storage.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectConfig:
        """Build a config; missing values fall back to the defaults."""
        model_data = data.get("model") or {}
        storage_data = data.get("storage") or {}
        if not isinstance(model_data, dict) or not isinstance(storage_data, dict):
            raise ValueError("config sections must be tables")
        defaults = ModelConfig()
        optional = {
            key: _optional_str(model_data, key) for key in _OPTIONAL_MODEL_FIELDS
        }
        model = ModelConfig(
            provider=_optional_str(model_data, "provider") or defaults.provider,
            name=_optional_str(model_data, "name") or defaults.name,
            **optional,
        )
        storage = StorageConfig(uri=_optional_str(storage_data, "uri"))
        return cls(model=model, storage=storage)


class Database(ABC):
    """Storage backend for artifacts."""

    @abstractmethod
    async def insert(self, artifact: Artifact) -> None: ...

    @abstractmethod
    async def get(self, artifact_id: str) -> Artifact | None: ...

    @abstractmethod
    async def update(self, artifact: Artifact) -> None: ...

    @abstractmethod
    async def delete(self, artifact_id: str) -> bool: ...

    @abstractmethod
    async def list(self, filters: SearchFilters) -> list[Artifact]: ...

    @abstractmethod
    async def search(
        self, query_embedding: list[float], filters: SearchFilters
    ) -> list[SearchResult]: ...


class EmbeddingProvider(ABC):
    """Turns text into embedding vectors."""

    @abstractmethod
    async def embed(self, text: str) -> list[float]: ...

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed each text in order."""
        return [await self.embed(text) for text in texts]

    @abstractmethod
    def model_id(self) -> str: ...

    @abstractmethod
    def dimensions(self) -> int: ...
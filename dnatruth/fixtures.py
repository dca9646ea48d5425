"""Ready-made artifacts, sandboxes and embeddings for exercising the services."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

from .types import ID_ALPHABET, ID_LENGTH, Artifact, ContentFormat, EmbeddingProvider

DEFAULT_CONTENT = "Test artifact content"
BUILDER_MODEL = "test-model"

DEFAULT_CONFIG_TOML = """
[model]
provider = "local"
name = "BAAI/bge-small-en-v1.5"
"""


class ArtifactBuilder:
    """Fluent builder for artifacts with sensible defaults."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.name: str | None = None
        self.content = DEFAULT_CONTENT
        self.format = ContentFormat.MARKDOWN
        self.metadata: dict[str, str] = {}

    def with_name(self, name: str) -> ArtifactBuilder:
        self.name = name
        return self

    def with_content(self, content: str) -> ArtifactBuilder:
        self.content = content
        return self

    def with_format(self, format: ContentFormat) -> ArtifactBuilder:
        self.format = format
        return self

    def with_metadata(self, key: str, value: str) -> ArtifactBuilder:
        self.metadata[key] = value
        return self

    def build(self) -> Artifact:
        return Artifact.create(
            kind=self.kind,
            content=self.content,
            format=self.format,
            name=self.name,
            metadata=self.metadata,
            embedding_model=BUILDER_MODEL,
        )


class ProjectSandbox:
    """A throwaway project directory holding an empty ``.dna`` layout."""

    def __init__(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        self._root = Path(self._temp_dir.name)
        self.dna_dir = self._root / ".dna"
        self.db_dir = self.dna_dir / "db"
        self.config_path = self.dna_dir / "config.toml"
        self.db_dir.mkdir(parents=True, exist_ok=True)

    def root(self) -> Path:
        """The project root directory."""
        return self._root

    def init_dna(self) -> None:
        """Initialise the project with the default configuration."""
        self.write_default_config()

    def write_default_config(self) -> None:
        self.write_config(DEFAULT_CONFIG_TOML)

    def write_config(self, config: str) -> None:
        self.config_path.write_text(config, encoding="utf-8")

    def cleanup(self) -> None:
        """Remove the sandbox directory and everything in it."""
        self._temp_dir.cleanup()

    def __enter__(self) -> ProjectSandbox:
        return self

    def __exit__(self, *args: Any) -> None:
        self.cleanup()


class HashEmbeddingProvider(EmbeddingProvider):
    """Deterministic embeddings derived from a byte sum of the text."""

    def __init__(self, model_id: str = "mock-model", dimensions: int = 384) -> None:
        self._model_id = model_id
        self._dimensions = dimensions

    def vector(self, text: str) -> list[float]:
        """The embedding of ``text``, computed synchronously."""
        digest = sum(text.encode("utf-8")) & 0xFFFFFFFF
        return [
            ((digest + i) & 0xFFFFFFFF) % 1000 / 1000.0
            for i in range(self._dimensions)
        ]

    async def embed(self, text: str) -> list[float]:
        return self.vector(text)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [self.vector(text) for text in texts]

    def model_id(self) -> str:
        return self._model_id

    def dimensions(self) -> int:
        return self._dimensions


def intent_artifact() -> Artifact:
    return (
        ArtifactBuilder("intent")
        .with_name("user-authentication")
        .with_content("The system authenticates users via email and password")
        .with_metadata("domain", "auth")
        .with_metadata("priority", "high")
        .build()
    )


def invariant_artifact() -> Artifact:
    return (
        ArtifactBuilder("invariant")
        .with_name("valid-payment")
        .with_content("Users must have a valid payment method before completing checkout")
        .with_metadata("domain", "checkout")
        .with_metadata("priority", "critical")
        .build()
    )


def contract_artifact() -> Artifact:
    return (
        ArtifactBuilder("contract")
        .with_name("payment-api")
        .with_content("POST /api/payments returns 201 on success with payment ID")
        .with_format(ContentFormat.OPENAPI)
        .with_metadata("service", "payment-service")
        .build()
    )


def algorithm_artifact() -> Artifact:
    return (
        ArtifactBuilder("algorithm")
        .with_name("price-calculation")
        .with_content("Price = base_price * quantity * (1 - discount_rate)")
        .with_metadata("domain", "pricing")
        .build()
    )


def evaluation_artifact() -> Artifact:
    return (
        ArtifactBuilder("evaluation")
        .with_name("checkout-success")
        .with_content("Given valid cart, when checkout, then order created")
        .with_metadata("domain", "checkout")
        .build()
    )


def pace_artifact() -> Artifact:
    return (
        ArtifactBuilder("pace")
        .with_name("payment-api-stability")
        .with_content("Payment API contracts require 2-week deprecation notice")
        .with_metadata("service", "payment-service")
        .build()
    )


def monitor_artifact() -> Artifact:
    return (
        ArtifactBuilder("monitor")
        .with_name("api-latency")
        .with_content("P99 API latency < 200ms")
        .with_metadata("service", "all")
        .with_metadata("slo", "true")
        .build()
    )


def all_kinds() -> list[Artifact]:
    """One sample artifact of every standard kind."""
    return [
        intent_artifact(),
        invariant_artifact(),
        contract_artifact(),
        algorithm_artifact(),
        evaluation_artifact(),
        pace_artifact(),
        monitor_artifact(),
    ]


def _is_lower_alnum(char: str) -> bool:
    return char.isascii() and (char.islower() or char.isdigit())


def check_id(value: str) -> None:
    """Raise ``ValueError`` unless ``value`` is a well-formed artifact id."""
    if len(value) != ID_LENGTH:
        raise ValueError("ID should be exactly 10 characters")
    if not all(_is_lower_alnum(char) for char in value):
        raise ValueError("ID should only contain lowercase alphanumeric characters")
    if not all(char in ID_ALPHABET for char in value):
        raise ValueError("ID contains invalid characters (ambiguous chars not allowed)")


def check_slug(value: str) -> None:
    """Raise ``ValueError`` unless ``value`` is a lowercase hyphenated slug."""
    if not all(_is_lower_alnum(char) or char == "-" for char in value):
        raise ValueError("Slug should only contain lowercase alphanumeric and hyphens")
    if value and (value.startswith("-") or value.endswith("-")):
        raise ValueError("Slug should not start or end with hyphen")
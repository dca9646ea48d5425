"""Creating, reading, updating and removing artifacts."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from .types import (
    Artifact,
    ContentFormat,
    Database,
    EmbeddingProvider,
    NotFoundError,
    SearchFilters,
    ServiceError,
    slugify_kind,
)


@contextmanager
def _failure_context(message: str) -> Iterator[None]:
    """Re-raise unexpected errors as ``ServiceError`` carrying ``message``."""
    try:
        yield
    except ServiceError:
        raise
    except Exception as exc:
        raise ServiceError(f"{message}: {exc}") from exc


class ArtifactService:
    """Stores artifacts and keeps their embeddings in step with their content."""

    def __init__(self, db: Database, embedding: EmbeddingProvider) -> None:
        self.db = db
        self.embedding = embedding

    async def add(
        self,
        kind: str,
        content: str,
        format: ContentFormat = ContentFormat.MARKDOWN,
        name: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> Artifact:
        """Create, embed and store a new artifact; the kind is slugified."""
        artifact = Artifact.create(
            kind=slugify_kind(kind),
            content=content,
            format=format,
            name=name,
            metadata=metadata,
            embedding_model=self.embedding.model_id(),
        )
        with _failure_context("Failed to generate embedding"):
            artifact.embedding = await self.embedding.embed(content)
        with _failure_context("Failed to insert artifact"):
            await self.db.insert(artifact)
        return artifact

    async def get(self, artifact_id: str) -> Artifact | None:
        """The artifact with this id, or ``None``."""
        with _failure_context("Failed to get artifact"):
            return await self.db.get(artifact_id)

    async def update(
        self,
        artifact_id: str,
        content: str | None = None,
        name: str | None = None,
        kind: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> Artifact:
        """Change the given fields; re-embed only when the content changed.

        New metadata is merged into the existing metadata.
        Raises ``NotFoundError`` when no artifact has this id.
        """
        artifact = await self.get(artifact_id)
        if artifact is None:
            raise NotFoundError(f"Artifact '{artifact_id}' not found")

        needs_reembed = False
        if content is not None and content != artifact.content:
            artifact.content = content
            needs_reembed = True
        if name is not None:
            artifact.name = name
        if kind is not None:
            artifact.kind = slugify_kind(kind)
        if metadata is not None:
            artifact.metadata.update(metadata)

        artifact.updated_at = datetime.now(timezone.utc)

        if needs_reembed:
            with _failure_context("Failed to generate embedding"):
                artifact.embedding = await self.embedding.embed(artifact.content)
            artifact.embedding_model = self.embedding.model_id()

        with _failure_context("Failed to update artifact"):
            await self.db.update(artifact)
        return artifact

    async def remove(self, artifact_id: str) -> bool:
        """Delete an artifact; ``True`` if it existed."""
        with _failure_context("Failed to delete artifact"):
            return await self.db.delete(artifact_id)

    async def list(self, filters: SearchFilters | None = None) -> list[Artifact]:
        """Artifacts matching the filters."""
        with _failure_context("Failed to list artifacts"):
            return await self.db.list(filters or SearchFilters())

    async def reindex(self) -> int:
        """Re-embed every artifact with the current model; return how many."""
        artifacts = await self.list(SearchFilters())
        model_id = self.embedding.model_id()
        for artifact in artifacts:
            with _failure_context("Failed to generate embedding during reindex"):
                artifact.embedding = await self.embedding.embed(artifact.content)
            artifact.embedding_model = model_id
            with _failure_context("Failed to update artifact during reindex"):
                await self.db.update(artifact)
        return len(artifacts)
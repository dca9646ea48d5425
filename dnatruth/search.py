"""Semantic search over stored artifacts."""

from __future__ import annotations

from .types import Database, EmbeddingProvider, SearchFilters, SearchResult


class SearchService:
    """Embeds queries and looks them up in the database."""

    def __init__(self, db: Database, embedding: EmbeddingProvider) -> None:
        self.db = db
        self.embedding = embedding

    async def search(
        self, query: str, filters: SearchFilters | None = None
    ) -> list[SearchResult]:
        """Artifacts most similar to the query."""
        query_embedding = await self.embedding.embed(query)
        return await self.db.search(query_embedding, filters or SearchFilters())

    async def check_embedding_consistency(self) -> list[str]:
        """Ids of artifacts embedded with a model other than the current one."""
        current_model = self.embedding.model_id()
        artifacts = await self.db.list(SearchFilters())
        return [a.id for a in artifacts if a.embedding_model != current_model]
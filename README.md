# dnatruth

dnatruth manages "truth artifacts" for a project: intents, invariants,
contracts, algorithms, evaluations and any other kinds you define. Each
artifact carries an embedding, which lets you search the store by meaning.

The package supplies the services and the data types. It does not supply the
storage or the embedding model. You provide your own `Database` and
`EmbeddingProvider` implementations and pass them to the services.

## Installation

```
pip install dnatruth
```

To run the tests, install the `test` extra:

```
pip install "dnatruth[test]"
```

## Core types (`dnatruth.types`)

- `Artifact` is a dataclass with these fields: `id`, `kind`, `content`,
  `format`, `name`, `metadata`, `embedding`, `embedding_model`, `created_at`
  and `updated_at`.
  - `Artifact.create(kind, content, format, name=None, metadata=None, embedding_model="")`
    returns a new artifact with a fresh id. Its creation and update times are
    equal, in UTC.
  - `file_extension()` returns `md`, `yaml`, `json` or `txt`, depending on the
    format. The `openapi` format maps to `yaml`.
  - `to_dict()` and `to_json()` serialise the artifact. The embedding is left
    out, and timestamps are written in ISO 8601 with a `Z` suffix.
  - `from_dict()` and `from_json()` read an artifact back. A missing field
    raises `ValueError`.
- `ContentFormat` is an enum with the members `MARKDOWN`, `YAML`, `JSON`,
  `OPENAPI` and `TEXT`. `str()` returns the lowercase name.
  `ContentFormat.parse` ignores case and also accepts `md`, `yml` and `txt`. An
  unknown name raises `ValueError`.
- `SearchFilters` has the fields `kind`, `metadata`, `after`, `before` and
  `limit`. All of them are empty by default.
- `SearchResult` pairs an `artifact` with a `score`. It has `to_dict` and
  `from_dict`.
- `ProjectConfig` holds a `ModelConfig` and a `StorageConfig`. The default
  `ModelConfig` has provider `local` and model `BAAI/bge-small-en-v1.5`.
- `slugify_kind("My Custom Type")` returns `"my-custom-type"`.
- `generate_id()` returns a 10-character id built from the alphabet
  `23456789abcdefghjkmnpqrstuvwxyz`. The alphabet has no easily confused
  characters.
- `ServiceError` is the base error of the package. `NotFoundError` is a
  subclass of it.

## Plugging in storage and embeddings

`Database` and `EmbeddingProvider` are abstract base classes.

A `Database` subclass must implement these coroutines:

- `insert`
- `get`
- `update`
- `delete`
- `list`
- `search`

An `EmbeddingProvider` subclass must implement:

- the coroutine `embed`
- `model_id()`
- `dimensions()`

`embed_batch` has a default implementation that embeds the texts one by one.

```python
from dnatruth.types import EmbeddingProvider


class MyEmbedding(EmbeddingProvider):
    async def embed(self, text):
        ...

    def model_id(self):
        return "my-model"

    def dimensions(self):
        return 384
```

## Managing and searching artifacts

```python
from dnatruth.artifacts import ArtifactService
from dnatruth.search import SearchService
from dnatruth.types import ContentFormat, SearchFilters

service = ArtifactService(db, embedding)
artifact = await service.add(
    "intent",
    "Users must be able to sign in with email and password.",
    ContentFormat.MARKDOWN,
    "user-authentication",
    {"domain": "auth"},
)

await service.update(artifact.id, metadata={"priority": "high"})
artifacts = await service.list(SearchFilters(kind="intent"))
count = await service.reindex()
removed = await service.remove(artifact.id)

search = SearchService(db, embedding)
results = await search.search("sign in", SearchFilters(limit=5))
stale_ids = await search.check_embedding_consistency()
```

Notes on `ArtifactService`:

- `add` slugifies the kind, embeds the content and stores the artifact.
- `update` slugifies a new kind and merges new metadata into the existing
  metadata. It sets a new update time. It computes a new embedding only when
  the content has actually changed. If no artifact has the given id, it raises
  `NotFoundError`.
- `reindex` embeds every artifact again with the current model and returns how
  many artifacts it processed.
- If the database or the embedding provider fails, the error is re-raised as a
  `ServiceError`.

`SearchService.check_embedding_consistency` returns the ids of artifacts whose
`embedding_model` differs from the current provider's `model_id()`.

## Configuration (`dnatruth.config`)

`ConfigService(project_root)` reads and writes `.dna/config.toml` under the
project root.

```python
from pathlib import Path
from dnatruth.config import ConfigService

config = ConfigService(Path("."))
config.init()                       # writes the defaults
config.set("model.provider", "openai")
config.update_model("openai", "text-embedding-3-small")
print(config.get("model.name"))
print(config.resolve_storage_uri(Path(".")))
```

- **Keys.** The keys are `model.provider`, `model.name`, `model.api_key`,
  `model.base_url` and `storage.uri`. `get` returns `""` for an optional value
  that is not set. An unknown key raises `ServiceError`.
- **Loading.** `load()` starts from the defaults. It applies the file on top of
  them, then applies environment variables with the `DNA_` prefix. Levels in a
  variable name are separated by `__`, so `DNA_MODEL__NAME` overrides
  `model.name`.
- **Storage URI.** `resolve_storage_uri` returns `.dna/db/artifacts.lance`
  under the project root when no URI is set. An `s3://` URI is returned
  unchanged. Any other value is joined to the project root.

## Helpers (`dnatruth.fixtures`)

- `ArtifactBuilder(kind)` builds an artifact through chained calls:
  `with_name`, `with_content`, `with_format`, `with_metadata` and then `build()`.
- `ProjectSandbox` is a temporary project directory with a `.dna/db` layout. It
  has `root()`, `init_dna()`, `write_config()` and `cleanup()`, and it can be
  used as a context manager.
- `HashEmbeddingProvider(model_id="mock-model", dimensions=384)` produces
  deterministic vectors derived from the text's bytes.
- These functions return sample artifacts:
  - `intent_artifact`
  - `invariant_artifact`
  - `contract_artifact`
  - `algorithm_artifact`
  - `evaluation_artifact`
  - `pace_artifact`
  - `monitor_artifact`
  - `all_kinds`, which returns one artifact of each of the kinds above
- `check_id` and `check_slug` raise `ValueError` when the id or slug is
  malformed.

## What this package does not do

- There is no storage backend. You must implement `Database` yourself.
- There is no embedding model. Apart from the deterministic
  `HashEmbeddingProvider`, you supply an `EmbeddingProvider`.
- There is no command-line tool, no server, and no rendering of artifacts to
  files. The package is a library only.
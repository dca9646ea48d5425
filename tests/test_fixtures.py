import pytest

from dnatruth.config import ConfigService
from dnatruth.fixtures import (
    ArtifactBuilder,
    HashEmbeddingProvider,
    ProjectSandbox,
    all_kinds,
    check_id,
    check_slug,
    contract_artifact,
    intent_artifact,
    monitor_artifact,
)
from dnatruth.types import ContentFormat, generate_id


def test_artifact_builder():
    artifact = (
        ArtifactBuilder("intent").with_name("test").with_content("Test content").build()
    )
    assert artifact.kind == "intent"
    assert artifact.name == "test"
    assert artifact.content == "Test content"


def test_builder_defaults():
    artifact = ArtifactBuilder("pace").build()
    assert artifact.content == "Test artifact content"
    assert artifact.format is ContentFormat.MARKDOWN
    assert artifact.name is None
    assert artifact.metadata == {}
    assert artifact.embedding_model == "test-model"


def test_builder_format_and_metadata():
    artifact = (
        ArtifactBuilder("contract")
        .with_format(ContentFormat.JSON)
        .with_metadata("a", "1")
        .with_metadata("b", "2")
        .build()
    )
    assert artifact.format is ContentFormat.JSON
    assert artifact.metadata == {"a": "1", "b": "2"}


def test_env_creation():
    with ProjectSandbox() as sandbox:
        assert sandbox.root().exists()
        assert sandbox.dna_dir.name == ".dna"
        assert sandbox.db_dir.is_dir()
        assert not sandbox.config_path.exists()


def test_cleanup_removes_directory():
    sandbox = ProjectSandbox()
    root = sandbox.root()
    sandbox.cleanup()
    assert not root.exists()


def test_init_dna_writes_default_config():
    with ProjectSandbox() as sandbox:
        sandbox.init_dna()
        service = ConfigService(sandbox.root())
        assert service.exists()
        assert service.get("model.name") == "BAAI/bge-small-en-v1.5"


def test_write_config_custom():
    with ProjectSandbox() as sandbox:
        sandbox.write_config('[model]\nprovider = "openai"\nname = "text-embedding-3-small"\n')
        service = ConfigService(sandbox.root())
        assert service.get("model.name") == "text-embedding-3-small"


def test_mock_embedding():
    provider = HashEmbeddingProvider()
    embedding = provider.vector("test")
    assert len(embedding) == 384
    assert embedding == provider.vector("test")
    assert all(0.0 <= value < 1.0 for value in embedding)


def test_mock_embedding_identity():
    provider = HashEmbeddingProvider("custom", 16)
    assert provider.model_id() == "custom"
    assert provider.dimensions() == 16
    assert len(provider.vector("abc")) == 16


@pytest.mark.asyncio
async def test_async_embed_matches_vector():
    provider = HashEmbeddingProvider()
    assert await provider.embed("hello") == provider.vector("hello")
    batch = await provider.embed_batch(["a", "b"])
    assert batch == [provider.vector("a"), provider.vector("b")]


@pytest.mark.parametrize("value", ["k7v3m9xnp2", "2abc3def4g"])
def test_valid_id_assertion(value):
    assert check_id(value) is None


def test_generated_ids_pass_check():
    for _ in range(50):
        assert check_id(generate_id()) is None


def test_invalid_id_length():
    with pytest.raises(ValueError, match="ID should be exactly 10 characters"):
        check_id("short")


def test_invalid_id_chars():
    with pytest.raises(ValueError, match="ID contains invalid characters"):
        check_id("k7v3m9xnp1")


def test_invalid_id_uppercase():
    with pytest.raises(ValueError, match="lowercase alphanumeric"):
        check_id("K7V3M9XNP2")


@pytest.mark.parametrize("value", ["my-slug", "", "abc123"])
def test_valid_slug(value):
    assert check_slug(value) is None


@pytest.mark.parametrize("value", ["-leading", "trailing-", "Upper", "under_score"])
def test_invalid_slug(value):
    with pytest.raises(ValueError):
        check_slug(value)


def test_samples_all_kinds():
    artifacts = all_kinds()
    assert len(artifacts) == 7
    assert [a.kind for a in artifacts] == [
        "intent",
        "invariant",
        "contract",
        "algorithm",
        "evaluation",
        "pace",
        "monitor",
    ]
    assert len({a.id for a in artifacts}) == 7


def test_sample_details():
    assert intent_artifact().metadata == {"domain": "auth", "priority": "high"}
    assert contract_artifact().format is ContentFormat.OPENAPI
    assert monitor_artifact().metadata["slo"] == "true"
    for artifact in all_kinds():
        check_slug(artifact.name)
        assert artifact.name is not None and artifact.name
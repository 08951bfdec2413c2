import pytest
from fakes import FakeEmbedder, seed_repository


@pytest.fixture
def repo(tmp_path):
    return seed_repository(tmp_path / "embeddings")


@pytest.fixture
def embedder():
    return FakeEmbedder()

import json
import pytest
from fakes import MIXED_VERSION, VALID_ROWS, VALID_VERSION, make_corpus
from repository.corpus_repository import CorpusRepository
from util.errors import StoreError


def test_save_then_load_keeps_chunks(repo):
    corpus = repo.load(VALID_VERSION)
    assert corpus.version == VALID_VERSION
    assert [c.id for c in corpus.chunks] == [r[0] for r in VALID_ROWS]
    assert corpus.chunks[1].embedding == VALID_ROWS[1][2]
    assert corpus.chunks[0].content == VALID_ROWS[0][1]
    assert corpus.dimension == 3
    assert corpus.matrix.shape == (3, 3)


def test_load_is_cached_until_file_changes(repo):
    first = repo.load(VALID_VERSION)
    assert repo.load(VALID_VERSION) is first

    repo.save(make_corpus(VALID_VERSION, VALID_ROWS[:1]))
    reloaded = repo.load(VALID_VERSION)
    assert reloaded is not first
    assert len(reloaded) == 1


def test_cache_can_be_disabled(tmp_path):
    repo = CorpusRepository(tmp_path, cache_enabled=False)
    repo.save(make_corpus(VALID_VERSION, VALID_ROWS))
    assert repo.load(VALID_VERSION) is not repo.load(VALID_VERSION)


def test_missing_version_is_store_error(repo):
    with pytest.raises(StoreError) as exc:
        repo.load("2024-11-05")
    assert exc.value.kind == "store_error"


@pytest.mark.parametrize("name", ["../secrets", "", ".hidden", "a/b"])
def test_unsafe_version_names_are_rejected(repo, name):
    with pytest.raises(StoreError):
        repo.load(name)


def test_malformed_json_is_store_error(tmp_path):
    (tmp_path / "draft.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StoreError):
        CorpusRepository(tmp_path).load("draft")


def test_mixed_dimensions_are_rejected(tmp_path):
    doc = {
        "version": "draft",
        "chunks": [
            {"id": "a", "content": "x", "embedding": [1.0, 0.0]},
            {"id": "b", "content": "y", "embedding": [1.0, 0.0, 0.0]},
        ],
    }
    (tmp_path / "draft.json").write_text(json.dumps(doc), encoding="utf-8")
    with pytest.raises(StoreError) as exc:
        CorpusRepository(tmp_path).load("draft")
    assert "mixed dimensions" in exc.value.message


def test_count_mismatch_is_rejected(tmp_path):
    doc = {
        "version": "draft",
        "count": 3,
        "chunks": [{"id": "a", "content": "x", "embedding": [1.0]}],
    }
    (tmp_path / "draft.json").write_text(json.dumps(doc), encoding="utf-8")
    with pytest.raises(StoreError):
        CorpusRepository(tmp_path).load("draft")


def test_extra_record_fields_land_in_metadata(tmp_path):
    doc = {
        "version": "draft",
        "chunks": [
            {
                "id": "a",
                "content": "x",
                "embedding": [1.0, 0.0],
                "file_path": "docs/specification/draft/basic/index.mdx",
                "metadata": {"section": "Basic"},
            }
        ],
    }
    (tmp_path / "draft.json").write_text(json.dumps(doc), encoding="utf-8")
    chunk = CorpusRepository(tmp_path).load("draft").chunks[0]
    assert chunk.version == "draft"
    assert chunk.metadata == {
        "section": "Basic",
        "file_path": "docs/specification/draft/basic/index.mdx",
    }


def test_list_versions(repo):
    assert repo.list_versions() == sorted([VALID_VERSION, MIXED_VERSION])


def test_list_versions_missing_dir(tmp_path):
    assert CorpusRepository(tmp_path / "nope").list_versions() == []


def test_save_leaves_no_temp_file(repo):
    assert not list(repo.data_dir.glob("*.tmp"))


@pytest.mark.asyncio
async def test_aload(repo):
    corpus = await repo.aload(MIXED_VERSION)
    assert len(corpus) == 5


@pytest.mark.parametrize("cache_enabled", [True, False])
def test_load_builds_search_matrix(tmp_path, cache_enabled):
    repo = CorpusRepository(tmp_path, cache_enabled=cache_enabled)
    repo.save(make_corpus(VALID_VERSION, VALID_ROWS))
    corpus = repo.load(VALID_VERSION)
    assert corpus._matrix is not None
    assert corpus._matrix.shape == (3, 3)
    assert corpus.matrix is corpus._matrix

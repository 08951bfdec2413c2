# controller/controller_dependencies.py
from functools import lru_cache
from fastapi import Depends
from config.settings import settings
from core.chunker import ContentChunker
from core.embedding_client import EmbeddingProvider, OpenAIEmbeddingClient
from core.local_embedder import LocalEmbeddingClient
from core.validation_pipeline import ValidationPipeline
from repository.corpus_repository import CorpusRepository
from service.validation_service import ValidationService
from util.enums import EmbeddingBackend


@lru_cache(maxsize=1)
def get_corpus_repository() -> CorpusRepository:
    # One instance per process so parsed corpora stay cached across requests.
    return CorpusRepository(settings.DATA_DIR, cache_enabled=settings.CORPUS_CACHE_ENABLED)


@lru_cache(maxsize=1)
def get_embedder() -> EmbeddingProvider:
    if settings.EMBEDDING_BACKEND == EmbeddingBackend.LOCAL:
        return LocalEmbeddingClient(model=settings.LOCAL_EMBEDDING_MODEL)
    return OpenAIEmbeddingClient(
        api_key=settings.OPENAI_API_KEY,
        model=settings.EMBEDDING_MODEL,
        base_url=settings.OPENAI_BASE_URL,
        timeout=settings.EMBEDDING_TIMEOUT_SECONDS,
        retry_delay=settings.EMBEDDING_RETRY_DELAY_SECONDS,
    )


def get_validation_service(
    store: CorpusRepository = Depends(get_corpus_repository),
    embedder: EmbeddingProvider = Depends(get_embedder),
) -> ValidationService:
    _chunker = ContentChunker(settings.CHUNK_SIZE, settings.CHUNK_OVERLAP)
    _pipeline = ValidationPipeline(
        embedder=embedder,
        store=store,
        chunker=_chunker,
        max_concurrency=settings.VALIDATE_CONCURRENCY,
    )
    _service = ValidationService(
        _pipeline,
        store,
        known_versions=settings.SPEC_VERSIONS,
        default_version=settings.DEFAULT_SPEC_VERSION,
        chunking_threshold=settings.CHUNKING_THRESHOLD,
        request_timeout=settings.REQUEST_TIMEOUT_SECONDS,
    )
    return _service

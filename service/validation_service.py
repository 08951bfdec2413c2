# service/validation_service.py
import asyncio
import logging
from typing import List, Optional, Sequence
from core.entities import AggregateVerdict, SearchMatch, ValidationReport
from core.validation_pipeline import ValidationPipeline
from repository.corpus_repository import CorpusRepository
from util.errors import DeadlineExceededError, EmptyInputError, InvalidVersionError

logger = logging.getLogger(__name__)


class ValidationService:
    """
    Request-level orchestration over the pipeline:
    - resolves and checks the spec version before any provider call
    - rejects blank input
    - routes content to single or chunked validation
    - bounds each request by `request_timeout` seconds
    """

    def __init__(
        self,
        pipeline: ValidationPipeline,
        store: CorpusRepository,
        *,
        known_versions: Sequence[str],
        default_version: str,
        chunking_threshold: int = 500,
        request_timeout: Optional[float] = None,
    ) -> None:
        self._pipeline = pipeline
        self._store = store
        self._known = list(known_versions)
        self._default = default_version
        self._threshold = chunking_threshold
        self._timeout = request_timeout

    @property
    def default_version(self) -> str:
        return self._default

    def resolve_version(self, version: Optional[str]) -> str:
        resolved = version or self._default
        if resolved not in self._known:
            logger.warning("service.version.invalid version=%s", resolved)
            raise InvalidVersionError(resolved, self._known)
        return resolved

    async def _bounded(self, coro, op: str):
        # Single-unit paths have nothing partial to return, so a timeout fails the request.
        try:
            return await asyncio.wait_for(coro, timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.error("service.deadline op=%s timeout=%s", op, self._timeout)
            raise DeadlineExceededError(
                f"{op} did not finish within {self._timeout}s"
            ) from None

    async def validate_content(
        self,
        content: str,
        version: Optional[str] = None,
        use_chunking: bool = False,
    ) -> ValidationReport | AggregateVerdict:
        resolved = self.resolve_version(version)
        if not content or not content.strip():
            raise EmptyInputError("content is empty")

        chunked = use_chunking or len(content) > self._threshold
        logger.info(
            "service.validate_content version=%s chars=%d chunked=%s",
            resolved,
            len(content),
            chunked,
        )
        if chunked:
            # the pipeline returns a partial verdict when the timeout elapses
            return await self._pipeline.validate_chunked(
                content, resolved, timeout=self._timeout
            )
        return await self._bounded(
            self._pipeline.validate_single(content, resolved), "validate_content"
        )

    async def validate_code(
        self, code: str, version: Optional[str] = None, language: str = "go"
    ) -> ValidationReport:
        resolved = self.resolve_version(version)
        if not code or not code.strip():
            raise EmptyInputError("code is empty")
        logger.info(
            "service.validate_code version=%s language=%s chars=%d",
            resolved,
            language,
            len(code),
        )
        return await self._bounded(
            self._pipeline.validate_code(code, resolved, language or "go"),
            "validate_code",
        )

    async def search(
        self, query: str, version: Optional[str] = None, top_k: int = 5
    ) -> List[SearchMatch]:
        resolved = self.resolve_version(version)
        if not query or not query.strip():
            raise EmptyInputError("query is empty")
        return await self._bounded(
            self._pipeline.search(query, resolved, top_k), "search"
        )

    def list_versions(self) -> List[str]:
        """Known versions that have a stored corpus, sorted."""
        stored = set(self._store.list_versions())
        return sorted(v for v in self._known if v in stored)

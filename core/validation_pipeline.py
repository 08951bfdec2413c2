# core/validation_pipeline.py
import asyncio
from typing import List, Optional, Sequence
from core.analyzer import (
    ValidationAnalyzer,
    chunk_analyzer,
    code_analyzer,
    code_topic,
    content_analyzer,
    summarize_matches,
)
from core.chunker import ContentChunker
from core.code_patterns import describe_code
from core.embedding_client import EmbeddingProvider
from core.entities import (
    AggregateVerdict,
    ChunkOutcome,
    SearchMatch,
    SubmissionChunk,
    ValidationReport,
    Verdict,
)
from core.similarity import rank_matches
from repository.corpus_repository import CorpusRepository
from util import functions
from util.constants import SearchLimits, SummaryLimits
from util.errors import (
    AggregationError,
    DeadlineExceededError,
    EmptyInputError,
    FactCheckError,
)
from util.timing import timed
import logging

logger = logging.getLogger(__name__)

OVERALL_THRESHOLD = 0.7
LOW_ALIGNMENT_THRESHOLD = 0.5


class ValidationPipeline:
    """
    embed -> search -> analyze, for one unit or for every chunk of a
    submission. Chunks share no state, so they run concurrently under a
    semaphore and are folded back in position order.
    """

    def __init__(
        self,
        *,
        embedder: EmbeddingProvider,
        store: CorpusRepository,
        chunker: ContentChunker,
        max_concurrency: int = 4,
    ) -> None:
        self._embedder = embedder
        self._store = store
        self._chunker = chunker
        self._max_concurrency = max(1, max_concurrency)
        self._content: ValidationAnalyzer = content_analyzer()
        self._chunk: ValidationAnalyzer = chunk_analyzer()
        self._code: ValidationAnalyzer = code_analyzer()

    async def _search_vector(
        self, version: str, vector: Sequence[float], top_k: int
    ) -> List[SearchMatch]:
        corpus = await self._store.aload(version)
        return rank_matches(corpus, vector, top_k)

    # ---------------- Single unit ----------------

    async def search(self, query: str, version: str, top_k: int) -> List[SearchMatch]:
        with timed(logger, "pipeline.search", version=version, k=top_k):
            vector = await self._embedder.embed(query)
            return await self._search_vector(version, vector, top_k)

    async def validate_single(self, text: str, version: str) -> ValidationReport:
        with timed(logger, "pipeline.single", version=version, chars=len(text)):
            vector = await self._embedder.embed(text)
            matches = await self._search_vector(version, vector, SearchLimits.SINGLE_TOP_K)
        verdict = self._content.analyze(matches, version)
        logger.info(
            "pipeline.single.result valid=%s conf=%.2f matches=%d",
            verdict.is_valid,
            verdict.confidence,
            len(matches),
        )
        return ValidationReport(
            verdict=verdict,
            matches=summarize_matches(
                matches, SummaryLimits.SINGLE_MATCHES, SummaryLimits.SINGLE_CHARS
            ),
        )

    async def validate_code(
        self, code: str, version: str, language: str
    ) -> ValidationReport:
        description = describe_code(code, language)
        with timed(logger, "pipeline.code", version=version, language=language):
            vector = await self._embedder.embed(description)
            matches = await self._search_vector(version, vector, SearchLimits.CODE_TOP_K)
        verdict = self._code.analyze(matches, version, description)
        logger.info(
            "pipeline.code.result valid=%s conf=%.2f matches=%d",
            verdict.is_valid,
            verdict.confidence,
            len(matches),
        )
        return ValidationReport(
            verdict=verdict,
            matches=summarize_matches(
                matches,
                SummaryLimits.CODE_MATCHES,
                SummaryLimits.CODE_CHARS,
                topic_rule=code_topic,
                default_topic="MCP Implementation",
            ),
        )

    # ---------------- Chunked ----------------

    async def _validate_chunk(self, chunk: SubmissionChunk, version: str) -> ChunkOutcome:
        try:
            with timed(logger, "pipeline.chunk", chunk=chunk.id, chars=len(chunk.text)):
                vector = await self._embedder.embed(chunk.text)
                matches = await self._search_vector(
                    version, vector, SearchLimits.CHUNK_TOP_K
                )
        except FactCheckError as e:
            logger.warning(
                "pipeline.chunk.error chunk=%s kind=%s msg=%s", chunk.id, e.kind, e.message
            )
            return ChunkOutcome(chunk=chunk, error=e.message, error_kind=e.kind)

        return ChunkOutcome(
            chunk=chunk,
            verdict=self._chunk.analyze(matches, version),
            matches=summarize_matches(
                matches, SummaryLimits.CHUNK_MATCHES, SummaryLimits.CHUNK_CHARS
            ),
        )

    async def validate_chunked(
        self, text: str, version: str, timeout: Optional[float] = None
    ) -> AggregateVerdict:
        """
        Validate every chunk of `text` and fold the results.
        - A failing chunk is recorded on its outcome and left out of the mean.
        - When `timeout` elapses, unfinished chunks are cancelled and the
          verdict is marked incomplete.
        - Raises AggregationError when no chunk could be analyzed.
        """
        chunks = self._chunker.split(text)
        if not chunks:
            raise EmptyInputError("content produced no chunks to validate")

        logger.info(
            "pipeline.chunked.start version=%s chunks=%d conc=%d",
            version,
            len(chunks),
            self._max_concurrency,
        )
        sem = asyncio.Semaphore(self._max_concurrency)

        async def _one(chunk: SubmissionChunk) -> ChunkOutcome:
            async with sem:
                return await self._validate_chunk(chunk, version)

        tasks = [asyncio.create_task(_one(c)) for c in chunks]
        try:
            with timed(logger, "pipeline.chunked", chunks=len(chunks)):
                _, pending = await asyncio.wait(tasks, timeout=timeout)
        finally:
            for t in tasks:
                if not t.done():
                    t.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(
                "pipeline.chunked.deadline abandoned=%d of=%d", len(pending), len(chunks)
            )

        outcomes: List[ChunkOutcome] = []
        for chunk, task in zip(chunks, tasks):
            if task in pending:
                outcomes.append(
                    ChunkOutcome(
                        chunk=chunk,
                        error="chunk abandoned: request deadline exceeded",
                        error_kind=DeadlineExceededError.kind,
                    )
                )
            else:
                outcomes.append(task.result())

        return self._fold(outcomes, version, incomplete=bool(pending))

    def _fold(
        self, outcomes: List[ChunkOutcome], version: str, incomplete: bool
    ) -> AggregateVerdict:
        analyzed = [o for o in outcomes if o.ok]
        failed = len(outcomes) - len(analyzed)

        if not analyzed:
            if incomplete:
                raise DeadlineExceededError(
                    f"request deadline exceeded before any of {len(outcomes)} chunks finished"
                )
            raise AggregationError(
                f"all {len(outcomes)} chunks failed validation", outcomes
            )

        avg = functions.mean([o.verdict.confidence for o in analyzed])
        overall = Verdict(
            is_valid=avg > OVERALL_THRESHOLD,
            confidence=avg,
            version=version,
            match_count=sum(o.verdict.match_count for o in analyzed),
        )
        if not overall.is_valid:
            overall.issues.append(
                f"{len(analyzed)} chunks analyzed with average confidence {avg:.2f}"
            )
            if avg < LOW_ALIGNMENT_THRESHOLD:
                overall.issues.append(
                    "Multiple sections show low alignment with MCP specification"
                )
            overall.suggestions.append("Review flagged sections against MCP specification")
            overall.suggestions.append(
                "Consider using standard MCP terminology throughout"
            )
        if failed:
            overall.issues.append(
                f"{failed} of {len(outcomes)} chunks could not be analyzed "
                "and were excluded from the overall confidence"
            )
        if incomplete:
            overall.issues.append(
                "Validation incomplete: request deadline reached before all chunks were analyzed"
            )

        summary = f"Analyzed {len(outcomes)} content chunks"
        if failed:
            summary += f" ({failed} failed)"
        logger.info(
            "pipeline.chunked.result valid=%s conf=%.2f ok=%d failed=%d incomplete=%s",
            overall.is_valid,
            avg,
            len(analyzed),
            failed,
            incomplete,
        )
        return AggregateVerdict(
            per_chunk=outcomes,
            overall=overall,
            version=version,
            summary=summary,
            incomplete=incomplete,
        )

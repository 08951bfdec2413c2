# model/api.py
from typing import Any, Literal
from pydantic import BaseModel, Field
from core.entities import (
    AggregateVerdict,
    ChunkOutcome,
    MatchSummary,
    SearchMatch,
    ValidationReport,
    Verdict,
)
from util import functions
from util.constants import SearchLimits


class ValidateContentRequest(BaseModel):
    content: str
    specVersion: str | None = None
    useChunking: bool = False


class ValidateCodeRequest(BaseModel):
    code: str
    specVersion: str | None = None
    language: str = "go"


class SearchSpecRequest(BaseModel):
    query: str
    specVersion: str | None = None
    topK: int = Field(
        default=SearchLimits.DEFAULT_TOP_K, ge=1, le=SearchLimits.MAX_TOP_K
    )


class VerdictModel(BaseModel):
    isValid: bool
    confidence: float
    specVersion: str
    issues: list[str]
    suggestions: list[str]
    matchCount: int

    @classmethod
    def from_entity(cls, v: Verdict) -> "VerdictModel":
        return cls(
            isValid=v.is_valid,
            confidence=v.confidence,
            specVersion=v.version,
            issues=list(v.issues),
            suggestions=list(v.suggestions),
            matchCount=v.match_count,
        )


class MatchSummaryModel(BaseModel):
    topic: str
    relevance: float
    summary: str

    @classmethod
    def from_entity(cls, m: MatchSummary) -> "MatchSummaryModel":
        return cls(topic=m.topic, relevance=m.relevance, summary=m.summary)


class ValidationReportResponse(BaseModel):
    mode: Literal["single"] = "single"
    verdict: VerdictModel
    matches: list[MatchSummaryModel]

    @classmethod
    def from_entity(cls, r: ValidationReport) -> "ValidationReportResponse":
        return cls(
            verdict=VerdictModel.from_entity(r.verdict),
            matches=[MatchSummaryModel.from_entity(m) for m in r.matches],
        )


class ChunkResultModel(BaseModel):
    chunkId: str
    position: int
    kind: str
    preview: str
    verdict: VerdictModel | None = None
    matches: list[MatchSummaryModel] = []
    error: str | None = None
    errorKind: str | None = None

    @classmethod
    def from_entity(cls, o: ChunkOutcome) -> "ChunkResultModel":
        return cls(
            chunkId=o.chunk.id,
            position=o.chunk.position,
            kind=o.chunk.kind.value,
            preview=functions.preview(o.chunk.text),
            verdict=VerdictModel.from_entity(o.verdict) if o.verdict else None,
            matches=[MatchSummaryModel.from_entity(m) for m in o.matches],
            error=o.error,
            errorKind=o.error_kind,
        )


class AggregateResponse(BaseModel):
    mode: Literal["chunked"] = "chunked"
    specVersion: str
    overall: VerdictModel
    chunks: list[ChunkResultModel]
    summary: str
    incomplete: bool

    @classmethod
    def from_entity(cls, a: AggregateVerdict) -> "AggregateResponse":
        return cls(
            specVersion=a.version,
            overall=VerdictModel.from_entity(a.overall),
            chunks=[ChunkResultModel.from_entity(o) for o in a.per_chunk],
            summary=a.summary,
            incomplete=a.incomplete,
        )


class SearchResultModel(BaseModel):
    id: str
    content: str
    similarity: float
    rank: int
    metadata: dict[str, Any] = {}

    @classmethod
    def from_entity(cls, m: SearchMatch) -> "SearchResultModel":
        return cls(
            id=m.chunk.id,
            content=m.chunk.content,
            similarity=m.similarity,
            rank=m.rank,
            metadata=dict(m.chunk.metadata),
        )


class SearchSpecResponse(BaseModel):
    specVersion: str
    results: list[SearchResultModel]


class SpecVersionsResponse(BaseModel):
    versions: list[str]
    defaultVersion: str


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    message: str


# Error envelopes rendered by main.factcheck_error_handler, for the OpenAPI schema.
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    code: {"model": ErrorResponse} for code in (400, 500, 502, 504)
}

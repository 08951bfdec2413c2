# core/entities.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import numpy as np
from util.enums import ChunkKind


@dataclass(frozen=True)
class ReferenceChunk:
    """
    One embedded passage of a specification version. Created offline by
    ingestion; never mutated at query time.
    """

    id: str
    version: str
    content: str
    embedding: Tuple[float, ...]
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ReferenceCorpus:
    """
    All reference chunks for one spec version plus a cached (n, d) float64
    matrix of their embeddings for vectorized cosine search.
    """

    version: str
    chunks: List[ReferenceChunk]
    _matrix: Optional[np.ndarray] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __len__(self) -> int:
        return len(self.chunks)

    @property
    def dimension(self) -> int:
        return len(self.chunks[0].embedding) if self.chunks else 0

    def build_matrix(self) -> np.ndarray:
        """Stack embeddings into the (n, d) search matrix; a no-op once built."""
        if self._matrix is None:
            if not self.chunks:
                self._matrix = np.zeros((0, 0), dtype=np.float64)
            else:
                self._matrix = np.asarray(
                    [c.embedding for c in self.chunks], dtype=np.float64
                )
        return self._matrix

    @property
    def matrix(self) -> np.ndarray:
        return self.build_matrix()


@dataclass(frozen=True)
class SubmissionChunk:
    id: str
    text: str
    position: int  # 0-based order within the submission
    kind: ChunkKind
    start: int  # offset of text[0] in the normalized submission
    end: int
    overlap: int = 0  # prefix length shared with the previous chunk


@dataclass(frozen=True)
class SearchMatch:
    chunk: ReferenceChunk
    similarity: float  # cosine, in [-1, 1]
    rank: int  # dense, 1-based


@dataclass(frozen=True)
class MatchSummary:
    topic: str
    relevance: float
    summary: str


@dataclass
class Verdict:
    is_valid: bool
    confidence: float
    version: str
    issues: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    match_count: int = 0  # 0 means nothing relevant was retrieved


@dataclass
class ValidationReport:
    verdict: Verdict
    matches: List[MatchSummary]


@dataclass
class ChunkOutcome:
    chunk: SubmissionChunk
    verdict: Optional[Verdict] = None
    matches: List[MatchSummary] = field(default_factory=list)
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.verdict is not None


@dataclass
class AggregateVerdict:
    per_chunk: List[ChunkOutcome]
    overall: Verdict
    version: str
    summary: str
    incomplete: bool = False

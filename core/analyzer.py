# core/analyzer.py
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence
from core.code_patterns import SIGNAL_PATTERNS, detect_signals
from core.entities import MatchSummary, SearchMatch, Verdict
from util import functions
from util.constants import SummaryLimits

NO_MATCH_CONFIDENCE = 0.1
NO_MATCH_ISSUE = "No relevant MCP specification content found"


@dataclass
class Assessment:
    is_valid: bool
    confidence: float
    issues: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)


class SignalExtractor(Protocol):
    """Turns the mean match similarity (plus optional derived text) into an assessment."""

    def assess(self, mean_similarity: float, description: str) -> Assessment: ...


class SimilaritySignals:
    """Text variant: validity is mean similarity above `threshold`."""

    def __init__(
        self,
        threshold: float = 0.7,
        low_threshold: float = 0.5,
        subject: str = "Content",
    ) -> None:
        self.threshold = threshold
        self.low_threshold = low_threshold
        self.subject = subject

    def assess(self, mean_similarity: float, description: str) -> Assessment:
        valid = mean_similarity > self.threshold
        result = Assessment(is_valid=valid, confidence=functions.clamp01(mean_similarity))
        if not valid:
            result.issues.append(f"{self.subject} may not align with MCP specification")
            if mean_similarity < self.low_threshold:
                result.issues.append("Low similarity to MCP patterns detected")
            result.suggestions.append("Review content against MCP specification")
            result.suggestions.append(
                "Consider using standard MCP terminology and patterns"
            )
        return result


class PatternSignals:
    """
    Code variant: needs mean similarity above `threshold` and at least one
    protocol signal in the derived description. Confidence is scaled by
    signal coverage so prose that merely mentions protocol terms scores low.
    """

    def __init__(self, threshold: float = 0.6, low_threshold: float = 0.5) -> None:
        self.threshold = threshold
        self.low_threshold = low_threshold

    def assess(self, mean_similarity: float, description: str) -> Assessment:
        detected = detect_signals(description)
        valid = mean_similarity > self.threshold and len(detected) > 0
        scaled = mean_similarity * (len(detected) / len(SIGNAL_PATTERNS))
        result = Assessment(is_valid=valid, confidence=functions.clamp01(scaled))
        if not valid:
            if not detected:
                result.issues.append("No MCP patterns detected in code")
                result.suggestions.append("Ensure code implements MCP protocol patterns")
            if mean_similarity < self.low_threshold:
                result.issues.append(
                    "Code structure doesn't match MCP specification patterns"
                )
                result.suggestions.append(
                    "Review MCP specification for proper implementation patterns"
                )
        else:
            result.suggestions.append(f"Detected MCP patterns: {', '.join(detected)}")
        return result


class ValidationAnalyzer:
    """
    Shared verdict construction for every content kind:
    - no matches -> fixed low confidence, explicit issue, match_count=0
    - otherwise the extractor judges the mean similarity
    """

    def __init__(self, signals: SignalExtractor) -> None:
        self.signals = signals

    def analyze(
        self, matches: Sequence[SearchMatch], version: str, description: str = ""
    ) -> Verdict:
        if not matches:
            return Verdict(
                is_valid=False,
                confidence=NO_MATCH_CONFIDENCE,
                version=version,
                issues=[NO_MATCH_ISSUE],
                match_count=0,
            )
        avg = functions.mean([m.similarity for m in matches])
        a = self.signals.assess(avg, description)
        return Verdict(
            is_valid=a.is_valid,
            confidence=a.confidence,
            version=version,
            issues=a.issues,
            suggestions=a.suggestions,
            match_count=len(matches),
        )


def content_topic(line: str) -> bool:
    return not line.startswith("#") and not line.startswith("-")


def code_topic(line: str) -> bool:
    return any(word in line for word in ("server", "client", "tool"))


def summarize_matches(
    matches: Sequence[SearchMatch],
    limit: int,
    summary_chars: int,
    topic_rule: Callable[[str], bool] = content_topic,
    default_topic: str = "MCP Specification",
) -> List[MatchSummary]:
    """Presentational digests of the top `limit` matches; no effect on validity."""
    out: List[MatchSummary] = []
    for m in matches[:limit]:
        line: Optional[str] = functions.first_matching_line(m.chunk.content, topic_rule)
        topic = (
            functions.clip_chars(line, SummaryLimits.TOPIC_CHARS) if line else default_topic
        )
        out.append(
            MatchSummary(
                topic=topic,
                relevance=m.similarity,
                summary=functions.clip_chars(m.chunk.content, summary_chars),
            )
        )
    return out


def content_analyzer() -> ValidationAnalyzer:
    return ValidationAnalyzer(SimilaritySignals())


def chunk_analyzer() -> ValidationAnalyzer:
    return ValidationAnalyzer(SimilaritySignals(subject="Content section"))


def code_analyzer() -> ValidationAnalyzer:
    return ValidationAnalyzer(PatternSignals())

import pytest
from core.analyzer import (
    chunk_analyzer,
    code_analyzer,
    code_topic,
    content_analyzer,
    summarize_matches,
)
from core.code_patterns import describe_code, detect_signals
from core.entities import ReferenceChunk, SearchMatch

MCP_CODE = """package main

// speaks json-rpc over stdio
func main() {
    server := mcp.NewServer()
    server.Tools().Register(echo)
}"""


def _matches(sims, content="Servers expose tools to clients."):
    return [
        SearchMatch(
            chunk=ReferenceChunk(id=f"c{i}", version="v", content=content, embedding=(1.0,)),
            similarity=s,
            rank=i + 1,
        )
        for i, s in enumerate(sims)
    ]


def test_no_matches_gives_low_fixed_confidence():
    v = content_analyzer().analyze([], "2025-06-18")
    assert not v.is_valid
    assert v.confidence == pytest.approx(0.1)
    assert v.issues == ["No relevant MCP specification content found"]
    assert v.match_count == 0
    assert v.version == "2025-06-18"


def test_content_above_threshold_is_valid():
    v = content_analyzer().analyze(_matches([0.9, 0.8]), "draft")
    assert v.is_valid
    assert v.confidence == pytest.approx(0.85)
    assert v.issues == [] and v.suggestions == []
    assert v.match_count == 2


def test_content_threshold_is_strict():
    v = content_analyzer().analyze(_matches([0.7, 0.7]), "draft")
    assert not v.is_valid
    assert v.issues == ["Content may not align with MCP specification"]


def test_content_low_similarity_adds_issue_and_suggestions():
    v = content_analyzer().analyze(_matches([0.4, 0.3]), "draft")
    assert not v.is_valid
    assert v.confidence == pytest.approx(0.35)
    assert "Low similarity to MCP patterns detected" in v.issues
    assert len(v.suggestions) == 2


def test_chunk_analyzer_names_the_section():
    v = chunk_analyzer().analyze(_matches([0.6]), "draft")
    assert v.issues[0] == "Content section may not align with MCP specification"


def test_negative_mean_clamps_confidence():
    v = content_analyzer().analyze(_matches([-0.4, -0.2]), "draft")
    assert v.confidence == 0.0


def test_describe_code_lists_patterns_and_size():
    d = describe_code(MCP_CODE, "go")
    lines = d.splitlines()
    assert lines[0] == "Language: go"
    assert "Detected MCP patterns:" in lines
    assert "- JSON-RPC protocol implementation" in lines
    assert "- Standard I/O transport" in lines
    assert lines[-1] == "Code contains 7 lines"
    assert detect_signals(d) == ["JSON-RPC", "MCP tools", "MCP server"]


def test_describe_code_without_patterns():
    d = describe_code("x = 1", "python")
    assert "No obvious MCP patterns detected in the code" in d
    assert detect_signals(d) == []


def test_code_confidence_scales_with_signals():
    full = code_analyzer().analyze(_matches([0.9]), "draft", describe_code(MCP_CODE, "go"))
    assert full.is_valid
    assert full.confidence == pytest.approx(0.9)
    assert full.suggestions == ["Detected MCP patterns: JSON-RPC, MCP tools, MCP server"]

    one = code_analyzer().analyze(
        _matches([0.9]), "draft", describe_code("rpc := NewServer()", "go")
    )
    assert one.is_valid
    assert one.confidence == pytest.approx(0.3)


def test_code_without_signals_is_invalid():
    v = code_analyzer().analyze(_matches([0.9]), "draft", describe_code("x = 1", "python"))
    assert not v.is_valid
    assert v.confidence == 0.0
    assert v.issues == ["No MCP patterns detected in code"]


def test_code_low_similarity_reports_structure():
    v = code_analyzer().analyze(_matches([0.2]), "draft", describe_code(MCP_CODE, "go"))
    assert not v.is_valid
    assert "Code structure doesn't match MCP specification patterns" in v.issues


def test_code_no_matches_reports_retrieval_miss():
    v = code_analyzer().analyze([], "draft", describe_code(MCP_CODE, "go"))
    assert v.issues == ["No relevant MCP specification content found"]
    assert v.confidence == pytest.approx(0.1)
    assert v.match_count == 0


def test_retrieval_miss_differs_from_missing_patterns():
    desc = describe_code("x = 1", "python")
    miss = code_analyzer().analyze([], "draft", desc)
    invalid = code_analyzer().analyze(_matches([0.9]), "draft", desc)
    assert not miss.is_valid and not invalid.is_valid
    assert miss.issues != invalid.issues
    assert "specification content" in miss.issues[0]
    assert invalid.issues == ["No MCP patterns detected in code"]
    assert (miss.match_count, invalid.match_count) == (0, 1)
    # every variant reports the same retrieval miss
    assert content_analyzer().analyze([], "draft").issues == miss.issues
    assert chunk_analyzer().analyze([], "draft").issues == miss.issues


def test_summaries_pick_topic_and_clip():
    body = "# Heading\n- bullet\nThe initialize request comes first. " + "x" * 300
    out = summarize_matches(_matches([0.9, 0.8, 0.7, 0.6], content=body), 3, 200)
    assert len(out) == 3
    assert out[0].relevance == pytest.approx(0.9)
    assert out[0].summary.endswith("...")
    assert len(out[0].summary) == 203
    assert out[0].topic.startswith("The initialize request comes first.")
    assert len(out[0].topic) == 53


def test_summaries_fall_back_to_default_topic():
    out = summarize_matches(
        _matches([0.5], content="# Only a heading"),
        2,
        150,
        topic_rule=code_topic,
        default_topic="MCP Implementation",
    )
    assert out[0].topic == "MCP Implementation"
    assert out[0].summary == "# Only a heading"

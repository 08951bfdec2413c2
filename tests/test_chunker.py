import pytest
from core.chunker import ContentChunker, looks_like_markdown, split_spans
from util.enums import ChunkKind

MARKDOWN_DOC = """# Overview

The Model Context Protocol connects clients and servers over JSON-RPC.
Each session starts with an initialize request.

## Tools

- tools/list enumerates tools
- tools/call invokes one tool

```go
server.AddTool(tool, handler)
```

## Resources

Resources expose read-only data to the client. Servers may notify
clients when a resource changes."""


def _rebuild(chunks):
    return "".join(c.text[c.overlap:] for c in chunks)


def test_empty_and_blank_input_yield_no_chunks():
    chunker = ContentChunker()
    assert chunker.split("") == []
    assert chunker.split("  \n\t ") == []


def test_short_text_is_single_chunk():
    chunks = ContentChunker().split("  Servers expose tools.  ")
    assert len(chunks) == 1
    c = chunks[0]
    assert (c.id, c.position, c.overlap) == ("chunk-0", 0, 0)
    assert c.text == "Servers expose tools."
    assert c.kind is ChunkKind.TEXT


def test_long_plain_text_windows_and_overlap():
    text = " ".join(["spec"] * 399) + " specs"
    assert len(text) == 2000
    chunks = ContentChunker(chunk_size=800, chunk_overlap=100).split(text)

    assert [len(c.text) for c in chunks] == [800, 900, 500]
    assert [c.overlap for c in chunks] == [0, 100, 100]
    assert [c.id for c in chunks] == ["chunk-0", "chunk-1", "chunk-2"]
    assert [c.position for c in chunks] == [0, 1, 2]
    assert _rebuild(chunks) == text


def test_overlap_is_suffix_of_previous_chunk():
    text = ". ".join(f"Sentence number {i} talks about MCP tools" for i in range(60))
    chunks = ContentChunker(chunk_size=200, chunk_overlap=40).split(text)
    assert len(chunks) > 2
    for prev, cur in zip(chunks, chunks[1:]):
        assert 0 <= cur.overlap <= 40
        if cur.overlap:
            assert prev.text.endswith(cur.text[: cur.overlap])


def test_chunk_sizes_are_bounded():
    text = "word " * 1000
    chunker = ContentChunker(chunk_size=120, chunk_overlap=30)
    for c in chunker.split(text):
        assert len(c.text) - c.overlap <= 120
        assert len(c.text) <= 150


def test_unbroken_text_is_hard_cut():
    text = "x" * 250
    chunks = ContentChunker(chunk_size=100, chunk_overlap=0).split(text)
    assert [len(c.text) for c in chunks] == [100, 100, 50]
    assert _rebuild(chunks) == text


def test_markdown_is_split_on_structure():
    assert looks_like_markdown(MARKDOWN_DOC)
    chunks = ContentChunker(chunk_size=120, chunk_overlap=20).split(MARKDOWN_DOC)
    assert len(chunks) > 1
    assert chunks[0].kind is ChunkKind.SECTION
    assert _rebuild(chunks) == MARKDOWN_DOC
    for c in chunks:
        assert len(c.text) - c.overlap <= 120


def test_plain_text_is_not_markdown():
    assert not looks_like_markdown("Servers respond with a result - or an error.")


def test_split_spans_partitions_range():
    text = "aaa bbb. ccc ddd\n\neee fff"
    spans = split_spans(text, 0, len(text), 8)
    assert spans[0][0] == 0 and spans[-1][1] == len(text)
    for (s1, e1), (s2, _) in zip(spans, spans[1:]):
        assert e1 == s2
    assert all(e - s <= 8 for s, e in spans)


@pytest.mark.parametrize("size,overlap", [(0, 0), (100, 100), (100, 150), (10, -1)])
def test_invalid_configuration(size, overlap):
    with pytest.raises(ValueError):
        ContentChunker(chunk_size=size, chunk_overlap=overlap)

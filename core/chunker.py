# core/chunker.py
import re
from dataclasses import dataclass
from typing import List, Sequence, Tuple
from core.entities import SubmissionChunk
from util.enums import ChunkKind
import logging

logger = logging.getLogger(__name__)

# Line-anchored markdown cues: headings, fences, bullet or numbered list items.
_MARKDOWN_RE = re.compile(r"^ {0,3}(?:#{1,6}\s|```|~~~|[-*+]\s|\d+[.)]\s)", re.MULTILINE)
_HEADING_RE = re.compile(r"^ {0,3}#{1,6}\s")
_FENCE_RE = re.compile(r"^ {0,3}(?:```|~~~)")
_LIST_RE = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s")
_WHITESPACE_RE = re.compile(r"\s+")

# Coarsest first; the separator stays attached to the piece on its left.
SEPARATORS: Tuple[str, ...] = ("\n\n", "\n", ". ", " ")


@dataclass(frozen=True)
class _Piece:
    start: int
    end: int
    kind: ChunkKind


def looks_like_markdown(text: str) -> bool:
    return _MARKDOWN_RE.search(text) is not None


def split_spans(
    text: str, start: int, end: int, max_len: int, separators: Sequence[str] = SEPARATORS
) -> List[Tuple[int, int]]:
    """
    Partition text[start:end] into contiguous (start, end) spans of at most
    `max_len` characters, cutting on the coarsest separator that helps and
    falling back to hard cuts when no separator is left.
    """
    if end - start <= max_len:
        return [(start, end)]
    if not separators:
        return [(i, min(i + max_len, end)) for i in range(start, end, max_len)]

    sep, rest = separators[0], separators[1:]
    pieces: List[Tuple[int, int]] = []
    cursor = start
    while cursor < end:
        idx = text.find(sep, cursor, end)
        if idx == -1:
            pieces.append((cursor, end))
            break
        cut = idx + len(sep)
        pieces.append((cursor, cut))
        cursor = cut

    if len(pieces) == 1:
        return split_spans(text, start, end, max_len, rest)

    out: List[Tuple[int, int]] = []
    for s, e in pieces:
        if e - s > max_len:
            out.extend(split_spans(text, s, e, max_len, rest))
        else:
            out.append((s, e))
    return out


def _markdown_blocks(text: str) -> List[_Piece]:
    """
    Cut markdown into headings (with their body), paragraphs, list runs and
    fenced code blocks. Blocks are contiguous; blank lines stay with the
    block before them.
    """
    starts: List[Tuple[int, ChunkKind]] = []
    offset = 0
    in_fence = False
    fence_closed = False
    prev_blank = False
    current: ChunkKind | None = None

    for line in text.splitlines(keepends=True):
        line_start = offset
        offset += len(line)
        blank = not line.strip()

        if in_fence:
            if _FENCE_RE.match(line):
                in_fence = False
                fence_closed = True
            continue

        if blank:
            prev_blank = True
            continue

        kind: ChunkKind | None = None
        if _FENCE_RE.match(line):
            kind = ChunkKind.CODE_BLOCK
            in_fence = True
        elif _HEADING_RE.match(line):
            kind = ChunkKind.SECTION
        elif _LIST_RE.match(line):
            if current is not ChunkKind.LIST or fence_closed:
                kind = ChunkKind.LIST
        elif current is None or prev_blank or fence_closed:
            kind = ChunkKind.PARAGRAPH

        if kind is not None:
            starts.append((line_start, kind))
            current = kind
            fence_closed = False
        prev_blank = False

    blocks: List[_Piece] = []
    for i, (s, kind) in enumerate(starts):
        e = starts[i + 1][0] if i + 1 < len(starts) else len(text)
        blocks.append(_Piece(s, e, kind))
    return blocks


def _pack(pieces: Sequence[_Piece], max_len: int, break_on_sections: bool) -> List[List[_Piece]]:
    windows: List[List[_Piece]] = []
    current: List[_Piece] = []
    for p in pieces:
        if current:
            size = p.end - current[0].start
            starts_section = (
                break_on_sections
                and p.kind is ChunkKind.SECTION
                and current[-1].end - current[0].start >= max_len // 2
            )
            if size > max_len or starts_section:
                windows.append(current)
                current = []
        current.append(p)
    if current:
        windows.append(current)
    return windows


class ContentChunker:
    """
    Splits a submission into ordered, overlapping SubmissionChunks.

    - Markdown input is cut on structure first; plain text is cut recursively
      on paragraph, line, sentence and word separators.
    - Windows hold at most `chunk_size` characters; every chunk after the
      first is prefixed with up to `chunk_overlap` characters of the previous
      window, so chunk text never exceeds chunk_size + chunk_overlap.
    - "".join(c.text[c.overlap:] for c in chunks) == text.strip()
    """

    def __init__(self, chunk_size: int = 800, chunk_overlap: int = 100) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if chunk_overlap < 0 or chunk_overlap >= chunk_size:
            raise ValueError("chunk_overlap must be in [0, chunk_size)")
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def split(self, content: str) -> List[SubmissionChunk]:
        text = content.strip()
        if not text:
            return []

        structured = looks_like_markdown(text)
        if structured:
            pieces: List[_Piece] = []
            for block in _markdown_blocks(text):
                for s, e in split_spans(text, block.start, block.end, self.chunk_size):
                    pieces.append(_Piece(s, e, block.kind))
        else:
            pieces = [
                _Piece(s, e, ChunkKind.TEXT)
                for s, e in split_spans(text, 0, len(text), self.chunk_size)
            ]

        windows = _pack(pieces, self.chunk_size, break_on_sections=structured)
        chunks: List[SubmissionChunk] = []
        for i, window in enumerate(windows):
            start, end = window[0].start, window[-1].end
            overlap_start = start
            if i > 0:
                overlap_start = self._overlap_start(text, windows[i - 1][0].start, start)
            chunks.append(
                SubmissionChunk(
                    id=f"chunk-{i}",
                    text=text[overlap_start:end],
                    position=i,
                    kind=window[0].kind,
                    start=overlap_start,
                    end=end,
                    overlap=start - overlap_start,
                )
            )

        logger.debug(
            "chunker.split chars=%d chunks=%d strategy=%s",
            len(text),
            len(chunks),
            "markdown" if structured else "recursive",
        )
        return chunks

    def _overlap_start(self, text: str, prev_start: int, start: int) -> int:
        candidate = max(prev_start, start - self.chunk_overlap)
        if candidate == prev_start or text[candidate - 1].isspace():
            return candidate
        # snap forward so the overlap does not begin mid-word
        m = _WHITESPACE_RE.search(text, candidate, start)
        if m is None or m.end() >= start:
            return candidate
        return m.end()

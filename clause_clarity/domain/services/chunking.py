from __future__ import annotations

import re
from collections import deque
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from clause_clarity.domain.errors import ConfigurationError

# ---------- Value Objects ----------

# Highest priority first: paragraph, line, sentence, clause, word.
DEFAULT_SEPARATORS: tuple[str, ...] = ("\n\n", "\n", ". ", ", ", " ")

Span = tuple[int, int]

# Last resort once the configured separators are exhausted: any whitespace run
# (tabs, non-breaking spaces, ...) still counts as a word boundary.
_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass(frozen=True)
class ChunkingParams:
    max_chunk_size: int = 200
    overlap: int = 50
    separators: tuple[str, ...] = DEFAULT_SEPARATORS

    def __post_init__(self) -> None:
        if self.max_chunk_size <= 0:
            raise ConfigurationError(
                f"max_chunk_size must be > 0 (got {self.max_chunk_size})"
            )
        if self.overlap < 0 or self.overlap >= self.max_chunk_size:
            raise ConfigurationError(
                f"overlap must satisfy 0 <= overlap < max_chunk_size "
                f"(got overlap={self.overlap}, max_chunk_size={self.max_chunk_size})"
            )
        if any(not sep for sep in self.separators):
            raise ConfigurationError("separators must be non-empty strings")


# ---------- Atom splitting ----------


def _atoms(text: str, start: int, end: int, seps: Sequence[str], limit: int) -> Iterator[Span]:
    """Yield contiguous spans covering text[start:end], each <= limit where possible.

    Each separator stays attached to the end of the piece it terminates, so the
    spans always tile the input exactly. With no configured separator left, the
    piece is split after each whitespace run; a single whitespace-delimited unit
    larger than `limit` is yielded whole.
    """
    if end - start <= limit:
        yield (start, end)
        return
    for i, sep in enumerate(seps):
        if text.find(sep, start, end) == -1:
            continue
        rest = seps[i + 1 :]
        pos = start
        while pos < end:
            idx = text.find(sep, pos, end)
            piece_end = end if idx == -1 else idx + len(sep)
            if piece_end - pos <= limit:
                yield (pos, piece_end)
            else:
                yield from _atoms(text, pos, piece_end, rest, limit)
            pos = piece_end
        return
    yield from _word_atoms(text, start, end)


def _word_atoms(text: str, start: int, end: int) -> Iterator[Span]:
    pos = start
    for match in _WHITESPACE_RUN.finditer(text, start, end):
        if match.end() > pos:
            yield (pos, match.end())
            pos = match.end()
    if pos < end:
        yield (pos, end)


# ---------- Chunk-Packer ----------


def _pack(atoms: Iterator[Span], p: ChunkingParams) -> Iterator[Span]:
    """Greedy packing of atoms into windows with a character tail overlap."""
    window: deque[Span] = deque()
    total = 0
    for atom in atoms:
        length = atom[1] - atom[0]
        if window and total + length > p.max_chunk_size:
            yield (window[0][0], window[-1][1])
            # Keep a tail of at most `overlap` chars that still leaves room for this atom.
            while window and (total > p.overlap or total + length > p.max_chunk_size):
                head = window.popleft()
                total -= head[1] - head[0]
        window.append(atom)
        total += length
    if window:
        yield (window[0][0], window[-1][1])


class ChunkSequence:
    """Lazy, finite, restartable sequence of chunk texts."""

    def __init__(self, chunker: Chunker, text: str) -> None:
        self._chunker = chunker
        self._text = text

    def __iter__(self) -> Iterator[str]:
        for start, end in self._chunker.spans(self._text):
            piece = self._text[start:end].strip()
            if piece:
                yield piece


class Chunker:
    """Recursive separator-priority splitter.

    Pipeline: atoms (largest natural unit that fits) → greedy packing with overlap.
    """

    def __init__(self, params: ChunkingParams | None = None) -> None:
        self.params = params or ChunkingParams()

    def spans(self, text: str) -> Iterator[Span]:
        """(start, end) offsets of every chunk; consecutive spans overlap by <= overlap."""
        if not text:
            return iter(())
        atoms = _atoms(text, 0, len(text), self.params.separators, self.params.max_chunk_size)
        return _pack(atoms, self.params)

    def split(self, text: str) -> ChunkSequence:
        return ChunkSequence(self, text)


# Properties:
#
# - No I/O, no globals, no external NLP libs.
# - Spans tile the text without gaps; overlap only ever covers whole atoms.
# - A word longer than max_chunk_size is never cut.

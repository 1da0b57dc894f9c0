# -*- coding: utf-8 -*-
"""Split long text (exception traces) into field-sized chunks."""

from __future__ import annotations

from collections.abc import Iterator


def _last_break(text: str, start: int, end: int) -> int:
    """Index of the last line break in text[start:end], or -1."""
    return max(text.rfind("\r", start, end), text.rfind("\n", start, end))


def chunk_text(text: str, max_chars: int) -> Iterator[str]:
    """Yield consecutive segments of ``text``, each at most ``max_chars`` long.

    A segment ends at the last line break that leaves it within ``max_chars``
    (a break right after a full window counts); that break (``\\r``, ``\\n``
    or a ``\\r\\n`` pair) is consumed. Without a break the segment is cut at
    exactly ``max_chars``.

    Raises:
        ValueError: If max_chars is less than 1.
    """
    if max_chars < 1:
        raise ValueError("max_chars must be >= 1")

    pos = 0
    length = len(text)
    while length - pos > max_chars:
        end = pos + max_chars
        # A break at index ``end`` still leaves a segment of max_chars.
        brk = _last_break(text, pos + 1, end + 1)
        stop = brk
        if brk != -1 and text[brk] == "\n" and text[brk - 1] == "\r":
            stop = brk - 1
        if brk == -1 or stop == pos:
            yield text[pos:end]
            pos = end
            continue

        yield text[pos:stop]
        pos = brk + 1
        if text[brk] == "\r" and pos < length and text[pos] == "\n":
            pos += 1

    if pos < length:
        yield text[pos:]

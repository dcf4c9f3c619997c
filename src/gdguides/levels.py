"""Pattern-based level lookup inside a decoded save blob.

The blob is plist-like markup but it is never parsed as XML. Level names and
level strings are found with lookaround regexes and paired up by position:
the Kth ``<s>name</s><k>k4</k>`` belongs to the Kth ``<k>k4</k><s>...</s>``.
Markers showing up inside a level's own free text are not supported.

All positions are :class:`Span` objects tied to the exact string they were
computed from. Splicing returns a new string, so spans taken before a splice
must be recomputed against the result.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass

from gdguides.codec import decode_payload
from gdguides.errors import FieldNotFoundError, RecordNotFoundError

logger = logging.getLogger(__name__)

LEVEL_NAME_RE = re.compile(r"(?<=<s>)[^<>=]+(?=</s><k>k4</k>)")
LEVEL_DATA_RE = re.compile(r"(?<=<k>k4</k><s>)[^<>]+(?=</s>)")
GUIDELINES_RE = re.compile(r"(?<=kA14,)[0-9.~]*")
PLAIN_SEPARATOR = "|"


@dataclass(frozen=True)
class Span:
    start: int
    end: int
    source_length: int

    def slice(self, text: str) -> str:
        self.validate(text)
        return text[self.start : self.end]

    def validate(self, text: str) -> None:
        if len(text) != self.source_length:
            raise ValueError(
                f"stale span: computed on {self.source_length} chars, applied to {len(text)}"
            )
        if not 0 <= self.start <= self.end <= len(text):
            raise ValueError(f"span {self.start}:{self.end} out of bounds")


def _span(match: re.Match[str], text: str) -> Span:
    return Span(match.start(), match.end(), len(text))


def iter_level_names(text: str) -> Iterator[str]:
    """Yield level names in order of appearance."""
    for match in LEVEL_NAME_RE.finditer(text):
        yield match.group(0)


def list_level_names(text: str) -> list[str]:
    return list(iter_level_names(text))


def find_payload_span(text: str, index: int) -> Span:
    """Span of the ``index``-th (0-based) level string in ``text``."""
    if index >= 0:
        for i, match in enumerate(LEVEL_DATA_RE.finditer(text)):
            if i == index:
                return _span(match, text)
    raise RecordNotFoundError(f"Level #{index} not found")


def find_payload_span_by_name(text: str, name: str) -> tuple[int, Span]:
    """Locate the level string belonging to the first level called ``name``.

    Returns the level's ordinal alongside the span. Names and level strings
    are matched independently, so their counts have to agree before the
    ordinal can be trusted.
    """
    levels = paired_levels(text)
    for index, (level_name, span) in enumerate(levels):
        if level_name == name:
            return index, span
    raise RecordNotFoundError(f"Level '{name}' not found")


def paired_levels(text: str) -> list[tuple[str, Span]]:
    """Every level as ``(name, level string span)``, joined by position.

    Names and level strings are matched independently; when their counts
    differ the pairing cannot be trusted and nothing is returned.
    """
    names = list_level_names(text)
    spans = [_span(m, text) for m in LEVEL_DATA_RE.finditer(text)]
    if len(spans) != len(names):
        raise RecordNotFoundError(
            f"Level markers out of step: {len(names)} names but {len(spans)} level strings"
        )
    return list(zip(names, spans))


def find_level(text: str, index: int) -> tuple[str, Span]:
    """Name and level string span of the ``index``-th level, checked for pairing."""
    levels = paired_levels(text)
    if not 0 <= index < len(levels):
        raise RecordNotFoundError(f"Level #{index} not found")
    return levels[index]


def resolve_payload(payload: str) -> tuple[str, bool]:
    """Return the plain level string and whether it had to be decoded."""
    if PLAIN_SEPARATOR in payload:
        return payload, False
    logger.debug("level string is encoded (%d chars), decoding", len(payload))
    return decode_payload(payload), True


def find_guideline_span(payload: str) -> Span:
    match = GUIDELINES_RE.search(payload)
    if match is None:
        raise FieldNotFoundError("Guidelines not found in level data")
    return _span(match, payload)


def splice(text: str, span: Span, replacement: str) -> str:
    """Replace exactly ``span`` of ``text``, leaving every other character alone."""
    span.validate(text)
    return text[: span.start] + replacement + text[span.end :]


def splice_field(payload: str, span: Span, guidelines: str) -> str:
    return splice(payload, span, guidelines)


def splice_payload(text: str, span: Span, payload: str) -> str:
    return splice(text, span, payload)

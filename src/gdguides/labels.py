"""Audacity label tracks to Geometry Dash guideline strings.

A label export has one label per line: ``start<TAB>end<TAB>text``. Only the
start time and the last character of the line matter here. The last
character picks the guideline color as a base-3 digit; anything that is not
a digit (including a trailing tab from an empty label) falls back to yellow.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from gdguides.errors import InvalidEncodingError, LabelParseError, SaveFileError

logger = logging.getLogger(__name__)

TIME_RE = re.compile(r"\+?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


class GuidelineColor(Enum):
    YELLOW = "0.9"
    GREEN = "1"
    ORANGE = "0"

    @property
    def code(self) -> str:
        """Value written into the save's guideline string."""
        return self.value


DIGIT_COLORS = (GuidelineColor.YELLOW, GuidelineColor.GREEN, GuidelineColor.ORANGE)


@dataclass(frozen=True)
class LabelEntry:
    time: float
    color: GuidelineColor


def color_for_char(ch: str) -> GuidelineColor:
    """Read ``ch`` as a base-3 digit; ASCII digits and raw code points 0-2 both count."""
    if ch in ("0", "1", "2"):
        return DIGIT_COLORS[int(ch)]
    if ord(ch) < len(DIGIT_COLORS):
        return DIGIT_COLORS[ord(ch)]
    return GuidelineColor.YELLOW


def _parse_time(raw: str, line_number: int, line: str) -> float:
    if not TIME_RE.fullmatch(raw):
        raise LabelParseError(line_number, line, "expected a non-negative time")
    time = float(raw)
    if not math.isfinite(time):
        raise LabelParseError(line_number, line, "time is not finite")
    return time


def parse_labels(text: str) -> list[LabelEntry]:
    """Parse a label export, sorted by time (ties keep file order)."""
    entries: list[LabelEntry] = []
    for line_number, line in enumerate(text.split("\n"), start=1):
        line = line.removesuffix("\r")
        if not line:
            continue
        time = _parse_time(line.split("\t", 1)[0], line_number, line)
        entries.append(LabelEntry(time=time, color=color_for_char(line[-1])))
    entries.sort(key=lambda entry: entry.time)
    logger.debug("parsed %d labels", len(entries))
    return entries


def render_guidelines(entries: Iterable[LabelEntry]) -> str:
    return "".join(f"{entry.time:.6f}~{entry.color.code}~" for entry in entries)


def create_guidelines(text: str) -> str:
    return render_guidelines(parse_labels(text))


def decode_labels(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidEncodingError("labels utf-8", f"invalid UTF-8 at byte {exc.start}") from exc


def read_labels(path: Path) -> str:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise SaveFileError(f"Could not read labels file {path}: {exc}") from exc
    return decode_labels(data)

"""Typed failures raised by the save pipeline.

Each error carries the pipeline stage it came from so callers (CLI, UI) can
say where things went wrong without parsing messages.
"""

from __future__ import annotations


class GuidelineError(Exception):
    """Base class for every failure the core reports."""

    stage = "unknown"


class InvalidEncodingError(GuidelineError):
    """Bad UTF-8, bad base64 or a corrupt deflate stream."""

    stage = "decode"

    def __init__(self, step: str, detail: str) -> None:
        super().__init__(f"{step}: {detail}")
        self.step = step
        self.detail = detail


class RecordNotFoundError(GuidelineError):
    stage = "locate"


class FieldNotFoundError(GuidelineError):
    stage = "splice"


class LabelParseError(GuidelineError):
    stage = "parse"

    def __init__(self, line_number: int, line: str, reason: str) -> None:
        super().__init__(f"line {line_number}: {reason}: {line!r}")
        self.line_number = line_number
        self.line = line
        self.reason = reason


class SaveFileError(GuidelineError):
    stage = "io"

"""End-to-end guideline replacement over a save file."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from gdguides.codec import read_save, write_save
from gdguides.labels import create_guidelines
from gdguides.levels import (
    find_guideline_span,
    find_level,
    find_payload_span_by_name,
    paired_levels,
    resolve_payload,
    splice_field,
    splice_payload,
)

logger = logging.getLogger(__name__)


@dataclass
class SpliceResult:
    text: str
    level_index: int
    level_name: str | None
    guidelines: str
    was_encoded: bool


def apply_guidelines(blob: str, target: int | str, guidelines: str) -> SpliceResult:
    """Write ``guidelines`` into the level picked by ordinal or exact name.

    An encoded level string is put back decoded; the game reads either form.
    """
    if isinstance(target, str):
        level_index, payload_span = find_payload_span_by_name(blob, target)
        level_name: str | None = target
    else:
        level_index = target
        level_name, payload_span = find_level(blob, target)

    payload, was_encoded = resolve_payload(payload_span.slice(blob))
    field_span = find_guideline_span(payload)
    new_payload = splice_field(payload, field_span, guidelines)
    logger.debug(
        "level #%d: guideline field %d:%d replaced with %d chars",
        level_index,
        field_span.start,
        field_span.end,
        len(guidelines),
    )
    return SpliceResult(
        text=splice_payload(blob, payload_span, new_payload),
        level_index=level_index,
        level_name=level_name,
        guidelines=guidelines,
        was_encoded=was_encoded,
    )


def apply_labels(blob: str, target: int | str, labels_text: str) -> SpliceResult:
    return apply_guidelines(blob, target, create_guidelines(labels_text))


def list_levels(save_path: Path) -> list[str]:
    return [name for name, _span in paired_levels(read_save(save_path))]


def apply_guidelines_to_level(
    save_path: Path, target: int | str, labels_text: str, *, dry_run: bool = False
) -> SpliceResult:
    """Read, modify and (unless ``dry_run``) rewrite ``save_path``.

    Nothing is written unless every step succeeded.
    """
    blob = read_save(save_path)
    result = apply_labels(blob, target, labels_text)
    if dry_run:
        logger.info("dry run, leaving %s untouched", save_path)
    else:
        write_save(save_path, result.text)
    return result

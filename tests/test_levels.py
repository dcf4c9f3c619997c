import pytest

from gdguides.errors import FieldNotFoundError, RecordNotFoundError
from gdguides.levels import (
    find_guideline_span,
    find_level,
    find_payload_span,
    find_payload_span_by_name,
    iter_level_names,
    list_level_names,
    paired_levels,
    resolve_payload,
    splice_field,
    splice_payload,
)


def test_names_and_payloads_line_up(blob_factory, plain_level):
    levels = [("First", plain_level), ("Second level", plain_level + "a"), ("Third", "x|y")]
    blob = blob_factory(levels)

    names = list_level_names(blob)
    assert names == ["First", "Second level", "Third"]
    for i, (_name, data) in enumerate(levels):
        assert find_payload_span(blob, i).slice(blob) == data

    with pytest.raises(RecordNotFoundError):
        find_payload_span(blob, len(levels))
    with pytest.raises(RecordNotFoundError):
        find_payload_span(blob, -1)


def test_level_names_are_restartable(blob_factory, plain_level):
    blob = blob_factory([("A", plain_level), ("B", plain_level)])
    assert list(iter_level_names(blob)) == list(iter_level_names(blob)) == ["A", "B"]


def test_empty_blob_has_no_levels(blob_factory):
    blob = blob_factory([])
    assert list_level_names(blob) == []
    with pytest.raises(RecordNotFoundError):
        find_payload_span(blob, 0)


def test_find_by_name_uses_position(blob_factory, plain_level):
    blob = blob_factory([("Test", "a|b"), ("Other", plain_level), ("Test", "c|d")])
    index, span = find_payload_span_by_name(blob, "Other")
    assert index == 1
    assert span.slice(blob) == plain_level

    # first exact match wins
    index, span = find_payload_span_by_name(blob, "Test")
    assert index == 0
    assert span.slice(blob) == "a|b"

    with pytest.raises(RecordNotFoundError):
        find_payload_span_by_name(blob, "test")


def test_find_by_name_rejects_unpaired_markers(blob_factory, plain_level):
    # "=" is not allowed in a name, so this level has a payload but no name match
    blob = blob_factory([("a=b", plain_level), ("Test", plain_level)])
    assert list_level_names(blob) == ["Test"]
    with pytest.raises(RecordNotFoundError, match="out of step"):
        find_payload_span_by_name(blob, "Test")


def test_resolve_payload(plain_level, payload_encoder):
    assert resolve_payload(plain_level) == (plain_level, False)
    assert resolve_payload(payload_encoder(plain_level)) == (plain_level, True)


def test_guideline_span_missing_marker():
    with pytest.raises(FieldNotFoundError) as excinfo:
        find_guideline_span("kS38,1_40|,kA13,0,kA15,0;1,1,2,15;")
    assert excinfo.value.stage == "splice"


def test_guideline_span_covers_existing_field():
    payload = "kS38,1|,kA14,1.500000~0.9~3.000000~1~,kA6,0;"
    span = find_guideline_span(payload)
    assert span.slice(payload) == "1.500000~0.9~3.000000~1~"


def test_splice_field_into_empty_field(plain_level):
    span = find_guideline_span(plain_level)
    assert span.start == span.end

    new = splice_field(plain_level, span, "2.000000~0.9~")
    prefix = plain_level[: span.start]
    suffix = plain_level[span.end :]
    assert new.encode() == prefix.encode() + b"2.000000~0.9~" + suffix.encode()
    assert prefix.endswith("kA14,")
    assert suffix.startswith(",kA6,")


def test_splice_payload_keeps_rest_of_blob(blob_factory, plain_level):
    blob = blob_factory([("A", plain_level), ("B", plain_level)])
    span = find_payload_span(blob, 1)
    new_blob = splice_payload(blob, span, "new|data")
    assert new_blob[: span.start] == blob[: span.start]
    assert new_blob[span.start + len("new|data") :] == blob[span.end :]
    assert find_payload_span(new_blob, 1).slice(new_blob) == "new|data"
    assert find_payload_span(new_blob, 0).slice(new_blob) == plain_level


def test_stale_span_is_rejected(blob_factory, plain_level):
    blob = blob_factory([("A", plain_level)])
    span = find_payload_span(blob, 0)
    changed = splice_payload(blob, span, "short|")
    with pytest.raises(ValueError, match="stale span"):
        splice_payload(changed, span, "again|")


def test_find_level_pairs_name_and_payload(blob_factory, plain_level):
    blob = blob_factory([("A", "a|1"), ("B", plain_level)])
    name, span = find_level(blob, 1)
    assert name == "B"
    assert span.slice(blob) == plain_level
    assert [name for name, _span in paired_levels(blob)] == ["A", "B"]
    with pytest.raises(RecordNotFoundError):
        find_level(blob, 2)
    with pytest.raises(RecordNotFoundError):
        find_level(blob, -1)


def test_find_level_rejects_unpaired_markers(blob_factory, plain_level):
    blob = blob_factory([("a=b", plain_level), ("Test", plain_level)])
    with pytest.raises(RecordNotFoundError, match="out of step"):
        find_level(blob, 0)
    with pytest.raises(RecordNotFoundError, match="out of step"):
        paired_levels(blob)

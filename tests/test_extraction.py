"""Tests for duodebate/extraction.py."""

import pytest

from duodebate.extraction import (
    ExtractionError,
    MalformedResponseError,
    MissingFieldError,
    StructuredRecord,
    extract_record,
)

_RECORD_JSON = '{"draft": "An old silent pond", "status": "ONGOING", "sources": ["basho"]}'
_EXPECTED = {"draft": "An old silent pond", "status": "ONGOING", "sources": ["basho"]}


@pytest.mark.parametrize(
    "raw",
    [
        _RECORD_JSON,
        f"```json\n{_RECORD_JSON}\n```",
        f"```\n{_RECORD_JSON}\n```",
        f"  \n```JSON\n{_RECORD_JSON}\n```\n  ",
        f"```{_RECORD_JSON}```",
    ],
    ids=["plain", "tagged-fence", "untagged-fence", "padded-fence", "inline-fence"],
)
def test_extract_plain_and_fenced_are_identical(raw):
    assert extract_record(raw).as_dict() == _EXPECTED


def test_extract_from_surrounding_prose():
    raw = f"Sure! Here is my answer:\n{_RECORD_JSON}\nLet me know if you need more."
    assert extract_record(raw).as_dict() == _EXPECTED


def test_extract_fence_followed_by_prose():
    raw = f"```json\n{_RECORD_JSON}\n```\nHope this helps."
    assert extract_record(raw).as_dict() == _EXPECTED


def test_extract_nested_braces_uses_outermost_span():
    raw = 'Result: {"critique": "ok", "meta": {"depth": 2}} done'
    record = extract_record(raw)
    assert record.as_dict() == {"critique": "ok", "meta": {"depth": 2}}


def test_extract_garbage_raises_malformed_with_original_error():
    with pytest.raises(MalformedResponseError, match="Expecting value"):
        extract_record("I could not think of anything to say.")


def test_extract_empty_text_raises():
    with pytest.raises(MalformedResponseError):
        extract_record("   ")


def test_extract_unbalanced_braces_raises():
    with pytest.raises(MalformedResponseError):
        extract_record("} nothing useful {")


def test_extract_invalid_brace_span_raises():
    with pytest.raises(MalformedResponseError):
        extract_record('{"a": 1} and also {b}')


def test_extract_top_level_array_is_not_a_record():
    with pytest.raises(MalformedResponseError):
        extract_record('["draft", "status"]')


def test_malformed_is_an_extraction_error():
    with pytest.raises(ExtractionError):
        extract_record("nope")


# --- StructuredRecord accessors ---

def test_require_text_returns_string():
    record = StructuredRecord({"draft": "text"})
    assert record.require_text("draft") == "text"


def test_require_text_missing_field():
    record = StructuredRecord({"status": "READY"})
    with pytest.raises(MissingFieldError) as exc_info:
        record.require_text("draft")
    assert exc_info.value.field_name == "draft"
    assert "draft" in str(exc_info.value)


def test_require_text_null_is_missing():
    with pytest.raises(MissingFieldError):
        StructuredRecord({"draft": None}).require_text("draft")


def test_require_text_wrong_type():
    with pytest.raises(MissingFieldError, match="must be text"):
        StructuredRecord({"draft": {"nested": True}}).require_text("draft")


def test_optional_text_default_when_absent():
    assert StructuredRecord({}).optional_text("response", "fallback") == "fallback"


def test_optional_text_renders_scalars():
    record = StructuredRecord({"n": 3, "flag": False})
    assert record.optional_text("n", "") == "3"
    assert record.optional_text("flag", "") == "false"


def test_text_list_absent_or_not_a_list():
    record = StructuredRecord({"questions": "just one"})
    assert record.text_list("questions") is None
    assert record.text_list("suggestions") is None


def test_text_list_renders_entries():
    record = StructuredRecord({"sources": ["a", 1, True, None, {"x": 1}]})
    assert record.text_list("sources") == ["a", "1", "true", "", ""]


def test_record_equality_and_contains():
    a = StructuredRecord({"critique": "fine"})
    b = StructuredRecord({"critique": "fine"})
    assert a == b
    assert "critique" in a
    assert "questions" not in a

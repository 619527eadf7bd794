"""Recover a structured record from free-form agent text."""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

# Opening fence with an optional language tag, e.g. ```json
_OPEN_FENCE = re.compile(r"^```[\w+-]*[ \t]*\r?\n?")
_CLOSE_FENCE = "```"


class ExtractionError(ValueError):
    """Raised when an agent reply cannot be turned into the expected record."""


class MalformedResponseError(ExtractionError):
    """No JSON object could be recovered from the reply."""


class MissingFieldError(ExtractionError):
    """A required field is absent or has the wrong type."""

    def __init__(self, field_name: str, message: str | None = None) -> None:
        self.field_name = field_name
        super().__init__(message or f"Missing required field '{field_name}'")


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return ""


class StructuredRecord:
    """Typed, read-only view over a parsed JSON object."""

    def __init__(self, data: dict[str, Any]) -> None:
        self._data = data

    def __contains__(self, name: str) -> bool:
        return name in self._data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StructuredRecord):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"StructuredRecord({self._data!r})"

    def as_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def require_text(self, name: str) -> str:
        if name not in self._data or self._data[name] is None:
            raise MissingFieldError(name)
        value = self._data[name]
        if not isinstance(value, str):
            raise MissingFieldError(
                name, f"Field '{name}' must be text, got {type(value).__name__}"
            )
        return value

    def optional_text(self, name: str, default: str) -> str:
        value = self._data.get(name)
        if value is None:
            return default
        return _as_text(value)

    def text_list(self, name: str) -> list[str] | None:
        """Return list entries as text, or None if the field is absent or not a list."""
        value = self._data.get(name)
        if not isinstance(value, list):
            return None
        return [_as_text(item) for item in value]


def _strip_fences(raw: str) -> str:
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        cleaned = _OPEN_FENCE.sub("", cleaned, count=1)
    if cleaned.endswith(_CLOSE_FENCE):
        cleaned = cleaned[: -len(_CLOSE_FENCE)]
    return cleaned.strip()


def _parse_object(text: str) -> dict[str, Any]:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def extract_record(raw: str) -> StructuredRecord:
    """Extract a JSON object from an agent reply.

    Handles plain JSON, JSON inside a markdown code fence (with or without a
    language tag), and JSON embedded in surrounding prose.

    Raises:
        MalformedResponseError: If no JSON object can be recovered. The
            message is the error from the first, whole-text parse attempt.
    """
    cleaned = _strip_fences(raw)

    try:
        return StructuredRecord(_parse_object(cleaned))
    except ValueError as exc:
        first_error = exc

    logger.warning("Failed to parse JSON directly, attempting to extract JSON block")

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start >= 0 and end > start:
        candidate = cleaned[start : end + 1]
        try:
            return StructuredRecord(_parse_object(candidate))
        except ValueError:
            logger.error("Failed to parse extracted JSON: %s", candidate[:200])

    raise MalformedResponseError(str(first_error)) from first_error

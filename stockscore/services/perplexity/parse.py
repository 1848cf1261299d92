"""
Tolerant JSON extraction and schema validation for model output.

Model responses are untrusted text: JSON may arrive inside markdown fences,
wrapped in prose, or not at all. Extraction looks, in order, for a fenced
block, the first `{...}` span, the first `[...]` span, and finally the
trimmed text. When the array span opens first it is tried before the
object. Validation runs through a pydantic TypeAdapter so both model
classes and generic types such as `list[SearchResult]` are accepted.
"""

from __future__ import annotations

import json
import re
from functools import lru_cache
from typing import Any, List, Optional, Type, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from stockscore.core.exceptions import JSONExtractionError, SchemaValidationError
from stockscore.core.logging import get_logger


logger = get_logger("perplexity.parse")

T = TypeVar("T")

EXCERPT_LENGTH = 500

FENCE_PATTERN = re.compile(r"```(?:json|JSON)?\s*([\s\S]*?)```")
OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


def _candidates(raw_text: str) -> List[str]:
    """Extraction candidates in precedence order, without duplicates."""
    found: List[str] = []

    fence = FENCE_PATTERN.search(raw_text)
    if fence:
        found.append(fence.group(1).strip())

    spans = [m for m in (OBJECT_PATTERN.search(raw_text), ARRAY_PATTERN.search(raw_text)) if m]
    # An array that opens before the first object encloses it
    if len(spans) == 2 and spans[1].start() < spans[0].start():
        spans.reverse()
    found.extend(match.group(0) for match in spans)

    found.append(raw_text.strip())

    unique: List[str] = []
    for candidate in found:
        if candidate not in unique:
            unique.append(candidate)
    return unique


def extract_json_text(raw_text: str) -> str:
    """Return the highest-precedence JSON candidate without parsing it."""
    return _candidates(raw_text)[0]


def extract_json(raw_text: str) -> Any:
    """
    Extract and parse the JSON value embedded in `raw_text`.

    The highest-precedence candidate wins. If it does not parse, lower
    candidates are tried so a top-level array of objects is still found
    when the greedy object span straddles two elements.

    Raises:
        JSONExtractionError: no candidate parses as JSON
    """
    first_error: Optional[Exception] = None
    for candidate in _candidates(raw_text):
        try:
            return json.loads(candidate)
        except (ValueError, RecursionError) as e:
            # ValueError covers JSONDecodeError and oversized integer literals
            if first_error is None:
                first_error = e

    logger.warning(f"Could not extract JSON from model response ({len(raw_text)} chars)")
    raise JSONExtractionError(
        f"Failed to parse JSON from response: {first_error}",
        details={"excerpt": raw_text[:EXCERPT_LENGTH]},
    )


@lru_cache(maxsize=64)
def _adapter(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def _format_issue(error: dict) -> str:
    path = ".".join(str(part) for part in error.get("loc", ())) or "(root)"
    return f"{path}: {error.get('msg', 'invalid')}"


def validate_payload(parsed: Any, schema: Type[T]) -> T:
    """
    Validate an already-parsed JSON value against `schema`.

    Raises:
        SchemaValidationError: with every failing field path and the
            top-level keys that were actually present
    """
    try:
        return _adapter(schema).validate_python(parsed)
    except PydanticValidationError as e:
        issues = [_format_issue(err) for err in e.errors()]
        keys = sorted(parsed.keys()) if isinstance(parsed, dict) else []
        logger.warning(
            f"Schema validation failed with {len(issues)} issue(s)",
            extra={"issues": issues[:10], "keys": keys},
        )
        raise SchemaValidationError(
            "Response did not match expected schema: " + "; ".join(issues),
            details={"issues": issues, "keys": keys},
        ) from e


def extract_and_validate(raw_text: str, schema: Type[T]) -> T:
    """
    Extract JSON from untrusted model text and validate it.

    Usage:
        overview = extract_and_validate(text, OverviewResponse)
        results = extract_and_validate(text, list[SearchResult])
    """
    return validate_payload(extract_json(raw_text), schema)

"""Recover JSON payloads from free-form model output.

Model replies wrap JSON in prose, markdown fences or slightly broken syntax.
:func:`extract_json` tries progressively looser strategies and never raises:

1. parse the whole trimmed text
2. parse the first fenced code block (```json first, then plain ```)
3. parse the first balanced ``{...}``/``[...]`` span, honouring strings and escapes
4. parse the greedy first-open to last-close span
5. repair the greedy span (trailing commas, single quotes, bare keys, ``undefined``) and parse again
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CODE_BLOCK_PATTERNS = (
    re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE),
    re.compile(r"```\s*([\s\S]*?)\s*```"),
)
_GREEDY_OBJECT = re.compile(r"\{[\s\S]*\}")
_GREEDY_ARRAY = re.compile(r"\[[\s\S]*\]")

_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_BARE_KEY = re.compile(r"([{,]\s*)([a-zA-Z_][a-zA-Z0-9_]*)\s*:")
_UNDEFINED_VALUE = re.compile(r":\s*undefined\b")

PREVIEW_LENGTH = 200


@dataclass(frozen=True)
class ExtractionResult:
    success: bool
    data: Any = None
    raw_json: str | None = None
    error: str | None = None


def _is_valid(data: Any, expect_array: bool) -> bool:  # noqa: ANN401
    if expect_array:
        return isinstance(data, list)
    return isinstance(data, dict)


def _try_parse(candidate: str, expect_array: bool) -> tuple[bool, Any]:
    try:
        parsed = json.loads(candidate)
    except ValueError:
        return False, None
    return _is_valid(parsed, expect_array), parsed


def _balanced_span(text: str, open_char: str, close_char: str) -> str | None:
    """First span from ``open_char`` to its matching ``close_char``, ignoring brackets inside strings."""
    start = text.find(open_char)
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        char = text[i]
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def _repair(candidate: str) -> str:
    repaired = _TRAILING_COMMA.sub(r"\1", candidate)
    # Only swap quotes when there are no double quotes to corrupt
    if '"' not in repaired and "'" in repaired:
        repaired = repaired.replace("'", '"')
    repaired = _BARE_KEY.sub(r'\1"\2":', repaired)
    return _UNDEFINED_VALUE.sub(": null", repaired)


def extract_json(
    text: Any,  # noqa: ANN401
    *,
    expect_array: bool = False,
    fallback: Any = None,  # noqa: ANN401
    debug: bool = False,
) -> ExtractionResult:
    """Extract a JSON object (or array with ``expect_array``) from ``text``."""
    if not isinstance(text, str) or not text:
        return ExtractionResult(False, fallback, error="Invalid input: expected non-empty string")

    def trace(message: str) -> None:
        if debug:
            logger.debug("JSON extractor: %s", message)

    trimmed = text.strip()
    ok, parsed = _try_parse(trimmed, expect_array)
    if ok:
        trace("direct parse succeeded")
        return ExtractionResult(True, parsed, raw_json=trimmed)
    trace("direct parse failed")

    for pattern in _CODE_BLOCK_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1):
            block = match.group(1).strip()
            ok, parsed = _try_parse(block, expect_array)
            if ok:
                trace("code block parse succeeded")
                return ExtractionResult(True, parsed, raw_json=block)
            trace("code block parse failed")

    open_char, close_char = ("[", "]") if expect_array else ("{", "}")
    span = _balanced_span(text, open_char, close_char)
    if span is not None:
        ok, parsed = _try_parse(span, expect_array)
        if ok:
            trace("balanced span parse succeeded")
            return ExtractionResult(True, parsed, raw_json=span)
        trace("balanced span parse failed")

    greedy = (_GREEDY_ARRAY if expect_array else _GREEDY_OBJECT).search(text)
    if greedy is not None:
        ok, parsed = _try_parse(greedy.group(0), expect_array)
        if ok:
            trace("greedy match parse succeeded")
            return ExtractionResult(True, parsed, raw_json=greedy.group(0))
        trace("greedy match parse failed")

        repaired = _repair(greedy.group(0))
        ok, parsed = _try_parse(repaired, expect_array)
        if ok:
            trace("repaired parse succeeded")
            return ExtractionResult(True, parsed, raw_json=repaired)
        trace("repaired parse failed")

    logger.warning(
        "All JSON extraction strategies failed (textLength=%d, preview=%r)",
        len(text),
        text[:PREVIEW_LENGTH],
    )
    return ExtractionResult(False, fallback, error="Failed to extract valid JSON from response")


def extract_json_with_type(text: Any, validate: Callable[[Any], bool], fallback: T) -> T:  # noqa: ANN401
    """Extracted object when it passes ``validate``, otherwise ``fallback``."""
    result = extract_json(text)
    if result.success and validate(result.data):
        return result.data
    logger.warning("JSON type validation failed, using fallback")
    return fallback


def extract_model(
    text: Any,  # noqa: ANN401
    model_type: Any,  # noqa: ANN401
    fallback: T,
    *,
    expect_array: bool = False,
) -> T:
    """Extract and validate against a pydantic type, e.g. ``list[ExpertTip]``."""
    result = extract_json(text, expect_array=expect_array)
    if not result.success:
        return fallback
    try:
        return TypeAdapter(model_type).validate_python(result.data)
    except ValidationError as exc:
        logger.warning("Extracted JSON failed %s validation: %d errors", model_type, exc.error_count())
        return fallback

"""Locate JSON values embedded in free-form text and reshape them via a template.

Generated text rarely contains *only* JSON: models wrap it in prose or code
fences, or emit several objects one after another. Extraction runs in three
steps:

1. discovery: every balanced top-level ``{...}`` or ``[...]`` literal is
   collected, left to right;
2. normalisation: a candidate that is a JSON array contributes each of its
   elements, anything else that does not start with ``[`` is kept as one value,
   and an unparseable ``[...]`` candidate aborts the call;
3. formatting: each value is decoded, rendered through the output template
   and the render is decoded again, so every result is valid JSON.

A batch with any failing value fails as a whole.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import structlog
from jinja2 import Template

from ..errors import (
    AggregatedError,
    ExtractionItemFailure,
    ExtractionStage,
    MalformedArrayError,
    NoStructureFoundError,
)

_OPENERS = {"{": "}", "[": "]"}
_CLOSERS = frozenset(_OPENERS.values())

logger = structlog.get_logger("feed_summarizer.jsonify")


def _reject_constant(token: str) -> Any:
    raise ValueError(f"invalid JSON constant: {token}")


def _loads(text: str) -> Any:
    """Strict JSON decoding: ``NaN`` and ``Infinity`` are not JSON."""

    return json.loads(text, parse_constant=_reject_constant)


@dataclass(slots=True)
class ExtractedValue:
    """One JSON value found in the source text, kept unparsed until formatting."""

    raw: str
    decoded: Any = field(default=None, repr=False)


def _scan_balanced(text: str, start: int) -> int | None:
    """Return the end offset of the literal opening at ``start``, if balanced."""

    expected: list[str] = []
    in_string = False
    escaped = False
    for pos in range(start, len(text)):
        ch = text[pos]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _OPENERS:
            expected.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            if not expected or expected.pop() != ch:
                return None
            if not expected:
                return pos + 1
    return None


def find_candidates(text: str) -> list[str]:
    """Return every balanced top-level object or array literal in ``text``."""

    candidates: list[str] = []
    pos = 0
    while pos < len(text):
        if text[pos] in _OPENERS:
            end = _scan_balanced(text, pos)
            if end is not None:
                candidates.append(text[pos:end])
                pos = end
                continue
        pos += 1
    return candidates


def extract_values(text: str) -> list[ExtractedValue]:
    """Discover candidates and flatten arrays one level into individual values."""

    candidates = find_candidates(text)
    if not candidates:
        raise NoStructureFoundError()

    values: list[ExtractedValue] = []
    for candidate in candidates:
        try:
            parsed = _loads(candidate)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            values.extend(
                ExtractedValue(raw=json.dumps(element, ensure_ascii=False)) for element in parsed
            )
        elif not candidate.startswith("["):
            values.append(ExtractedValue(raw=candidate))
        else:
            raise MalformedArrayError(candidate)
    return values


def render_context(value: Any) -> dict[str, Any]:
    """Expose mapping keys as top-level names and the whole value as ``item``.

    A mapping with its own ``item`` key keeps it; the whole value is then only
    reachable through its fields.
    """

    if isinstance(value, dict):
        context = dict(value)
        context.setdefault("item", value)
        return context
    return {"item": value}


def format_value(extracted: ExtractedValue, template: Template) -> Any:
    try:
        extracted.decoded = _loads(extracted.raw)
    except ValueError as exc:
        raise ExtractionItemFailure(extracted.raw, ExtractionStage.DECODE, exc) from exc

    try:
        rendered = template.render(render_context(extracted.decoded))
    except Exception as exc:  # noqa: BLE001
        raise ExtractionItemFailure(extracted.raw, ExtractionStage.RENDER, exc) from exc

    try:
        return _loads(rendered)
    except ValueError as exc:
        raise ExtractionItemFailure(extracted.raw, ExtractionStage.REDECODE, exc) from exc


def extract_and_format(text: str, template: Template) -> list[Any]:
    """Extract every JSON value from ``text`` and reshape it through ``template``.

    Raises :class:`NoStructureFoundError` or :class:`MalformedArrayError` when
    discovery fails, and :class:`AggregatedError` of
    :class:`ExtractionItemFailure` when any value fails to format. Successfully
    formatted siblings are discarded in that case.
    """

    values = extract_values(text)
    formatted: list[Any] = []
    failures: list[ExtractionItemFailure] = []
    for index, extracted in enumerate(values):
        try:
            formatted.append(format_value(extracted, template))
        except ExtractionItemFailure as failure:
            logger.debug(
                "extraction_item_failed",
                index=index,
                stage=failure.stage.value,
                error=str(failure.cause),
            )
            failures.append(failure)
    if failures:
        raise AggregatedError(failures, "failed to create JSON string")
    return formatted


__all__ = [
    "ExtractedValue",
    "extract_and_format",
    "extract_values",
    "find_candidates",
    "format_value",
    "render_context",
]

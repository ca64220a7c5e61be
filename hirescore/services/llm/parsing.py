"""Defensive parsing of structured AI output."""

import json
import logging
from typing import Any

from hirescore.core.exceptions import ParseError

logger = logging.getLogger(__name__)


def first_json_object(raw: str) -> str:
    """Return the first balanced ``{...}`` span of ``raw``.

    Gateways occasionally concatenate several JSON objects in one tool call
    argument string, so everything after the first balanced object is dropped.
    Braces inside string literals do not count towards the depth.
    """
    start = raw.find("{")
    if start == -1:
        raise ParseError("No JSON object found in AI response")

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(raw)):
        char = raw[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return raw[start : index + 1]

    raise ParseError("Unbalanced JSON object in AI response")


def parse_tool_arguments(raw: str) -> dict[str, Any]:
    """Parse the first JSON object in a tool call argument string."""
    candidate = first_json_object(raw.strip())
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse AI response: {e}. Raw: {raw[:500]}")
        raise ParseError(f"Failed to parse AI response: {e.msg}") from e
    if not isinstance(parsed, dict):
        raise ParseError("AI response is not a JSON object")
    return parsed


def clamp_score(value: Any) -> int:
    """Coerce a model-provided score to an int in [0, 100]."""
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError, OverflowError) as e:
        raise ParseError(f"Invalid score value: {value!r}") from e
    return max(0, min(100, score))

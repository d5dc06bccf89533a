from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Tuple

from ..errors import GenerationError

log = logging.getLogger("guildsmith.generation")


def _balanced_span(text: str, start: int) -> Optional[Tuple[int, int]]:
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
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
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return start, i + 1
    return None


def extract_json(raw_text: Any) -> Dict[str, Any]:
    """Return the first balanced ``{...}`` object found in model output.

    Braces inside string literals are ignored. Only the span opened by the
    first ``{`` is considered; if it does not parse to an object the output
    is rejected rather than searched for a nested one.
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        raise GenerationError("Model returned an empty response")

    start = raw_text.find("{")
    span = _balanced_span(raw_text, start) if start != -1 else None
    if span is None:
        log.debug("No JSON object in model output: %.200r", raw_text)
        raise GenerationError("Model did not return a valid JSON object")

    try:
        value = json.loads(raw_text[span[0]:span[1]])
    except json.JSONDecodeError as e:
        log.debug("Unparseable JSON in model output: %.200r", raw_text)
        raise GenerationError(f"Model returned malformed JSON: {e.msg}") from e
    if not isinstance(value, dict):
        raise GenerationError("Model did not return a valid JSON object")
    return value

"""
Payload extraction for free-text model output.

Models are told to answer with JSON but routinely wrap it in Markdown
fences or chat around it. This is a bracket heuristic, not a parser.
"""

import json
import re
from typing import Any

from goindia.core.errors import AIUpstreamError

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
_BARE_FENCE = re.compile(r"\A```[a-zA-Z0-9_-]*\s*([\s\S]*?)\s*```\Z")

_CLOSERS = {"{": "}", "[": "]"}


def _strip_fences(text: str) -> str:
    match = _JSON_FENCE.search(text)
    if match:
        return match.group(1).strip()
    match = _BARE_FENCE.match(text)
    if match:
        return match.group(1).strip()
    return text


def extract_payload(raw: str) -> str:
    """Return the JSON object/array embedded in `raw`, or the trimmed text.

    The span runs from the earliest `{` or `[` to the last closer of the
    same kind. Without such a pair the (fence-stripped) text comes back
    unchanged.
    """
    text = _strip_fences((raw or "").strip())

    starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
    if not starts:
        return text
    start = min(starts)
    end = text.rfind(_CLOSERS[text[start]])
    if end <= start:
        return text
    return text[start:end + 1]


def parse_json_payload(raw: str) -> Any:
    payload = extract_payload(raw)
    try:
        return json.loads(payload)
    except json.JSONDecodeError as exc:
        raise AIUpstreamError(
            "The AI assistant returned a response that could not be understood. Please try again."
        ) from exc

from __future__ import annotations

import json
import re
from typing import Any

from ..exceptions import ModelOutputError

_FENCED_JSON_RE = re.compile(r"```json\n([\s\S]*?)\n```")


def _parses(candidate: str) -> bool:
    try:
        json.loads(candidate)
    except (ValueError, RecursionError):
        return False
    return True


def extract_json_from_string(text: Any) -> str | None:
    """
    Find the JSON document inside a model reply.

    Tries a ```json fenced block, then the outermost ``{...}`` span, then the
    whole string. Returns the first candidate that parses, or ``None``.
    """
    if not text or not isinstance(text, str):
        return None

    match = _FENCED_JSON_RE.search(text)
    if match and _parses(match.group(1)):
        return match.group(1)

    first, last = text.find("{"), text.rfind("}")
    if first != -1 and last > first:
        candidate = text[first:last + 1]
        if _parses(candidate):
            return candidate

    if _parses(text):
        return text
    return None


def parse_model_json(text: str | None, stage: str) -> Any:
    """Extract and decode JSON from ``text`` or raise ``ModelOutputError``."""
    json_text = extract_json_from_string(text)
    if json_text is None:
        raise ModelOutputError(stage, f"{stage} model did not return parseable JSON.", raw=text)
    return json.loads(json_text)

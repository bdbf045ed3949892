"""Parsing and shape validation of model replies.

The remote model is non-deterministic: it may wrap its JSON in a Markdown code
fence, return invalid JSON, drop a field or invent one.  Every helper in this
module therefore reports failure by returning ``None`` and logging a warning;
nothing here raises on malformed content.

Pipeline
--------
1. :func:`unwrap_fenced` strips an optional fenced code block.
2. :func:`parse_json_reply` decodes the remaining text.
3. One shape check, depending on the operation:

   - :func:`validate_preserved_prompt`: the reply must have exactly the key
     set of a reference prompt (improve / edit operations).
   - :func:`validate_open_prompt`: any non-empty mapping of segments
     (initial generation, chat updates).
   - :func:`validate_segment`: a single segment (new field).
   - :func:`extract_alternatives`: an ``{"alternatives": [...]}`` object.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .models import PromptSegment, StructuredPrompt

logger = logging.getLogger(__name__)

# Optional language tag, content, closing fence.  Applied to trimmed text.
_FENCE_RE = re.compile(r"^```(\w*)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)


def unwrap_fenced(text: str) -> str:
    """Return the content of a fenced code block, or the trimmed text.

    Args:
        text: Raw reply text.

    Returns:
        Inner content of the fence when the whole text is one fenced block,
        otherwise the text with surrounding whitespace removed.
    """
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    if match and match.group(2):
        return match.group(2).strip()
    return stripped


def parse_json_reply(text: str, *, log_failures: bool = True) -> Any | None:
    """Decode a (possibly fenced) JSON reply.

    Args:
        text: Raw reply text.
        log_failures: Log a warning when the text is not JSON.  Disabled
            where plain text is a legitimate reply.

    Returns:
        The decoded value, or ``None`` if the text is not valid JSON.
    """
    try:
        return json.loads(unwrap_fenced(text))
    except json.JSONDecodeError as e:
        if log_failures:
            logger.warning(f"Failed to parse JSON reply: {e}. Original text: {text!r}")
        return None


def validate_segment(data: Any) -> PromptSegment | None:
    """Check that *data* is a single ``{value, alternatives}`` segment."""
    try:
        return PromptSegment.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Invalid segment structure: {data!r} ({e.error_count()} errors)")
        return None


def _validate_segments(data: Mapping[str, Any]) -> StructuredPrompt | None:
    prompt: StructuredPrompt = {}
    for key, raw in data.items():
        segment = validate_segment(raw)
        if segment is None:
            logger.warning(f"Invalid structure for key {key!r}")
            return None
        prompt[key] = segment
    return prompt


def validate_open_prompt(data: Any, min_fields: int = 1) -> StructuredPrompt | None:
    """Validate a structured prompt whose keys are not known in advance.

    Args:
        data: Decoded reply.
        min_fields: Minimum number of fields the prompt must have.

    Returns:
        The validated prompt in reply order, or ``None``.
    """
    if not isinstance(data, dict):
        logger.warning(f"Expected a JSON object, got {type(data).__name__}")
        return None
    if len(data) < min_fields:
        logger.warning(f"Expected at least {min_fields} fields, got {len(data)}")
        return None
    return _validate_segments(data)


def validate_preserved_prompt(
    data: Any, reference: Mapping[str, Any]
) -> StructuredPrompt | None:
    """Validate a prompt that must keep the exact key set of *reference*.

    A reply that adds, drops or renames a field is rejected, never
    corrected.  Key order in the reply is kept as returned.

    Args:
        data: Decoded reply.
        reference: Prompt that was sent to the model.

    Returns:
        The validated prompt, or ``None``.
    """
    if not isinstance(data, dict):
        logger.warning(f"Expected a JSON object, got {type(data).__name__}")
        return None

    if len(data) != len(reference) or set(data) != set(reference):
        logger.warning(
            f"Key mismatch between original and new prompt: "
            f"expected {list(reference)}, got {list(data)}"
        )
        return None

    return _validate_segments(data)


def extract_alternatives(data: Any) -> list[str] | None:
    """Return the ``alternatives`` array of an ``{"alternatives": [...]}`` reply.

    Returns:
        Exactly the list found under ``alternatives``, or ``None`` when the
        key is absent or is not a list of strings.
    """
    if not isinstance(data, dict):
        logger.warning(f"Expected a JSON object, got {type(data).__name__}")
        return None

    alternatives = data.get("alternatives")
    if not isinstance(alternatives, list) or not all(
        isinstance(item, str) for item in alternatives
    ):
        logger.warning(f"Invalid alternatives in reply: {alternatives!r}")
        return None
    return alternatives

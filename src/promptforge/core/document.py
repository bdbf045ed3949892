"""Editable prompt document.

:class:`PromptDocument` is the caller-side model of the prompt being built:
the segments, the order they are displayed and compiled in (the user can move
fields around), and a history of earlier versions the user can restore.

The document never talks to the API.  UI handlers call the client and hand the
results to the document:

- results of key-preserving operations (improve, edit) keep the user's field
  order via :meth:`PromptDocument.replace` with ``keep_order=True``;
- results of free restructuring (initial generation, chat) take the order of
  the new prompt.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from .errors import DocumentError
from .models import PromptSegment, StructuredPrompt

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = ", "


def normalise_field_key(name: str) -> str:
    """Key of a field the user adds (``" Camera Angle "`` -> ``"camera_angle"``)."""
    return re.sub(r"\s+", "_", name.strip().lower())


@dataclass(frozen=True)
class PromptVersion:
    """A saved state of the document."""

    segments: StructuredPrompt
    order: tuple[str, ...]


@dataclass
class PromptDocument:
    """Segments, display order and version history of the prompt being edited."""

    segments: StructuredPrompt = field(default_factory=dict)
    order: list[str] = field(default_factory=list)
    history: list[PromptVersion] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.order

    def ordered(self) -> StructuredPrompt:
        """Segments in display order (what key-preserving operations receive)."""
        return {key: self.segments[key] for key in self.order}

    def snapshot(self) -> None:
        """Save the current state to the history (empty documents are skipped)."""
        if self.is_empty:
            return
        frozen = {key: segment.model_copy(deep=True) for key, segment in self.segments.items()}
        self.history.append(PromptVersion(segments=frozen, order=tuple(self.order)))
        logger.debug(f"Saved prompt version {len(self.history)}")

    def restore(self, index: int) -> None:
        """Restore version *index* of the history (0 is the oldest)."""
        try:
            version = self.history[index]
        except IndexError:
            raise DocumentError(f"No prompt version {index + 1}.") from None
        self.snapshot()
        self.segments = {key: segment.model_copy(deep=True) for key, segment in version.segments.items()}
        self.order = list(version.order)

    def replace(self, prompt: StructuredPrompt, keep_order: bool = False) -> None:
        """Replace all segments with *prompt*.

        Args:
            prompt: New segments.
            keep_order: Keep the current field order when *prompt* has the
                same number of fields.  Otherwise the order of *prompt* is
                used.
        """
        self.snapshot()
        self.segments = dict(prompt)
        if not (keep_order and len(prompt) == len(self.order) and set(prompt) == set(self.order)):
            self.order = list(prompt)

    def clear(self) -> None:
        self.snapshot()
        self.segments = {}
        self.order = []

    def _segment(self, key: str) -> PromptSegment:
        try:
            return self.segments[key]
        except KeyError:
            raise DocumentError(f"Unknown field: {key}") from None

    def set_value(self, key: str, value: str) -> None:
        segment = self._segment(key)
        self.segments[key] = segment.model_copy(update={"value": value})

    def set_alternatives(self, key: str, alternatives: list[str]) -> None:
        segment = self._segment(key)
        self.segments[key] = segment.model_copy(update={"alternatives": list(alternatives)})

    def add_field(self, key: str, segment: PromptSegment) -> None:
        """Append a new field at the end of the order.

        Raises:
            DocumentError: A field with this key already exists.
        """
        if key in self.segments:
            raise DocumentError("This field already exists. Please choose another name.")
        self.snapshot()
        self.segments[key] = segment
        self.order.append(key)

    def remove_field(self, key: str) -> None:
        """Remove a field; removing the last one empties the document."""
        self._segment(key)
        self.snapshot()
        del self.segments[key]
        self.order.remove(key)

    def move_field(self, source: int, target: int) -> None:
        """Move the field at position *source* so it ends up at position *target*."""
        if not (0 <= source < len(self.order)) or not (0 <= target < len(self.order)):
            raise DocumentError(f"Invalid field position: {source} -> {target}")
        key = self.order.pop(source)
        self.order.insert(target, key)

    def compile(self) -> str:
        """Field values in display order, comma-separated."""
        return FIELD_SEPARATOR.join(self.segments[key].value for key in self.order)

"""Data models shared by the client, the validator and the UI.

Pydantic models describe everything that crosses the wire (prompt segments,
the persisted API settings, chat turns, catalog entries).  The two chat reply
variants are plain dataclasses because they are only ever built locally.

Models
------
PromptSegment
    One field of a structured prompt: the current ``value`` plus alternative
    phrasings the user can switch to.
StructuredPrompt
    Ordered ``dict[str, PromptSegment]``.  Insertion order is field order.
ApiConfig
    The user's API key and model id.  Passed to every client call.
ChatTurn
    One message of a chat conversation.
ModelPricing / ModelDescriptor
    Entries of the OpenRouter model catalog.
TextReply / PromptReplacement
    The two outcomes of a chat turn (see :data:`ChatReply`).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class PromptSegment(BaseModel):
    """One labeled facet of a generated prompt (subject, style, ...).

    Strict mode is enabled so that replies such as ``{"value": 3}`` or
    ``{"alternatives": ["a", 1]}`` are rejected rather than coerced.  The
    remote model is asked for exactly four alternatives, but only "a list of
    strings" is checked here.

    Attributes:
        value: Text of the segment as it appears in the compiled prompt.
        alternatives: Other phrasings the user can switch to.
    """

    model_config = ConfigDict(strict=True)

    value: str
    alternatives: list[str]


StructuredPrompt: TypeAlias = dict[str, PromptSegment]


def prompt_to_dict(prompt: StructuredPrompt) -> dict[str, dict]:
    """Convert a structured prompt to plain JSON-compatible data, keeping order."""
    return {key: segment.model_dump() for key, segment in prompt.items()}


def prompt_to_json(prompt: StructuredPrompt, indent: int | None = None) -> str:
    """Serialise a structured prompt the way it is quoted in model messages."""
    return json.dumps(prompt_to_dict(prompt), ensure_ascii=False, indent=indent)


class ApiConfig(BaseModel):
    """Credentials and model choice for the remote API.

    Owned by the caller and passed by value to every client operation; the
    client never caches it.  The key is a :class:`~pydantic.SecretStr` so it
    is masked in ``repr`` and therefore in log output.

    The persisted form uses the camelCase ``apiKey`` name; both names are
    accepted on input.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    api_key: SecretStr = Field(..., alias="apiKey")
    model: str = Field(..., min_length=1)

    def to_blob(self) -> dict[str, str]:
        """Return the ``{apiKey, model}`` dictionary that is persisted."""
        return {"apiKey": self.api_key.get_secret_value(), "model": self.model}


class ChatTurn(BaseModel):
    """One message of a chat conversation.

    Attributes:
        role: ``user``, ``assistant`` or ``system``.
        content: Message text.
        image_data_url: Image attached by the user, as a data URL.
        prompt: Structured prompt proposed by the assistant in this turn.
        display_only: Shown in the conversation but never sent to the model.
    """

    role: Literal["user", "assistant", "system"]
    content: str
    image_data_url: str | None = None
    prompt: StructuredPrompt | None = None
    display_only: bool = False


class ModelPricing(BaseModel):
    """Per-token prices as returned by the catalog (decimal strings)."""

    model_config = ConfigDict(extra="ignore")

    prompt: str | None = None
    completion: str | None = None
    output: str | None = None
    request: str | None = None
    image: str | None = None


class ModelDescriptor(BaseModel):
    """One entry of the OpenRouter ``/models`` listing."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    description: str = ""
    pricing: ModelPricing = Field(default_factory=ModelPricing)
    context_length: int | None = None


@dataclass(frozen=True)
class TextReply:
    """A conversational chat answer."""

    text: str


@dataclass(frozen=True)
class PromptReplacement:
    """A chat answer that proposes a whole new structured prompt."""

    prompt: StructuredPrompt


ChatReply: TypeAlias = TextReply | PromptReplacement

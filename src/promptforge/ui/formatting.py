"""Formatting utilities for PromptForge UI output.

Markdown rendering of the prompt document and of the status messages shown
after each action.
"""

import logging

from promptforge.core.chat import PROMPT_PROPOSAL_TEXT
from promptforge.core.document import PromptDocument
from promptforge.core.errors import ApiError
from promptforge.core.instructions import field_label
from promptforge.core.models import ChatTurn, StructuredPrompt, prompt_to_json

from .validation import ValidationError

logger = logging.getLogger(__name__)


def format_validation_error(error: ValidationError) -> str:
    """Format a validation error for display.

    Args:
        error: ValidationError raised by input validation

    Returns:
        Markdown-formatted error message
    """
    return f"❌ **Validation Error**\n\n{str(error)}"


def format_api_error(error: ApiError) -> str:
    """Format a failed API request for display.

    Args:
        error: ApiError raised by the client

    Returns:
        Markdown-formatted error message
    """
    return f"❌ **Request failed**\n\n{str(error)}"


def format_unexpected_error(error: Exception) -> str:
    """Format an unexpected exception for display.

    Args:
        error: Any exception not covered by the other formatters

    Returns:
        Markdown-formatted error message
    """
    return (
        f"❌ **Error**\n\nAn unexpected error occurred: {str(error)}\n\n"
        "*Check logs for details*"
    )


def render_prompt_markdown(document: PromptDocument) -> str:
    """Render the document as a numbered Markdown list, in display order."""
    if document.is_empty:
        return "*No prompt yet. Describe an idea or upload an image, then click **Generate**.*"

    lines = []
    for position, key in enumerate(document.order, start=1):
        lines.append(f"{position}. **{field_label(key)}**: {document.segments[key].value}")
    return "\n".join(lines)


def field_choices(document: PromptDocument) -> list[tuple[str, str]]:
    """Dropdown choices (label, key) for the fields of the document."""
    return [(field_label(key), key) for key in document.order]


def history_choices(document: PromptDocument) -> list[tuple[str, int]]:
    """Dropdown choices for the saved versions, newest first."""
    choices = []
    for index in reversed(range(len(document.history))):
        version = document.history[index]
        first = version.segments[version.order[0]].value if version.order else ""
        preview = first if len(first) <= 60 else first[:57] + "..."
        choices.append((f"Version {index + 1}: {preview}", index))
    return choices


def format_proposal(prompt: StructuredPrompt) -> str:
    """Chat bubble content for a prompt proposed by the expert persona."""
    lines = [PROMPT_PROPOSAL_TEXT, ""]
    lines.extend(f"- **{field_label(key)}**: {segment.value}" for key, segment in prompt.items())
    return "\n".join(lines)


def chat_messages(turns: list[ChatTurn]) -> list[dict[str, str]]:
    """Convert chat turns to ``gr.Chatbot(type="messages")`` entries.

    System turns are never displayed; a user image is noted in the bubble.
    """
    messages = []
    for turn in turns:
        if turn.role == "system":
            continue
        if turn.role == "assistant" and turn.prompt is not None:
            content = format_proposal(turn.prompt)
        else:
            content = turn.content
            if turn.image_data_url:
                content = f"{content}\n\n*(image attached)*".strip()
        messages.append({"role": turn.role, "content": content})
    return messages


def format_prompt_json(document: PromptDocument) -> str:
    """Pretty JSON of the document, for the raw-JSON accordion."""
    if document.is_empty:
        return ""
    return prompt_to_json(document.ordered(), indent=2)

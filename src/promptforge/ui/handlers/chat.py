"""Chat tab handlers.

Each persona keeps its own conversation in the session's ``ChatSession``.
When the expert persona answers with a structured prompt, the proposal is
shown in the chat and kept in ``UIState.pending_proposal`` until the user
applies it to the editor.
"""

import logging
from typing import Any

import gradio as gr

from promptforge.core.chat import PROMPT_APPLIED_TEXT, PROMPT_PROPOSAL_TEXT
from promptforge.core.errors import ApiError
from promptforge.core.images import image_to_data_url
from promptforge.core.models import ChatTurn, PromptReplacement

from ..formatting import chat_messages, format_validation_error
from ..models import UIState
from ..state import initialize_ui_state
from ..validation import ValidationError, require_api_config
from .common import error_status
from .generator import editor_view

logger = logging.getLogger(__name__)


def _chat_view(state: UIState) -> tuple[list[dict[str, str]], Any]:
    turns = state.chat.turns(state.persona, not state.document.is_empty)
    return chat_messages(turns), gr.update(visible=state.pending_proposal is not None)


def show_conversation(state: UIState) -> tuple[list[dict[str, str]], Any, UIState]:
    """Display the conversation of the current persona.

    Returns:
        Tuple of (chat_messages, use_prompt_button_update, state)
    """
    state = initialize_ui_state(state)
    return (*_chat_view(state), state)


def switch_persona(persona: str, state: UIState) -> tuple[list[dict[str, str]], Any, UIState]:
    """Switch to the other persona and show its conversation."""
    state = initialize_ui_state(state)
    if persona in state.chat.personas and persona != state.persona:
        logger.info(f"Switching chat persona to {persona}")
        state.persona = persona
        state.pending_proposal = None
    return (*_chat_view(state), state)


def new_conversation(state: UIState) -> tuple[list[dict[str, str]], Any, UIState]:
    """Drop the current persona's conversation and start again."""
    state = initialize_ui_state(state)
    state.chat.reset(state.persona, not state.document.is_empty)
    state.pending_proposal = None
    return (*_chat_view(state), state)


async def send_chat_message(
    message: str, image_path: str | None, state: UIState
) -> tuple[list[dict[str, str]], str, None, Any, str, UIState]:
    """Send a user message (text and/or image) and append the reply.

    A failed request is answered in the conversation itself, so the user
    sees it where they were looking.

    Returns:
        Tuple of (chat_messages, message_box, image_box, use_prompt_button_update,
        status, state)
    """
    state = initialize_ui_state(state)
    try:
        api_config = require_api_config(state)
        if not message.strip() and not image_path:
            raise ValidationError("Please enter a message or attach an image.")
        image_data_url = image_to_data_url(image_path) if image_path else None
    except Exception as e:
        messages, _ = _chat_view(state)
        return messages, message, image_path, gr.update(), error_status("Chat", e), state

    persona = state.persona
    has_prompt = not state.document.is_empty
    state.chat.turns(persona, has_prompt)
    state.chat.append(persona, ChatTurn(role="user", content=message, image_data_url=image_data_url))

    history = state.chat.request_history(persona, state.document.ordered() if has_prompt else None)
    system_instruction = state.chat.personas[persona].system_instruction

    try:
        reply = await state.client.continue_chat(api_config, history, system_instruction)
    except ApiError as e:
        logger.error(f"Chat request failed: {e}")
        notice = ChatTurn(role="assistant", content=f"An error occurred: {e}", display_only=True)
        state.chat.append(persona, notice)
        messages, button = _chat_view(state)
        return messages, "", None, button, "", state

    if isinstance(reply, PromptReplacement):
        logger.info(f"Chat proposed a prompt with fields {list(reply.prompt)}")
        state.pending_proposal = reply.prompt
        turn = ChatTurn(role="assistant", content=PROMPT_PROPOSAL_TEXT, prompt=reply.prompt)
    else:
        turn = ChatTurn(role="assistant", content=reply.text)
    state.chat.append(persona, turn)

    messages, button = _chat_view(state)
    return messages, "", None, button, "", state


def use_proposal(state: UIState) -> tuple:
    """Load the last proposed prompt into the editor.

    Returns:
        The chat outputs (messages, use_prompt_button_update) followed by the
        editor view
    """
    state = initialize_ui_state(state)
    if state.pending_proposal is None:
        error = ValidationError("There is no prompt proposal to use.")
        return (*_chat_view(state), *editor_view(state, format_validation_error(error)))

    state.document.replace(state.pending_proposal)
    state.translation = ""
    state.pending_proposal = None
    state.chat.append(state.persona, ChatTurn(role="assistant", content=PROMPT_APPLIED_TEXT))
    logger.info("Applied chat proposal to the editor")
    return (*_chat_view(state), *editor_view(state, "✅ Prompt updated from the chat"))

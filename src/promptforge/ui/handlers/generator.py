"""Prompt generator tab handlers.

Every handler that changes the document returns the same *editor view*
tuple so the Gradio wiring can share one output list:

    (prompt_markdown, field_dropdown, field_value, alternatives,
     history_dropdown, prompt_json, status, state)

The API settings are checked before any request.  A handler that gets
``None`` back from the client leaves the document unchanged and reports that
the model returned an unexpected format; a raised ``ApiError`` is reported as
a failed request.
"""

import logging
from typing import Any

import gradio as gr

from promptforge.core.instructions import field_label

from ..formatting import (
    field_choices,
    format_prompt_json,
    history_choices,
    render_prompt_markdown,
)
from ..models import MALFORMED_REPLY_MESSAGE, UIState
from ..state import initialize_ui_state
from ..validation import (
    require_api_config,
    require_prompt,
    validate_field_key,
    validate_idea,
    validate_new_field_name,
    validate_text,
)
from .common import error_status

logger = logging.getLogger(__name__)

EditorView = tuple[str, Any, str, Any, Any, str, str, UIState]


def editor_view(state: UIState, status: str = "", selected: str | None = None) -> EditorView:
    """Build the editor outputs for the current document.

    Args:
        state: UI state
        status: Status message to display
        selected: Field to keep selected (dropped if it no longer exists)

    Returns:
        Editor view tuple (see module docstring)
    """
    document = state.document
    if selected not in document.segments:
        selected = None

    value = document.segments[selected].value if selected else ""
    alternatives = document.segments[selected].alternatives if selected else []

    return (
        render_prompt_markdown(document),
        gr.update(choices=field_choices(document), value=selected),
        value,
        gr.update(choices=alternatives, value=None),
        gr.update(choices=history_choices(document), value=None),
        format_prompt_json(document),
        status,
        state,
    )


async def generate_prompt(idea: str, image_path: str | None, state: UIState) -> EditorView:
    """Generate a new structured prompt from an idea and/or an image."""
    state = initialize_ui_state(state)
    try:
        api_config = require_api_config(state)
        validate_idea(idea, image_path)

        prompt = await state.client.generate_initial(api_config, idea, image_path or None)
        if prompt is None:
            return editor_view(state, MALFORMED_REPLY_MESSAGE)

        state.document.replace(prompt)
        state.translation = ""
        logger.info(f"Generated prompt with fields {list(prompt)}")
        return editor_view(state, f"✅ Prompt generated with {len(prompt)} fields")

    except Exception as e:
        return editor_view(state, error_status("Prompt generation", e))


def select_field(key: str | None, state: UIState) -> tuple[str, Any, UIState]:
    """Show the value and alternatives of the selected field.

    Returns:
        Tuple of (field_value, alternatives_update, state)
    """
    state = initialize_ui_state(state)
    segment = state.document.segments.get(key) if key else None
    if segment is None:
        return "", gr.update(choices=[], value=None), state
    return segment.value, gr.update(choices=segment.alternatives, value=None), state


def apply_value(key: str | None, value: str, state: UIState) -> EditorView:
    """Replace the value of the selected field with the edited text."""
    state = initialize_ui_state(state)
    try:
        key = validate_field_key(key, state.document)
        value = validate_text(value, "The field value cannot be empty.")
        state.document.set_value(key, value)
        return editor_view(state, f"✅ {field_label(key)} updated", selected=key)
    except Exception as e:
        return editor_view(state, error_status("Field update", e), selected=key)


def choose_alternative(key: str | None, alternative: str | None, state: UIState) -> EditorView:
    """Use one of the suggested alternatives as the field value."""
    state = initialize_ui_state(state)
    if not alternative:
        return editor_view(state, selected=key)
    return apply_value(key, alternative, state)


async def refresh_alternatives(key: str | None, state: UIState) -> EditorView:
    """Ask the model for fresh alternatives for the selected field."""
    state = initialize_ui_state(state)
    try:
        api_config = require_api_config(state)
        key = validate_field_key(key, state.document)
        segment = state.document.segments[key]

        alternatives = await state.client.get_alternatives(
            api_config, field_label(key), segment.value
        )
        if alternatives is None:
            return editor_view(state, MALFORMED_REPLY_MESSAGE, selected=key)

        state.document.set_alternatives(key, alternatives)
        return editor_view(state, f"✅ New alternatives for {field_label(key)}", selected=key)

    except Exception as e:
        return editor_view(state, error_status("Alternatives refresh", e), selected=key)


async def custom_alternatives(key: str | None, query: str, state: UIState) -> EditorView:
    """Ask for alternatives following the user's request."""
    state = initialize_ui_state(state)
    try:
        api_config = require_api_config(state)
        key = validate_field_key(key, state.document)
        query = validate_text(query, "Please describe the alternatives you want.")
        segment = state.document.segments[key]

        alternatives = await state.client.get_custom_alternatives(
            api_config, field_label(key), query, segment.alternatives
        )
        if alternatives is None:
            return editor_view(state, MALFORMED_REPLY_MESSAGE, selected=key)

        state.document.set_alternatives(key, alternatives)
        return editor_view(state, f"✅ Custom alternatives for {field_label(key)}", selected=key)

    except Exception as e:
        return editor_view(state, error_status("Custom alternatives", e), selected=key)


async def improve_prompt(state: UIState) -> EditorView:
    """Rewrite every field of the prompt, keeping its fields and order."""
    state = initialize_ui_state(state)
    try:
        api_config = require_api_config(state)
        require_prompt(state.document)

        prompt = await state.client.improve_full_prompt(api_config, state.document.ordered())
        if prompt is None:
            return editor_view(state, MALFORMED_REPLY_MESSAGE)

        state.document.replace(prompt, keep_order=True)
        state.translation = ""
        return editor_view(state, "✅ Prompt improved")

    except Exception as e:
        return editor_view(state, error_status("Prompt improvement", e))


async def edit_prompt(instruction: str, state: UIState) -> tuple:
    """Apply a free-text instruction to the whole prompt.

    Returns:
        The cleared instruction box followed by the editor view
    """
    state = initialize_ui_state(state)
    try:
        api_config = require_api_config(state)
        require_prompt(state.document)
        instruction = validate_text(instruction, "Please describe the change you want.")

        prompt = await state.client.edit_full_prompt(
            api_config, state.document.ordered(), instruction
        )
        if prompt is None:
            return (instruction, *editor_view(state, MALFORMED_REPLY_MESSAGE))

        state.document.replace(prompt, keep_order=True)
        state.translation = ""
        return ("", *editor_view(state, "✅ Prompt updated"))

    except Exception as e:
        return (instruction, *editor_view(state, error_status("Prompt edit", e)))


async def add_field(name: str, state: UIState) -> tuple:
    """Generate and append a new field named by the user.

    Returns:
        The cleared name box followed by the editor view
    """
    state = initialize_ui_state(state)
    try:
        api_config = require_api_config(state)
        require_prompt(state.document)
        key = validate_new_field_name(name, state.document)

        segment = await state.client.generate_new_field(
            api_config, state.document.ordered(), name.strip()
        )
        if segment is None:
            return (
                name,
                *editor_view(
                    state,
                    "⚠️ The model could not generate content for this field. "
                    "Try another wording.",
                ),
            )

        state.document.add_field(key, segment)
        return ("", *editor_view(state, f"✅ Field {field_label(key)} added", selected=key))

    except Exception as e:
        return (name, *editor_view(state, error_status("Field creation", e)))


def remove_field(key: str | None, state: UIState) -> EditorView:
    """Remove the selected field; removing the last one starts over."""
    state = initialize_ui_state(state)
    try:
        key = validate_field_key(key, state.document)
        state.document.remove_field(key)
        if state.document.is_empty:
            state.translation = ""
            return editor_view(state, "Prompt cleared. Start over with a new idea.")
        return editor_view(state, f"✅ Field {field_label(key)} removed")
    except Exception as e:
        return editor_view(state, error_status("Field removal", e))


def move_field(key: str | None, offset: int, state: UIState) -> EditorView:
    """Move the selected field up (negative offset) or down."""
    state = initialize_ui_state(state)
    try:
        key = validate_field_key(key, state.document)
        source = state.document.order.index(key)
        target = min(max(source + offset, 0), len(state.document.order) - 1)
        if target != source:
            state.document.move_field(source, target)
        return editor_view(state, selected=key)
    except Exception as e:
        return editor_view(state, error_status("Field move", e), selected=key)


def restore_version(index: int | None, state: UIState) -> EditorView:
    """Restore a saved version of the prompt."""
    state = initialize_ui_state(state)
    if index is None:
        return editor_view(state, "Select a version to restore.")
    try:
        state.document.restore(int(index))
        state.translation = ""
        return editor_view(state, f"✅ Version {int(index) + 1} restored")
    except Exception as e:
        return editor_view(state, error_status("Version restore", e))


async def translate_prompt(state: UIState) -> tuple[str, str, UIState]:
    """Compile the prompt and translate it to English for copying.

    Returns:
        Tuple of (english_prompt, status, state)
    """
    state = initialize_ui_state(state)
    try:
        api_config = require_api_config(state)
        require_prompt(state.document)

        translation = await state.client.translate_to_english(
            api_config, state.document.compile()
        )
        if translation is None:
            return state.translation, "⚠️ The translation failed. Nothing to copy.", state

        state.translation = translation
        return translation, "✅ English prompt ready. Use the copy button.", state

    except Exception as e:
        return state.translation, error_status("Translation", e), state

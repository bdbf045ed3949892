"""UI event handlers organized by feature area.

This package provides handlers for all Gradio UI events, organized into logical modules:
- generator: Prompt generation, field editing, versions and translation
- chat: Persona chat and prompt proposals
- settings: API key, model choice and model catalog
"""

from .chat import (
    new_conversation,
    send_chat_message,
    show_conversation,
    switch_persona,
    use_proposal,
)
from .generator import (
    add_field,
    apply_value,
    choose_alternative,
    custom_alternatives,
    edit_prompt,
    editor_view,
    generate_prompt,
    improve_prompt,
    move_field,
    refresh_alternatives,
    remove_field,
    restore_version,
    select_field,
    translate_prompt,
)
from .settings import (
    load_model_catalog,
    load_settings_view,
    save_settings,
    toggle_custom_model,
)

__all__ = [
    # Generator handlers
    "add_field",
    "apply_value",
    "choose_alternative",
    "custom_alternatives",
    "edit_prompt",
    "editor_view",
    "generate_prompt",
    "improve_prompt",
    "move_field",
    "refresh_alternatives",
    "remove_field",
    "restore_version",
    "select_field",
    "translate_prompt",
    # Chat handlers
    "new_conversation",
    "send_chat_message",
    "show_conversation",
    "switch_persona",
    "use_proposal",
    # Settings handlers
    "load_model_catalog",
    "load_settings_view",
    "save_settings",
    "toggle_custom_model",
]

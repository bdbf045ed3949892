"""Settings tab handlers: API key, model choice and the model catalog."""

import logging
from typing import Any

import gradio as gr

from promptforge.core.catalog import fetch_sorted_models, model_choice_label
from promptforge.core.config import config
from promptforge.core.settings_store import choice_for_model, resolve_model_choice

from ..models import UIState
from ..state import initialize_ui_state, update_api_config
from .common import error_status

logger = logging.getLogger(__name__)


def load_settings_view(state: UIState) -> tuple[str, str, Any, str, UIState]:
    """Fill the settings form from the stored settings.

    Returns:
        Tuple of (api_key, model_choice, custom_model_update, status, state)
    """
    state = initialize_ui_state(state)
    if state.api_config is None:
        return (
            "",
            "premium",
            gr.update(value=None, visible=False),
            "⚠️ No API key configured yet. Enter your OpenRouter key to get started.",
            state,
        )

    api_config = state.api_config
    choice = choice_for_model(api_config.model, config.premium_model_id, config.free_model_id)
    custom_model = api_config.model if choice == "custom" else None
    return (
        api_config.api_key.get_secret_value(),
        choice,
        gr.update(value=custom_model, visible=choice == "custom"),
        f"✅ Using model **{api_config.model}**",
        state,
    )


def toggle_custom_model(choice: str) -> Any:
    """Show the custom model picker only for the ``custom`` choice."""
    return gr.update(visible=choice == "custom")


def save_settings(
    api_key: str, choice: str, custom_model_id: str | None, state: UIState
) -> tuple[str, UIState]:
    """Validate and persist the settings form.

    Returns:
        Tuple of (status, state)
    """
    state = initialize_ui_state(state)
    try:
        api_config = resolve_model_choice(
            api_key or "",
            choice,
            custom_model_id or "",
            config.premium_model_id,
            config.free_model_id,
        )
        state = update_api_config(state, api_config)
        return f"✅ Settings saved. Using model **{api_config.model}**", state
    except Exception as e:
        return error_status("Saving settings", e), state


async def load_model_catalog(state: UIState) -> tuple[Any, str, UIState]:
    """Fetch the OpenRouter catalog into the custom model picker.

    Returns:
        Tuple of (custom_model_update, status, state)
    """
    state = initialize_ui_state(state)
    try:
        state.catalog = await fetch_sorted_models(state.client)
    except Exception as e:
        return gr.update(), error_status("Loading the model catalog", e), state

    choices = [(model_choice_label(model), model.id) for model in state.catalog]
    return gr.update(choices=choices), f"✅ {len(choices)} models available", state

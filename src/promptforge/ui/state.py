"""State management utilities for PromptForge UI.

This module creates the per-session components (API client, chat session)
and loads the persisted API settings into a :class:`UIState`.
"""

import logging

from promptforge.core.chat import ChatSession, build_personas
from promptforge.core.client import PromptClient
from promptforge.core.config import config
from promptforge.core.models import ApiConfig
from promptforge.core.settings_store import load_api_config, save_api_config

from .models import UIState

logger = logging.getLogger(__name__)


def initialize_ui_state(state: UIState | None = None) -> UIState:
    """Initialize or ensure UI state is ready.

    Creates the client and the chat session on first use and loads the
    stored API settings, if any.

    Args:
        state: Existing UIState or None

    Returns:
        Initialized UIState instance
    """
    if state is None:
        logger.info("Creating new UIState")
        state = UIState()

    if state.is_initialized():
        logger.debug("UIState already initialized")
        return state

    logger.info("Initializing UIState components...")

    if state.client is None:
        state.client = PromptClient(config)

    if state.chat is None:
        state.chat = ChatSession(personas=build_personas(config.output_language))

    if state.api_config is None:
        state.api_config = load_api_config(
            config.settings_file, config.premium_model_id, config.free_model_id
        )
        if state.api_config is None:
            logger.info("No usable API settings; the user must configure them")

    logger.info(f"UIState initialized: {state!r}")
    return state


def update_api_config(state: UIState, api_config: ApiConfig) -> UIState:
    """Persist new API settings and use them for the rest of the session.

    Raises:
        OSError: The settings file could not be written.
    """
    state = initialize_ui_state(state)
    save_api_config(config.settings_file, api_config)
    state.api_config = api_config
    logger.info(f"Session now uses model {api_config.model}")
    return state

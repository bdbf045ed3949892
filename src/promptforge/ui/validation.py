"""Validation utilities for PromptForge UI inputs."""

import logging

from promptforge.core.document import PromptDocument, normalise_field_key
from promptforge.core.models import ApiConfig

from .models import NOT_CONFIGURED_MESSAGE, UIState

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """User-friendly validation error.

    This exception is raised when user input fails validation.
    The message is intended to be displayed directly to the user.
    """

    pass


def require_api_config(state: UIState) -> ApiConfig:
    """Return the session's API settings.

    Raises:
        ValidationError: If the user has not configured an API key yet
    """
    if state.api_config is None:
        raise ValidationError(NOT_CONFIGURED_MESSAGE)
    return state.api_config


def require_prompt(document: PromptDocument) -> None:
    """Raises ValidationError if there is no prompt to work on."""
    if document.is_empty:
        raise ValidationError("Generate a prompt first.")


def validate_idea(idea: str, image_path: str | None) -> None:
    """Validate the inputs of an initial generation.

    Raises:
        ValidationError: If neither an idea nor an image was given
    """
    if not idea.strip() and not image_path:
        raise ValidationError("Please enter an idea or upload an image.")


def validate_field_key(key: str | None, document: PromptDocument) -> str:
    """Validate that *key* names an existing field of the document."""
    if not key:
        raise ValidationError("Select a field first.")
    if key not in document.segments:
        raise ValidationError(f"Unknown field: {key}")
    return key


def validate_new_field_name(name: str, document: PromptDocument) -> str:
    """Validate the name of a field to add and return its normalised key.

    Raises:
        ValidationError: If the name is blank or the field already exists
    """
    if not name.strip():
        raise ValidationError("Please enter a field name.")
    key = normalise_field_key(name)
    if key in document.segments:
        raise ValidationError("This field already exists. Please choose another name.")
    return key


def validate_text(text: str, message: str) -> str:
    """Return *text* stripped, or raise ValidationError with *message* if blank."""
    stripped = text.strip()
    if not stripped:
        raise ValidationError(message)
    return stripped

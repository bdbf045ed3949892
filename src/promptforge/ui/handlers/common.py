"""Helpers shared by the handler modules."""

import logging

from promptforge.core.errors import ApiError, PromptForgeError

from ..formatting import format_api_error, format_unexpected_error, format_validation_error
from ..validation import ValidationError

logger = logging.getLogger(__name__)


def error_status(action: str, error: Exception) -> str:
    """Log *error* and return the status message to show for it.

    Args:
        action: What the user tried to do, for the log line
        error: Exception raised while doing it

    Returns:
        Markdown-formatted status message
    """
    if isinstance(error, ValidationError):
        logger.info(f"{action}: {error}")
        return format_validation_error(error)
    if isinstance(error, ApiError):
        logger.error(f"{action} failed: {error}")
        return format_api_error(error)
    if isinstance(error, PromptForgeError):
        logger.warning(f"{action}: {error}")
        return f"❌ {str(error)}"
    logger.error(f"{action} failed: {error}", exc_info=True)
    return format_unexpected_error(error)

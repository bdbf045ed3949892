"""Core functionality for PromptForge.

This package holds everything that does not depend on the user interface:

1. **Configuration Layer** (config.py):
   - Environment-based configuration using Pydantic Settings
   - All settings prefixed with PROMPTFORGE_ in .env files

2. **API Layer** (client.py, parsing.py, instructions.py):
   - :class:`PromptClient` sends one chat-completions request per operation
   - Replies are unwrapped, parsed and shape-checked before being returned
   - System instructions and user messages are built by plain functions

3. **Domain Layer** (models.py, document.py, chat.py):
   - Pydantic models for segments, prompts, settings and chat turns
   - The editable prompt document with field order and version history
   - Chat personas and conversation assembly

4. **Support Utilities**:
   - catalog.py: Model catalog sorting
   - settings_store.py: Persisted API settings and legacy migration
   - images.py: Data URL encoding of image inputs
   - errors.py: Exception hierarchy

Usage Example
-------------
    from promptforge.core import ApiConfig, PromptClient

    client = PromptClient()
    api_config = ApiConfig(api_key="sk-or-...", model="openai/gpt-4.1-mini")
    prompt = await client.generate_initial(api_config, "a lighthouse at dusk")
"""

from .client import PromptClient
from .config import PromptForgeConfig, config
from .document import PromptDocument
from .errors import (
    ApiConnectionError,
    ApiError,
    ApiRequestError,
    ApiResponseError,
    DocumentError,
    InvalidImageError,
    PromptForgeError,
    SettingsError,
)
from .models import (
    ApiConfig,
    ChatReply,
    ChatTurn,
    ModelDescriptor,
    PromptReplacement,
    PromptSegment,
    StructuredPrompt,
    TextReply,
)

__all__ = [
    "PromptClient",
    "PromptForgeConfig",
    "config",
    "PromptDocument",
    "ApiConfig",
    "ChatReply",
    "ChatTurn",
    "ModelDescriptor",
    "PromptReplacement",
    "PromptSegment",
    "StructuredPrompt",
    "TextReply",
    "PromptForgeError",
    "ApiError",
    "ApiRequestError",
    "ApiConnectionError",
    "ApiResponseError",
    "SettingsError",
    "DocumentError",
    "InvalidImageError",
]

"""PromptForge - Structured prompt builder for AI image generators."""

__version__ = "0.1.0"

from promptforge.core.client import PromptClient
from promptforge.core.config import PromptForgeConfig, config
from promptforge.core.models import ApiConfig, PromptSegment, StructuredPrompt

__all__ = [
    "ApiConfig",
    "PromptClient",
    "PromptForgeConfig",
    "PromptSegment",
    "StructuredPrompt",
    "config",
]

"""Data models for PromptForge UI state."""

from dataclasses import dataclass, field
from typing import Any

from promptforge.core.chat import PersonaName
from promptforge.core.document import PromptDocument
from promptforge.core.models import ApiConfig, ModelDescriptor, StructuredPrompt


@dataclass
class UIState:
    """Per-session state held in a ``gr.State``.

    The document, the chat conversations and the proposal waiting to be
    applied live here.  The API settings are loaded from disk when the
    session starts and replaced when the user saves the settings tab.
    """

    # Core components (initialized lazily)
    client: Any | None = None  # PromptClient instance
    chat: Any | None = None  # ChatSession instance
    api_config: ApiConfig | None = None

    # Prompt being edited
    document: PromptDocument = field(default_factory=PromptDocument)
    translation: str = ""  # Last English translation of the compiled prompt

    # Chat state
    persona: PersonaName = "expert"
    pending_proposal: StructuredPrompt | None = None  # Last prompt proposed by the expert

    # Settings tab
    catalog: list[ModelDescriptor] = field(default_factory=list)

    def is_initialized(self) -> bool:
        """Check if the client and chat session have been created."""
        return self.client is not None and self.chat is not None

    def is_configured(self) -> bool:
        """Check if the user has saved an API key and model."""
        return self.api_config is not None

    def __repr__(self) -> str:
        """String representation for debugging (never shows the API key)."""
        model = self.api_config.model if self.api_config else None
        return (
            f"UIState(initialized={self.is_initialized()}, "
            f"model={model}, "
            f"fields={len(self.document.order)}, "
            f"versions={len(self.document.history)})"
        )


# Settings tab radio choices: (label, value)
MODEL_CHOICES = [
    ("Premium (GPT-4.1 mini)", "premium"),
    ("Free (Mistral Small)", "free"),
    ("Other OpenRouter model", "custom"),
]

# Chat persona radio choices: (label, value)
PERSONA_CHOICES = [
    ("Prompt Expert", "expert"),
    ("Generalist", "generalist"),
]

# Status messages
NOT_CONFIGURED_MESSAGE = "⚠️ Please configure your API key in the **Settings** tab first."
MALFORMED_REPLY_MESSAGE = (
    "⚠️ The model returned an unexpected format. Please try again."
)

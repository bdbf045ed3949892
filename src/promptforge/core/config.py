"""Configuration management for PromptForge.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the PROMPTFORGE_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (PROMPTFORGE_* prefix)
2. .env file in the project root
3. Default values defined in PromptForgeConfig

Example .env file:
    PROMPTFORGE_OUTPUT_LANGUAGE=French
    PROMPTFORGE_REQUEST_TIMEOUT=120
    PROMPTFORGE_SETTINGS_FILE=data/api_config.json
    PROMPTFORGE_GRADIO_SERVER_PORT=7860

What Is *Not* Configured Here
-----------------------------
The user's API key and chosen model are not application settings.  They form
the :class:`~promptforge.core.models.ApiConfig` blob that the user enters in
the settings tab; it is persisted by :mod:`promptforge.core.settings_store`
and passed explicitly to every client operation.

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from promptforge.core.config import config

    print(config.api_base_url)
    print(config.free_model_id)
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

FREE_MODEL_ID = "mistralai/mistral-small-3.2-24b-instruct:free"
PREMIUM_MODEL_ID = "openai/gpt-4.1-mini"


class PromptForgeConfig(BaseSettings):
    """Main configuration for PromptForge.

    Attributes
    ----------
    Remote API Settings:
        api_base_url : str
            Base URL of the OpenRouter API (chat completions and model listing)
        site_url : str
            Sent as the ``HTTP-Referer`` header to identify the application
        site_name : str
            Sent as the ``X-Title`` header to identify the application
        free_model_id : str
            Model that does not support the ``response_format`` JSON hint
        premium_model_id : str
            Model selected by the "premium" choice in the settings panel
        request_timeout : float | None
            Seconds to wait for one API call (None waits indefinitely)

    Generation Settings:
        output_language : str
            Natural language the generated prompt segments are written in

    Paths:
        settings_file : Path
            JSON file holding the persisted ``{apiKey, model}`` blob

    UI Settings:
        gradio_server_name : str
            Server bind address
        gradio_server_port : int
            Server port (1024-65535)
        gradio_share : bool
            Create public gradio.live link (keep False for local-only)
        log_level : Literal["DEBUG", "INFO", "WARNING", "ERROR"]
            Root logging level applied by the UI entry point

    Examples
    --------
        >>> custom_config = PromptForgeConfig(output_language="English")
        >>> custom_config.output_language
        'English'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROMPTFORGE_",
        case_sensitive=False,
    )

    # Remote API settings
    api_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="Base URL of the OpenRouter API",
    )
    site_url: str = Field(
        default="https://prompt-generator.app",
        description="Application URL sent as HTTP-Referer",
    )
    site_name: str = Field(
        default="PromptForge",
        description="Application name sent as X-Title",
    )
    free_model_id: str = Field(
        default=FREE_MODEL_ID,
        description="Free model id (requests to it omit the JSON response_format hint)",
    )
    premium_model_id: str = Field(
        default=PREMIUM_MODEL_ID,
        description="Model id behind the 'premium' settings choice",
    )
    request_timeout: float | None = Field(
        default=None,
        description="Timeout in seconds for one API call (None = wait indefinitely)",
    )

    # Generation settings
    output_language: str = Field(
        default="French",
        description="Language the generated prompt segments are written in",
    )

    # Paths
    settings_file: Path = Field(
        default=Path("data") / "api_config.json",
        description="JSON file holding the persisted API settings",
    )

    # UI settings
    gradio_server_name: str = Field(
        default="127.0.0.1",
        description="Server bind address (0.0.0.0 for local network)",
    )
    gradio_server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    gradio_share: bool = Field(
        default=False,
        description="Create public gradio.live link (keep False for local-only)",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root logging level",
    )

    @property
    def chat_completions_url(self) -> str:
        """Endpoint every client operation POSTs to."""
        return f"{self.api_base_url.rstrip('/')}/chat/completions"

    @property
    def models_url(self) -> str:
        """Endpoint listing the models available on OpenRouter."""
        return f"{self.api_base_url.rstrip('/')}/models"


# Global configuration instance
# Loads values from environment variables (PROMPTFORGE_* prefix) and .env file.
config = PromptForgeConfig()

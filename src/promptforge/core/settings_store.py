"""Persistence of the user's API settings.

The only state PromptForge persists is a single JSON blob::

    {"apiKey": "sk-or-...", "model": "openai/gpt-4.1-mini"}

Older versions of the application stored the model as a two-way choice
instead of a model id::

    {"apiKey": "sk-or-...", "modelSelection": "premium"}

Such blobs are migrated when loaded: ``"premium"`` maps to the premium model
id, anything else to the free model id.  The migrated blob is written back
immediately so the legacy shape is only ever read once.

Loading is forgiving: a missing, unreadable or unrecognised file yields
``None`` and the UI asks the user for settings again.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import ValidationError

from .config import FREE_MODEL_ID, PREMIUM_MODEL_ID
from .errors import SettingsError
from .models import ApiConfig

logger = logging.getLogger(__name__)

ModelChoice = Literal["premium", "free", "custom"]


def migrate_legacy_config(
    raw: Any,
    premium_model_id: str = PREMIUM_MODEL_ID,
    free_model_id: str = FREE_MODEL_ID,
) -> dict[str, Any] | None:
    """Normalise a stored settings blob to the ``{apiKey, model}`` shape.

    Args:
        raw: Decoded JSON content of the settings file.
        premium_model_id: Model id the legacy ``"premium"`` choice maps to.
        free_model_id: Model id every other legacy choice maps to.

    Returns:
        The normalised blob, or ``None`` when *raw* is neither shape.
    """
    if not isinstance(raw, dict):
        return None

    if raw.get("modelSelection"):
        model = premium_model_id if raw["modelSelection"] == "premium" else free_model_id
        return {"apiKey": raw.get("apiKey"), "model": model}

    if raw.get("apiKey") and raw.get("model"):
        return {"apiKey": raw["apiKey"], "model": raw["model"]}

    return None


def load_api_config(
    path: Path,
    premium_model_id: str = PREMIUM_MODEL_ID,
    free_model_id: str = FREE_MODEL_ID,
) -> ApiConfig | None:
    """Load the persisted API settings, migrating the legacy shape.

    Args:
        path: Settings file.

    Returns:
        The stored :class:`ApiConfig`, or ``None`` if there is none usable.
    """
    if not path.exists():
        logger.info(f"No API settings found at {path}")
        return None

    try:
        with open(path, encoding="utf-8") as handle:
            raw = json.load(handle)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not load API settings from {path}: {e}")
        return None

    blob = migrate_legacy_config(raw, premium_model_id, free_model_id)
    if blob is None:
        logger.warning(f"Unrecognised API settings in {path}")
        return None

    try:
        api_config = ApiConfig.model_validate(blob)
    except ValidationError as e:
        logger.warning(f"Invalid API settings in {path}: {e.error_count()} errors")
        return None

    if "modelSelection" in raw:
        logger.info(f"Migrated legacy API settings to model {api_config.model}")
        save_api_config(path, api_config)

    return api_config


def save_api_config(path: Path, api_config: ApiConfig) -> None:
    """Persist the API settings, creating the parent directory if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(api_config.to_blob(), handle, indent=2)
    logger.info(f"Saved API settings (model {api_config.model}) to {path}")


def choice_for_model(
    model: str,
    premium_model_id: str = PREMIUM_MODEL_ID,
    free_model_id: str = FREE_MODEL_ID,
) -> ModelChoice:
    """Settings-panel choice matching a stored model id."""
    if model == premium_model_id:
        return "premium"
    if model == free_model_id:
        return "free"
    return "custom"


def resolve_model_choice(
    api_key: str,
    choice: ModelChoice,
    custom_model_id: str = "",
    premium_model_id: str = PREMIUM_MODEL_ID,
    free_model_id: str = FREE_MODEL_ID,
) -> ApiConfig:
    """Build an :class:`ApiConfig` from the settings panel inputs.

    Raises:
        SettingsError: The key is blank, the custom model id is blank, or the
            choice is unknown.
    """
    if not api_key.strip():
        raise SettingsError("Please enter an OpenRouter API key.")

    if choice == "premium":
        model = premium_model_id
    elif choice == "free":
        model = free_model_id
    elif choice == "custom":
        if not custom_model_id.strip():
            raise SettingsError("Please enter the custom model identifier.")
        model = custom_model_id.strip()
    else:
        raise SettingsError("Please select a model.")

    return ApiConfig(api_key=api_key.strip(), model=model)

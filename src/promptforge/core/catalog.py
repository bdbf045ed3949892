"""OpenRouter model catalog helpers.

The settings tab lets the user pick any model from the OpenRouter catalog.
Models are listed cheapest first so the free ones come on top:

- the sort key is the combined ``prompt`` + ``output`` price per token
  (``completion`` is used when the catalog has no ``output`` price);
- ties are broken alphabetically by display name;
- models whose price is missing or not a number come last.
"""

from __future__ import annotations

import logging
import math

from .client import PromptClient
from .models import ModelDescriptor

logger = logging.getLogger(__name__)


def _parse_price(raw: str | None) -> float | None:
    if raw is None:
        return None
    try:
        price = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(price) or math.isinf(price):
        return None
    # Variable-priced routers report -1
    if price < 0:
        return None
    return price


def model_price(model: ModelDescriptor) -> float | None:
    """Combined prompt + output price of *model*, or ``None`` if unpriced."""
    prompt_price = _parse_price(model.pricing.prompt)
    output_raw = model.pricing.output if model.pricing.output is not None else model.pricing.completion
    output_price = _parse_price(output_raw)
    if prompt_price is None or output_price is None:
        return None
    return prompt_price + output_price


def is_free(model: ModelDescriptor) -> bool:
    return model_price(model) == 0


def sort_models(models: list[ModelDescriptor]) -> list[ModelDescriptor]:
    """Return *models* sorted cheapest first, unpriced last."""

    def sort_key(model: ModelDescriptor) -> tuple[int, float, str]:
        price = model_price(model)
        name = (model.name or model.id).lower()
        if price is None:
            return (1, 0.0, name)
        return (0, price, name)

    return sorted(models, key=sort_key)


async def fetch_sorted_models(client: PromptClient | None = None) -> list[ModelDescriptor]:
    """Fetch the catalog and sort it for display."""
    client = client or PromptClient()
    models = await client.list_models()
    unpriced = sum(1 for model in models if model_price(model) is None)
    if unpriced:
        logger.debug(f"{unpriced} catalog models have no usable price")
    return sort_models(models)


def model_choice_label(model: ModelDescriptor) -> str:
    """Dropdown label: name, id and a free/priced marker."""
    price = model_price(model)
    if price is None:
        marker = "price unknown"
    elif price == 0:
        marker = "free"
    else:
        # Per-million-token price reads better than per-token.
        marker = f"${price * 1_000_000:.2f}/M tokens"
    return f"{model.name or model.id} ({model.id}) - {marker}"

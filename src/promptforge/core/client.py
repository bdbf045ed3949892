"""Client for the OpenRouter chat-completions API.

Every operation turns one user intent into exactly one HTTP request, extracts
the text of the first completion choice and, for JSON operations, validates it
with :mod:`promptforge.core.parsing`.

Error policy
------------
All operations follow the same rule:

- a transport failure (unreachable API, non-2xx status, body that is not a
  chat completion) raises a subclass of
  :class:`~promptforge.core.errors.ApiError`;
- a reply whose content does not fit the expected shape returns ``None``
  (or a :class:`~promptforge.core.models.TextReply` for chat).

Callers can therefore tell "the request failed, retry" apart from "the model
returned an unexpected format".

Statelessness
-------------
:class:`PromptClient` only holds application settings and, optionally, a
shared ``httpx.AsyncClient``.  The user's :class:`~promptforge.core.models.ApiConfig`
is passed to every call and never stored.  There is no retry, no cache and,
unless ``request_timeout`` is configured, no timeout.

Usage Example
-------------
    >>> client = PromptClient()
    >>> api_config = ApiConfig(api_key="sk-or-...", model="openai/gpt-4.1-mini")
    >>> prompt = await client.generate_initial(api_config, "a lighthouse at dusk")
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import httpx
from PIL import Image

from . import instructions
from .chat import turn_to_message
from .config import PromptForgeConfig, config
from .errors import ApiConnectionError, ApiRequestError, ApiResponseError
from .images import image_to_data_url
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
from .parsing import (
    extract_alternatives,
    parse_json_reply,
    validate_open_prompt,
    validate_preserved_prompt,
    validate_segment,
)

logger = logging.getLogger(__name__)

ImageSource = bytes | str | Path | Image.Image

# Initial generation must return at least the five default fields.
MIN_INITIAL_FIELDS = len(instructions.DEFAULT_FIELDS)


def _error_detail(response: httpx.Response) -> str | None:
    """Best-effort error message from an error response body."""
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text[:200] or None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            return error
    return None


def _completion_text(data: Any) -> str:
    """Return ``choices[0].message.content`` of a chat completion body."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise ApiResponseError("The API response contains no completion choice.") from e
    if not isinstance(content, str):
        raise ApiResponseError("The API response completion has no text content.")
    return content


class PromptClient:
    """Thin async client over the chat-completions endpoint.

    Args:
        settings: Application settings (defaults to the global ``config``).
        http_client: Shared ``httpx.AsyncClient``.  When omitted, a client is
            opened and closed around every request.
    """

    def __init__(
        self,
        settings: PromptForgeConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or config
        self._http_client = http_client

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self.settings.request_timeout) as client:
            yield client

    def _headers(self, api_config: ApiConfig | None = None) -> dict[str, str]:
        headers = {
            "HTTP-Referer": self.settings.site_url,
            "X-Title": self.settings.site_name,
            "Content-Type": "application/json",
        }
        if api_config is not None:
            headers["Authorization"] = f"Bearer {api_config.api_key.get_secret_value()}"
        return headers

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Perform one HTTP exchange and return the decoded JSON body.

        Raises:
            ApiConnectionError: The API could not be reached.
            ApiRequestError: The API answered with a non-success status.
            ApiResponseError: The body is not JSON.
        """
        async with self._client() as client:
            try:
                response = await client.request(method, url, headers=headers, json=body)
            except httpx.TransportError as e:
                logger.error(f"Could not reach {url}: {e!r}")
                raise ApiConnectionError(f"Could not reach the API: {e}") from e

        if not response.is_success:
            detail = _error_detail(response)
            logger.error(f"OpenRouter API error (status {response.status_code}): {detail}")
            raise ApiRequestError(response.status_code, detail)

        try:
            return response.json()
        except ValueError as e:
            raise ApiResponseError("The API response is not valid JSON.") from e

    def build_request_body(
        self,
        api_config: ApiConfig,
        messages: list[dict[str, Any]],
        *,
        expect_json: bool,
    ) -> dict[str, Any]:
        """Assemble a chat-completions request body.

        The ``response_format`` JSON hint is attached to JSON-expecting calls,
        except for the free model, which does not support it.
        """
        body: dict[str, Any] = {"model": api_config.model, "messages": messages}
        if expect_json and api_config.model != self.settings.free_model_id:
            body["response_format"] = {"type": "json_object"}
        return body

    async def _complete(
        self,
        api_config: ApiConfig,
        messages: list[dict[str, Any]],
        *,
        expect_json: bool,
    ) -> str:
        """POST one chat completion and return the text of the first choice."""
        body = self.build_request_body(api_config, messages, expect_json=expect_json)
        data = await self._send(
            "POST", self.settings.chat_completions_url, self._headers(api_config), body
        )
        return _completion_text(data)

    async def _complete_system_user(
        self, api_config: ApiConfig, system_instruction: str, user_content: Any, *, expect_json: bool
    ) -> str:
        messages = [
            {"role": "system", "content": system_instruction},
            {"role": "user", "content": user_content},
        ]
        return await self._complete(api_config, messages, expect_json=expect_json)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def generate_initial(
        self,
        api_config: ApiConfig,
        user_text: str,
        image: ImageSource | None = None,
    ) -> StructuredPrompt | None:
        """Build a first structured prompt from an idea, an image, or both.

        Args:
            api_config: User's API key and model.
            user_text: Free-text idea (may be empty when an image is given).
            image: Optional image to analyse.

        Returns:
            A prompt with at least the five default fields, or ``None`` when
            the reply is unparsable, too short or malformed.
        """
        logger.info(f"Generating initial prompt with {api_config.model} (image: {image is not None})")
        content: list[dict[str, Any]] = [
            {"type": "text", "text": instructions.initial_user_text(user_text, image is not None)}
        ]
        if image is not None:
            content.append({"type": "image_url", "image_url": {"url": image_to_data_url(image)}})

        text = await self._complete_system_user(
            api_config,
            instructions.initial_system_instruction(self.settings.output_language),
            content,
            expect_json=True,
        )
        return validate_open_prompt(parse_json_reply(text), min_fields=MIN_INITIAL_FIELDS)

    async def get_alternatives(
        self, api_config: ApiConfig, category: str, current_value: str
    ) -> list[str] | None:
        """Ask for four alternative phrasings of one field."""
        logger.info(f"Requesting alternatives for {category!r}")
        text = await self._complete_system_user(
            api_config,
            instructions.alternatives_system_instruction(self.settings.output_language),
            instructions.alternatives_user_message(category, current_value),
            expect_json=True,
        )
        return extract_alternatives(parse_json_reply(text))

    async def get_custom_alternatives(
        self,
        api_config: ApiConfig,
        category: str,
        user_query: str,
        existing_alternatives: list[str],
    ) -> list[str] | None:
        """Ask for alternatives steered by a user request.

        The model is asked not to repeat *existing_alternatives*; this is not
        checked locally.
        """
        logger.info(f"Requesting custom alternatives for {category!r}")
        text = await self._complete_system_user(
            api_config,
            instructions.custom_alternatives_system_instruction(self.settings.output_language),
            instructions.custom_alternatives_user_message(
                category, user_query, existing_alternatives
            ),
            expect_json=True,
        )
        return extract_alternatives(parse_json_reply(text))

    async def improve_full_prompt(
        self, api_config: ApiConfig, current_prompt: StructuredPrompt
    ) -> StructuredPrompt | None:
        """Rewrite every field; the reply must keep the exact key set."""
        logger.info(f"Improving prompt with {len(current_prompt)} fields")
        text = await self._complete_system_user(
            api_config,
            instructions.improve_system_instruction(self.settings.output_language),
            instructions.improve_user_message(current_prompt),
            expect_json=True,
        )
        return validate_preserved_prompt(parse_json_reply(text), current_prompt)

    async def edit_full_prompt(
        self, api_config: ApiConfig, current_prompt: StructuredPrompt, instruction: str
    ) -> StructuredPrompt | None:
        """Apply a user instruction to the prompt; the key set must be kept."""
        logger.info(f"Editing prompt with instruction {instruction!r}")
        text = await self._complete_system_user(
            api_config,
            instructions.edit_system_instruction(self.settings.output_language),
            instructions.edit_user_message(current_prompt, instruction),
            expect_json=True,
        )
        return validate_preserved_prompt(parse_json_reply(text), current_prompt)

    async def translate_to_english(self, api_config: ApiConfig, text: str) -> str | None:
        """Translate compiled prompt text to English.

        Returns:
            The trimmed translation, or ``None`` if the model replied with
            nothing.
        """
        logger.info(f"Translating {len(text)} characters to English")
        reply = await self._complete_system_user(
            api_config,
            instructions.translate_system_instruction(self.settings.output_language),
            text,
            expect_json=False,
        )
        return reply.strip() or None

    async def generate_new_field(
        self, api_config: ApiConfig, current_prompt: StructuredPrompt, field_name: str
    ) -> PromptSegment | None:
        """Create the segment of a field the user adds to the prompt."""
        logger.info(f"Generating new field {field_name!r}")
        text = await self._complete_system_user(
            api_config,
            instructions.new_field_system_instruction(self.settings.output_language),
            instructions.new_field_user_message(current_prompt, field_name),
            expect_json=True,
        )
        return validate_segment(parse_json_reply(text))

    async def continue_chat(
        self,
        api_config: ApiConfig,
        history: Sequence[ChatTurn],
        system_instruction: str,
    ) -> ChatReply:
        """Send the running conversation and classify the reply.

        Args:
            api_config: User's API key and model.
            history: Chronological turns, ending with the new user turn.
            system_instruction: Persona instruction, sent first.

        Returns:
            :class:`PromptReplacement` when the reply is JSON shaped like a
            structured prompt with at least one field, otherwise
            :class:`TextReply` with the trimmed reply text.
        """
        logger.info(f"Continuing chat ({len(history)} turns)")
        messages = [{"role": "system", "content": system_instruction}]
        messages.extend(turn_to_message(turn) for turn in history)

        text = await self._complete(api_config, messages, expect_json=False)

        # Plain answers are expected here, so a failed parse is not a warning.
        candidate = parse_json_reply(text, log_failures=False)
        prompt = validate_open_prompt(candidate) if candidate is not None else None
        if prompt is not None:
            return PromptReplacement(prompt=prompt)
        return TextReply(text=text.strip())

    async def list_models(self) -> list[ModelDescriptor]:
        """Fetch the OpenRouter model catalog (unsorted).

        Entries that do not look like model descriptors are skipped.
        """
        data = await self._send("GET", self.settings.models_url, self._headers())
        entries = data.get("data") if isinstance(data, dict) else data
        if not isinstance(entries, list):
            raise ApiResponseError("The model listing contains no model array.")

        models: list[ModelDescriptor] = []
        for entry in entries:
            try:
                models.append(ModelDescriptor.model_validate(entry))
            except ValueError:
                logger.warning(f"Skipping malformed model entry: {entry!r}")
        logger.info(f"Fetched {len(models)} models from the catalog")
        return models

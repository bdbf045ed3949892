"""Shared pytest fixtures for PromptForge tests."""

import json
import shutil
import tempfile
from pathlib import Path
from typing import Any, AsyncIterator, Generator

import httpx
import pytest

from promptforge.core.client import PromptClient
from promptforge.core.config import PromptForgeConfig
from promptforge.core.models import ApiConfig, PromptSegment, StructuredPrompt
from promptforge.ui.models import UIState


class FakeOpenRouter:
    """Scripted stand-in for the OpenRouter API.

    Replies are queued with :meth:`reply_with`, :meth:`reply_status` or
    :meth:`fail_with` and consumed one per request.  Every request is recorded.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.replies: list[httpx.Response | Exception] = []

    def reply_with(self, content: Any) -> None:
        """Queue a chat completion whose first choice has *content*."""
        if not isinstance(content, str):
            content = json.dumps(content)
        self.replies.append(
            httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})
        )

    def reply_json(self, body: Any, status_code: int = 200) -> None:
        """Queue a raw JSON body."""
        self.replies.append(httpx.Response(status_code, json=body))

    def reply_status(self, status_code: int, body: Any = None) -> None:
        """Queue an error response."""
        if body is None:
            self.replies.append(httpx.Response(status_code, text="error"))
        else:
            self.replies.append(httpx.Response(status_code, json=body))

    def fail_with(self, error: Exception) -> None:
        """Queue a transport failure."""
        self.replies.append(error)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> PromptForgeConfig:
    """Create a test configuration that ignores the environment's .env file.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        PromptForgeConfig instance for testing
    """
    return PromptForgeConfig(
        api_base_url="https://openrouter.test/api/v1",
        settings_file=temp_dir / "data" / "api_config.json",
        output_language="French",
        _env_file=None,
    )


@pytest.fixture
def api_config() -> ApiConfig:
    """API settings using the premium model."""
    return ApiConfig(api_key="sk-or-test-key", model="openai/gpt-4.1-mini")


@pytest.fixture
def free_api_config() -> ApiConfig:
    """API settings using the free model (no JSON response_format)."""
    return ApiConfig(api_key="sk-or-test-key", model="mistralai/mistral-small-3.2-24b-instruct:free")


@pytest.fixture
def sample_prompt_data() -> dict[str, dict]:
    """A valid five-field prompt as the model would return it."""
    return {
        "subject": {
            "value": "a lighthouse on a cliff",
            "alternatives": ["a stone tower", "a beacon", "a red lighthouse", "an old keeper's house"],
        },
        "style": {
            "value": "cinematic shot",
            "alternatives": ["oil painting", "editorial photography", "watercolour", "anime"],
        },
        "lighting": {
            "value": "golden hour",
            "alternatives": ["blue hour", "chiaroscuro lighting", "volumetric haze", "moonlight"],
        },
        "composition": {
            "value": "wide angle",
            "alternatives": ["low angle", "rule of thirds", "aerial view", "close-up"],
        },
        "details": {
            "value": "crashing waves",
            "alternatives": ["seagulls", "fog banks", "wet rocks", "a lone boat"],
        },
    }


@pytest.fixture
def sample_prompt(sample_prompt_data: dict[str, dict]) -> StructuredPrompt:
    """The sample prompt as validated segments."""
    return {key: PromptSegment(**raw) for key, raw in sample_prompt_data.items()}


@pytest.fixture
def fake_api() -> FakeOpenRouter:
    """Scripted OpenRouter API."""
    return FakeOpenRouter()


@pytest.fixture
async def client(test_config: PromptForgeConfig, fake_api: FakeOpenRouter) -> AsyncIterator[PromptClient]:
    """PromptClient whose HTTP traffic goes to ``fake_api``."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))
    yield PromptClient(test_config, http_client=http_client)
    await http_client.aclose()


@pytest.fixture
def ui_state() -> UIState:
    """Create empty UI state for testing.

    Returns:
        UIState instance
    """
    return UIState()


@pytest.fixture
def png_bytes() -> bytes:
    """A tiny valid PNG image."""
    from io import BytesIO

    from PIL import Image

    buffer = BytesIO()
    Image.new("RGB", (4, 4), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()

"""Exception hierarchy for PromptForge.

Two families of failure matter to callers and are kept apart on purpose:

- **Transport failures** (:class:`ApiError` and subclasses): the remote call
  did not produce a usable HTTP response.  These always propagate to the
  caller, who should show a retry-worthy error.
- **Malformed content**: the remote call succeeded but the model's reply did
  not fit the expected shape.  This is never an exception; client operations
  return ``None`` (or a plain-text chat reply) instead.

The remaining exceptions cover local validation of user input.
"""

from __future__ import annotations


class PromptForgeError(Exception):
    """Base class for every error raised by PromptForge."""


class ApiError(PromptForgeError):
    """The remote model API could not be reached or answered with an error."""


class ApiRequestError(ApiError):
    """The API answered with a non-success HTTP status.

    Attributes:
        status_code: HTTP status code returned by the API.
        detail: Error description extracted from the response body, if any.
    """

    def __init__(self, status_code: int, detail: str | None = None):
        self.status_code = status_code
        self.detail = detail
        message = (
            f"API request failed (status {status_code}). "
            "Check your API key or the OpenRouter status."
        )
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class ApiConnectionError(ApiError):
    """The API could not be reached (DNS, connection reset, timeout...)."""


class ApiResponseError(ApiError):
    """The API answered 2xx but the body is not a chat completion."""


class SettingsError(PromptForgeError):
    """User-facing error raised while validating API settings."""


class DocumentError(PromptForgeError):
    """User-facing error raised by prompt document edits."""


class InvalidImageError(PromptForgeError):
    """The supplied file or bytes are not a readable image."""

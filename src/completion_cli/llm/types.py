"""Completion wire models and error types."""

from __future__ import annotations

import json
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError

# Upper bound on generated length, keeps each call's cost predictable.
MAX_TOKENS = 100

UNKNOWN_ERROR_MESSAGE = "Unknown error when attempting to read the error message"


class CompletionRequest(BaseModel):
    model: str
    prompt: str
    max_tokens: int = Field(default=MAX_TOKENS, ge=0)


class Choice(BaseModel):
    text: str
    index: int = Field(ge=0)
    logprobs: Optional[int] = Field(default=None, ge=0, le=255)
    finish_reason: str


class CompletionResponse(BaseModel):
    # The service sometimes sends these empty or null.
    id: Optional[str] = None
    object: Optional[str] = None
    created: Optional[int] = Field(default=None, ge=0)
    model: Optional[str] = None
    choices: List[Choice]

    def first_text(self) -> Optional[str]:
        if not self.choices:
            return None
        return self.choices[0].text


class CompletionError(RuntimeError):
    """Base class for everything that can go wrong around a completion call."""


class ConfigError(CompletionError):
    """Required configuration (the API credential) is missing."""


class TransportError(CompletionError):
    """The request never produced an HTTP response (connection, TLS, timeout)."""


class ResponseParseError(CompletionError):
    """A success response body did not match the completion schema."""


class APIError(CompletionError):
    """The service answered with a 4xx or 5xx status."""

    def __init__(self, status_code: int, reason: str, message: str) -> None:
        self.status_code = status_code
        self.reason = reason
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")

    @property
    def status_line(self) -> str:
        return f"{self.status_code} {self.reason}".strip()


def build_request(user_text: str, model: str, preamble: str) -> CompletionRequest:
    """Prefixes the raw user text with the preamble. The text is not trimmed."""
    return CompletionRequest(
        model=model,
        prompt=f"{preamble} {user_text}",
        max_tokens=MAX_TOKENS,
    )


def parse_response(body: bytes) -> CompletionResponse:
    try:
        return CompletionResponse.model_validate_json(body)
    except ValidationError as exc:
        raise ResponseParseError(f"Malformed completion response: {exc}") from exc


def extract_error_message(body: bytes) -> str:
    """Best-effort read of error.message from an error body."""
    try:
        payload: Any = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return UNKNOWN_ERROR_MESSAGE
    if not isinstance(payload, dict):
        return UNKNOWN_ERROR_MESSAGE
    error = payload.get("error")
    if not isinstance(error, dict):
        return UNKNOWN_ERROR_MESSAGE
    message = error.get("message")
    if isinstance(message, str):
        return message
    return UNKNOWN_ERROR_MESSAGE

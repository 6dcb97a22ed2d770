"""OpenAI completions endpoint over plain HTTPS."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict

import requests

from .types import (
    APIError,
    CompletionRequest,
    CompletionResponse,
    TransportError,
    extract_error_message,
    parse_response,
)

logger = logging.getLogger(__name__)


class CompletionClient:
    def __init__(
        self,
        api_key: str,
        endpoint: str,
        model: str,
        timeout_seconds: float = 30,
        session: requests.Session | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.model = model
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()
        # Composed once, reused for every request.
        self._session.headers.update(
            {
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            }
        )
        logger.debug("Completion client ready for %s (key ...%s)", endpoint, api_key[-4:])

    @classmethod
    def from_settings(cls, settings: Dict[str, Any], api_key: str) -> "CompletionClient":
        llm_cfg = settings.get("llm", {})
        return cls(
            api_key=api_key,
            endpoint=str(llm_cfg["endpoint"]),
            model=str(llm_cfg["model"]),
            timeout_seconds=float(llm_cfg.get("timeout_seconds", 30)),
        )

    def create_completion(self, request: CompletionRequest) -> CompletionResponse:
        """
        Sends one completion request and waits for the whole body.

        Raises:
            TransportError: no HTTP response arrived (including timeouts).
            APIError: the service answered 4xx/5xx.
            ResponseParseError: a success body did not match the schema.
        """
        start = time.perf_counter()
        try:
            res = self._session.post(
                self.endpoint,
                data=request.model_dump_json().encode("utf-8"),
                timeout=self.timeout_seconds,
            )
            body = res.content
        except requests.RequestException as exc:
            raise TransportError(f"Request to {self.endpoint} failed: {exc}") from exc

        latency_ms = int((time.perf_counter() - start) * 1000)
        logger.debug("HTTP %s from %s in %d ms", res.status_code, self.endpoint, latency_ms)

        if 400 <= res.status_code < 600:
            raise APIError(
                status_code=res.status_code,
                reason=res.reason or "",
                message=extract_error_message(body),
            )
        return parse_response(body)

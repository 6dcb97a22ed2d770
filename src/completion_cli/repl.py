"""The read-send-print loop."""

from __future__ import annotations

import logging
import sys
from pprint import pformat
from typing import Callable, Optional, TextIO

from .llm.client import CompletionClient
from .llm.types import (
    APIError,
    CompletionResponse,
    ResponseParseError,
    TransportError,
    build_request,
)
from .spinner import Spinner

logger = logging.getLogger(__name__)

PROMPT_MARKER = ">>> "
BUSY_MESSAGE = "\t\tOpenAI is busy assembling a response..."
NO_COMPLETION_MESSAGE = "no completion returned"


def clear_terminal(stream: TextIO) -> None:
    isatty = getattr(stream, "isatty", None)
    if isatty and isatty():
        stream.write("\x1bc")
        stream.flush()


class CompletionRepl:
    def __init__(
        self,
        client: CompletionClient,
        preamble: str,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        spinner_factory: Callable[..., Spinner] = Spinner,
        show_request: bool = True,
        clear_screen: bool = True,
    ) -> None:
        self.client = client
        self.preamble = preamble
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.spinner_factory = spinner_factory
        self.show_request = show_request
        self.clear_screen = clear_screen

    def _out(self, text: str = "") -> None:
        print(text, file=self.stdout)

    def _err(self, text: str) -> None:
        print(text, file=self.stderr)

    def run(self) -> None:
        """Loops until stdin is exhausted. Read errors propagate."""
        if self.clear_screen:
            clear_terminal(self.stdout)
        while self.run_once():
            pass
        logger.info("Input closed, leaving the loop")

    def run_once(self) -> bool:
        self.stdout.write(PROMPT_MARKER)
        self.stdout.flush()
        user_text = self.stdin.readline()
        if user_text == "":
            # EOF
            self._out()
            return False
        self.handle_prompt(user_text)
        return True

    def _send(self, user_text: str) -> Optional[CompletionResponse]:
        request = build_request(user_text, model=self.client.model, preamble=self.preamble)
        if self.show_request:
            self._out(pformat(request.model_dump(), sort_dicts=False))
        # The spinner owns the current line from here on.
        spinner = self.spinner_factory(BUSY_MESSAGE, stream=self.stdout)
        spinner.start()
        try:
            return self.client.create_completion(request)
        finally:
            spinner.stop()

    def handle_prompt(self, user_text: str) -> Optional[str]:
        """
        Sends one prompt and reports the outcome.

        Returns the printed completion text, or None when an error was
        reported instead. Only input-stream failures end the loop; every
        request-level failure is reported here and the caller carries on.
        """
        try:
            response = self._send(user_text)
        except APIError as exc:
            self._err(f"Error: {exc.status_line}")
            self._err(f"Detailed error message: {exc.message}")
            return None
        except (TransportError, ResponseParseError) as exc:
            logger.warning("Completion request failed: %s", exc)
            self._err(f"Error: {exc}")
            return None

        text = response.first_text()
        if text is None:
            logger.warning("Completion response %s had no choices", response.id)
            self._err(f"Error: {NO_COMPLETION_MESSAGE}")
            return None

        self._out()
        self._out(text)
        return text

"""Entrypoint: load configuration and run the completion loop."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from dotenv import load_dotenv

from .config import load_settings, resolve_api_key
from .llm.client import CompletionClient
from .llm.types import ConfigError
from .repl import CompletionRepl
from .spinner import Spinner

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Interactive prompt for the OpenAI completions API")
    parser.add_argument("--settings", default="config/settings.yaml", help="Path to settings.yaml")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    load_dotenv()
    args = _build_parser().parse_args(argv)
    config = load_settings(args.settings)

    logging.basicConfig(
        level=str(config["logging"].get("level", "WARNING")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        api_key = resolve_api_key()
    except ConfigError as exc:
        raise SystemExit(str(exc)) from exc

    client = CompletionClient.from_settings(config, api_key)
    ui_cfg = config.get("ui", {})
    spinner_enabled = bool(ui_cfg.get("spinner", True))

    def spinner_factory(message, stream=None):
        return Spinner(message, stream=stream, enabled=spinner_enabled)

    repl = CompletionRepl(
        client,
        preamble=str(config["prompt"]["preamble"]),
        spinner_factory=spinner_factory,
        show_request=bool(ui_cfg.get("show_request", True)),
        clear_screen=bool(ui_cfg.get("clear_screen", True)),
    )

    try:
        repl.run()
    except KeyboardInterrupt:
        print(file=sys.stdout)
        logger.info("Interrupted")
        raise SystemExit(130)


if __name__ == "__main__":
    main()

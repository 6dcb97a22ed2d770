"""Entrypoint: run the interactive completion prompt from a checkout."""

from __future__ import annotations

from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from completion_cli.cli import main


if __name__ == "__main__":
    main()

"""Interactive command-line client for a text-completion API."""

__version__ = "0.1.0"

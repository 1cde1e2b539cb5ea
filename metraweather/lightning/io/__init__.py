"""File output for strike collections."""

from .persistence import persist_strikes_to_file

__all__ = ["persist_strikes_to_file"]

"""High-level API facade."""

from .strikes_api import StrikesAPI

__all__ = ["StrikesAPI"]

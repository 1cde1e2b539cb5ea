"""Fetch result containers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..formats.collection import StrikeCollection


@dataclass(frozen=True)
class StrikePage:
    """One page of a paginated strike request.

    Attributes:
        collection: Strikes returned by this page
        has_more: Whether the response linked to a ``next`` page
    """

    collection: StrikeCollection[Any]
    has_more: bool


@dataclass(frozen=True)
class StrikeChunkResult:
    """All strikes of one time chunk with the chunk's concrete bounds."""

    collection: StrikeCollection[Any]
    start: datetime
    end: datetime

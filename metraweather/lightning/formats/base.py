"""Format codec contract.

Architecture:
    Every wire format the strikes endpoint speaks is handled by one
    ``FormatCodec`` subclass. A codec is a stateless triple of pure functions:

    - ``parse``: raw response text -> native value (tree, table, dict, list)
    - ``serialize``: native value -> wire text
    - ``merge``: two native values of the same format -> concatenated value

    ``StrikeCollection`` holds a value plus its ``StrikeFormat`` tag and
    dispatches to the codec registered for that tag; no other module knows
    about format specifics.

Design Decisions:
    - Explicit runtime dispatch: the format tag travels with every collection
      and the registry resolves it, rather than relying on the static type
    - Merge returns a new value and never mutates its inputs
    - Lossless round trip where the format permits (KML, CSV); JSON formats
      use one canonical compact stringification

See Also:
    - formats.registry: tag -> codec lookup
    - formats.collection: StrikeCollection
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from ..core.enums import StrikeFormat
from ..core.exceptions import ParseError

T = TypeVar("T")


class FormatCodec(ABC, Generic[T]):
    """Parse/serialize/merge contract for one wire format."""

    name: str = "unknown"

    @abstractmethod
    def parse(self, raw: str) -> T:
        """Parse a raw response body.

        Raises:
            ParseError: If the body is not well-formed for this format
        """

    @abstractmethod
    def serialize(self, value: T) -> str:
        """Render a value back to its wire format."""

    @abstractmethod
    def merge(self, base: T, incoming: T) -> T:
        """Append ``incoming``'s strikes after ``base``'s."""

    @abstractmethod
    def empty(self) -> T:
        """A value holding no strikes."""

    def count(self, value: T) -> int:
        """Number of strikes held by a value."""
        return len(value)  # type: ignore[arg-type]


class JsonCodec(FormatCodec[T]):
    """Shared parsing for the JSON based formats."""

    def __init__(self, strike_format: StrikeFormat) -> None:
        self.strike_format = strike_format

    def parse(self, raw: str) -> T:
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseError(f"Failed to parse {self.name}. {e}", self.strike_format.value) from e
        self.validate_shape(value)
        return value

    def serialize(self, value: T) -> str:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)

    @abstractmethod
    def validate_shape(self, value: Any) -> None:
        """Raise ParseError when decoded JSON is not this format's shape."""

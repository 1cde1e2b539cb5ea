"""Strike collection: a format-tagged, lazily parsed response.

Architecture:
    A ``StrikeCollection`` owns exactly one value cell. The cell starts out
    pending (a loader that reads and parses the response body) and is
    resolved at most once; the outcome, value or failure, is remembered.
    Merging resolves both sides, asks the codec for the concatenated value
    and stores it back into this collection's cell.

Design Decisions:
    - Lazy parse: a page can be handed around before its body is parsed,
      and a parse failure surfaces on first use rather than at construction
    - Sticky failure: once parsing failed every later resolve, merge or
      serialize re-raises the same error; empty data is never substituted
    - One writer at a time: merges into one instance are serialized by a
      lock. Sharing a collection between concurrent writers is not a
      supported pattern, the lock only keeps the cell consistent
    - ``other`` is never mutated by a merge

See Also:
    - formats.base.FormatCodec: format specific parse/serialize/merge
    - runtime.rest.paginator: merges pages into one collection
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Generic, Protocol, TypeVar

from ..core.enums import StrikeFormat
from ..core.exceptions import MergeShapeMismatchError
from .base import FormatCodec
from .registry import get_codec

T = TypeVar("T")

_PENDING = object()


class TextResponse(Protocol):
    """Anything exposing the response body as text (e.g. aiohttp responses)."""

    async def text(self) -> str: ...


class _ValueCell(Generic[T]):
    """Single-assignment-then-replace slot for a collection's value."""

    def __init__(self, loader: Callable[[], Awaitable[T]] | None = None, value: Any = _PENDING) -> None:
        self._loader = loader
        self._value: Any = value
        self._error: BaseException | None = None
        self._lock = asyncio.Lock()

    @property
    def resolved(self) -> bool:
        return self._value is not _PENDING or self._error is not None

    async def get(self) -> T:
        if not self.resolved:
            async with self._lock:
                if not self.resolved:
                    try:
                        self._value = await self._loader()
                    except Exception as e:
                        self._error = e
                    self._loader = None
        if self._error is not None:
            raise self._error
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self._error = None
        self._loader = None


class StrikeCollection(Generic[T]):
    """Strikes in one wire format, plus what is needed to serialize them."""

    def __init__(
        self,
        strike_format: StrikeFormat | str,
        loader: Callable[[], Awaitable[T]] | None = None,
        *,
        value: Any = _PENDING,
    ) -> None:
        if loader is None and value is _PENDING:
            raise ValueError("StrikeCollection needs a loader or a value")
        self._format = StrikeFormat.parse(strike_format)
        self._codec: FormatCodec[T] = get_codec(self._format)
        self._cell: _ValueCell[T] = _ValueCell(loader, value)
        self._merge_lock = asyncio.Lock()

    @classmethod
    def from_text(cls, strike_format: StrikeFormat | str, text: str) -> StrikeCollection[Any]:
        """Collection parsed lazily from an already read body."""
        codec = get_codec(strike_format)

        async def load() -> Any:
            return codec.parse(text)

        return cls(strike_format, load)

    @classmethod
    def from_response(cls, strike_format: StrikeFormat | str, response: TextResponse) -> StrikeCollection[Any]:
        """Collection whose body is read and parsed on first use."""
        codec = get_codec(strike_format)

        async def load() -> Any:
            return codec.parse(await response.text())

        return cls(strike_format, load)

    @classmethod
    def from_value(cls, strike_format: StrikeFormat | str, value: Any) -> StrikeCollection[Any]:
        """Collection wrapping an already parsed value."""
        return cls(strike_format, value=value)

    @classmethod
    def empty(cls, strike_format: StrikeFormat | str) -> StrikeCollection[Any]:
        return cls.from_value(strike_format, get_codec(strike_format).empty())

    @property
    def format(self) -> StrikeFormat:
        return self._format

    @property
    def codec(self) -> FormatCodec[T]:
        return self._codec

    async def resolve(self) -> T:
        """Parsed value, parsing the response on first call.

        Raises:
            ParseError: If the response body could not be parsed
        """
        return await self._cell.get()

    async def count(self) -> int:
        return self._codec.count(await self.resolve())

    async def merge_collection(self, other: StrikeCollection[T]) -> T:
        """Append ``other``'s strikes after this collection's.

        Replaces this collection's value with the merged value and returns it.
        ``other`` is left untouched.

        Raises:
            MergeShapeMismatchError: If the collections hold different formats
        """
        if other.format.canonical is not self._format.canonical:
            raise MergeShapeMismatchError(
                f"Cannot merge {other.format.value} into {self._format.value}"
            )
        async with self._merge_lock:
            current = await self.resolve()
            incoming = await other.resolve()
            merged = self._codec.merge(current, incoming)
            self._cell.set(merged)
            return merged

    async def merge_collections(self, *others: StrikeCollection[T]) -> StrikeCollection[T]:
        """Merge each collection in argument order. Returns ``self``."""
        for other in others:
            await self.merge_collection(other)
        return self

    async def to_string(self) -> str:
        """Serialize back to the wire format."""
        return self._codec.serialize(await self.resolve())

    def __repr__(self) -> str:
        state = "resolved" if self._cell.resolved else "pending"
        return f"StrikeCollection(format={self._format.name}, {state})"

"""CSV codec.

The body is kept as raw lines so an unmodified response serializes back to
exactly the same text. Rows are only split into columns when a merge has to
reorder them to the base collection's header.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field

from ..core.exceptions import MergeShapeMismatchError
from .base import FormatCodec


@dataclass(frozen=True)
class CSVTable:
    """Header line, body lines, and whether the text ended with a newline."""

    header: str
    body: list[str] = field(default_factory=list)
    trailing_newline: bool = False

    @property
    def columns(self) -> list[str]:
        header = self.header.removesuffix("\r")
        return _split_row(header) if header else []


def _split_row(row: str) -> list[str]:
    return next(csv.reader([row]))


def _join_row(columns: list[str]) -> str:
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="").writerow(columns)
    return buffer.getvalue()


class CSVCodec(FormatCodec[CSVTable]):
    name = "CSV"

    def parse(self, raw: str) -> CSVTable:
        trailing_newline = raw.endswith("\n")
        if trailing_newline:
            raw = raw[:-1]
        header, *body = raw.split("\n")
        return CSVTable(header=header, body=body, trailing_newline=trailing_newline)

    def serialize(self, value: CSVTable) -> str:
        text = "\n".join([value.header, *value.body])
        return text + "\n" if value.trailing_newline else text

    def merge(self, base: CSVTable, incoming: CSVTable) -> CSVTable:
        if not base.header:
            return CSVTable(incoming.header, list(incoming.body), incoming.trailing_newline)
        if not incoming.header or not incoming.body:
            return CSVTable(base.header, list(base.body), base.trailing_newline)

        rows = incoming.body
        if incoming.header != base.header:
            rows = self.reindex_rows(incoming, base.columns)
        return CSVTable(base.header, [*base.body, *rows], base.trailing_newline)

    def reindex_rows(self, table: CSVTable, target_columns: list[str]) -> list[str]:
        """Reorder ``table``'s row columns to follow ``target_columns``.

        Raises:
            MergeShapeMismatchError: If the headers do not hold the same names
        """
        source_columns = table.columns
        if sorted(source_columns) != sorted(target_columns):
            raise MergeShapeMismatchError(
                f"CSV headers differ: '{table.header}' cannot be merged into '{','.join(target_columns)}'"
            )
        source_index = {name: index for index, name in enumerate(source_columns)}
        order = [source_index[name] for name in target_columns]

        # Rows of CRLF text end in "\r" after splitting on "\n"; keep it
        reindexed = []
        for row in table.body:
            line = row.removesuffix("\r")
            if not line:
                reindexed.append(row)
                continue
            values = _split_row(line)
            ending = row[len(line) :]
            reindexed.append(_join_row([values[i] if i < len(values) else "" for i in order]) + ending)
        return reindexed

    def empty(self) -> CSVTable:
        return CSVTable(header="")

    def count(self, value: CSVTable) -> int:
        return sum(1 for row in value.body if row.removesuffix("\r"))

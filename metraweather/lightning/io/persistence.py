"""Writing strike collections to disk."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from ..formats.collection import StrikeCollection

logger = logging.getLogger(__name__)


def _write_text(directory: Path, file_name: str, text: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / file_name
    path.write_text(text, encoding="utf-8")
    return path


async def persist_strikes_to_file(
    collection: StrikeCollection[Any],
    directory: str | Path,
    file_name: str,
) -> Path:
    """Serialize ``collection`` and write it to ``directory/file_name``.

    The collection is fully serialized before anything touches the disk.
    Missing directories are created and an existing file is overwritten.

    Returns:
        Path of the written file

    Raises:
        ParseError: If the collection's response could not be parsed
        OSError: If the directory or file cannot be written
    """
    try:
        text = await collection.to_string()
        path = await asyncio.to_thread(_write_text, Path(directory), file_name, text)
    except Exception:
        logger.exception(f"Failed to persist collection to {directory}/{file_name}")
        raise
    logger.debug(f"Wrote {len(text)} characters to {path}")
    return path

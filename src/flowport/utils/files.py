"""Async JSON file helpers."""

import json
from pathlib import Path
from typing import Any

import aiofiles

from flowport.exceptions import ArchiveFormatError


async def read_json(path: Path) -> Any:
    """Read and parse a JSON file.

    Args:
        path: File to read

    Returns:
        Parsed document

    Raises:
        OSError: If the file cannot be read
        ArchiveFormatError: If the content is not valid JSON
    """
    try:
        async with aiofiles.open(path, encoding="utf-8") as f:
            content = await f.read()
        return json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ArchiveFormatError(f"Invalid JSON in {path}: {e}") from e


async def write_json(path: Path, document: Any) -> int:
    """Write a document as indented JSON.

    Args:
        path: Destination file; parent directories are created
        document: JSON-serializable document

    Returns:
        Number of characters written

    Raises:
        OSError: If the file cannot be written
    """
    content = json.dumps(document, indent=2, ensure_ascii=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(path, "w", encoding="utf-8") as f:
        await f.write(content)
    return len(content)

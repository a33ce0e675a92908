"""File path safety checks for archive reads and writes."""

import re
from pathlib import Path

from flowport.exceptions import UnsafePathError


def validate_safe_path(
    file_path: str,
    allowed_paths: list[Path] | None = None,
    base_dir: str | None = None,
) -> Path:
    """Validate that a file path is safe and within an allowed directory.

    Args:
        file_path: User-provided file path
        allowed_paths: Additional allowed base directories
        base_dir: Base directory to constrain paths (default: cwd)

    Returns:
        Resolved absolute Path

    Raises:
        UnsafePathError: If the path uses traversal or is outside every allowed base
    """
    # Check for path traversal patterns before resolving
    if ".." in Path(file_path).parts:
        raise UnsafePathError(f"Path traversal detected in {file_path}")

    # Resolve symlinks (e.g. /var -> /private/var on macOS) on both sides
    path_resolved = Path(file_path).resolve()

    allowed_bases = [Path(base_dir).resolve() if base_dir else Path.cwd().resolve()]
    allowed_bases.extend(p.resolve() for p in allowed_paths or [])

    for base_resolved in allowed_bases:
        if path_resolved.is_relative_to(base_resolved):
            return path_resolved

    raise UnsafePathError(f"Path {file_path} is outside allowed directory")


def suggest_filename(name: str, extension: str) -> str:
    """Build a share-file name from an entity name.

    Every character outside [a-zA-Z0-9] becomes a dash, e.g.
    "Build & Test" -> "Build---Test.workflow.json".
    """
    return f"{re.sub(r'[^a-zA-Z0-9]', '-', name)}.{extension}"

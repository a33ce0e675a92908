"""Archive format version parsing and compatibility checks."""

import re
from dataclasses import dataclass

from flowport.models.archive import CURRENT_FORMAT_VERSION, MIN_SUPPORTED_VERSION

_VERSION_PATTERN = re.compile(r"[0-9]+\.[0-9]+\.[0-9]+")


@dataclass(frozen=True)
class CompatibilityCheck:
    """Outcome of a version compatibility check.

    `error` blocks the import; `warning` is advisory only.
    """

    error: str | None = None
    warning: str | None = None

    @property
    def compatible(self) -> bool:
        return self.error is None


def _parse(version: str) -> tuple[int, int, int]:
    parts = version.split(".")
    numbers = []
    for index in range(3):
        part = parts[index] if index < len(parts) else ""
        numbers.append(int(part) if part.isascii() and part.isdigit() else 0)
    return numbers[0], numbers[1], numbers[2]


def compare_versions(v1: str, v2: str) -> int:
    """Compare two semantic versions.

    Missing or non-numeric components count as 0.

    Args:
        v1: First version
        v2: Second version

    Returns:
        -1 if v1 < v2, 0 if equal, 1 if v1 > v2
    """
    left, right = _parse(v1), _parse(v2)
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def is_valid_version(version: str) -> bool:
    """Check that a version is exactly three dot-separated integers."""
    return isinstance(version, str) and _VERSION_PATTERN.fullmatch(version) is not None


def check_compatibility(
    version: str,
    minimum: str = MIN_SUPPORTED_VERSION,
    current: str = CURRENT_FORMAT_VERSION,
) -> CompatibilityCheck:
    """Decide whether an archive of the given format version can be imported.

    Versions below `minimum` are rejected. Versions above `current` are
    accepted with a warning, since newer files are usually readable.

    Args:
        version: Archive format version
        minimum: Oldest supported version
        current: Version written by this build

    Returns:
        CompatibilityCheck with an error or warning, if any
    """
    if not is_valid_version(version):
        return CompatibilityCheck(error="metadata.version format invalid, must be x.y.z format")
    if compare_versions(version, minimum) < 0:
        return CompatibilityCheck(
            error=f"Version {version} is not supported, minimum supported version is {minimum}"
        )
    if compare_versions(version, current) > 0:
        return CompatibilityCheck(
            warning=f"File version {version} is newer, some features may not be compatible"
        )
    return CompatibilityCheck()

"""flowport MCP tools.

Tool functions in `portability_tools` return plain dicts. Failures are
reported in-band through `create_error_response` rather than raised, so a
client always receives a JSON payload.
"""

from datetime import datetime, timezone
from typing import Any

__all__ = ["create_error_response"]


def create_error_response(
    message: str,
    error_type: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the error payload returned by a failed export, import or share tool.

    Args:
        message: Result code or failure message (e.g. "WRITE_ERROR: disk full")
        error_type: Failure category, e.g. ValidationError or IOError
        details: Extra context such as validation errors or a partial import summary

    Returns:
        Dict flagged with `error: True` and a UTC timestamp
    """
    response: dict[str, Any] = {
        "error": True,
        "message": message,
        "error_type": error_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        response["details"] = details
    return response

"""Structural validation of archive payloads."""

from typing import Any

from flowport.core.version_gate import check_compatibility
from flowport.models.collections import (
    COLLECTIONS,
    PAYLOAD_KEYS,
    CollectionKind,
    CollectionSpec,
)
from flowport.models.results import ValidationResult


def validate_export_data(data: Any) -> ValidationResult:
    """Validate a parsed archive file.

    Every rule is checked independently so that all violations are reported
    at once. Only a non-object candidate stops validation early.

    Args:
        data: Parsed JSON document

    Returns:
        ValidationResult; `valid` is True when no errors were found
    """
    if not isinstance(data, dict):
        return ValidationResult(
            valid=False, errors=["Invalid file format: must be a JSON object"]
        )

    errors: list[str] = []
    warnings: list[str] = []

    _check_metadata(data.get("metadata"), errors, warnings)
    _check_data(data.get("data"), errors)

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def _check_metadata(metadata: Any, errors: list[str], warnings: list[str]) -> None:
    if not isinstance(metadata, dict):
        errors.append("Missing metadata field")
        return

    version = metadata.get("version")
    if not isinstance(version, str):
        errors.append("metadata.version must be a string")
    else:
        check = check_compatibility(version)
        if check.error:
            errors.append(check.error)
        if check.warning:
            warnings.append(check.warning)

    app_version = metadata.get("appVersion")
    if app_version is not None and not isinstance(app_version, str):
        errors.append("metadata.appVersion must be a string")

    if not isinstance(metadata.get("exportedAt"), str):
        errors.append("metadata.exportedAt must be a string")

    if metadata.get("exportType") not in ("full", "partial"):
        errors.append('metadata.exportType must be "full" or "partial"')

    included = metadata.get("includedTypes")
    if included is not None and not (
        isinstance(included, list) and all(isinstance(t, str) for t in included)
    ):
        errors.append("metadata.includedTypes must be an array of strings")


def _check_data(data: Any, errors: list[str]) -> None:
    if not isinstance(data, dict):
        errors.append("Missing data field")
        return

    if not any(_has_payload(data, key) for key in PAYLOAD_KEYS):
        errors.append("File contains no data")

    for spec in COLLECTIONS:
        value = data.get(spec.archive_key)
        if value is None:
            continue
        if spec.kind is CollectionKind.SINGLETON:
            if not isinstance(value, dict):
                errors.append(f"data.{spec.archive_key} must be an object")
        elif not isinstance(value, list):
            errors.append(f"data.{spec.archive_key} must be an array")
        else:
            _check_keys(spec, value, errors)


def _has_payload(data: dict[str, Any], key: str) -> bool:
    value = data.get(key)
    if key == "settings":
        return value is not None
    return isinstance(value, list) and len(value) > 0


def _check_keys(spec: CollectionSpec, items: list[Any], errors: list[str]) -> None:
    seen: set[str] = set()
    for index, item in enumerate(items):
        key = item.get(spec.key_field) if isinstance(item, dict) else None
        if not isinstance(key, str) or not key:
            errors.append(f"{spec.archive_key}[{index}] missing {spec.key_field} field")
        elif spec.identified and key in seen:
            errors.append(f'{spec.archive_key}[{index}] duplicate id "{key}"')
        else:
            seen.add(key)

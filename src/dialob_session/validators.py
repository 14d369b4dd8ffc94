"""
Input validation for identifiers used in transport URLs.

Session and item identifiers are interpolated into request paths, so they
are checked before any request is made.
"""

import re

_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.\-]*$")


def format_validation_error(field_name: str, reason: str) -> str:
    """
    Generate consistent error message for validation failures.

    Args:
        field_name: Human-readable field name (e.g., "Session id")
        reason: Description of validation failure (e.g., "cannot be empty")

    Returns:
        Formatted error message string
    """
    return f"{field_name} {reason}"


def _validate_identifier(value: str, field_name: str) -> tuple[bool, str]:
    if not value or not value.strip():
        return (False, format_validation_error(field_name, "cannot be empty"))

    if ".." in value or "/" in value:
        return (
            False,
            format_validation_error(
                field_name, "cannot contain '..' or '/'"
            ),
        )

    if not _ID_PATTERN.match(value):
        return (
            False,
            format_validation_error(
                field_name,
                f"'{value}' contains unsupported characters",
            ),
        )

    return (True, "")


def validate_session_id(session_id: str) -> tuple[bool, str]:
    """
    Validate a session identifier.

    Args:
        session_id: The identifier to validate

    Returns:
        Tuple of (is_valid, error_message).
        Returns (True, "") if valid, (False, reason) if invalid.

    Validation rules:
        - Cannot be empty or whitespace-only
        - Cannot contain '..' or '/' (path traversal protection)
        - Must match ^[A-Za-z0-9][A-Za-z0-9_.-]*$
    """
    return _validate_identifier(session_id, "Session id")


def validate_item_id(item_id: str) -> tuple[bool, str]:
    """
    Validate an item identifier given on the command line.

    Same rules as ``validate_session_id``.
    """
    return _validate_identifier(item_id, "Item id")

"""
Input validation functions for dirmirror.

Validates the root paths handed to the engine before any scanning
starts.  Each validator returns ``(is_valid, error_message)``.
"""

from pathlib import Path

# ---------------------------------------------------------------------------
# Error message formatting helpers
# ---------------------------------------------------------------------------


def format_validation_error(field_name: str, reason: str) -> str:
    """
    Generate consistent error message for validation failures.

    Args:
        field_name: Human-readable field name (e.g., "Source directory")
        reason: Description of validation failure (e.g., "does not exist")

    Returns:
        Formatted error message string
    """
    return f"{field_name} {reason}"


def validate_root_path(
    path: Path, field_name: str, must_exist: bool = True
) -> tuple[bool, str]:
    """
    Validate a tree root.

    Args:
        path: The root path to validate (should be absolute)
        field_name: Human-readable name used in the error message
        must_exist: Whether the directory must already exist

    Returns:
        Tuple of (is_valid, error_message).
        Returns (True, "") if valid, (False, reason) if invalid.

    Validation rules:
        - Must be absolute
        - If it exists, must be a directory
        - Must exist when must_exist is True
    """
    if not path.is_absolute():
        return (
            False,
            format_validation_error(field_name, f"must be absolute: {path}"),
        )

    if path.exists() and not path.is_dir():
        return (
            False,
            format_validation_error(
                field_name, f"is not a directory: {path}"
            ),
        )

    if must_exist and not path.exists():
        return (
            False,
            format_validation_error(field_name, f"does not exist: {path}"),
        )

    return (True, "")


def validate_disjoint_roots(
    inner: Path, outer: Path, inner_name: str, outer_name: str
) -> tuple[bool, str]:
    """
    Check that *inner* is neither equal to nor nested inside *outer*.

    Args:
        inner: Resolved path that must stay outside *outer*
        outer: Resolved path that must not contain *inner*
        inner_name: Human-readable name of *inner*
        outer_name: Human-readable name of *outer*

    Returns:
        Tuple of (is_valid, error_message).
    """
    if inner == outer:
        return (
            False,
            format_validation_error(
                inner_name, f"cannot be the same as the {outer_name.lower()}"
            ),
        )

    if inner.is_relative_to(outer):
        return (
            False,
            format_validation_error(
                inner_name, f"cannot be inside the {outer_name.lower()}"
            ),
        )

    return (True, "")

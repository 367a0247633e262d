"""Presence checks shared by configuration and request handling."""

from .errors import MissingConfiguration


def validate_required(value, name=None, error=MissingConfiguration):
    """
    Check that a value is a non-empty string.

    Args:
        value: The value to check
        name: Optional name used in the error message
        error: Exception class to raise on failure

    Returns:
        The value, unchanged

    Raises:
        error: If value is not a string or is empty
    """
    if isinstance(value, str) and len(value) > 0:
        return value
    if name:
        raise error(f"Missing required variable: {name}")
    raise error()

"""Utilities for masking sensitive data."""

from typing import Optional


def mask_key(key: Optional[str]) -> str:
    """Mask a service key for safe logging.

    Args:
        key: The key to mask.

    Returns:
        Masked key showing only first and last 4 characters.
    """
    if not key:
        return "<empty>"
    if len(key) <= 8:
        return "***"
    return f"{key[:4]}...{key[-4:]}"

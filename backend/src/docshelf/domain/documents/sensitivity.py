"""Sensitivity classification produced by the AI analysis pass

The classification is a fixed two-level risk scale on top of "safe":

- SAFE: no sensitive information detected
- MAYBE_SENSITIVE: potentially sensitive (personal data, financial info, ...)
- SENSITIVE: highly sensitive (passwords, medical records, confidential data, ...)

A document with no completed analysis has sensitivity None.
SENSITIVE documents can never be public.
"""

from enum import Enum
from typing import Any, Optional


class Sensitivity(str, Enum):
    """Sensitivity classification enum"""
    SAFE = "safe"
    MAYBE_SENSITIVE = "maybe_sensitive"
    SENSITIVE = "sensitive"


DEFAULT_SENSITIVITY = Sensitivity.SAFE


def normalize_sensitivity(value: Any) -> Sensitivity:
    """Normalize a raw classifier value to a Sensitivity member

    Matching is case-insensitive and tolerant of surrounding whitespace and of
    "maybe sensitive"/"maybe-sensitive" spellings. Anything unrecognised
    (including None) falls back to SAFE.

    Args:
        value: Raw value from the classifier response

    Returns:
        Normalized Sensitivity

    Example:
        >>> normalize_sensitivity(" Sensitive ")
        <Sensitivity.SENSITIVE: 'sensitive'>
        >>> normalize_sensitivity("maybe-sensitive")
        <Sensitivity.MAYBE_SENSITIVE: 'maybe_sensitive'>
        >>> normalize_sensitivity("top secret")
        <Sensitivity.SAFE: 'safe'>
    """
    if isinstance(value, Sensitivity):
        return value
    if not isinstance(value, str):
        return DEFAULT_SENSITIVITY

    key = value.strip().lower().replace("-", "_").replace(" ", "_")
    try:
        return Sensitivity(key)
    except ValueError:
        return DEFAULT_SENSITIVITY


def is_sensitive(value: Optional[str]) -> bool:
    """Check whether a stored sensitivity value is SENSITIVE"""
    return value == Sensitivity.SENSITIVE.value

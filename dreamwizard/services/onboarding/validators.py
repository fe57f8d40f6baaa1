"""Onboarding validators."""

from typing import Any, Dict


def normalize_name(value: Any, ctx: Dict[str, Any]) -> str:
    """Normalize the user's display name.

    Surrounding whitespace is dropped and inner runs of whitespace are
    collapsed. An empty result is allowed; the flow substitutes the
    default name at completion.

    Args:
        value: Name as typed
        ctx: Collected answers (unused)

    Returns:
        Normalized name

    Raises:
        ValueError: If the value is not text
    """
    if not isinstance(value, str):
        raise ValueError(f"Name must be text, got {type(value).__name__}")
    return ' '.join(value.split())

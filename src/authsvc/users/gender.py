"""Gender normalization to the single-character profile column."""

from __future__ import annotations

_MALE = frozenset({"male", "m", "0"})
_FEMALE = frozenset({"female", "f", "1"})


def normalize_gender(value: str | None) -> str | None:
    """
    Map free-form gender input to 'M', 'F' or a one-character fallback.

    Matching is case-insensitive. Unrecognized input keeps its first character
    uppercased; empty or missing input yields None.
    """
    if not value:
        return None
    lowered = str(value).lower()
    if lowered in _MALE:
        return "M"
    if lowered in _FEMALE:
        return "F"
    return str(value)[0].upper()

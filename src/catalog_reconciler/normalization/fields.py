"""Field normalization for raw course text.

Turns the messy strings delivered by the extraction layer into the
canonical scalar forms stored in the catalog. Every text field in the
catalog is either meaningful text or the ``"n/a"`` sentinel, never empty.
"""

from collections.abc import Iterable
import re
import unicodedata

NA = "n/a"

_CREDITS_PATTERN = re.compile(r"(\d+\.?\d*)")
_REPLACEMENT_CHAR = "\ufffd"
_CONTROL_CHARS = re.compile(r"[\u0000-\u001f\u007f-\u009f]")
_WHITESPACE = re.compile(r"\s+")


def is_na(value: str | None) -> bool:
    """Check whether a value is empty or the ``"n/a"`` sentinel.

    Args:
        value: Text to check.

    Returns:
        True if the value carries no information.
    """
    return normalize_na(value) == NA


def normalize_na(value: str | None) -> str:
    """Collapse the various spellings of "not available" to ``"n/a"``.

    Args:
        value: Raw text.

    Returns:
        The trimmed text, or ``"n/a"`` for empty, whitespace-only,
        ``"N/A"`` (any case) and ``"-"``.

    Example:
        >>> normalize_na("  N/A ")
        'n/a'
        >>> normalize_na(" Algebra 1 ")
        'Algebra 1'
    """
    if value is None:
        return NA
    normalized = str(value).strip()
    if not normalized or normalized.lower() == NA or normalized == "-":
        return NA
    return normalized


def parse_credits(value: str | float | None) -> float:
    """Parse a credit value such as ``"0.5"`` or ``"0.5 credits"``.

    Args:
        value: Raw credit text, or an already numeric value.

    Returns:
        The first numeric token found, or ``0.0``.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    match = _CREDITS_PATTERN.search(str(value))
    return float(match.group(1)) if match else 0.0


def parse_grades(value: str | Iterable[str] | None) -> list[str]:
    """Parse an eligible-grades list such as ``"9th, 10th, 11th"``.

    Args:
        value: Comma-separated grades, or an already split sequence.

    Returns:
        Trimmed, non-empty grade labels. Never ``["n/a"]``.
    """
    if value is None:
        return []
    if isinstance(value, str):
        if is_na(value):
            return []
        tokens: Iterable[str] = value.split(",")
    else:
        tokens = value
    return [token.strip() for token in tokens if token and token.strip() and not is_na(token)]


def clean_description(value: str | None) -> str:
    """Clean description text for storage.

    Applies NFC normalization, strips replacement and control characters,
    and collapses runs of whitespace.

    Args:
        value: Raw description text.

    Returns:
        Cleaned text, or ``"n/a"`` if nothing is left.
    """
    if not value:
        return NA

    cleaned = unicodedata.normalize("NFC", value)
    cleaned = cleaned.replace(_REPLACEMENT_CHAR, "")
    # Newlines and tabs are C0 controls; turn them into spaces before stripping
    cleaned = _WHITESPACE.sub(" ", cleaned)
    cleaned = _CONTROL_CHARS.sub("", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()

    return cleaned or NA


def coalesce(preferred: str, fallback: str) -> str:
    """Return ``preferred`` unless it is empty or ``"n/a"``.

    Args:
        preferred: Value that wins when it carries information.
        fallback: Value used otherwise.

    Returns:
        The winning value.
    """
    return fallback if is_na(preferred) else preferred


def union_preserving_order(first: Iterable[str], second: Iterable[str]) -> list[str]:
    """Append items of ``second`` that are missing from ``first``.

    Comparison is exact (case-sensitive).

    Args:
        first: Items kept in their original order.
        second: Items appended when not already present.

    Returns:
        The merged list.
    """
    result = list(first)
    for item in second:
        if item not in result:
            result.append(item)
    return result

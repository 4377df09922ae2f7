"""Text normalization for comparing UI labels scraped from the booking widget."""

import re
import unicodedata
from typing import Any, List, Optional

_WHITESPACE_RE = re.compile(r"\s+")


def normalize(text: Optional[Any]) -> str:
    """
    Canonical comparison form of a UI label.

    Lowercases, strips diacritics (NFD decomposition without combining marks),
    collapses whitespace runs to a single space and trims. The result is stable
    under a second application, so ``normalize(normalize(x)) == normalize(x)``.

    Args:
        text: Any value; None and empty values yield ""

    Returns:
        Normalized string
    """
    if text is None:
        return ""
    value = str(text)
    if not value:
        return ""
    # Lowercase before decomposing: some capitals lowercase into base + combining mark
    decomposed = unicodedata.normalize("NFD", value.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE_RE.sub(" ", stripped).strip()


def split_lines(text: Optional[str]) -> List[str]:
    """Split rendered text into trimmed, non-empty lines."""
    if not text:
        return []
    return [line.strip() for line in str(text).splitlines() if line.strip()]


def text_matches(candidate: Optional[str], target: Optional[str]) -> bool:
    """True when the normalized candidate equals or contains the normalized target."""
    wanted = normalize(target)
    if not wanted:
        return False
    have = normalize(candidate)
    return have == wanted or wanted in have

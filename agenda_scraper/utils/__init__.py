"""Utility helpers."""

from .selectors import SelectorManager
from .text import normalize, split_lines, text_matches

__all__ = [
    "SelectorManager",
    "normalize",
    "split_lines",
    "text_matches",
]

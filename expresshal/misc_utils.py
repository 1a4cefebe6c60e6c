"""Small string helpers for configuration parsing."""

from __future__ import annotations

import logging
from typing import List

logger = logging.getLogger(__name__)

_C_SPACE = " \t\n\v\f\r"


def split_string(raw: str, max_substrings: int, delimiter: str) -> List[str]:
    """Split ``raw`` at ``delimiter`` into at most ``max_substrings`` pieces.

    Pieces past the limit are dropped; at least one piece is always returned.
    """
    if raw is None:
        raise ValueError("raw string must not be None")
    if len(delimiter) != 1:
        raise ValueError("delimiter must be a single character")
    pieces = raw.split(delimiter)[: max(1, max_substrings)]
    logger.debug("num_split_strings: %d", len(pieces))
    return pieces


def trim_space(text: str) -> str:
    """Remove leading and trailing whitespace.

    A string made only of whitespace is returned unchanged.
    """
    if text is None:
        raise ValueError("text must not be None")
    stripped = text.strip(_C_SPACE)
    return stripped if stripped else text
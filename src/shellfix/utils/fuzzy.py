"""Jaro-Winkler based fuzzy matching used by most correction rules."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from rapidfuzz.distance import Jaro, JaroWinkler

if TYPE_CHECKING:
    from collections.abc import Sequence

DEFAULT_N: Final[int] = 3
DEFAULT_CUTOFF: Final[float] = 0.6


def jaro(first: str, second: str) -> float:
    """Return the Jaro similarity of two strings in ``[0.0, 1.0]``."""

    if first == second:
        return 1.0
    return Jaro.similarity(first, second)


def jaro_winkler(first: str, second: str) -> float:
    """Jaro similarity boosted for a shared prefix of up to four characters.

    The boost only applies once the Jaro score is above 0.7.
    """

    if first == second:
        return 1.0
    return JaroWinkler.similarity(first, second, prefix_weight=0.1)


def similarity(first: str, second: str) -> float:
    return jaro_winkler(first, second)


def get_close_matches(
    word: str,
    possibilities: Sequence[str],
    n: int = DEFAULT_N,
    cutoff: float = DEFAULT_CUTOFF,
) -> list[str]:
    """Return up to ``n`` possibilities scoring at least ``cutoff``, best first.

    Ties keep the relative order of ``possibilities``.
    """

    if n <= 0 or not possibilities:
        return []

    scored = [
        (score, candidate)
        for candidate in possibilities
        if (score := jaro_winkler(word, candidate)) >= cutoff
    ]
    scored.sort(key=lambda item: item[0], reverse=True)
    return [candidate for _, candidate in scored[:n]]


def get_closest(
    word: str,
    possibilities: Sequence[str],
    cutoff: float = DEFAULT_CUTOFF,
    fallback_to_first: bool = True,
) -> str | None:
    """Return the single best match, optionally falling back to the first entry."""

    if not possibilities:
        return None
    matches = get_close_matches(word, possibilities, 1, cutoff)
    if matches:
        return matches[0]
    if fallback_to_first:
        return possibilities[0]
    return None


__all__ = [
    "DEFAULT_CUTOFF",
    "DEFAULT_N",
    "get_close_matches",
    "get_closest",
    "jaro",
    "jaro_winkler",
    "similarity",
]

"""Unit tests for Jaro-Winkler fuzzy matching."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from shellfix.utils.fuzzy import get_close_matches, get_closest, jaro, jaro_winkler, similarity

pytestmark = [pytest.mark.unit]

_words = st.text(alphabet="abcdefghij-_", max_size=12)


def test_known_reference_values() -> None:
    assert jaro("MARTHA", "MARHTA") == pytest.approx(0.944, abs=1e-3)
    assert jaro_winkler("MARTHA", "MARHTA") == pytest.approx(0.961, abs=1e-3)
    assert jaro_winkler("DIXON", "DICKSONX") == pytest.approx(0.813, abs=1e-3)


def test_prefix_boost_needs_a_jaro_score_above_threshold() -> None:
    assert jaro("push", "pull") == pytest.approx(0.667, abs=1e-3)
    assert jaro_winkler("push", "pull") == pytest.approx(0.667, abs=1e-3)
    assert jaro_winkler("abcd", "abzzzzzzz") == pytest.approx(0.574, abs=1e-3)
    assert get_close_matches("push", ["pull"], 3, 0.7) == []


def test_disjoint_and_empty_strings_score_zero() -> None:
    assert similarity("abc", "xyz") == 0.0
    assert similarity("", "abc") == 0.0
    assert similarity("", "") == 1.0


def test_close_matches_prefer_the_nearest_command() -> None:
    commands = ["status", "stash", "stage", "commit", "push"]

    assert get_close_matches("stats", commands)[0] == "status"
    assert get_close_matches("psuh", commands, n=1) == ["push"]


def test_close_matches_respects_n_and_cutoff() -> None:
    assert get_close_matches("git", ["gti", "gtt", "igt", "git"], n=0) == []
    assert get_close_matches("git", [], n=3) == []
    assert get_close_matches("git", ["zzz"], cutoff=0.6) == []


def test_get_closest_fallback() -> None:
    assert get_closest("zzz", ["alpha", "beta"]) == "alpha"
    assert get_closest("zzz", ["alpha", "beta"], fallback_to_first=False) is None
    assert get_closest("zzz", []) is None
    assert get_closest("bta", ["alpha", "beta"]) == "beta"


@given(_words)
def test_similarity_with_itself_is_one(word: str) -> None:
    assert similarity(word, word) == 1.0


@given(_words, _words)
def test_similarity_is_bounded(first: str, second: str) -> None:
    score = similarity(first, second)

    assert 0.0 <= score <= 1.0


@given(
    _words,
    st.lists(_words, max_size=15),
    st.integers(min_value=0, max_value=5),
    st.floats(min_value=0.0, max_value=1.0),
)
def test_close_matches_contract(word: str, candidates: list[str], n: int, cutoff: float) -> None:
    matches = get_close_matches(word, candidates, n, cutoff)
    scores = [similarity(word, match) for match in matches]

    assert len(matches) <= n
    assert all(score >= cutoff for score in scores)
    assert scores == sorted(scores, reverse=True)

import sys
from pathlib import Path

import pytest

# Add repository root to path
sys.path.append(str(Path(__file__).resolve().parents[1]))

import flips


@pytest.fixture(autouse=True)
def disable_tqdm(monkeypatch):
    """Replace tqdm with identity to avoid progress output during tests."""
    monkeypatch.setattr(flips, "tqdm", lambda iterable, *_, **__: iterable)


def test_similar_pairs_count_no_anagrams():
    # Only length 2 is compared: 'aa' and 'ab' are not anagrams.
    assert flips.similar_pairs_count('aab', 1) == 0


def test_similar_pairs_count_deduplicates_by_content():
    # Length 2: 'ab', 'ba', 'ab' -> the pair {ab, ba} counts once.
    # Length 3: 'aba' and 'bab' are not anagrams.
    assert flips.similar_substrings('abab', 1, 2) == 1
    assert flips.similar_pairs_count('abab', 1) == 1


def test_similar_substrings_threshold():
    # Length 3: 'abc', 'bca', 'cab' are all two flips apart.
    assert flips.similar_substrings('abcab', 1, 3) == 0
    assert flips.similar_substrings('abcab', 2, 3) == 3


def test_similar_pairs_count_sums_lengths():
    # Length 2 has no distinct anagram pairs and length 4 'abca'/'bcab' differ.
    assert flips.similar_pairs_count('abcab', 1) == 0
    assert flips.similar_pairs_count('abcab', 2) == 3


def test_similar_pairs_count_across_lengths():
    # Length 2: {ab, ba} at distance 1. Length 3: {abb, bba} at distance 2.
    assert flips.similar_pairs_count('abba', 1) == 1
    assert flips.similar_pairs_count('abba', 2) == 2


def test_identical_substrings_never_pair():
    assert flips.similar_pairs_count('aaaa', 0) == 0
    assert flips.similar_pairs_count('aaaa', 5) == 0


def test_zero_distance_counts_nothing():
    assert flips.similar_pairs_count('abab', 0) == 0


def test_short_strings_have_no_pairs():
    assert flips.similar_pairs_count('', 3) == 0
    assert flips.similar_pairs_count('a', 3) == 0
    assert flips.similar_pairs_count('ab', 3) == 0


def test_negative_distance_rejected():
    with pytest.raises(ValueError):
        flips.similar_pairs_count('abab', -1)
    with pytest.raises(ValueError):
        flips.similar_substrings('abab', -1, 2)


@pytest.mark.parametrize("length", [0, 1, 4, 5])
def test_length_out_of_range_rejected(length):
    with pytest.raises(ValueError):
        flips.similar_substrings('abab', 1, length)


def test_similar_substrings_treats_missing_sequence_as_far(monkeypatch):
    def always_fail(src, dest):
        raise flips.NoSequenceExists(src, dest)

    monkeypatch.setattr(flips, "minimal_flips", always_fail)
    assert flips.similar_substrings('abab', 5, 2) == 0


def test_progress_label_does_not_include_input(monkeypatch):
    labels = []

    def recording_tqdm(iterable, *_, desc=None, **__):
        labels.append(desc)
        return iterable

    monkeypatch.setattr(flips, "tqdm", recording_tqdm)
    flips.similar_pairs_count('abcdefghijklmnopqrstuvwxyz', 1)
    assert labels == ["Comparing substrings"]

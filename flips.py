'''
flips.py

Purpose:
    Compute the "flip distance" between two strings: the minimum number of
    adjacent-character swaps needed to turn one string into the other. Only
    anagrams (strings with the same letters) can be transformed this way;
    every other pair is infinitely far apart.

Features:
    - Verify that a list of swaps, applied in order, turns one string into another.
    - Build a shortest list of adjacent swaps between two anagrams.
    - Count how many distinct pairs of same-length substrings of a string lie
      within a given flip distance of each other.
'''

import logging
import math
from typing import Iterable, NamedTuple

from tqdm import tqdm


class NoSequenceExists(Exception):
    """Raised when no sequence of flips can turn one string into another."""

    def __init__(self, src: str, dest: str) -> None:
        super().__init__(f"'{src}' and '{dest}' are not anagrams; no flip sequence exists.")
        self.src = src
        self.dest = dest


class Swap(NamedTuple):
    """A pair of indices whose characters are exchanged."""

    left: int
    right: int

    def is_valid(self, length: int) -> bool:
        """Return True if both indices fall inside a string of *length*."""
        if not (isinstance(self.left, int) and isinstance(self.right, int)):
            return False
        return 0 <= self.left < length and 0 <= self.right < length

    def is_flip(self, length: int) -> bool:
        """Return True if this is a valid swap of two neighbouring positions."""
        return self.is_valid(length) and abs(self.left - self.right) == 1


def is_anagram(first: str, second: str) -> bool:
    """Return True if both strings contain exactly the same characters."""
    return len(first) == len(second) and sorted(first) == sorted(second)


def apply_flips(src: str, flips: Iterable[tuple[int, int]]) -> str:
    """
    Apply swaps to a copy of *src* and return the resulting string.

    Raises:
        IndexError: If a swap refers to a position outside of *src*.
    """
    chars = list(src)
    for left, right in flips:
        if not Swap(left, right).is_valid(len(chars)):
            raise IndexError(f"Swap ({left}, {right}) is out of range for '{src}'.")
        chars[left], chars[right] = chars[right], chars[left]
    return ''.join(chars)


def flips_match(src: str, dest: str, flips: Iterable[tuple[int, int]]) -> bool:
    """
    Check whether a list of flips will bring *src* to *dest*.

    Returns False without applying anything if some swap is not a flip, i.e.
    its indices are not adjacent or do not both lie within *src*.
    """
    swaps = [Swap(left, right) for left, right in flips]
    if not all(swap.is_flip(len(src)) for swap in swaps):
        return False
    return apply_flips(src, swaps) == dest


def minimal_flips(src: str, dest: str) -> list[Swap]:
    """
    Find a shortest list of flips that turns *src* into *dest*.

    Each destination position is filled, left to right, by bubbling the first
    remaining occurrence of the needed character down into place. Taking the
    first occurrence keeps repeated characters in their original order, which
    is what makes the result minimal.

    Args:
        src (str): The string to start from.
        dest (str): The target string.

    Returns:
        list: Swaps of adjacent positions, in the order they must be applied.

    Raises:
        NoSequenceExists: If *src* and *dest* are not anagrams of each other.
    """
    if not is_anagram(src, dest):
        raise NoSequenceExists(src, dest)

    work = list(src)
    swaps: list[Swap] = []

    for dest_index, needed in enumerate(dest):
        src_index = work.index(needed, dest_index)
        while src_index > dest_index:
            work[src_index - 1], work[src_index] = work[src_index], work[src_index - 1]
            swaps.append(Swap(src_index - 1, src_index))
            src_index -= 1

    logging.debug("Found %d flip(s) from '%s' to '%s'.", len(swaps), src, dest)
    return swaps


def flip_distance(src: str, dest: str) -> int | float:
    """Return the flip distance between two strings, or math.inf for non-anagrams."""
    try:
        return len(minimal_flips(src, dest))
    except NoSequenceExists:
        return math.inf


def similar_substrings(s: str, max_dist: int, length: int) -> int:
    """
    Count distinct pairs of substrings of one length within *max_dist* flips.

    Pairs are compared by content: two substrings with the same text are
    never paired, and a pair of texts occurring at several positions counts
    once.

    Args:
        s (str): The string whose substrings are compared.
        max_dist (int): The largest flip distance that still counts.
        length (int): The substring length, from 2 to len(s) - 1.

    Returns:
        int: The number of distinct unordered pairs within the distance.
    """
    if max_dist < 0:
        raise ValueError(f"max_dist must be non-negative, got {max_dist}.")
    if not 2 <= length <= len(s) - 1:
        raise ValueError(
            f"length must be between 2 and {len(s) - 1} for '{s}', got {length}."
        )

    substrings = [s[i:i + length] for i in range(len(s) - length + 1)]

    close_pairs: set[frozenset[str]] = set()
    for i, current in enumerate(substrings[:-1]):
        for other in substrings[i + 1:]:
            if current == other or not is_anagram(current, other):
                continue
            try:
                if len(minimal_flips(current, other)) <= max_dist:
                    close_pairs.add(frozenset((current, other)))
            except NoSequenceExists:
                continue

    logging.debug(
        "Length %d: %d distinct pair(s) within distance %d in '%s'.",
        length,
        len(close_pairs),
        max_dist,
        s,
    )
    return len(close_pairs)


def similar_pairs_count(s: str, max_dist: int, quiet: bool = False) -> int:
    """
    Count pairs of distinct substrings of *s* that are *max_dist* flips or fewer apart.

    Every substring length from 2 up to len(s) - 1 is counted separately and
    the results are summed. Single characters carry no information and the
    whole string has no partner, so both lengths are left out.
    """
    if max_dist < 0:
        raise ValueError(f"max_dist must be non-negative, got {max_dist}.")

    total = 0
    for length in tqdm(range(2, len(s)), desc="Comparing substrings", disable=quiet):
        total += similar_substrings(s, max_dist, length)
    return total

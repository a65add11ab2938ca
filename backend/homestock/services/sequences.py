# Overview: Pure hole-filling sequence helpers shared by letter and number auto numbers.

"""
Sequence helpers

HOLE-FILLING: the next segment is the lowest value of an ordered alphabet that
no active sibling uses. Deleting "B" from {A, B, C} makes the next sibling "B"
again, not "D".

LETTERS: A..Z, then doubled AA, BB, .. ZZ. Doubling is not bijective base-26
(there is no "AB"); it is kept for naming compatibility and tops out at 52
values per parent and type.
"""

from __future__ import annotations

import itertools
import string
from typing import Hashable, Iterable, TypeVar

from homestock.errors import SequenceExhausted


T = TypeVar("T", bound=Hashable)

UPPER_LETTERS: tuple[str, ...] = tuple(string.ascii_uppercase) + tuple(c * 2 for c in string.ascii_uppercase)


def next_free(used: Iterable[T], alphabet: Iterable[T]) -> T:
    """Return the first value of ``alphabet`` not present in ``used``."""
    taken = set(used)
    for value in alphabet:
        if value not in taken:
            return value
    raise SequenceExhausted("No unused value left in sequence", details={"used": sorted(map(str, taken))})


def next_number(used: Iterable[int]) -> int:
    """Lowest positive integer not in ``used``."""
    return next_free(used, itertools.count(1))


def next_letter(used: Iterable[str], lowercase: bool = False) -> str:
    """
    Lowest unused letter segment. Comparison is case-insensitive so that
    "a" and "A" occupy the same slot.
    """
    letter = next_free((u.upper() for u in used), UPPER_LETTERS)
    return letter.lower() if lowercase else letter

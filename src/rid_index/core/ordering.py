"""Key ordering shared by sorting, index building and lookups.

Keys are split into fields on '.' and ':'. Fields made only of ASCII digits
compare as unsigned integers, anything else compares as a plain string.
"""

from __future__ import annotations

import re
from functools import cmp_to_key

from .types import Key

_SEPARATORS = re.compile(r"[.:]")
_NUMERIC = re.compile(r"[0-9]+")


def tokenize(key: Key) -> list[str]:
    """Split a key into its fields."""
    return _SEPARATORS.split(key)


def _compare_tokens(a: str, b: str) -> int:
    if _NUMERIC.fullmatch(a) and _NUMERIC.fullmatch(b):
        x, y = int(a), int(b)
    else:
        x, y = a, b
    return (x > y) - (x < y)


def compare_keys(a: Key, b: Key) -> int:
    """Return -1, 0 or 1 as ``a`` sorts before, with, or after ``b``.

    When every shared field is equal, the key with fewer fields sorts first.
    Literally different keys may still compare equal (``"r:1"``/``"r.1"``).
    """
    if a == b:
        return 0
    ta = tokenize(a)
    tb = tokenize(b)
    for x, y in zip(ta, tb):
        cmp = _compare_tokens(x, y)
        if cmp:
            return cmp
    return (len(ta) > len(tb)) - (len(ta) < len(tb))


# Usable as ``key=`` for sorted(), bisect and sortedcontainers
sort_key = cmp_to_key(compare_keys)

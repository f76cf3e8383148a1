"""
Levenshtein edit distance used for "did you mean" suggestions.

Unit cost for insertion, deletion and substitution, case-sensitive, no
normalization (callers normalize). Only two rows sized to the shorter string
are kept alive, so memory stays O(min(len(a), len(b))).
"""


def distance(a, b, /):
    """
    return the edit distance between two strings.

    properties
    - distance(a, a) == 0
    - distance(a, b) == distance(b, a)
    - distance("", b) == len(b)
    """
    if not isinstance(a, str) or not isinstance(b, str):
        raise TypeError("distance() arguments must be strings")
    if a == b:
        return 0
    if len(a) > len(b):
        a, b = b, a
    if not a:
        return len(b)

    previous = list(range(len(a) + 1))
    current = [0] * (len(a) + 1)

    for j, right in enumerate(b, start=1):
        current[0] = j
        for i, left in enumerate(a, start=1):
            current[i] = min(
                current[i - 1] + 1,                   # insertion
                previous[i] + 1,                      # deletion
                previous[i - 1] + (left != right),    # substitution
            )
        previous, current = current, previous

    return previous[len(a)]


__all__ = ("distance",)

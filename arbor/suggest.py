"""
Closest registered command path for a mistyped input.

Every registered path (aliases included) is compared to the typed input as a
whole space-joined string; the score is the edit distance divided by the
longer of the two strings. Only scores strictly below THRESHOLD are
suggested: no suggestion is better than a wrong one.
"""
import logging

from .distance import distance

logger = logging.getLogger(__name__)

THRESHOLD = 0.3


def suggest(tree, typed, /):
    """
    return the closest registered path as a space-joined string, or None.

    - tree: CommandTree to search.
    - typed: sequence of segments the user typed.

    Ties keep the first candidate in walk order (lexicographic by segment).
    """
    want = " ".join(typed)
    best = None
    score = float("inf")

    for path, node in tree.walk():
        if not node.registered:
            continue
        candidate = " ".join(path)
        longest = max(len(want), len(candidate))
        normalized = distance(want, candidate) / longest if longest else 0.0
        if normalized < score:
            best, score = candidate, normalized

    if best is not None and score < THRESHOLD:
        logger.debug("suggesting %r for %r (score %.3f)", best, want, score)
        return best
    return None


__all__ = ("THRESHOLD", "suggest")

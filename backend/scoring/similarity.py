"""
Textual similarity between two mark names.

Case-insensitive Levenshtein distance normalised to an integer percentage of
the longer name's length.
"""
import Levenshtein


def similarity(a: str, b: str) -> int:
    """
    Return how similar two names are, as an integer from 0 (nothing in common)
    to 100 (identical ignoring case). Two empty names count as identical.
    """
    a = (a or "").lower()
    b = (b or "").lower()

    max_len = max(len(a), len(b))
    if max_len == 0:
        return 100

    distance = Levenshtein.distance(a, b)
    # Half-up rounding; round() would bank 12.5 down to 12
    return int(100 * (max_len - distance) / max_len + 0.5)

"""
Similarity measures for question titles.

Two independent signals:
- Jaccard overlap of the meaningful word tokens (catches rewording).
- Dice coefficient over padded character trigrams (catches typos,
  compounding like "Fußball-Weltmeister" vs "Weltmeister im Fußball",
  and small spelling differences).

Both return a float in [0, 1] and treat missing input as no evidence (0.0).
"""

from collections import Counter
from typing import Iterable

from .normalize import normalize_text

PADDING = "  "


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    """
    Jaccard similarity of two token collections.

    Args:
        a: Tokens of the first title
        b: Tokens of the second title

    Returns:
        |a ∩ b| / |a ∪ b|, or 0.0 if either side is empty
    """
    sa = set(a)
    sb = set(b)
    if not sa or not sb:
        return 0.0
    inter = len(sa & sb)
    union = len(sa) + len(sb) - inter
    return inter / union if union > 0 else 0.0


def trigrams(text: str) -> Counter:
    """
    Build the trigram multiset of a title.

    The normalized text is padded with two spaces on each side so word
    boundaries at the start and end contribute their own trigrams.

    Returns:
        Counter mapping each 3-character window to its number of occurrences
        (empty if the text normalizes to nothing)
    """
    norm = normalize_text(text)
    if not norm:
        return Counter()
    padded = f"{PADDING}{norm}{PADDING}"
    return Counter(padded[i:i + 3] for i in range(len(padded) - 2))


def dice_coefficient(ta: Counter, tb: Counter) -> float:
    """Multiset Dice coefficient of two trigram counters."""
    if not ta or not tb:
        return 0.0
    # Counter & keeps min(count_a, count_b) per shared key
    inter = sum((ta & tb).values())
    denom = sum(ta.values()) + sum(tb.values())
    return (2 * inter) / denom if denom > 0 else 0.0


def trigram_dice(a: str, b: str) -> float:
    return dice_coefficient(trigrams(a), trigrams(b))

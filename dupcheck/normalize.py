import re
import unicodedata
from typing import List, Optional, Set

_COMBINING_MARKS = re.compile("[\u0300-\u036f]")
_NOT_ALLOWED = re.compile(r"[^a-z0-9äöüß ]+")
_WHITESPACE = re.compile(r"\s+")

MIN_TOKEN_LENGTH = 3

STOPWORDS = frozenset({
    "der", "die", "das",
    "ein", "eine", "einen", "einem", "einer",
    "und", "oder", "mit", "ohne",
    "in", "im", "am", "an", "auf", "zu", "zum", "zur", "bis", "ab", "von",
    "für", "fuer", "fur",
    "sie", "du", "ihr", "wir", "euch",
    "wird", "werden", "wurde", "wurden", "wurdest",
    "ist", "sind", "sein", "hat", "haben",
    "kommt", "kommen",
    "noch", "mindestens", "maximal",
    "unter", "über", "ueber",
})


def normalize_text(s: Optional[str]) -> str:
    if not s:
        return ""
    folded = _COMBINING_MARKS.sub("", unicodedata.normalize("NFD", s))
    cleaned = _NOT_ALLOWED.sub(" ", folded.lower())
    return _WHITESPACE.sub(" ", cleaned).strip()


def ordered_tokens(text: Optional[str]) -> List[str]:
    """Meaningful tokens of ``text`` in first-seen order, without repeats."""
    seen: Set[str] = set()
    result: List[str] = []
    for token in normalize_text(text).split():
        if len(token) < MIN_TOKEN_LENGTH or token in STOPWORDS:
            continue
        if token not in seen:
            seen.add(token)
            result.append(token)
    return result


def tokenize(text: Optional[str]) -> Set[str]:
    return set(ordered_tokens(text))


def query_tokens(text: Optional[str], limit: int = 10) -> List[str]:
    """Tokens of a draft title, truncated to the first ``limit`` entries.

    Candidate titles are never truncated; only the query is bounded so the
    per-candidate work stays small.
    """
    return ordered_tokens(text)[:limit]

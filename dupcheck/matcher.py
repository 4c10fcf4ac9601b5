"""
Duplicate-question matcher.

Takes a draft question title and a pool of existing questions and returns
the few existing questions most likely to be about the same event.

Invariant:
Given identical inputs (including ``today``), the result is identical.
Nothing is cached or kept between calls.
"""

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import MatcherConfig
from .logger import get_logger
from .normalize import normalize_text, query_tokens, tokenize
from .schema import Candidate
from .similarity import dice_coefficient, jaccard, trigrams

DEFAULT_CONFIG = MatcherConfig()


class CandidatePoolError(ValueError):
    """Raised when no candidate pool was supplied at all."""
    pass


@dataclass(frozen=True)
class ScoredMatch:
    """A candidate that passed at least one threshold, with its raw scores."""

    candidate: Candidate
    token_score: float
    dice_score: float
    score: float
    position: int


@dataclass(frozen=True)
class Match:
    """Caller-facing result for one likely duplicate."""

    id: str
    title: str
    closes_at: Optional[date]
    ended: bool
    status: Optional[str]
    score: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "closesAt": self.closes_at.isoformat() if self.closes_at else None,
            "ended": self.ended,
            "status": self.status,
            "score": self.score,
        }


def percent(score: float) -> int:
    """Convert a [0, 1] score to an integer percentage, rounding halves up."""
    return int(math.floor(score * 100 + 0.5))


def _score_pool(
    query: str,
    candidates: Optional[Sequence[Candidate]],
    config: MatcherConfig,
) -> Tuple[Optional[List[ScoredMatch]], int, int]:
    """Kept matches (None when the query is too weak to score), scored count, skipped count."""
    if candidates is None:
        raise CandidatePoolError("Candidate pool is required (pass an empty list for no candidates)")
    logger = get_logger()

    q_norm = normalize_text(query)
    q_tokens = query_tokens(q_norm, limit=config.max_query_tokens)
    if len(q_norm) < config.min_query_length or not q_tokens:
        logger.debug("Query too short to score", length=len(q_norm), tokens=len(q_tokens))
        return None, 0, 0

    q_trigrams = trigrams(q_norm)
    kept: List[ScoredMatch] = []
    scored = skipped = 0

    for position, candidate in enumerate(candidates):
        if not isinstance(candidate, Candidate) or not candidate.is_complete():
            skipped += 1
            logger.warning(
                "Skipping candidate without id or title",
                position=position,
                id=getattr(candidate, "id", None),
            )
            continue

        scored += 1
        token_score = jaccard(q_tokens, tokenize(candidate.title))
        dice_score = dice_coefficient(q_trigrams, trigrams(candidate.title))
        if token_score < config.token_threshold and dice_score < config.dice_threshold:
            continue
        kept.append(ScoredMatch(
            candidate=candidate,
            token_score=token_score,
            dice_score=dice_score,
            score=max(token_score, dice_score),
            position=position,
        ))

    kept.sort(key=lambda m: (-m.score, m.position))
    logger.debug("Scored candidate pool", scored=scored, skipped=skipped, kept=len(kept))
    return kept, scored, skipped


def score_candidates(
    query: str,
    candidates: Optional[Sequence[Candidate]],
    config: Optional[MatcherConfig] = None,
) -> List[ScoredMatch]:
    """
    Score every candidate against the query and keep the likely duplicates.

    Records no metrics, so it can be called next to rank() for a score
    breakdown without counting the query twice.

    Args:
        query: Draft question title
        candidates: Existing questions, most recent first
        config: Thresholds and limits (default: MatcherConfig())

    Returns:
        Kept candidates sorted by score descending, ties in pool order.
        Not truncated to ``max_matches``.

    Raises:
        CandidatePoolError: If candidates is None
    """
    kept, _, _ = _score_pool(query, candidates, config or DEFAULT_CONFIG)
    return kept or []


def rank(
    query: str,
    candidates: Optional[Sequence[Candidate]],
    today: Optional[date] = None,
    config: Optional[MatcherConfig] = None,
) -> List[Match]:
    """
    Return up to ``max_matches`` existing questions that look like duplicates.

    An empty list means "no likely duplicates" and is also returned when the
    query carries too little signal to compare (short or only stopwords).

    Args:
        query: Draft question title
        candidates: Existing questions, most recent first. An empty list is
            valid input; None is a caller error.
        today: Reference date for the ``ended`` flag (default: date.today())
        config: Thresholds and limits (default: MatcherConfig())

    Raises:
        CandidatePoolError: If candidates is None
    """
    config = config or DEFAULT_CONFIG
    today = today or date.today()
    logger = get_logger()
    kept, scored, skipped = _score_pool(query, candidates, config)
    if kept is None:
        logger.record_insufficient_signal()
        return []

    matches = []
    for m in kept[:config.max_matches]:
        c = m.candidate
        matches.append(Match(
            id=c.id,
            title=c.title,
            closes_at=c.closes_at,
            ended=c.closes_at is not None and c.closes_at < today,
            status=c.status,
            score=percent(m.score),
        ))
    logger.record_rank(scored=scored, skipped=skipped, returned=len(matches))
    return matches


def find_similar(
    query: str,
    candidates: Optional[Sequence[Candidate]],
    today: Optional[date] = None,
    config: Optional[MatcherConfig] = None,
) -> List[Dict[str, Any]]:
    """Like rank(), but returns the JSON-ready dicts an HTTP handler responds with."""
    return [m.to_dict() for m in rank(query, candidates, today=today, config=config)]

"""Near-duplicate detection for prediction-market question titles."""

__version__ = "0.3.0"

from .matcher import CandidatePoolError, Match, ScoredMatch, find_similar, rank, score_candidates
from .schema import Candidate

__all__ = [
    "Candidate",
    "CandidatePoolError",
    "Match",
    "ScoredMatch",
    "find_similar",
    "rank",
    "score_candidates",
    "__version__",
]

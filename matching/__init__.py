"""Match scoring between dog descriptors."""

from matching.scorer import MatchBreakdown, explain, score

__all__ = ["MatchBreakdown", "explain", "score"]

"""
candidate selection helpers
pick a value from a small ordered list of candidates
earlier candidates win ties
"""

from typing import Callable, Optional, Sequence


def closest_candidate(value: float, candidates: Sequence[float]) -> float:
    # nearest candidate by absolute difference, first one wins ties
    if not candidates:
        raise ValueError("candidates must not be empty")

    best = candidates[0]
    best_diff = abs(value - best)

    for candidate in candidates[1:]:
        diff = abs(value - candidate)
        if diff < best_diff:
            best = candidate
            best_diff = diff

    return best


def best_candidate(candidates: Sequence[float],
                   score: Callable[[float], float],
                   default: Optional[float] = None) -> Optional[float]:
    # highest scoring candidate, later equal scores never replace it
    best = default
    best_score = float("-inf")

    for candidate in candidates:
        candidate_score = score(candidate)
        if candidate_score > best_score:
            best = candidate
            best_score = candidate_score

    return best

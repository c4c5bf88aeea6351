from __future__ import annotations

import math
from typing import Sequence

from .models import DependencyChange, Issue


BASE_SCORE = 50
PINNING_POINTS = 30
MAX_SCORE = 100

# (upper bound of the count, points awarded); counts above the last bound get 0.
CONFLICT_TIERS = ((0, 25), (2, 15), (5, 5))
OUTDATED_TIERS = ((0, 15), (3, 10), (6, 5))


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _tiered(count: int, tiers: Sequence[tuple[int, int]]) -> int:
    for upper, points in tiers:
        if count <= upper:
            return points
    return 0


def pinning_points(dependency_diff: Sequence[DependencyChange]) -> int:
    total = len(dependency_diff)
    if total == 0:
        return 0
    pinned = sum(1 for dep in dependency_diff if dep.is_pinned)
    # Scaled through a percentage first; 1 of 12 lands just under 2.5 and rounds to 2.
    pinned_pct = pinned / total * 100
    return _round_half_up(pinned_pct / 100 * PINNING_POINTS)


def conflict_points(issues: Sequence[Issue]) -> int:
    conflicts = [i for i in issues if i.category == "conflict" or i.severity == "high"]
    return _tiered(len(conflicts), CONFLICT_TIERS)


def outdated_points(issues: Sequence[Issue]) -> int:
    outdated = [i for i in issues if i.category == "outdated"]
    return _tiered(len(outdated), OUTDATED_TIERS)


def compute_reproducibility_score(
    issues: Sequence[Issue],
    dependency_diff: Sequence[DependencyChange],
) -> int:
    """Score how reproducibly an environment can be rebuilt, from 0 to 100.

    The base of 50 plus non-negative components means a repository never
    scores below 50, however many problems it has. The formula is kept as is.

    Args:
        issues: Issues reported by the model
        dependency_diff: Before/after versions per package

    Returns:
        Integer score capped at 100
    """
    score = (
        BASE_SCORE
        + pinning_points(dependency_diff)
        + conflict_points(issues)
        + outdated_points(issues)
    )
    return min(score, MAX_SCORE)

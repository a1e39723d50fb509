"""Milestone badges keyed on the total number of wins."""

from typing import Iterable, Optional, Sequence, Tuple

MILESTONES: Tuple[int, ...] = (3, 7, 15, 30, 50, 100)


def detect_milestone(
    total_wins: int,
    reached: Iterable[int],
    thresholds: Sequence[int] = MILESTONES,
) -> Optional[int]:
    """Return the threshold hit by ``total_wins`` if it has not fired before.

    Only an exact match fires. A win count that jumps over a threshold never
    triggers it.
    """
    if total_wins in thresholds and total_wins not in set(reached):
        return total_wins
    return None


def next_milestone(
    total_wins: int,
    thresholds: Sequence[int] = MILESTONES,
) -> Optional[Tuple[int, int]]:
    """(next threshold above total_wins, wins remaining) or None past the last."""
    for threshold in sorted(thresholds):
        if threshold > total_wins:
            return threshold, threshold - total_wins
    return None
